"""Domain layer — document model, anchors, languages, and link rules.

This layer depends only on stdlib and parsing libraries.
It must never import from services, infrastructure, commands, or config.
"""
