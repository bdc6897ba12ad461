"""guidectl — lint, navigate, and render Markdown migration guides."""

__version__ = "0.3.0"
