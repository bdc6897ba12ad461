"""Infrastructure layer — filesystem discovery, the Guide repository, templates."""
