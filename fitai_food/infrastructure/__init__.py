"""Infrastructure layer: external APIs, caching, configuration, logging."""
