"""Domain layer: models, reference data and pure algorithms (no I/O)."""
