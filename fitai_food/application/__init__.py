"""Application layer: services orchestrating domain and infrastructure."""
