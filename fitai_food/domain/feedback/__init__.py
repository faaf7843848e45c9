"""Recognition feedback models."""
