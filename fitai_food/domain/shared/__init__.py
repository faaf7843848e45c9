"""Shared errors and value objects."""
