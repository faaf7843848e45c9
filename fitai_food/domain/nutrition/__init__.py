"""Nutrition record validation and aggregation."""
