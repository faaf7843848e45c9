"""
FitAI food recognition enhancement core.

Turns raw vision-model food classifications into calibrated,
regionally corrected nutrition estimates.

Structure:
- domain/: Reference tables, rule tables and pure algorithms
- infrastructure/: External concerns (nutrition APIs, vision, cache, config)
- application/: Use cases orchestrating domain and infrastructure
- tests/: Test suite
"""

__version__ = "1.0.0"
