"""
Name-similarity scoring and confidence-weighted aggregation.

`weighted_average` and `agreement_bonus` are kept separate so the bonus
formula can be tuned without touching the averaging core.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from fitai_food.domain.food.models import ExternalNutritionRecord, NutritionValues, round_half_up
from fitai_food.domain.shared.value_objects import normalize_food_name

EXACT_MATCH_CONFIDENCE = 95
CONTAINMENT_CONFIDENCE = 85
MIN_SIMILARITY_CONFIDENCE = 30
SIMILARITY_RANGE = 50

DEFAULT_CONFIDENCE_CEILING = 95
AGREEMENT_BONUS_PER_SOURCE = 5
MAX_AGREEMENT_BONUS = 10

SOURCE_SEPARATOR = " + "


def match_confidence(query: str, found_name: Optional[str]) -> int:
    """
    Score how well a database answer matches the query.

    - exact equality → 95
    - containment either way → 85
    - otherwise 30 + 50 × (matching words / max word count), where
      words longer than two characters match by substring either way

    Example:
        >>> match_confidence("chicken curry", "Chicken Curry")
        95
        >>> match_confidence("dal", "Dal makhani, restaurant style")
        85
    """
    query_norm = normalize_food_name(query)
    found_norm = normalize_food_name(found_name or "")
    if not query_norm or not found_norm:
        return MIN_SIMILARITY_CONFIDENCE
    if query_norm == found_norm:
        return EXACT_MATCH_CONFIDENCE
    if query_norm in found_norm or found_norm in query_norm:
        return CONTAINMENT_CONFIDENCE

    query_words = query_norm.split()
    found_words = found_norm.split()
    matching = sum(
        1
        for word in query_words
        if len(word) > 2 and any(word in other or other in word for other in found_words)
    )
    ratio = matching / max(len(query_words), len(found_words))
    return int(round_half_up(MIN_SIMILARITY_CONFIDENCE + ratio * SIMILARITY_RANGE))


def weighted_average(pairs: Iterable[Tuple[float, float]]) -> float:
    """
    Weighted mean of (value, weight) pairs.

    Example:
        >>> weighted_average([(150, 80), (170, 60)])
        158.57142857142858
    """
    items = list(pairs)
    total_weight = sum(weight for _, weight in items)
    if total_weight <= 0:
        if not items:
            return 0.0
        return sum(value for value, _ in items) / len(items)
    return sum(value * weight for value, weight in items) / total_weight


def agreement_bonus(source_count: int) -> int:
    """Bonus for multiple sources agreeing: +5 per extra source, max +10."""
    return min(MAX_AGREEMENT_BONUS, max(0, source_count - 1) * AGREEMENT_BONUS_PER_SOURCE)


def _optional_average(values: Sequence[Tuple[Optional[float], float]]) -> Optional[float]:
    present = [(value, weight) for value, weight in values if value is not None]
    if not present:
        return None
    return weighted_average(present)


def aggregate_records(
    records: Sequence[ExternalNutritionRecord],
    ceiling: int = DEFAULT_CONFIDENCE_CEILING,
) -> Optional[ExternalNutritionRecord]:
    """
    Combine per-source records into one.

    A single record is returned unchanged. Several records are averaged
    field by field with weights confidence / Σconfidence; the combined
    confidence is the mean input confidence plus `agreement_bonus`,
    capped at `ceiling`. Sources are joined with " + ".

    Returns:
        Aggregated record, or None for an empty input
    """
    if not records:
        return None
    if len(records) == 1:
        return records[0]

    def field(name: str) -> float:
        return weighted_average(
            (getattr(r.nutrition, name), r.confidence) for r in records
        )

    nutrition = NutritionValues(
        calories=field("calories"),
        protein=field("protein"),
        carbs=field("carbs"),
        fat=field("fat"),
        fiber=field("fiber"),
        sugar=_optional_average([(r.nutrition.sugar, r.confidence) for r in records]),
        sodium=_optional_average([(r.nutrition.sodium, r.confidence) for r in records]),
    ).rounded()

    mean_confidence = sum(r.confidence for r in records) / len(records)
    confidence = min(ceiling, int(round_half_up(mean_confidence)) + agreement_bonus(len(records)))

    sources: List[str] = []
    for record in records:
        for name in record.source.split(SOURCE_SEPARATOR):
            if name not in sources:
                sources.append(name)

    return ExternalNutritionRecord(
        nutrition=nutrition,
        source=SOURCE_SEPARATOR.join(sources),
        confidence=confidence,
        canonical_name=records[0].canonical_name,
    )
