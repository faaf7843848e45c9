"""
Recognition feedback models and summary statistics.

Feedback is passed through to the feedback collaborator unchanged;
statistics are computed for the caller's information only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from fitai_food.domain.food.models import EnhancedFood, round_half_up

LOW_RATING_THRESHOLD = 3.0
LOW_ACCURACY_THRESHOLD = 80.0
LOW_GROUP_ACCURACY_THRESHOLD = 70.0


class FoodFeedback(BaseModel):
    """User verdict on one recognised dish."""

    model_config = ConfigDict(frozen=True)

    dish_id: str = Field(..., min_length=1)
    was_correct: bool
    corrected_name: Optional[str] = None
    accuracy_rating: int = Field(..., ge=1, le=5)
    note: Optional[str] = None


class GroupAccuracy(BaseModel):
    """Correct/total counts for one cuisine or provenance group."""

    model_config = ConfigDict(frozen=True)

    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return 100.0 * self.correct / self.total if self.total else 0.0


class FeedbackStats(BaseModel):
    """Summary of one feedback submission."""

    model_config = ConfigDict(frozen=True)

    total: int
    correct: int
    incorrect: int
    average_rating: float
    accuracy: float
    by_cuisine: Dict[str, GroupAccuracy] = Field(default_factory=dict)
    by_source: Dict[str, GroupAccuracy] = Field(default_factory=dict)


class FeedbackSubmission(BaseModel):
    """Feedback records plus derived statistics."""

    model_config = ConfigDict(frozen=True)

    meal_id: str
    feedback: List[FoodFeedback]
    stats: FeedbackStats
    suggestions: List[str] = Field(default_factory=list)
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _grouped(
    feedback: Sequence[FoodFeedback], group_of: Dict[str, str]
) -> Dict[str, GroupAccuracy]:
    groups: Dict[str, GroupAccuracy] = {}
    for item in feedback:
        key = group_of.get(item.dish_id)
        if key is None:
            continue
        current = groups.get(key, GroupAccuracy())
        groups[key] = GroupAccuracy(
            correct=current.correct + (1 if item.was_correct else 0),
            total=current.total + 1,
        )
    return groups


def compute_feedback_stats(
    feedback: Sequence[FoodFeedback], foods: Sequence[EnhancedFood] = ()
) -> FeedbackStats:
    """
    Summarise feedback, grouped by cuisine and provenance where the
    rated dish is among `foods`.
    """
    total = len(feedback)
    correct = sum(1 for item in feedback if item.was_correct)
    average = sum(item.accuracy_rating for item in feedback) / total if total else 0.0
    accuracy = 100.0 * correct / total if total else 0.0

    return FeedbackStats(
        total=total,
        correct=correct,
        incorrect=total - correct,
        average_rating=round_half_up(average, 2),
        accuracy=round_half_up(accuracy, 1),
        by_cuisine=_grouped(feedback, {f.id: f.cuisine.value for f in foods}),
        by_source=_grouped(feedback, {f.id: f.enhancement_source.value for f in foods}),
    )


def improvement_suggestions(stats: FeedbackStats) -> List[str]:
    """Human-readable hints for weak spots in recognition quality."""
    suggestions = []
    if stats.total and stats.average_rating < LOW_RATING_THRESHOLD:
        suggestions.append(
            "Low average rating: review portion estimates and nutrition baselines"
        )
    if stats.total and stats.accuracy < LOW_ACCURACY_THRESHOLD:
        suggestions.append("Recognition accuracy below 80%: extend reference dishes and synonyms")
    for cuisine, group in stats.by_cuisine.items():
        if group.total and group.accuracy < LOW_GROUP_ACCURACY_THRESHOLD:
            suggestions.append(f"Improve recognition for {cuisine} cuisine")
    for source, group in stats.by_source.items():
        if group.total and group.accuracy < LOW_GROUP_ACCURACY_THRESHOLD:
            suggestions.append(f"Review nutrition data from {source} source")
    return suggestions
