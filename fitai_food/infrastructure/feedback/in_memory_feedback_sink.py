"""
In-memory feedback sink.

Default IFeedbackSink adapter: keeps submitted feedback per meal for the
lifetime of the process. Real deployments forward to the backend.
"""

from __future__ import annotations

from typing import Dict, List

import structlog

from fitai_food.domain.feedback.models import FoodFeedback

logger = structlog.get_logger(__name__)


class InMemoryFeedbackSink:
    """Feedback store keyed by meal id."""

    def __init__(self) -> None:
        self._feedback: Dict[str, List[FoodFeedback]] = {}

    async def submit(self, meal_id: str, feedback: List[FoodFeedback]) -> None:
        self._feedback.setdefault(meal_id, []).extend(feedback)
        logger.info("feedback_stored", meal_id=meal_id, count=len(feedback))

    def get(self, meal_id: str) -> List[FoodFeedback]:
        return list(self._feedback.get(meal_id, []))

    def count(self) -> int:
        return sum(len(items) for items in self._feedback.values())
