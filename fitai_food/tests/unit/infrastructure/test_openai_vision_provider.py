"""
Unit tests for OpenAI vision provider.

The AsyncOpenAI client is replaced by a mock; no network access.
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from fitai_food.domain.food.models import FoodCategory, MealType
from fitai_food.domain.shared.errors import RecognitionError
from fitai_food.infrastructure.ai.openai_vision_provider import (
    OpenAIVisionProvider,
    build_recognition_prompt,
    parse_observations,
)

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


def _mock_client(content: Any) -> MagicMock:
    """AsyncOpenAI stand-in returning `content` as message text."""
    message = MagicMock()
    message.content = content if isinstance(content, str) else json.dumps(content)
    completion = MagicMock()
    completion.choices = [MagicMock(message=message)]
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion)
    client.close = AsyncMock()
    return client


class TestPrompt:
    """Test prompt construction."""

    def test_mentions_meal_type_and_per_100g(self) -> None:
        """Prompt should name the meal and ask for per-100g values."""
        prompt = build_recognition_prompt(MealType.DINNER)
        assert "dinner" in prompt
        assert "PER 100 GRAMS" in prompt
        assert '"foods"' in prompt


class TestParseObservations:
    """Test mapping of model output."""

    def test_maps_items(self) -> None:
        """Should build observations from well-formed items."""
        observations = parse_observations(
            {
                "foods": [
                    {
                        "name": "Masala Dosa",
                        "category": "main",
                        "cuisine": "south indian",
                        "estimated_grams": 150,
                        "calories": 180,
                        "ingredients": ["rice", "potato"],
                        "confidence": 88,
                    }
                ]
            }
        )
        assert len(observations) == 1
        dosa = observations[0]
        assert dosa.name == "Masala Dosa"
        assert dosa.category is FoodCategory.MAIN
        assert dosa.cuisine == "south indian"
        assert dosa.ingredients == ["rice", "potato"]

    def test_tolerates_sloppy_fields(self) -> None:
        """Unknown categories and non-list ingredients should be dropped."""
        observations = parse_observations(
            {"foods": [{"name": "Chai", "category": "drink", "ingredients": "tea, milk"}]}
        )
        assert observations[0].category is None
        assert observations[0].ingredients == []

    def test_skips_items_without_name(self) -> None:
        """Only items without a usable name should be skipped."""
        observations = parse_observations(
            {"foods": ["rice", {"name": "   "}, {"calories": 120}, {"name": 42}, {"name": "Roti"}]}
        )
        assert [o.name for o in observations] == ["Roti"]

    def test_keeps_dish_with_invalid_optional_fields(self) -> None:
        """Out-of-range or non-numeric values should be dropped, not the dish."""
        observations = parse_observations(
            {
                "foods": [
                    {"name": "Dal Makhani", "confidence": 120, "calories": 140},
                    {"name": "Jeera Rice", "estimated_grams": -5, "confidence": 80},
                    {"name": "Naan", "calories": "about 300", "protein": "9", "notes": ["tandoor"]},
                ]
            }
        )
        assert [o.name for o in observations] == ["Dal Makhani", "Jeera Rice", "Naan"]
        dal, rice, naan = observations
        assert dal.confidence is None
        assert dal.calories == 140
        assert rice.estimated_grams is None
        assert rice.confidence == 80
        assert naan.calories is None
        assert naan.protein == 9
        assert naan.notes is None

    @pytest.mark.asyncio
    async def test_recognize_keeps_sloppy_dishes(self) -> None:
        """A sloppy answer should still report the detected dishes."""
        client = _mock_client({"foods": [{"name": "Idli", "estimated_grams": "two pieces"}]})
        provider = OpenAIVisionProvider(client=client)

        observations = await provider.recognize(IMAGE, MealType.BREAKFAST)

        assert [o.name for o in observations] == ["Idli"]
        assert observations[0].estimated_grams is None

    def test_missing_foods_list(self) -> None:
        """Payload without a foods list should fail recognition."""
        with pytest.raises(RecognitionError):
            parse_observations({"dishes": []})


class TestOpenAIVisionProvider:
    """Tests for OpenAIVisionProvider."""

    def test_requires_key_or_client(self) -> None:
        """Should refuse to start unconfigured."""
        with pytest.raises(ValueError):
            OpenAIVisionProvider()

    @pytest.mark.asyncio
    async def test_recognize(self) -> None:
        """Should send the image and parse the JSON answer."""
        client = _mock_client({"foods": [{"name": "Biryani", "estimated_grams": 250}]})
        provider = OpenAIVisionProvider(client=client, model="gpt-4o")

        observations = await provider.recognize(IMAGE, MealType.LUNCH)

        assert [o.name for o in observations] == ["Biryani"]
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        user_content = kwargs["messages"][1]["content"]
        assert user_content[1]["image_url"]["url"] == IMAGE

    @pytest.mark.asyncio
    async def test_empty_detection(self) -> None:
        """An empty foods list is a valid answer."""
        provider = OpenAIVisionProvider(client=_mock_client({"foods": []}))
        assert await provider.recognize(IMAGE, MealType.SNACK) == []

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        """Non-JSON answers should raise RecognitionError."""
        provider = OpenAIVisionProvider(client=_mock_client("I see a biryani"))
        with pytest.raises(RecognitionError):
            await provider.recognize(IMAGE, MealType.LUNCH)

    @pytest.mark.asyncio
    async def test_non_object_json(self) -> None:
        """JSON arrays are not a valid answer."""
        provider = OpenAIVisionProvider(client=_mock_client("[1, 2]"))
        with pytest.raises(RecognitionError):
            await provider.recognize(IMAGE, MealType.LUNCH)

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Should close the underlying client."""
        client = _mock_client({"foods": []})
        await OpenAIVisionProvider(client=client).close()
        client.close.assert_awaited_once()
