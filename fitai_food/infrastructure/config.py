"""
Configuration for the enhancement pipeline.

Settings are read from environment variables, optionally loaded from a
`.env` file:

    USDA_API_KEY                  USDA FoodData Central key (source skipped if unset)
    OPENAI_API_KEY                OpenAI key for the vision provider
    OPENAI_VISION_MODEL           Vision model (default gpt-4o)
    NUTRITION_SOURCE_TIMEOUT_S    Per-source lookup timeout (default 10)
    NUTRITION_CACHE_TTL_S         Lookup cache TTL (default 7 days)
    RECOGNITION_CACHE_TTL_S       Recognition result cache TTL (default 24h)
    CONFIDENCE_CEILING            Maximum reported confidence (default 95)
    LOG_LEVEL / LOG_FORMAT        See logging_config
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from fitai_food.application.food.enhancement_service import FoodEnhancementService
from fitai_food.application.food.recognition_service import FoodRecognitionService
from fitai_food.application.nutrition.lookup_service import NutritionLookupService
from fitai_food.infrastructure.ai.openai_vision_provider import OpenAIVisionProvider
from fitai_food.infrastructure.cache.ttl_cache import TTLCache
from fitai_food.infrastructure.feedback.in_memory_feedback_sink import InMemoryFeedbackSink
from fitai_food.infrastructure.logging_config import configure_logging
from fitai_food.infrastructure.openfoodfacts.api_client import OpenFoodFactsClient
from fitai_food.infrastructure.usda.api_client import USDAClient


class Settings(BaseModel):
    """Pipeline settings."""

    model_config = ConfigDict(frozen=True)

    usda_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_vision_model: str = "gpt-4o"
    nutrition_source_timeout_s: float = Field(10.0, gt=0)
    nutrition_cache_ttl_s: float = Field(604800, gt=0)
    recognition_cache_ttl_s: float = Field(86400, gt=0)
    confidence_ceiling: int = Field(95, ge=0, le=99)
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Union[str, Path]] = None,
    ) -> Settings:
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            env_file: Optional .env file loaded into os.environ first
                (existing variables are not overridden)
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(name)
            return value.strip() if value and value.strip() else None

        values = {
            "usda_api_key": get("USDA_API_KEY"),
            "openai_api_key": get("OPENAI_API_KEY"),
            "openai_vision_model": get("OPENAI_VISION_MODEL"),
            "nutrition_source_timeout_s": get("NUTRITION_SOURCE_TIMEOUT_S"),
            "nutrition_cache_ttl_s": get("NUTRITION_CACHE_TTL_S"),
            "recognition_cache_ttl_s": get("RECOGNITION_CACHE_TTL_S"),
            "confidence_ceiling": get("CONFIDENCE_CEILING"),
            "log_level": get("LOG_LEVEL"),
            "log_format": get("LOG_FORMAT"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})


def build_lookup_service(settings: Settings) -> NutritionLookupService:
    """USDA + OpenFoodFacts lookup with its 7-day cache."""
    return NutritionLookupService(
        sources=[
            USDAClient(
                api_key=settings.usda_api_key,
                timeout_seconds=settings.nutrition_source_timeout_s,
            ),
            OpenFoodFactsClient(timeout_seconds=settings.nutrition_source_timeout_s),
        ],
        cache=TTLCache(default_ttl_seconds=settings.nutrition_cache_ttl_s, name="nutrition"),
        timeout_seconds=settings.nutrition_source_timeout_s,
        confidence_ceiling=settings.confidence_ceiling,
    )


def build_recognition_service(settings: Optional[Settings] = None) -> FoodRecognitionService:
    """
    Wire the default object graph.

    Logging is configured from the settings. Without an OpenAI key the
    service is built without a vision provider: `enhance_observations`
    works, `recognize` raises RecognitionError.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)
    vision = (
        OpenAIVisionProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_vision_model,
        )
        if settings.openai_api_key
        else None
    )
    return FoodRecognitionService(
        vision_provider=vision,
        enhancer=FoodEnhancementService(
            lookup=build_lookup_service(settings),
            confidence_ceiling=settings.confidence_ceiling,
        ),
        feedback_sink=InMemoryFeedbackSink(),
        cache=TTLCache(default_ttl_seconds=settings.recognition_cache_ttl_s, name="recognition"),
    )
