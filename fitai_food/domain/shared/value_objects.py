"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re
import uuid

from pydantic import BaseModel, ConfigDict, Field


class FoodId(BaseModel):
    """
    Enhanced food ID value object.

    Format: "<prefix>_<12_hex_chars>", where the prefix tells how the
    record was produced ("food" for enhanced, "basic" for degraded).

    Example:
        >>> food_id = FoodId.generate()
        >>> assert food_id.value.startswith("food_")
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(
        ...,
        pattern=r"^[a-z]+_[a-f0-9]{12}$",
        description="Food identifier",
    )

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"FoodId('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    @classmethod
    def generate(cls, prefix: str = "food") -> FoodId:
        """
        Generate new food ID.

        Args:
            prefix: Lowercase alphabetic prefix

        Returns:
            New FoodId with random UUID part
        """
        return cls(value=f"{prefix}_{uuid.uuid4().hex[:12]}")


class Barcode(BaseModel):
    """
    Product barcode value object.

    Validates barcode format (8-13 digits).
    Used for OpenFoodFacts lookups.

    Example:
        >>> barcode = Barcode(value="8901063010031")
        >>> assert barcode.is_valid()
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{8,13}$", description="Barcode digits")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    def is_valid(self) -> bool:
        """Validate barcode format (8-13 digits)."""
        return bool(re.match(r"^\d{8,13}$", self.value))

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string."""
        return cls(value=s.strip())


def normalize_food_name(name: str) -> str:
    """
    Normalize a food name for lookups and cache keys.

    Lowercases, trims and collapses internal whitespace.

    Example:
        >>> normalize_food_name("  Chicken   Biryani ")
        'chicken biryani'
    """
    return " ".join(name.lower().split())
