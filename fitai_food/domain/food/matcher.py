"""
Dish matcher.

Resolves a detected dish name against REFERENCE_DISHES:

1. Exact key lookup
2. Normalised variants (modifier stripping and synonyms)
3. Partial token match

The first stage with a hit wins. Partial matching returns the first
reference entry in table order that shares a significant token with the
query; pass ``best_partial=True`` to score every entry instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional

import structlog

from fitai_food.domain.food.models import ReferenceDish
from fitai_food.domain.food.reference_data import REFERENCE_DISHES
from fitai_food.domain.shared.value_objects import normalize_food_name

logger = structlog.get_logger(__name__)

_PREFIX_MODIFIERS = re.compile(r"^(chicken|mutton|paneer|veg|vegetable)\s+")
_SUFFIX_MODIFIERS = re.compile(r"\s+(curry|masala|fry|dry|gravy)$")

# Alternate transliterations, applied in both directions
SYNONYMS = (
    ("biriyani", "biryani"),
    ("daal", "dal"),
    ("roti", "chapati"),
    ("sabzi", "sabji"),
    ("aloo", "potato"),
    ("palak", "spinach"),
)

# Tokens must be longer than this to take part in partial matching
MIN_SIGNIFICANT_TOKEN = 3


class MatchStrength(str, Enum):
    """How a reference dish was found."""

    EXACT = "exact"
    VARIATION = "variation"
    PARTIAL = "partial"


@dataclass(frozen=True, slots=True)
class DishMatch:
    """Reference dish found for a query."""

    dish: ReferenceDish
    key: str
    strength: MatchStrength


def _replace_word(text: str, old: str, new: str) -> str:
    return re.sub(rf"\b{re.escape(old)}\b", new, text)


def _strip_modifiers(name: str) -> List[str]:
    stripped_suffix = _SUFFIX_MODIFIERS.sub("", name)
    stripped_prefix = _PREFIX_MODIFIERS.sub("", name)
    stripped_both = _PREFIX_MODIFIERS.sub("", stripped_suffix)
    return [stripped_suffix, stripped_prefix, stripped_both]


def generate_variants(name: str) -> List[str]:
    """
    Candidate spellings for a dish name, in lookup order.

    Synonym substitutions come first, then each spelling with its
    suffix modifier, prefix modifier, or both removed. The name itself
    is not included.

    Example:
        >>> "chicken biryani" in generate_variants("chicken biriyani masala")
        True
    """
    base = normalize_food_name(name)
    spellings = [base]
    for left, right in SYNONYMS:
        for old, new in ((left, right), (right, left)):
            if re.search(rf"\b{re.escape(old)}\b", base):
                spellings.append(_replace_word(base, old, new))

    variants: List[str] = spellings[1:]
    for spelling in spellings:
        variants.extend(_strip_modifiers(spelling))

    seen = {base}
    unique = []
    for variant in variants:
        variant = variant.strip()
        if variant and variant not in seen:
            seen.add(variant)
            unique.append(variant)
    return unique


def _significant_tokens(text: str) -> List[str]:
    return [token for token in text.split() if len(token) > MIN_SIGNIFICANT_TOKEN]


def _tokens_overlap(query_tokens: List[str], key_tokens: List[str]) -> int:
    return sum(
        1
        for q in query_tokens
        if any(q in k or k in q for k in key_tokens)
    )


def match_dish(
    name: str,
    table: Optional[Mapping[str, ReferenceDish]] = None,
    best_partial: bool = False,
) -> Optional[DishMatch]:
    """
    Find the reference dish for a detected name.

    Args:
        name: Detected dish name
        table: Reference table (defaults to REFERENCE_DISHES)
        best_partial: Score all entries in the partial stage and pick
            the one sharing most tokens (ties keep table order)

    Returns:
        DishMatch or None if nothing matched

    Example:
        >>> match_dish("biryani").strength
        <MatchStrength.EXACT: 'exact'>
        >>> match_dish("chicken biriyani masala").key
        'chicken biryani'
    """
    dishes = REFERENCE_DISHES if table is None else table
    query = normalize_food_name(name)
    if not query:
        return None

    dish = dishes.get(query)
    if dish is not None:
        return DishMatch(dish=dish, key=query, strength=MatchStrength.EXACT)

    for variant in generate_variants(query):
        dish = dishes.get(variant)
        if dish is not None:
            logger.debug("dish_matched_variant", query=query, variant=variant)
            return DishMatch(dish=dish, key=variant, strength=MatchStrength.VARIATION)

    query_tokens = _significant_tokens(query)
    if not query_tokens:
        return None

    best: Optional[DishMatch] = None
    best_score = 0
    for key, dish in dishes.items():
        score = _tokens_overlap(query_tokens, _significant_tokens(key))
        if score == 0:
            continue
        if not best_partial:
            logger.debug("dish_matched_partial", query=query, key=key)
            return DishMatch(dish=dish, key=key, strength=MatchStrength.PARTIAL)
        if score > best_score:
            best = DishMatch(dish=dish, key=key, strength=MatchStrength.PARTIAL)
            best_score = score

    if best is not None:
        logger.debug("dish_matched_best_partial", query=query, key=best.key, score=best_score)
    return best
