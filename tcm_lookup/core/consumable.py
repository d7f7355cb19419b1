# tcm_lookup/core/consumable.py
from __future__ import annotations

from typing import Tuple, Union

from .models import Ingredient, Nutrient

# Substrings that mark an ingredient category as not fit to eat. Matching is
# a plain substring test on the lowercased category, so "industrial chemical
# compound" hits "chemical". Anything not listed is accepted: this is a
# denylist, and a novel category defaults to consumable.
NON_CONSUMABLE_CATEGORIES: Tuple[str, ...] = (
    "poison",
    "chemical",
    "non-food",
    "cleaning agent",
    "toxic substance",
    "metal",
    "plastic",
    "drug",
    "medicine",
    "insecticide",
    "herbicide",
    "fungicide",
    "fertilizer",
    "petroleum",
    "non-edible",
    "radioactive",
    "synthetic compound",
    "material",
    "alloy",
    "paint",
    "solvent",
    "detergent",
    "adhesive",
    "lubricant",
    "pesticide",
    "disinfectant",
    "explosive",
    "gas",
    "element",
    "rock",
    "gemstone",
    "crystal",
)


def is_consumable(item: Union[Ingredient, Nutrient]) -> bool:
    """Nutrients always pass; ingredients fail when their category hits the denylist."""
    if isinstance(item, Nutrient):
        return True
    if isinstance(item, Ingredient):
        category = (item.category or "").lower()
        return not any(term in category for term in NON_CONSUMABLE_CATEGORIES)
    raise TypeError(f"Unsupported item variant: {type(item).__name__}")
