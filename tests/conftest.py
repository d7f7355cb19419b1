import copy
import json
from typing import Any, Dict, List, Optional

import pytest

from tcm_lookup.services.exceptions import LLMError, RepoError
from tcm_lookup.services.llm import ItemGenerator
from tcm_lookup.services.repo.base import ItemRepo


GINGER: Dict[str, Any] = {
    "ItemType": "ingredient",
    "Name": {"English": "Ginger", "Chinese": "生姜", "Spanish": "Jengibre"},
    "AlternateNames": ["Ginger root"],
    "Description": {"English": "A pungent rhizome used as spice and remedy."},
    "YinYangClassification": "Yang (Warm)",
    "FiveElements": "Metal",
    "Category": "root vegetable",
    "FlavorProfile": ["pungent", "spicy"],
    "MedicinalProperties": ["anti-nausea"],
    "CommonCulinaryUses": ["stir-fries", "tea"],
    "OriginRegion": "Southeast Asia",
    "SeasonalAvailability": "Year-round",
    "NutritionalInformation": {"ServingSize": "100g", "Calories": 80, "Fat": 0.75},
    "AllergenInformation": "None known",
    "StorageMethods": {"ShortTerm": "Refrigerate", "LongTerm": "Freeze"},
    "TCMInformation": {"Functions": ["Warms the middle"], "Meridians": ["Lung", "Spleen"]},
}

VITAMIN_C: Dict[str, Any] = {
    "ItemType": "nutrient",
    "Name": "Vitamin C",
    "Description": "A water-soluble antioxidant vitamin.",
    "Type": "vitamin",
    "Functions": ["Collagen synthesis"],
    "Sources": ["Citrus fruits"],
    "RecommendedDailyIntake": "90 mg",
    "DeficiencySymptoms": ["Scurvy"],
    "ExcessSymptoms": ["Diarrhea"],
    "TopFoodSources": ["Guava", "Kiwi"],
}


class FakeGenerator(ItemGenerator):
    """Returns a canned reply, or raises LLMError when ``fail`` is set."""
    reply: str = ""
    fail: bool = False
    calls: List[str] = []

    def generate(self, search_name: str) -> str:
        self.calls.append(search_name)
        if self.fail:
            raise LLMError("Request timed out.")
        return self.reply


class InMemoryRepo(ItemRepo):
    def __init__(self, items: Optional[List[Dict[str, Any]]] = None, fail_insert: bool = False,
                 fail_query: bool = False):
        self.items = list(items or [])
        self.fail_insert = fail_insert
        self.fail_query = fail_query
        self.queries: List[str] = []

    def find_by_name(self, name_lowercase):
        self.queries.append(name_lowercase)
        if self.fail_query:
            raise RepoError("query failed")
        return next((it for it in self.items if it.get("NameLowercase") == name_lowercase), None)

    def insert(self, record):
        if self.fail_insert:
            raise RepoError("write failed")
        self.items.append(record)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def ginger() -> Dict[str, Any]:
    return copy.deepcopy(GINGER)


@pytest.fixture
def vitamin_c() -> Dict[str, Any]:
    return copy.deepcopy(VITAMIN_C)


@pytest.fixture
def ginger_reply() -> str:
    # Prose and a code fence around the object, as chat models tend to do.
    return "Here is the data:\n```json\n" + json.dumps(GINGER, ensure_ascii=False) + "\n```"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
