from __future__ import annotations

import json
from typing import Any, Dict
from pydantic import BaseModel
from .exceptions import GenerationParseError, LLMError
from tcm_lookup.config import Settings

# OpenAI SDK v1+
try:
    from openai import OpenAI
except ImportError as e:  # pragma: no cover
    raise LLMError("Failed to import OpenAI SDK. Install with `pip install openai`") from e


SYSTEM_PROMPT = (
    "You are a helpful assistant that provides detailed information about consumable food "
    "ingredients. Your responses should be in valid JSON format without any additional text. "
    "Do not include fields like ItemID, DateAdded, or NameLowercase; these will be added by the system."
)

INGREDIENT_TEMPLATE = """{
  "ItemType": "ingredient",
  "Name": {"English": "string", "Chinese": "string", "Spanish": "string"},
  "AlternateNames": ["string"],
  "Description": {"English": "string", "Chinese": "string", "Spanish": "string"},
  "YinYangClassification": "string",
  "FiveElements": "string",
  "Category": "string",
  "FlavorProfile": ["string"],
  "MedicinalProperties": ["string"],
  "CommonCulinaryUses": ["string"],
  "OriginRegion": "string",
  "SeasonalAvailability": "string",
  "NutritionalInformation": {
    "ServingSize": "string",
    "Calories": "number",
    "Carbohydrates": "number",
    "Protein": "number",
    "Fat": "number",
    "Fiber": "number",
    "Vitamins": {"VitaminName": "amount as string with units"},
    "Minerals": {"MineralName": "amount as string with units"}
  },
  "AllergenInformation": "string",
  "PreparationTips": ["string"],
  "DietaryRestrictions": ["string"],
  "SubstituteIngredients": ["string"],
  "StorageMethods": {"ShortTerm": "string", "LongTerm": "string"},
  "CulinaryTechniques": ["string"],
  "CulturalSignificance": {"Region1": "string", "Region2": "string"},
  "HistoricalUsage": {"AncientTimes": "string", "ModernTimes": "string"},
  "EnvironmentalImpact": {"Positive": "string", "Negative": "string"},
  "TCMInformation": {
    "Functions": ["string"],
    "HerbalFormulations": ["string"],
    "Meridians": ["string"]
  }
}"""

NUTRIENT_TEMPLATE = """{
  "ItemType": "nutrient",
  "Name": "string",
  "Description": "string",
  "Type": "string",
  "Functions": ["string"],
  "Sources": ["string"],
  "RecommendedDailyIntake": "string",
  "DeficiencySymptoms": ["string"],
  "ExcessSymptoms": ["string"],
  "TopFoodSources": ["string"]
}"""


def build_user_prompt(search_name: str) -> str:
    return (
        f'Determine if "{search_name}" is a consumable food ingredient or a nutrient '
        "(vitamin, mineral, etc.). Then, provide detailed information in **valid JSON format** "
        "according to the appropriate schema.\n\n"
        f"If it is an **ingredient**, use the following schema:\n{INGREDIENT_TEMPLATE}\n\n"
        'The "YinYangClassification" field must be one of: '
        '"Yin (Cold)", "Yin (Cool)", "Neutral", "Yang (Warm)", "Yang (Hot)".\n\n'
        f"If it is a **nutrient**, use the following schema:\n{NUTRIENT_TEMPLATE}\n\n"
        'The "Type" field must be one of: "vitamin", "mineral", "other". '
        '"TopFoodSources" lists the top primary food sources.\n\n'
        "Ensure that:\n"
        "- The entire response is a single JSON object.\n"
        "- All keys and string values are enclosed in double quotes.\n"
        "- All numerical values are numbers without units or additional text.\n"
        "- Special characters (like newlines and tabs) are escaped.\n"
        "- Do not include any explanations, apologies, or extraneous text; provide only the JSON.\n\n"
        f'If "{search_name}" is neither an ingredient nor a nutrient, respond with a JSON object '
        'like {"error": "Invalid item"} instead.'
    )


def has_error_marker(reply: str) -> bool:
    """The model's own "not an item" signal. Checked on raw text, before parsing."""
    return '"error":' in reply.lower()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def extract_json_object(reply: str) -> Dict[str, Any]:
    """Parse the span from the first '{' to the last '}' as a JSON object.

    Leading/trailing prose or code fences around the object are tolerated.
    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and fail the parse.
    """
    start = reply.find("{")
    end = reply.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise GenerationParseError("JSON object not found in generation reply")
    try:
        data = json.loads(reply[start:end + 1], parse_constant=_reject_constant)
    except ValueError as e:
        raise GenerationParseError(f"Invalid JSON in generation reply: {e}") from e
    if not isinstance(data, dict):
        raise GenerationParseError("Generation reply is not a JSON object")
    return data


class ItemGenerator(BaseModel):
    """
    Interface-like base to keep types clear. Concrete impl below.
    """
    def generate(self, search_name: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    @property
    def engine_name(self) -> str:
        return type(self).__name__


class OpenAIItemGenerator(ItemGenerator):
    _client: OpenAI
    _model: str
    _temperature: float
    _max_tokens: int

    def __init__(self, settings: Settings):
        super().__init__()
        try:
            # No SDK retries: a failed or timed-out call is terminal for the request.
            self._client = OpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout_s,
                max_retries=0,
            )
        except Exception as e:
            raise LLMError("Could not initialize OpenAI client") from e
        self._model = settings.openai_model
        self._temperature = settings.openai_temperature
        self._max_tokens = settings.openai_max_tokens

    @property
    def engine_name(self) -> str:
        return self._model

    def generate(self, search_name: str) -> str:
        """Return the raw reply text for ``search_name``; parsing is the caller's job."""
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": SYSTEM_PROMPT},
                          {"role": "user", "content": build_user_prompt(search_name)}],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            return (resp.choices[0].message.content or "").strip()
        except Exception as e:
            raise LLMError(f"OpenAI generate failed: {e}") from e
