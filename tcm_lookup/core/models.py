# tcm_lookup/core/models.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_pascal


def _check_date_time(v: str) -> str:
    try:
        ts = datetime.fromisoformat(v)
    except ValueError as e:
        raise ValueError(f"not an ISO-8601 date-time: {v!r}") from e
    if ts.tzinfo is None:
        raise ValueError(f"date-time must carry a timezone: {v!r}")
    return v


DateTimeStr = Annotated[StrictStr, AfterValidator(_check_date_time)]

YinYang = Literal["Yin (Cold)", "Yin (Cool)", "Neutral", "Yang (Warm)", "Yang (Hot)"]
NutrientType = Literal["vitamin", "mineral", "other"]


class _Closed(BaseModel):
    """Wire keys are PascalCase; anything outside the declared set is an error."""
    model_config = ConfigDict(
        alias_generator=to_pascal,
        extra="forbid",
        frozen=True,
    )

    # Optional keys may be omitted, never sent as null.
    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("null is not allowed; omit the key instead")
        return v


# ---------- Shared value objects ----------

class MultilingualText(_Closed):
    english: StrictStr
    chinese: Optional[StrictStr] = None
    spanish: Optional[StrictStr] = None


class TCMInformation(_Closed):
    functions: List[StrictStr]
    herbal_formulations: Optional[List[StrictStr]] = None
    meridians: Optional[List[StrictStr]] = None


# ---------- Generated shapes (pre-storage) ----------

class Ingredient(_Closed):
    item_type: Literal["ingredient"]
    name: MultilingualText
    alternate_names: Optional[List[StrictStr]] = None
    description: Optional[MultilingualText] = None
    yin_yang_classification: Optional[YinYang] = None
    five_elements: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    flavor_profile: Optional[List[StrictStr]] = None
    medicinal_properties: Optional[List[StrictStr]] = None
    common_culinary_uses: Optional[List[StrictStr]] = None
    origin_region: Optional[StrictStr] = None
    seasonal_availability: Optional[StrictStr] = None
    nutritional_information: Optional[Dict[str, Any]] = None
    allergen_information: Optional[StrictStr] = None
    preparation_tips: Optional[List[StrictStr]] = None
    dietary_restrictions: Optional[List[StrictStr]] = None
    substitute_ingredients: Optional[List[StrictStr]] = None
    storage_methods: Optional[Dict[str, Any]] = None
    culinary_techniques: Optional[List[StrictStr]] = None
    cultural_significance: Optional[Dict[str, Any]] = None
    historical_usage: Optional[Dict[str, Any]] = None
    environmental_impact: Optional[Dict[str, Any]] = None
    top_food_sources: Optional[List[StrictStr]] = None
    tcm_information: Optional[TCMInformation] = Field(None, alias="TCMInformation")


class Nutrient(_Closed):
    item_type: Literal["nutrient"]
    name: StrictStr
    description: Optional[StrictStr] = None
    type: Optional[NutrientType] = None
    functions: Optional[List[StrictStr]] = None
    sources: Optional[List[StrictStr]] = None
    recommended_daily_intake: Optional[StrictStr] = None
    deficiency_symptoms: Optional[List[StrictStr]] = None
    excess_symptoms: Optional[List[StrictStr]] = None
    top_food_sources: Optional[List[StrictStr]] = None


# ---------- Persisted shapes (post-storage) ----------

class _SystemFields(_Closed):
    """Assigned by the service at persistence time, never by the generator."""
    item_id: StrictStr = Field(..., alias="ItemID")
    date_added: DateTimeStr = Field(..., alias="DateAdded")
    name_lowercase: StrictStr = Field(..., alias="NameLowercase")


class StoredIngredient(Ingredient, _SystemFields):
    pass


class StoredNutrient(Nutrient, _SystemFields):
    pass


GeneratedItem = Annotated[Union[Ingredient, Nutrient], Field(discriminator="item_type")]
StoredItem = Annotated[Union[StoredIngredient, StoredNutrient], Field(discriminator="item_type")]

SYSTEM_FIELDS = ("ItemID", "DateAdded", "NameLowercase")
