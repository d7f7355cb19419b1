# tcm_lookup/core/validation.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .models import GeneratedItem, Ingredient, Nutrient, StoredItem

_generated = TypeAdapter(GeneratedItem)
_stored = TypeAdapter(StoredItem)


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of one schema pass. ``errors`` holds every violation found."""
    valid: bool
    item: Optional[Union[Ingredient, Nutrient]] = None
    errors: List[str] = field(default_factory=list)


def _format_errors(exc: ValidationError) -> List[str]:
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        out.append(f"{loc}: {err['msg']}")
    return out


def _run(adapter: TypeAdapter, data: Any) -> ValidationReport:
    try:
        item = adapter.validate_python(data)
    except ValidationError as e:
        return ValidationReport(valid=False, errors=_format_errors(e))
    return ValidationReport(valid=True, item=item)


def validate_generated(data: Any) -> ValidationReport:
    """Check a record as emitted by the generator, before system fields exist.

    System fields (``ItemID``, ``DateAdded``, ``NameLowercase``) are unknown keys
    at this stage and are rejected like any other extra key.
    """
    return _run(_generated, data)


def validate_stored(data: Any) -> ValidationReport:
    """Check a record in its persisted layout: generated shape plus system fields."""
    return _run(_stored, data)
