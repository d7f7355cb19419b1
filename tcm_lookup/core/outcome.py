# tcm_lookup/core/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class OutcomeKind(str, Enum):
    FOUND = "found"                    # cache or store hit
    CREATED = "created"                # generated, validated and stored
    BAD_REQUEST = "bad_request"        # no search term
    NOT_FOUND = "not_found"            # generator flagged it, or not consumable
    UPSTREAM_ERROR = "upstream_error"  # generation call failed / timed out
    PARSE_ERROR = "parse_error"        # reply had no parseable JSON object
    INVALID_DATA = "invalid_data"      # schema violation at either stage
    STORAGE_ERROR = "storage_error"    # conditional insert failed
    INTERNAL = "internal"              # anything unanticipated


STATUS_CODES: Dict[OutcomeKind, int] = {
    OutcomeKind.FOUND: 200,
    OutcomeKind.CREATED: 200,
    OutcomeKind.BAD_REQUEST: 400,
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.UPSTREAM_ERROR: 502,
    OutcomeKind.PARSE_ERROR: 500,
    OutcomeKind.INVALID_DATA: 500,
    OutcomeKind.STORAGE_ERROR: 500,
    OutcomeKind.INTERNAL: 500,
}

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}

MSG_NAME_REQUIRED = "Search name is required."
MSG_UPSTREAM = "Failed to retrieve data from external service."
MSG_PARSE = "Failed to parse data from external service."
MSG_INVALID_INPUT = "Invalid data format received from external service."
MSG_INVALID_STORAGE = "Invalid data format after adding system fields."
MSG_SAVE_FAILED = "Failed to save item data."
MSG_INTERNAL = "Internal server error."


def not_consumable_message(search_name: str) -> str:
    return f"{search_name} is not a valid consumable food item or nutrient."


@dataclass(frozen=True)
class LookupOutcome:
    """Terminal state of one lookup: either an item or an error message."""
    kind: OutcomeKind
    item: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    @classmethod
    def found(cls, item: Dict[str, Any]) -> "LookupOutcome":
        return cls(OutcomeKind.FOUND, item=item)

    @classmethod
    def created(cls, item: Dict[str, Any]) -> "LookupOutcome":
        return cls(OutcomeKind.CREATED, item=item)

    @classmethod
    def error(cls, kind: OutcomeKind, message: str) -> "LookupOutcome":
        return cls(kind, message=message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.FOUND, OutcomeKind.CREATED)

    def body(self) -> Dict[str, Any]:
        if self.ok:
            return {"found": self.kind is OutcomeKind.FOUND, "item": self.item}
        return {"error": self.message}
