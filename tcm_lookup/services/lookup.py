from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from tcm_lookup.core.cache import ItemCache
from tcm_lookup.core.consumable import is_consumable
from tcm_lookup.core.naming import fingerprint, normalize_name
from tcm_lookup.core.outcome import (
    MSG_INTERNAL,
    MSG_INVALID_INPUT,
    MSG_INVALID_STORAGE,
    MSG_NAME_REQUIRED,
    MSG_PARSE,
    MSG_SAVE_FAILED,
    MSG_UPSTREAM,
    LookupOutcome,
    OutcomeKind,
    not_consumable_message,
)
from tcm_lookup.core.validation import validate_generated, validate_stored
from .exceptions import GenerationParseError, LLMError, RepoError
from .llm import ItemGenerator, extract_json_object, has_error_marker
from .metrics import MetricsLogger
from .repo.base import ItemRepo

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_item_id() -> str:
    return str(uuid.uuid4())


class LookupService:
    """
    Resolve a search term to an item record.

    Order: cache -> store -> generator. A generated record must pass the
    pre-storage schema and the consumability check, gets its system fields,
    must pass the storage schema, and is then inserted (insert-if-absent on
    ItemID) and cached.

    Two concurrent cold lookups for the same name each generate and insert
    their own record; the conditional insert only guards a single ItemID.
    """

    def __init__(
        self,
        repo: ItemRepo,
        generator: ItemGenerator,
        cache: ItemCache,
        metrics: Optional[MetricsLogger] = None,
        now: Callable[[], str] = utc_timestamp,
        id_factory: Callable[[], str] = new_item_id,
    ) -> None:
        self.repo = repo
        self.generator = generator
        self.cache = cache
        self.metrics = metrics
        self._now = now
        self._new_id = id_factory

    def lookup(self, search_name: Optional[str], corr_id: str) -> LookupOutcome:
        if not search_name or not search_name.strip():
            logger.error("[%s] Search name is required.", corr_id)
            return LookupOutcome.error(OutcomeKind.BAD_REQUEST, MSG_NAME_REQUIRED)
        try:
            return self._resolve(search_name, corr_id)
        except Exception:
            logger.exception("[%s] Error processing search for %r", corr_id, search_name)
            return LookupOutcome.error(OutcomeKind.INTERNAL, MSG_INTERNAL)

    # ---- pipeline ------------------------------------------------------------

    def _resolve(self, search_name: str, corr_id: str) -> LookupOutcome:
        name_key = normalize_name(search_name)
        cache_key = fingerprint(search_name)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("[%s] Returning cached data for: %s", corr_id, search_name)
            return LookupOutcome.found(cached)

        stored = self.repo.find_by_name(name_key)
        if stored is not None:
            self.cache.set(cache_key, stored)
            logger.info("[%s] Item found in store: %s", corr_id, search_name)
            return LookupOutcome.found(stored)

        logger.info("[%s] Item not found in store, generating: %s", corr_id, search_name)
        try:
            reply = self._generate(search_name, corr_id)
        except LLMError:
            logger.exception("[%s] Error calling generation service", corr_id)
            return LookupOutcome.error(OutcomeKind.UPSTREAM_ERROR, MSG_UPSTREAM)

        if has_error_marker(reply):
            logger.error("[%s] Invalid item according to generator: %s", corr_id, search_name)
            return LookupOutcome.error(OutcomeKind.NOT_FOUND, not_consumable_message(search_name))

        try:
            data = extract_json_object(reply)
        except GenerationParseError as e:
            logger.error("[%s] Error parsing generation reply: %s", corr_id, e)
            logger.debug("[%s] Generation reply content: %s", corr_id, reply)
            return LookupOutcome.error(OutcomeKind.PARSE_ERROR, MSG_PARSE)

        report = validate_generated(data)
        if not report.valid:
            logger.error("[%s] Generated data does not match input schema: %s", corr_id, report.errors)
            return LookupOutcome.error(OutcomeKind.INVALID_DATA, MSG_INVALID_INPUT)

        if not is_consumable(report.item):
            logger.error("[%s] Item is not consumable: %s", corr_id, search_name)
            return LookupOutcome.error(OutcomeKind.NOT_FOUND, not_consumable_message(search_name))

        record = self._with_system_fields(data, name_key)
        stored_report = validate_stored(record)
        if not stored_report.valid:
            logger.error("[%s] Data with system fields does not match storage schema: %s",
                         corr_id, stored_report.errors)
            return LookupOutcome.error(OutcomeKind.INVALID_DATA, MSG_INVALID_STORAGE)

        try:
            self.repo.insert(record)
        except RepoError:
            logger.exception("[%s] Error saving item to store", corr_id)
            return LookupOutcome.error(OutcomeKind.STORAGE_ERROR, MSG_SAVE_FAILED)
        logger.info("[%s] Item saved to store: %s", corr_id, search_name)

        self.cache.set(cache_key, record)
        return LookupOutcome.created(record)

    def _generate(self, search_name: str, corr_id: str) -> str:
        t0 = time.perf_counter()
        ok = False
        try:
            reply = self.generator.generate(search_name)
            ok = True
            logger.info("[%s] Generation reply received.", corr_id)
            return reply
        finally:
            if self.metrics is not None:
                self.metrics.log_latency(
                    name="generate",
                    duration_ms=(time.perf_counter() - t0) * 1000.0,
                    extra={"model": self.generator.engine_name, "ok": ok},
                    corr_id=corr_id,
                )

    def _with_system_fields(self, data: Dict[str, Any], name_key: str) -> Dict[str, Any]:
        record = dict(data)
        record["ItemID"] = self._new_id()
        record["DateAdded"] = self._now()
        # From the search input, not the generated Name.
        record["NameLowercase"] = name_key
        return record
