"""AWS Lambda entry point: API Gateway proxy event in, proxy response out.

``handler`` builds its LookupService (and with it the item cache) on the first
invocation and reuses it for every later invocation served by the same
container.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Callable, Dict, Optional

from tcm_lookup.config import Settings
from tcm_lookup.core.cache import ItemCache
from tcm_lookup.core.outcome import CORS_HEADERS, MSG_INTERNAL, LookupOutcome, OutcomeKind
from tcm_lookup.services.llm import OpenAIItemGenerator
from tcm_lookup.services.lookup import LookupService
from tcm_lookup.services.metrics import MetricsLogger
from tcm_lookup.services.repo.factory import build_repo

logger = logging.getLogger(__name__)


def build_lookup_service() -> LookupService:
    settings = Settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    return LookupService(
        repo=build_repo(settings),
        generator=OpenAIItemGenerator(settings),
        cache=ItemCache(ttl_ms=settings.cache_ttl_ms),
        metrics=MetricsLogger(settings),
    )


def to_proxy_response(outcome: LookupOutcome) -> Dict[str, Any]:
    return {
        "statusCode": outcome.status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(outcome.body(), ensure_ascii=False),
    }


def make_handler(service_factory: Callable[[], LookupService]) -> Callable[[Dict[str, Any], Any], Dict[str, Any]]:
    service: Optional[LookupService] = None

    def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        nonlocal service
        corr_id = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
        logger.info("[%s] Received event: %s", corr_id, json.dumps(event, default=str))
        if service is None:
            try:
                service = service_factory()
            except Exception:
                logger.exception("[%s] Could not initialize lookup service", corr_id)
                return to_proxy_response(LookupOutcome.error(OutcomeKind.INTERNAL, MSG_INTERNAL))
        params = event.get("queryStringParameters") or {}
        return to_proxy_response(service.lookup(params.get("name"), corr_id))

    return handler


handler = make_handler(build_lookup_service)
