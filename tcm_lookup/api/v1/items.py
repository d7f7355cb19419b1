from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from tcm_lookup.config import Settings
from tcm_lookup.core.outcome import CORS_HEADERS
from tcm_lookup.services.llm import ItemGenerator, OpenAIItemGenerator
from tcm_lookup.services.lookup import LookupService
from tcm_lookup.services.metrics import MetricsLogger
from tcm_lookup.services.repo.base import ItemRepo
from tcm_lookup.services.repo.factory import build_repo

router = APIRouter(tags=["items"])

# ---- DI helpers --------------------------------------------------------------

def get_settings() -> Settings:
    return Settings()

# The store and generator hold SDK clients; build them once per app, on first use.
def get_repo(request: Request, settings: Settings = Depends(get_settings)) -> ItemRepo:
    repo = getattr(request.app.state, "item_repo", None)
    if repo is None:
        repo = request.app.state.item_repo = build_repo(settings)
    return repo

def get_generator(request: Request, settings: Settings = Depends(get_settings)) -> ItemGenerator:
    generator = getattr(request.app.state, "item_generator", None)
    if generator is None:
        generator = request.app.state.item_generator = OpenAIItemGenerator(settings)
    return generator

def get_lookup_service(
    request: Request,
    settings: Settings = Depends(get_settings),
    repo: ItemRepo = Depends(get_repo),
    generator: ItemGenerator = Depends(get_generator),
) -> LookupService:
    # The cache lives on app.state for the life of the process.
    return LookupService(repo, generator, request.app.state.item_cache, MetricsLogger(settings))

# ---- Routes ------------------------------------------------------------------

@router.get("/")
@router.get("/api/v1/items")
def lookup_item(
    request: Request,
    name: Optional[str] = Query(None, description="Ingredient or nutrient to look up"),
    service: LookupService = Depends(get_lookup_service),
):
    corr_id = request.headers.get("X-Correlation-Id") or str(uuid.uuid4())
    outcome = service.lookup(name, corr_id)
    return JSONResponse(
        status_code=outcome.status_code,
        content=jsonable_encoder(outcome.body()),
        headers={**CORS_HEADERS, "X-Correlation-Id": corr_id},
    )
