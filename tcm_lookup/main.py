from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tcm_lookup.api.v1.items import router as items_router
from tcm_lookup.config import Settings
from tcm_lookup.core.cache import ItemCache
from tcm_lookup.core.outcome import CORS_HEADERS, MSG_INTERNAL

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure data dir exists so the JSON store and metrics can write
    settings = Settings()
    os.makedirs(settings.data_dir, exist_ok=True)
    yield

def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="TCM Item Lookup API", version="1.0", lifespan=lifespan)
    app.state.item_cache = ItemCache(ttl_ms=settings.cache_ttl_ms)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(items_router)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        corr_id = request.headers.get("X-Correlation-Id", "-")
        logger.error("[%s] Unhandled error on %s", corr_id, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": MSG_INTERNAL}, headers=dict(CORS_HEADERS))

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app
