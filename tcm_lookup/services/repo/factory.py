from __future__ import annotations

from tcm_lookup.config import Settings
from .base import ItemRepo
from .dynamo_repo import DynamoItemRepo
from .json_repo import JSONItemRepo


def build_repo(settings: Settings) -> ItemRepo:
    if settings.store_backend == "json":
        return JSONItemRepo(settings)
    return DynamoItemRepo(settings)
