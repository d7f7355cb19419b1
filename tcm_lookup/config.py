from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator
import os
from typing import Optional, List, Literal
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


def _default_data_dir() -> str:
    # Only /tmp is writable inside a Lambda container.
    return "/tmp" if os.environ.get("AWS_LAMBDA_FUNCTION_NAME") else "data"


class Settings(BaseSettings):
    # LLM
    openai_api_key: str = Field(..., min_length=1)
    openai_model: str = Field("gpt-4o-mini")
    openai_temperature: float = Field(0.7, ge=0, le=2)
    openai_max_tokens: int = Field(1500, ge=1)
    openai_timeout_s: float = Field(10.0, gt=0)

    # Storage
    store_backend: Literal["dynamodb", "json"] = Field("dynamodb")
    table_name: Optional[str] = Field(None)
    name_index: str = Field("NameLowercaseIndex")
    aws_region: Optional[str] = Field(None)
    data_dir: str = Field(default_factory=_default_data_dir)
    items_file: str = Field(default_factory=lambda: os.path.join(_default_data_dir(), "items.json"))

    # Cache
    cache_ttl_ms: int = Field(60 * 60 * 1000, ge=0)

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field("INFO")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def _table_required_for_dynamodb(self) -> "Settings":
        if self.store_backend == "dynamodb" and not self.table_name:
            raise ValueError("TABLE_NAME must be set when STORE_BACKEND=dynamodb")
        return self
