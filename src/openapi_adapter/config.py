"""Configuration for the OpenAPI MCP Adapter."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="centia-io-mcp-server")
    service_version: str = Field(default="1.0.0")

    api_base_url: str = Field(default="https://api.centia.io")
    api_token: Optional[str] = Field(default=None)
    api_spec_path: str = Field(default="openapi.json")
    api_timeout_seconds: float = Field(default=30)

    adapter_transport: str = Field(default="stdio")
    adapter_host: str = Field(default="0.0.0.0")
    adapter_port: int = Field(default=8000)

    adapter_log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
