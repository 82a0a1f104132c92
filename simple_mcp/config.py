"""Server settings, read from ``SIMPLE_MCP_*`` environment variables or ``.env``."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SIMPLE_MCP_", env_file=".env", extra="ignore")

    transport: Literal["http", "stdio"] = "http"
    host: str = "0.0.0.0"
    port: int = 8888
    log_level: str = "INFO"
    # include request params in the structured request log lines
    log_payloads: bool = True
