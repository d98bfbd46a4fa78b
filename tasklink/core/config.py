from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="TaskLink Bridge", alias="APP_NAME")
    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="127.0.0.1", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    ws_prefix: str = Field(default="/ws", alias="WS_PREFIX")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    asana_host_port: str = Field(default="app.asana.com", alias="ASANA_HOST_PORT")
    asana_api_version: str = Field(default="1.0", alias="ASANA_API_VERSION")
    asana_session_cookie: str = Field(default="ticket", alias="ASANA_SESSION_COOKIE")
    asana_session_ticket: str = Field(default="", alias="ASANA_SESSION_TICKET")

    http_timeout_seconds: float = Field(default=20.0, alias="HTTP_TIMEOUT_SECONDS")
    response_cache_ttl_seconds: int = Field(default=300, alias="RESPONSE_CACHE_TTL_SECONDS")
    response_cache_max_entries: int = Field(default=256, alias="RESPONSE_CACHE_MAX_ENTRIES")
    cache_refresh_interval_seconds: int = Field(default=15 * 60, alias="CACHE_REFRESH_INTERVAL_SECONDS")
    prime_cache_on_startup: bool = Field(default=True, alias="PRIME_CACHE_ON_STARTUP")

    typeahead_count: int = Field(default=10, alias="TYPEAHEAD_COUNT")
    user_opt_fields: str = Field(default="name,photo.image_60x60", alias="USER_OPT_FIELDS")

    options_file: str = Field(default=".tasklink/options.json", alias="OPTIONS_FILE")
    allowed_cors_origins: str = Field(default="", alias="ALLOWED_CORS_ORIGINS")

    @property
    def cors_origins(self) -> list[str]:
        return [x.strip() for x in self.allowed_cors_origins.split(",") if x.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
