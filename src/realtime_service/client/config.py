from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    API_BASE_URL: str = "http://localhost:8000"
    WS_URL: str = "ws://localhost:8000/ws"
    TOKEN: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    TYPING_WINDOW_SECONDS: float = 1.0

    model_config = SettingsConfigDict(
        env_prefix="REALTIME_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
