from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    app_name: str = "lorelink"

    # Optional JSON log file; stderr logging is always on
    log_file: Optional[str] = None
    log_level: str = "INFO"

    # Budget applied by the HTTP surface when a request carries no max_chars.
    # None disables link injection and truncation for such requests.
    default_max_chars: Optional[int] = None

    # Label emitted before the postamble block on serialize
    postamble_header: str = "Continue From:"

    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = SettingsConfigDict(env_prefix="LORELINK_", env_file=".env", extra="ignore")

@lru_cache
def get_settings():
    return Settings()
