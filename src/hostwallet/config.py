"""
Configuration management using pydantic-settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostwallet.transport import DEFAULT_API_URL, DEFAULT_TIMEOUT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="HOSTWALLET_"
    )

    api_url: str = DEFAULT_API_URL
    access_token: str = ""

    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    cache_keychains: bool = True

    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = (
        "INFO"
    )


def get_settings() -> Settings:
    return Settings()
