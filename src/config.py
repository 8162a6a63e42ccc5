"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_allow_origins: str = "*"

    site_url: str = "https://grabnwatch.com/"
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0.0.0 Safari/537.36"
    headless: bool = True
    browser_executable_path: str = ""
    browser_args: str = "--hide-scrollbars,--disable-web-security"

    navigation_timeout_seconds: float = 30.0
    challenge_wait_seconds: float = 10.0
    form_ready_timeout_seconds: float = 15.0
    return_wait_seconds: float = 5.0
    loading_timeout_seconds: float = 30.0
    settle_wait_seconds: float = 5.0

    session_mode: Literal["pooled", "per_request"] = "pooled"
    pool_size: int = 1
    pool_prewarm: bool = True

    def browser_arg_list(self) -> list[str]:
        return [a.strip() for a in self.browser_args.split(",") if a.strip()]

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
