from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Twitter / X credentials (optional; anonymous when unset)
    TWITTER_USERNAME: str = ""
    TWITTER_PASSWORD: str = ""
    TWITTER_EMAIL: str = ""
    TWITTER_LANGUAGE: str = "en-US"

    # Upstream behaviour
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
