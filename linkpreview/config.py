"""Pydantic Settings: loads configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    # Empty disables the subrequest cache
    redis_url: str = ""
    cache_timeout_seconds: float = 2.0
    subrequest_cache_ttl_seconds: int = 300

    fetch_timeout_seconds: float = 10.0
    user_agent: str = "linkpreview/0.1.0"

    response_max_age: int = 3600
    cors_allow_origins: str = "*"

    avatar_profile_url_template: str = "https://github.com/{username}"
    log_level: str = "INFO"
    access_log: bool = True

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
