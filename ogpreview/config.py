from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OGPREVIEW_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    request_timeout: float = 10.0
    follow_redirects: bool = True
    max_markup_bytes: int = 1_000_000
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    return Settings()
