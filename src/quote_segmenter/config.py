from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = "INFO"

    # Deeper element nesting is left unsegmented.
    max_nesting_depth: int = 200

    attachment_proxy_url: str = "/proxy/gmail-attachment"
    quote_time_zone: str = "UTC"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
