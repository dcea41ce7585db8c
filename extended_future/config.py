from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Attach a no-op failure handler to every new cell unless the cell says otherwise
    SUPPRESS_UNHANDLED_REJECTIONS: bool = False
    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="EXTENDED_FUTURE_", case_sensitive=False, extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings()
