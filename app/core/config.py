from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]
NamingBackend = Literal["stub", "openai"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "InventoryService"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Database (SQLAlchemy async URL)
    DATABASE_URL: str = "sqlite+aiosqlite:///./inventory.db"
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = True              # metadata.create_all on startup

    # Product naming
    NAMING_BACKEND: NamingBackend = "stub"
    naming_timeout_s: float = 10.0             # upper bound for the naming step

    # OpenAI (only used when NAMING_BACKEND=openai)
    OPENAI_API_KEY: str = ""
    OPENAI_NAMING_MODEL: str = "gpt-4o-mini"
    naming_max_tokens: int = 200

    # API
    api_prefix: str = "/api/v1"
    ALLOWED_ORIGINS: str = ""                  # CSV

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
