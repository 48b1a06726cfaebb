from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from urllib.parse import quote_plus
from enum import Enum
import json
import os


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Project Information
    PROJECT_NAME: str = "prayerfast"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: str = "prayerfast"
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # API Security
    VALID_API_KEYS: List[str] = []
    REQUIRE_API_KEY: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    @model_validator(mode="after")
    def _finalize_and_validate(self) -> "Settings":
        # Derive SQLALCHEMY_DATABASE_URI if not provided
        if not self.SQLALCHEMY_DATABASE_URI:
            safe_user = quote_plus(self.POSTGRES_USER)
            server = self.POSTGRES_SERVER
            port = self.POSTGRES_PORT
            db = self.POSTGRES_DB
            if self.POSTGRES_PASSWORD:
                safe_password = quote_plus(self.POSTGRES_PASSWORD)
                self.SQLALCHEMY_DATABASE_URI = (
                    f"postgresql+psycopg2://{safe_user}:{safe_password}@{server}:{port}/{db}"
                )
            else:
                self.SQLALCHEMY_DATABASE_URI = f"postgresql+psycopg2://{safe_user}@{server}:{port}/{db}"

        # Accept comma-separated keys as well as a JSON list
        if not self.VALID_API_KEYS:
            api_keys_env = os.getenv("VALID_API_KEYS")
            if api_keys_env:
                try:
                    self.VALID_API_KEYS = json.loads(api_keys_env)
                except (json.JSONDecodeError, TypeError):
                    self.VALID_API_KEYS = [key.strip() for key in api_keys_env.split(",") if key.strip()]

        if self.is_production and self.REQUIRE_API_KEY and not self.VALID_API_KEYS:
            raise ValueError("VALID_API_KEYS must be set when REQUIRE_API_KEY is enabled in production")

        return self

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


settings = Settings()
