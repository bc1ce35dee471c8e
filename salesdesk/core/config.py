# File: salesdesk/core/config.py
"""
Configuration settings for SalesDesk.

This module defines application settings using Pydantic's BaseSettings,
which supports environment variable loading and validation.
"""

import json
import logging
from typing import Any, List, Optional, Union

from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Values come from the process environment first and then from a local
    ``.env`` file, with validation and type conversion.
    """

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "SalesDesk"
    VERSION: str = "1.0.0"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[Union[AnyHttpUrl, str]] = []

    # Database
    DATABASE_URL: Optional[str] = None
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: Optional[str] = None
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None
    DATABASE_PATH: str = "salesdesk.db"
    SQL_ECHO: bool = False

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Events
    PUBLISH_EVENTS: bool = True

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str], None]) -> List[str]:
        """Parse CORS origins from a JSON list or a comma-separated string."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                return [i.strip() for i in v.split(",") if i.strip()]
        return v or []

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("MAX_PAGE_SIZE", "DEFAULT_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Page sizes must be positive")
        return v

    @model_validator(mode="after")
    def assemble_db_connection(self) -> Any:
        """Assemble the database connection string when none was given."""
        if self.DATABASE_URL:
            return self
        if self.DATABASE_HOST and self.DATABASE_PORT and self.DATABASE_USER and self.DATABASE_NAME:
            password = self.DATABASE_PASSWORD or ""
            self.DATABASE_URL = (
                f"postgresql://{self.DATABASE_USER}:{password}@{self.DATABASE_HOST}:"
                f"{self.DATABASE_PORT}/{self.DATABASE_NAME}"
            )
        else:
            self.DATABASE_URL = f"sqlite:///{self.DATABASE_PATH}"
        return self


settings = Settings()
