"""
Configuration settings for the FinOrbit transaction pipeline.

Uses Pydantic Settings to load environment variables for the database
connection, the SNS destination, logging, and the offline/test switch shared
by the producer and consumer entry points.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

OFFLINE_ENV = "test"


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASS")
    db_name: str = Field("finorbit", alias="DB_NAME")
    db_sslmode: str = Field("require", alias="DB_SSLMODE")
    db_connect_timeout: int = Field(10, alias="DB_CONNECT_TIMEOUT")

    # Messaging
    sns_topic_arn: str = Field("", alias="SNS_TOPIC_ARN")
    aws_region: Optional[str] = Field(None, alias="AWS_REGION")

    # Application
    app_env: str = Field("production", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def offline_mode(self) -> bool:
        """True when real database and SNS connections must not be opened."""
        return self.app_env.strip().lower() == OFFLINE_ENV


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["OFFLINE_ENV", "Settings", "get_settings"]
