from enum import Enum
from typing import List

from pydantic import Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Configuration settings for the Messaging Service.

    Loads from a .env file and environment variables.

    All environment variables are prefixed with MESSAGING_SERVICE_
    to avoid conflicts with the rest of the adoption platform.
    """

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- GENERAL APP SETTINGS ---
    PROJECT_NAME: str = "Messaging Service"
    DEBUG: bool = Field(False, alias="MESSAGING_SERVICE_DEBUG")
    ENVIRONMENT: Environment = Field(
        Environment.DEVELOPMENT, alias="MESSAGING_SERVICE_ENVIRONMENT"
    )
    LOGGING_LEVEL: str = Field("INFO", alias="MESSAGING_SERVICE_LOGGING_LEVEL")
    ROOT_PATH: str = Field("/api/v1", alias="MESSAGING_SERVICE_ROOT_PATH")

    # --- DATABASE SETTINGS ---
    DATABASE_URL: str = Field(..., alias="MESSAGING_SERVICE_DATABASE_URL")
    DATABASE_POOL_SIZE: int = Field(5, alias="MESSAGING_SERVICE_DATABASE_POOL_SIZE")

    # --- CORS SETTINGS ---
    CORS_ALLOW_ORIGINS: List[str] = Field(
        ["*"], alias="MESSAGING_SERVICE_CORS_ALLOW_ORIGINS"
    )

    # --- JWT Settings for user tokens ---
    # These MUST match the values used by the platform's auth service to sign tokens.
    USER_JWT_SECRET_KEY: str = Field(..., alias="MESSAGING_SERVICE_USER_JWT_SECRET_KEY")
    USER_JWT_ALGORITHM: str = Field("HS256", alias="MESSAGING_SERVICE_USER_JWT_ALGORITHM")
    USER_JWT_ISSUER: str = Field(
        "pet_adoption_auth", alias="MESSAGING_SERVICE_USER_JWT_ISSUER"
    )
    USER_JWT_AUDIENCE: str = Field(
        "pet_adoption_clients", alias="MESSAGING_SERVICE_USER_JWT_AUDIENCE"
    )

    # --- MESSAGING SETTINGS ---
    MESSAGE_HISTORY_LIMIT: int = Field(50, alias="MESSAGING_SERVICE_MESSAGE_HISTORY_LIMIT")
    SEND_MESSAGE_RATE_LIMIT: str = Field(
        "30/minute", alias="MESSAGING_SERVICE_SEND_MESSAGE_RATE_LIMIT"
    )
    GENERAL_RATE_LIMIT: str = Field(
        "200/minute", alias="MESSAGING_SERVICE_GENERAL_RATE_LIMIT"
    )

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        return self.ENVIRONMENT == Environment.TESTING

    @field_validator("DATABASE_URL", mode="after")
    def validate_db_url(cls, v: PostgresDsn) -> str:
        """Ensures the database URL uses the psycopg driver."""
        return str(v).replace("postgresql://", "postgresql+psycopg://")


# Global instance of the settings
settings = Settings()
