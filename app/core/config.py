from pydantic_settings import BaseSettings
from pydantic import field_validator, ValidationInfo, model_validator
from typing import Optional, Any
import logging

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Mentor Match"
    ENVIRONMENT: str = "development" # development, production, test
    SECRET_KEY: str = "super-secret-key-change-in-production"
    ALLOWED_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    POSTGRES_URL: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def check_database_url(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if not data.get("DATABASE_URL") and data.get("POSTGRES_URL"):
                data["DATABASE_URL"] = data.get("POSTGRES_URL")
        return data

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> str:
        if isinstance(v, str):
            if v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql://", 1)
        return v

    # Matching weights (score = w1*overlap + w2*location + w3*in_person - w4*availability_conflict)
    MATCH_WEIGHT_SKILL: float = 1.0
    MATCH_WEIGHT_LOCATION: float = 0.5
    MATCH_WEIGHT_IN_PERSON: float = 0.25
    MATCH_WEIGHT_AVAILABILITY: float = 0.5

    # Top-K candidates turned into suggestions per batch run
    SUGGESTION_BATCH_SIZE: int = 3

    @field_validator(
        "MATCH_WEIGHT_SKILL",
        "MATCH_WEIGHT_LOCATION",
        "MATCH_WEIGHT_IN_PERSON",
        "MATCH_WEIGHT_AVAILABILITY",
    )
    @classmethod
    def check_non_negative_weight(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            raise ValueError(f"{info.field_name} must be non-negative")
        return v

    @field_validator("SUGGESTION_BATCH_SIZE")
    @classmethod
    def check_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SUGGESTION_BATCH_SIZE must be at least 1")
        return v

    # Monitoring (Sentry)
    SENTRY_DSN: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore" # Prevent crash on extra env vars

settings = Settings()

if settings.ENVIRONMENT == "production" and settings.SECRET_KEY == "super-secret-key-change-in-production":
    logging.getLogger(__name__).critical("SECRET_KEY is the development default. Set SECRET_KEY in production.")
