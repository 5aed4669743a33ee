"""
Central API configuration (single source of truth).
Reads environment variables and exposes a typed Settings object.
"""
import os
from pydantic import BaseModel, Field


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    MONGO_URI: str = Field(default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017"))
    MONGO_DB: str  = Field(default_factory=lambda: os.getenv("MONGO_DB", "wellness"))
    JWT_SECRET: str = Field(default_factory=lambda: os.getenv("JWT_SECRET", "changeme"))
    JWT_EXPIRES_MIN: int = Field(default_factory=lambda: int(os.getenv("JWT_EXPIRES_MIN", str(7 * 24 * 60))))
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "*")))
    API_PREFIX: str = Field(default_factory=lambda: os.getenv("API_PREFIX", "/api"))

settings = Settings()
