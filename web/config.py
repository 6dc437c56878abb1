"""Application configuration for the teacher evaluation service."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    DEBUG: bool = Field(default=False, description="Enable FastAPI debug mode")
    ORGANIZATION_NAME: str = Field(
        default="Centro de Estudios Preuniversitarios - Universidad Nacional de San Agustín",
        description="Organization name printed in every page footer",
    )
    PRODUCT_LABEL: str = Field(default="CEPRUNSA - UNSA", description="Bold label in the page header")
    PRODUCT_SUBTITLE: str = Field(
        default="Sistema de Evaluación Docente", description="Subtitle next to the header label"
    )
    EVIDENCE_MAX_WIDTH: int = Field(default=600, ge=1, description="Evidence image box width (px)")
    EVIDENCE_MAX_HEIGHT: int = Field(default=450, ge=1, description="Evidence image box height (px)")
    GENERATION_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, description="Caller-side timeout for one document generation"
    )
    MAX_EVIDENCE_SIZE_MB: int = Field(default=10, ge=1, description="Maximum evidence payload size")
    ALLOWED_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])
    SERVER_HOST: str = Field(default="0.0.0.0", description="Development server bind address")
    SERVER_PORT: int = Field(default=8000, ge=1, le=65535)

    model_config = {
        "env_file": ".env",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""
    return Settings()
