"""
Centralized configuration management.

All application configuration is loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Application settings with validation."""

    # Dataset limits
    max_dataset_rows: int = Field(default=100000, ge=1, le=10000000, description="Maximum rows accepted per dataset")

    # Output sizes
    max_chart_recommendations: int = Field(default=8, ge=1, le=50, description="Charts returned per analysis")
    max_business_insights: int = Field(default=5, ge=0, le=20, description="Narrative insights kept per analysis")

    # Narrative collaborator
    narrative_timeout_seconds: float = Field(default=15.0, gt=0, le=300, description="Upper bound for one narrative request")
    narrative_max_tokens: int = Field(default=500, ge=50, le=4000, description="Token budget for the narrative reply")
    groq_model: str = Field(default="llama-3.1-8b-instant", description="Groq model to use")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=10, ge=1, le=1000, description="Rate limit per minute per IP")

    # Request timeout
    request_timeout_seconds: int = Field(default=300, ge=1, le=3600, description="Request timeout in seconds")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated list of allowed CORS origins"
    )

    # Analyzed datasets kept for refresh requests
    dataset_cache_ttl_seconds: int = Field(default=3600, ge=1, description="How long an analyzed dataset stays cached")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            max_dataset_rows=int(os.getenv("MAX_DATASET_ROWS", "100000")),
            max_chart_recommendations=int(os.getenv("MAX_CHART_RECOMMENDATIONS", "8")),
            max_business_insights=int(os.getenv("MAX_BUSINESS_INSIGHTS", "5")),
            narrative_timeout_seconds=float(os.getenv("NARRATIVE_TIMEOUT_SECONDS", "15")),
            narrative_max_tokens=int(os.getenv("NARRATIVE_MAX_TOKENS", "500")),
            groq_model=os.getenv("GROQ_MODEL", "llama-3.1-8b-instant"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "10")),
            request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT_SECONDS", "300")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:3001"),
            dataset_cache_ttl_seconds=int(os.getenv("DATASET_CACHE_TTL_SECONDS", "3600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
