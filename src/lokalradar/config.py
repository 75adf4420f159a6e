"""
Lokalradar configuration management using pydantic-settings.
"""

import logging
import warnings
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    # Application Settings
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # API
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Maximum request body size for extract uploads",
    )

    # Clustering
    cluster_count: int = Field(default=4, description="Default number of clusters (k)")
    max_iterations: int = Field(default=100, description="k-means iteration cap")
    move_windows: list[int] = Field(
        default=[8, 3],
        description="'Moved N years ago' windows feeding the clustering stage",
    )
    clustering_seed: Optional[int] = Field(
        default=None,
        description="Seed for centroid initialization (random when unset)",
    )

    # Risk scoring
    risk_threshold: int = Field(
        default=70, description="Default threshold for high-risk retrieval (0-100)"
    )

    # Timeline
    reference_year_policy: str = Field(
        default="dataset",
        description="Reference year: 'dataset' (max ingested year) or 'wall_clock'",
    )

    # Parsing
    legacy_remap_enabled: bool = Field(
        default=True,
        description="Remap legacy single-byte letters (å, ø, æ) while decoding extracts",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept only standard logging level names."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("cluster_count", "max_iterations")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("move_windows")
    @classmethod
    def validate_move_windows(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("at least one move window is required")
        if any(years < 0 for years in v):
            raise ValueError("move windows must be non-negative")
        return v

    @field_validator("risk_threshold")
    @classmethod
    def validate_risk_threshold(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("risk_threshold must be between 0 and 100")
        return v

    @field_validator("reference_year_policy")
    @classmethod
    def validate_reference_year_policy(cls, v: str) -> str:
        if v not in ("dataset", "wall_clock"):
            raise ValueError("reference_year_policy must be 'dataset' or 'wall_clock'")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Ensure critical settings are configured in production."""
        if self.environment == "production":
            if self.debug:
                raise ValueError("DEBUG must be False in production")
            if "*" in self.cors_origins:
                warnings.warn(
                    "CORS_ORIGINS allows any origin in production",
                    UserWarning,
                    stacklevel=2,
                )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Global settings instance
settings = Settings()
