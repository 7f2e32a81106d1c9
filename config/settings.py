"""
Application Configuration Module

Centralizes all application settings using Pydantic Settings.
Environment variables are loaded from .env file automatically.

Usage:
    from config.settings import settings
    
    print(settings.DATABASE_URL)
    print(settings.SPELLING_MIN_GAP_SEC)
"""

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    All settings can be overridden via environment variables or .env file.
    Variable names are case-insensitive.
    """
    
    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./spelling.db",
        description="Database connection string (async driver)"
    )
    DATABASE_ECHO: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )
    
    # ==========================================================================
    # Redis Configuration (for rate limiting)
    # ==========================================================================
    REDIS_URL: Optional[str] = Field(
        default=None,
        description="Redis connection URL for rate limiting storage"
    )
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable per-client request rate limiting"
    )
    
    # ==========================================================================
    # CORS Configuration
    # ==========================================================================
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )
    
    @property
    def cors_origins_list(self) -> list:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
    
    # ==========================================================================
    # Application Settings
    # ==========================================================================
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit structured JSON logs instead of colored console output"
    )
    APP_NAME: str = Field(
        default="Spelling Voice Engine",
        description="Application name for OpenAPI docs"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application version"
    )
    
    # ==========================================================================
    # Anti-Cheat (Spelled vs Said) Thresholds
    # ==========================================================================
    # Tuned against one recognizer's segmentation; retune per upstream vendor.
    SPELLING_MIN_GAP_SEC: float = Field(
        default=0.08,
        description="Minimum average pause between audio segments to count as spelling"
    )
    SPELLING_MIN_SECONDS_PER_LETTER: float = Field(
        default=0.10,
        description="Below this speech duration per letter the utterance is too fast to be spelling"
    )
    SPELLING_SINGLE_LETTER_RATIO: float = Field(
        default=0.5,
        description="Share of single-letter segments that marks a spelling pattern"
    )
    SPELLING_SEGMENT_LETTER_RATIO: float = Field(
        default=0.6,
        description="Segment count relative to letter count that marks a spelling pattern"
    )
    SPELLING_BACKSTOP_MIN_LETTERS: int = Field(
        default=3,
        description="Minimum letters before the duration backstop may reject"
    )
    FALLBACK_MIN_LETTER_GAP_MS: float = Field(
        default=100.0,
        description="Minimum mean gap between transcript letter arrivals (fallback path)"
    )
    SPELLING_SHAPE_LETTER_FORM_RATIO: float = Field(
        default=0.5,
        description="Share of letter-name parts that counts as spelling when no timing is available"
    )
    
    # ==========================================================================
    # Phonetic Learning Configuration
    # ==========================================================================
    LEARNING_MIN_OCCURRENCES: int = Field(
        default=2,
        description="Distinct failed attempts needed before a pattern becomes a mapping"
    )
    LEARNING_INITIAL_CONFIDENCE: float = Field(
        default=0.75,
        description="Confidence of a freshly learned mapping"
    )
    LEARNING_CONFIDENCE_BOOST: float = Field(
        default=0.10,
        description="Confidence added per occurrence beyond the minimum"
    )
    LEARNING_MAX_CONFIDENCE: float = Field(
        default=0.99,
        description="Upper bound for learned mapping confidence"
    )
    LEARNING_WINDOW_DAYS: int = Field(
        default=30,
        description="Only recognition logs newer than this feed a learning pass"
    )
    LEARNING_MAX_EVENTS: int = Field(
        default=500,
        description="Maximum recognition logs analyzed per learning pass"
    )
    STATS_MAX_LOGS: int = Field(
        default=100,
        description="Maximum recent logs returned by the stats endpoint"
    )
    
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Uses LRU cache to ensure settings are only loaded once.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Singleton instance for easy import
settings = get_settings()
