"""
Configuration settings for the questkit game engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (QUESTKIT_*)."""

    model_config = SettingsConfigDict(
        env_prefix="QUESTKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Timers
    # ========================================
    tick_interval_seconds: float = Field(
        default=0.1,
        description="Countdown tick interval for time-bounded games",
    )
    min_time_limit_seconds: int = Field(
        default=10,
        description="Smallest time limit an author may configure",
    )
    max_time_limit_seconds: int = Field(
        default=180,
        description="Largest time limit an author may configure",
    )

    # ========================================
    # Lesson feedback
    # ========================================
    feedback_delay_seconds: float = Field(
        default=1.5,
        description="Delay between lesson-mode feedback and the completion callback",
    )
    drag_drop_feedback_delay_seconds: float = Field(
        default=2.2,
        description="Longer feedback delay for drag-drop (placement animations)",
    )

    # ========================================
    # Memory flip
    # ========================================
    mismatch_hide_delay_seconds: float = Field(
        default=1.0,
        description="How long a mismatched pair stays face up",
    )
    min_perfect_multiplier: float = Field(default=1.0)
    max_perfect_multiplier: float = Field(default=5.0)

    # ========================================
    # Photo swipe
    # ========================================
    swipe_offset_threshold: float = Field(
        default=100.0,
        description="Horizontal drag distance (px) that commits a swipe",
    )
    swipe_velocity_threshold: float = Field(
        default=500.0,
        description="Release velocity (px/s) that commits a swipe",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(default="WARNING")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
