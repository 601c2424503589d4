"""
Configuration management for HorasCalc application.
Centralizes all configuration settings and environment variables.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Central configuration class for the application."""

    # Application version
    VERSION: str = "1.04"

    # Application configuration
    DEBUG: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

    # Server configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Application paths
    BASE_DIR: Path = Path(__file__).parent
    TEMPLATES_DIR: Path = BASE_DIR / "templates"
    STATIC_DIR: Optional[Path] = BASE_DIR / "static" if (BASE_DIR / "static").exists() else None

    # Logging
    LOG_FILE: str = os.getenv("LOG_FILE", "horas_calc.log")

    # Labor-time allowances (in minutes)
    DAILY_ORDINARY_MINUTES: int = int(os.getenv("DAILY_ORDINARY_MINUTES", "480"))
    WEEKLY_ORDINARY_MINUTES: int = int(os.getenv("WEEKLY_ORDINARY_MINUTES", "2640"))

    # Rest configuration
    MAX_REST_MINUTES: int = int(os.getenv("MAX_REST_MINUTES", "240"))
    DEFAULT_REST_MODE: str = os.getenv("DEFAULT_REST_MODE", "countdown")

    # Category policy preset (see core.wage_calculator.CATEGORY_POLICIES)
    CATEGORY_POLICY: str = os.getenv("CATEGORY_POLICY", "standard")

    LOCAL_TZ = ZoneInfo(os.getenv("LOCAL_TZ", "America/Bogota"))

    def __init__(self):
        """Validate configuration on initialization."""
        if self.DAILY_ORDINARY_MINUTES <= 0 or self.WEEKLY_ORDINARY_MINUTES <= 0:
            raise RuntimeError(
                "DAILY_ORDINARY_MINUTES and WEEKLY_ORDINARY_MINUTES must be positive."
            )

        if self.MAX_REST_MINUTES < 0:
            raise RuntimeError("MAX_REST_MINUTES cannot be negative.")

    @classmethod
    def from_env(cls) -> Config:
        """Create Config instance from environment variables."""
        return cls()


# Global config instance
config = Config.from_env()
