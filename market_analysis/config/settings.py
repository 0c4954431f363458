"""
Application configuration using pydantic-settings with nested structure
"""
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ============================================================================
# NESTED CONFIGURATION MODELS
# ============================================================================

# Get absolute path to .env file (project directory)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BASE_DIR / ".env"


class LoggerConfig(BaseSettings):
    """Logger configuration settings."""
    default_level: str = "INFO"
    console_level: str = "ERROR"
    file_path: str = "./data/logs/market_analysis.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    model_config = SettingsConfigDict(env_prefix="LOGGER__", extra="ignore")


class AnalysisConfig(BaseSettings):
    """Defaults for the bucketing and aggregation engine."""
    default_period: str = "weekly"
    pivot_strategy: str = "median_of_three"
    gap_policy: str = "skip"
    interpolation: str = "linear"
    precision: int = 4
    model_config = SettingsConfigDict(env_prefix="ANALYSIS__", extra="ignore")

    @field_validator("pivot_strategy")
    @classmethod
    def _check_pivot(cls, v: str) -> str:
        allowed = ("last", "median_of_three", "random")
        if v not in allowed:
            raise ValueError(f"pivot_strategy must be one of {allowed}, got '{v}'")
        return v

    @field_validator("gap_policy")
    @classmethod
    def _check_gap_policy(cls, v: str) -> str:
        allowed = ("skip", "empty")
        if v not in allowed:
            raise ValueError(f"gap_policy must be one of {allowed}, got '{v}'")
        return v

    @field_validator("interpolation")
    @classmethod
    def _check_interpolation(cls, v: str) -> str:
        allowed = ("linear", "lower", "higher", "nearest", "midpoint")
        if v not in allowed:
            raise ValueError(f"interpolation must be one of {allowed}, got '{v}'")
        return v

    @field_validator("precision")
    @classmethod
    def _check_precision(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"precision must be >= 0, got {v}")
        return v


# ============================================================================
# MAIN SETTINGS CLASS
# ============================================================================

class Settings(BaseSettings):
    """Application settings loaded from environment variables.
    
    Use double underscore (__) in env vars to access nested configs.
    
    Example:
        LOGGER__DEFAULT_LEVEL=DEBUG
        ANALYSIS__GAP_POLICY=empty
        ANALYSIS__PIVOT_STRATEGY=random
    """
    
    # Application metadata
    APP_NAME: str = "Market Analysis"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    
    # Nested configuration sections (constructed from environment)
    LOGGER: Optional[LoggerConfig] = None
    ANALYSIS: Optional[AnalysisConfig] = None
    
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Construct nested configs AFTER environment is loaded
        self.LOGGER = LoggerConfig()
        self.ANALYSIS = AnalysisConfig()
    
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_nested_delimiter="__",
        env_prefix=""
    )


# Global settings instance
from dotenv import load_dotenv

# Load .env file into environment variables
if _ENV_FILE.exists():
    load_dotenv(str(_ENV_FILE), override=True)

settings = Settings()
