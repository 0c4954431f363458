"""
Configuration module
"""
from market_analysis.config.settings import settings

__all__ = [
    "settings",
]
