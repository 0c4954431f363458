"""
Data models
"""
from market_analysis.models.price_record import DailyBar, PriceRecord

__all__ = ["DailyBar", "PriceRecord"]
