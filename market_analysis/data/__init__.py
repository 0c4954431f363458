"""
Price data sources
"""
from market_analysis.data.csv_loader import CSVPriceLoader, load_price_record, parse_date

__all__ = ["CSVPriceLoader", "load_price_record", "parse_date"]
