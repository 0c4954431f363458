"""
Market Analysis - calendar-windowed statistics over daily price series
"""

__version__ = "1.0.0"
