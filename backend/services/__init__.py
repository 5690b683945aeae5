"""Backend services for the SmartFin demo dataset."""

from .csv_processor import CSVProcessor, DataValidationError
from .market_data import MarketDataProvider, INDICATOR_SOURCE
from .spending_summary import InsufficientDataError, aggregate_by, summarize
from .insight_generator import InsightGenerator, derive_insights
from .pattern_analyzer import InvalidTransactionsError, PatternAnalyzer, analyze

__all__ = [
    "CSVProcessor",
    "DataValidationError",
    "MarketDataProvider",
    "INDICATOR_SOURCE",
    "InsufficientDataError",
    "aggregate_by",
    "summarize",
    "InsightGenerator",
    "derive_insights",
    "InvalidTransactionsError",
    "PatternAnalyzer",
    "analyze",
]
