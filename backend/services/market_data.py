"""
Module: market_data.py
Description: Mock market snapshot and economic indicator provider.

Values are hardcoded reference figures based on historical averages. Index
quotes get a small random drift on every read to simulate live updates;
commodities and indicators are static.

Author: SmartFin Team

Usage:
    provider = MarketDataProvider()
    provider.load()
    snapshot = provider.jitter(provider.snapshot)
"""

import copy
import random
from typing import Dict, Optional, Tuple

# Index value drift per read (+/- 0.1%)
VALUE_JITTER = 0.001
# Daily change scaling per read
CHANGE_JITTER = (0.9, 1.1)

INDICATOR_SOURCE = "Federal Reserve Economic Data (Simulated)"


class MarketDataProvider:
    """Holds the baseline market snapshot and economic indicators."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.snapshot: Dict = {}
        self.indicators: Dict[str, float] = {}

    @staticmethod
    def load_baseline() -> Tuple[Dict, Dict[str, float]]:
        """
        Return the fixed baseline figures.

        Returns:
            Tuple of (market snapshot, economic indicators).
        """
        snapshot = {
            'indices': [
                {'symbol': 'S&P 500', 'value': 4515.23, 'change': 0.78, 'change_percent': 0.02},
                {'symbol': 'NASDAQ', 'value': 14125.48, 'change': -32.45, 'change_percent': -0.23},
                {'symbol': 'DOW', 'value': 35123.36, 'change': 156.78, 'change_percent': 0.45},
                {'symbol': 'Russell 2000', 'value': 1812.45, 'change': 12.34, 'change_percent': 0.69},
            ],
            'commodities': [
                {'symbol': 'Gold', 'value': 1978.30, 'change': 5.20, 'unit': 'oz'},
                {'symbol': 'Oil', 'value': 78.45, 'change': -1.23, 'unit': 'barrel'},
                {'symbol': 'Bitcoin', 'value': 43567.89, 'change': 1234.56, 'unit': 'BTC'},
            ],
        }
        indicators = {
            'inflation_rate': 3.7,
            'unemployment_rate': 3.9,
            'federal_funds_rate': 5.5,
            'gdp_growth': 2.1,
            'consumer_confidence': 102.5,
            'retail_sales': 0.3,
            'mortgage_rate_30y': 7.23,
            'savings_rate': 4.1,
        }
        return snapshot, indicators

    def load(self) -> None:
        """Populate the cached baseline. Called once at startup."""
        self.snapshot, self.indicators = self.load_baseline()

    def jitter(self, snapshot: Dict) -> Dict:
        """
        Apply simulated real-time drift to index quotes.

        The input is left untouched; a new snapshot is returned.
        """
        updated = copy.deepcopy(snapshot)
        for index in updated['indices']:
            index['value'] = index['value'] * (1 + self.rng.uniform(-VALUE_JITTER, VALUE_JITTER))
            index['change'] = index['change'] * self.rng.uniform(*CHANGE_JITTER)
        return updated
