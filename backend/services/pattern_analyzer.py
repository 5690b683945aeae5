"""
Module: pattern_analyzer.py
Description: Ad-hoc spending pattern analysis for client-supplied transactions.

Computes:
    1. Totals and average transaction size
    2. Category and merchant breakdowns
    3. Daily / weekly / monthly projections from distinct spending days
    4. Rule-based recommendations

Author: SmartFin Team

Usage:
    analysis = PatternAnalyzer(transactions).analyze()
"""

from typing import Sequence

from models import InsightType, Transaction
from .observability import timed
from .spending_summary import aggregate_by, top_group


class InvalidTransactionsError(ValueError):
    """Raised when the analysis input is missing, not a list, or empty."""

    def __init__(self, message: str = "Invalid transactions data"):
        super().__init__(message)


class PatternAnalyzer:
    """
    Project spending forward from a list of transactions.

    Projections assume every distinct transaction date is one spending day,
    so gaps between dates are not counted.
    """

    DAYS_PER_WEEK = 7
    DAYS_PER_MONTH = 30

    # Monthly projection above this triggers a budgeting warning
    MONTHLY_WARNING_THRESHOLD = 5000
    # A single merchant above this share of spend triggers a note
    MERCHANT_SHARE_THRESHOLD = 0.20

    def __init__(self, transactions: Sequence[Transaction]):
        """
        Initialize pattern analyzer.

        Args:
            transactions: Transactions to analyze.

        Raises:
            InvalidTransactionsError: If the input is not a non-empty list.
        """
        if not isinstance(transactions, (list, tuple)) or not transactions:
            raise InvalidTransactionsError()
        self.transactions = list(transactions)

    @timed("analyze")
    def analyze(self) -> dict:
        """
        Run the full analysis.

        Returns:
            Dict with total_spent, average_transaction, categories, merchants,
            patterns and recommendations.
        """
        total = sum(t.amount for t in self.transactions)
        categories = aggregate_by(self.transactions, lambda t: t.category)
        merchants = aggregate_by(self.transactions, lambda t: t.merchant)
        patterns = self._project(total)

        return {
            'total_spent': total,
            'average_transaction': total / len(self.transactions),
            'categories': categories,
            'merchants': merchants,
            'patterns': patterns,
            'recommendations': self._recommend(total, merchants, patterns),
        }

    def _project(self, total: float) -> dict:
        """Daily average over distinct days, scaled to a week and a month."""
        days = len({t.date for t in self.transactions})
        return {
            'daily_average': total / days,
            'weekly_average': total * self.DAYS_PER_WEEK / days,
            'monthly_projection': total * self.DAYS_PER_MONTH / days,
        }

    def _recommend(self, total: float, merchants: dict, patterns: dict) -> list[dict]:
        recommendations = []

        if patterns['monthly_projection'] > self.MONTHLY_WARNING_THRESHOLD:
            recommendations.append({
                'type': InsightType.WARNING.value,
                'text': (
                    f"Monthly spending exceeds ${self.MONTHLY_WARNING_THRESHOLD}. "
                    "Consider setting category budgets."
                ),
            })

        merchant = top_group(merchants)
        if merchants[merchant]['total'] > total * self.MERCHANT_SHARE_THRESHOLD:
            recommendations.append({
                'type': InsightType.INFO.value,
                'text': (
                    f"{merchant} accounts for over {self.MERCHANT_SHARE_THRESHOLD:.0%} of spending. "
                    "Look for alternatives or discounts."
                ),
            })

        return recommendations


def analyze(transactions: Sequence[Transaction]) -> dict:
    """Analyze spending patterns for an arbitrary list of transactions."""
    return PatternAnalyzer(transactions).analyze()
