"""Rule-based spending insights over the most recent transactions."""

from typing import Optional, Sequence

from models import InsightType, Transaction
from .observability import timed
from .spending_summary import InsufficientDataError, aggregate_by, top_group


class InsightGenerator:
    """Generate explainable insights from a window of recent transactions."""

    COFFEE_MERCHANTS = ('starbucks', 'coffee')
    # Brewing at home saves roughly 70% of cafe spend
    COFFEE_SAVINGS_RATE = 0.70
    MIN_COFFEE_PURCHASES = 3

    OUTLIER_MULTIPLIER = 3
    MAX_OUTLIER_EXAMPLES = 3

    def __init__(self, window_size: int = 30):
        self.window_size = window_size

    @timed("derive_insights")
    def generate(self, transactions: Sequence[Transaction]) -> list[dict]:
        """
        Build insights in a fixed order: coffee, subscriptions, outliers,
        top category. Only the top-category insight is always present.

        Raises:
            InsufficientDataError: If the window is empty.
        """
        window = list(transactions[:self.window_size])
        if not window:
            raise InsufficientDataError("No transactions available for insights")

        candidates = [
            self._coffee_insight(window),
            self._subscription_insight(window),
            self._outlier_insight(window),
            self._top_category_insight(window),
        ]
        return [insight for insight in candidates if insight is not None]

    def _coffee_insight(self, window: list[Transaction]) -> Optional[dict]:
        coffee = [
            t for t in window
            if any(m in t.merchant.lower() for m in self.COFFEE_MERCHANTS)
        ]
        if len(coffee) <= self.MIN_COFFEE_PURCHASES:
            return None

        total = sum(t.amount for t in coffee)
        monthly_savings = total * self.COFFEE_SAVINGS_RATE
        return {
            'type': InsightType.WARNING.value,
            'category': 'Coffee Spending',
            'title': 'High Coffee Expenditure Detected',
            'description': (
                f"You've spent ${total:.2f} on coffee in the last {self.window_size} days "
                f"across {len(coffee)} purchases."
            ),
            'recommendation': (
                f"Consider brewing at home to save approximately ${monthly_savings:.2f} monthly."
            ),
            'potential_savings': round(monthly_savings * 12, 2),
        }

    def _subscription_insight(self, window: list[Transaction]) -> Optional[dict]:
        recurring = [t for t in window if t.is_recurring]
        if not recurring:
            return None

        total = sum(t.amount for t in recurring)
        # dict.fromkeys keeps first-seen order
        merchants = list(dict.fromkeys(t.merchant for t in recurring))
        return {
            'type': InsightType.INFO.value,
            'category': 'Subscriptions',
            'title': 'Active Subscriptions Summary',
            'description': (
                f"You have {len(recurring)} active subscriptions totaling ${total:.2f} per month."
            ),
            'recommendation': "Review these subscriptions to ensure you're using all services.",
            'subscriptions': merchants,
        }

    def _outlier_insight(self, window: list[Transaction]) -> Optional[dict]:
        mean = sum(t.amount for t in window) / len(window)
        threshold = mean * self.OUTLIER_MULTIPLIER
        outliers = [t for t in window if t.amount > threshold]
        if not outliers:
            return None

        return {
            'type': InsightType.ALERT.value,
            'category': 'Unusual Activity',
            'title': 'Large Transactions Detected',
            'description': (
                f"{len(outliers)} transactions exceeded {self.OUTLIER_MULTIPLIER}x "
                f"your average transaction of ${mean:.2f}."
            ),
            'transactions': outliers[:self.MAX_OUTLIER_EXAMPLES],
        }

    def _top_category_insight(self, window: list[Transaction]) -> dict:
        categories = aggregate_by(window, lambda t: t.category)
        name = top_group(categories)
        amount = categories[name]['total']
        window_total = sum(t.amount for t in window)
        share = (amount / window_total * 100) if window_total else 0.0

        return {
            'type': InsightType.INFO.value,
            'category': 'Spending Patterns',
            'title': 'Top Spending Category',
            'description': (
                f"{name} accounts for ${amount:.2f} ({share:.1f}%) of your recent spending."
            ),
            'recommendation': f"Focus on optimizing {name} expenses for maximum savings impact.",
        }


def derive_insights(transactions: Sequence[Transaction], window_size: int = 30) -> list[dict]:
    """Insights over the first ``window_size`` transactions."""
    return InsightGenerator(window_size).generate(transactions)
