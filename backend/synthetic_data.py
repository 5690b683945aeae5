"""
Module: synthetic_data.py
Description: Synthetic household spending generator for the SmartFin demo dataset.

Generates several months of transactions that follow typical American
household spending (BLS Consumer Expenditure Survey proportions):
    - Per-category monthly totals with a configurable variance
    - Randomized transaction counts around an expected monthly frequency
    - Fixed-amount subscriptions billed on the 1st of every month

The generator owns its own random source. Leave ``seed`` unset for a fresh
dataset on every startup, or pass one for reproducible output in tests.

Author: SmartFin Team

Usage:
    from synthetic_data import generate_synthetic_transactions
    transactions = generate_synthetic_transactions(months_back=6)
"""

import csv
import random
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from models import DEMO_USER_ID, CategoryProfile, SubscriptionDef, Transaction


CATEGORY_PROFILES: Dict[str, CategoryProfile] = {
    'Food & Dining': CategoryProfile(avg_monthly=750, variance=0.2, frequency=15),
    'Transportation': CategoryProfile(avg_monthly=820, variance=0.3, frequency=8),
    'Housing': CategoryProfile(avg_monthly=1800, variance=0.1, frequency=3),
    'Shopping': CategoryProfile(avg_monthly=450, variance=0.4, frequency=10),
    'Entertainment': CategoryProfile(avg_monthly=280, variance=0.3, frequency=6),
    'Healthcare': CategoryProfile(avg_monthly=380, variance=0.5, frequency=3),
    'Utilities': CategoryProfile(avg_monthly=350, variance=0.15, frequency=4),
    'Insurance': CategoryProfile(avg_monthly=550, variance=0.1, frequency=2),
}

CATEGORY_MERCHANTS: Dict[str, List[str]] = {
    'Food & Dining': ['Whole Foods', 'Starbucks', 'Chipotle', 'Subway', 'Olive Garden', 'McDonalds', 'Trader Joes'],
    'Transportation': ['Shell Gas', 'Chevron', 'Uber', 'Lyft', 'Public Transit', 'Auto Repair'],
    'Housing': ['Property Management', 'Home Depot', 'Lowes', 'Mortgage Payment'],
    'Shopping': ['Amazon', 'Target', 'Walmart', 'Best Buy', 'Costco', 'Nike'],
    'Entertainment': ['Netflix', 'Spotify', 'AMC Theaters', 'Steam Games', 'Hulu', 'Disney+'],
    'Healthcare': ['CVS Pharmacy', 'Walgreens', 'Kaiser', 'Dental Care', 'Vision Center'],
    'Utilities': ['PG&E Electric', 'Water Company', 'Comcast Internet', 'Verizon'],
    'Insurance': ['State Farm', 'Geico', 'Blue Cross', 'Life Insurance'],
}

SUBSCRIPTIONS: List[SubscriptionDef] = [
    SubscriptionDef('Netflix', 15.99, 'Entertainment'),
    SubscriptionDef('Spotify', 9.99, 'Entertainment'),
    SubscriptionDef('Amazon Prime', 14.99, 'Shopping'),
    SubscriptionDef('LA Fitness', 34.99, 'Healthcare'),
    SubscriptionDef('Adobe Creative', 52.99, 'Software'),
    SubscriptionDef('Hulu', 12.99, 'Entertainment'),
]

# Days 29-31 are skipped so every month has the same range
MAX_DAY_OF_MONTH = 28


def _month_start(today: date, months_ago: int) -> date:
    """First day of the month ``months_ago`` months before ``today``."""
    index = today.year * 12 + (today.month - 1) - months_ago
    return date(index // 12, index % 12 + 1, 1)


class SyntheticDataGenerator:
    """
    Synthetic transaction generator for the demo user.

    Each category gets a randomized monthly total that is split across a
    randomized number of purchases, then every subscription is billed once a
    month. Output is newest-first.
    """

    def __init__(self, seed: Optional[int] = None, today: Optional[date] = None):
        """
        Initialize the generator.

        Args:
            seed: Random seed for reproducibility. ``None`` draws fresh entropy.
            today: Reference date; generated dates never exceed it.
        """
        self.rng = random.Random(seed)
        self.today = today or date.today()

    def generate(
        self,
        categories: Optional[Dict[str, CategoryProfile]] = None,
        merchants: Optional[Dict[str, Sequence[str]]] = None,
        subscriptions: Optional[Sequence[SubscriptionDef]] = None,
        months_back: int = 6,
    ) -> List[Transaction]:
        """
        Generate ``months_back`` months of transactions.

        Args:
            categories: Category name to spending profile.
            merchants: Category name to candidate merchant names.
            subscriptions: Fixed monthly charges.
            months_back: Number of calendar months, counting the current one.

        Returns:
            Transactions sorted by date, most recent first.
        """
        categories = CATEGORY_PROFILES if categories is None else categories
        merchants = CATEGORY_MERCHANTS if merchants is None else merchants
        subscriptions = SUBSCRIPTIONS if subscriptions is None else subscriptions

        transactions: List[Transaction] = []

        for month in range(months_back):
            month_start = _month_start(self.today, month)

            for category, profile in categories.items():
                monthly_amount = profile.avg_monthly * (
                    1 + self.rng.uniform(-0.5, 0.5) * profile.variance
                )
                count = round(profile.frequency * self.rng.uniform(0.8, 1.2))

                for _ in range(count):
                    amount = (monthly_amount / count) * self.rng.uniform(0.5, 1.5)
                    transactions.append(Transaction(
                        id=f"txn_{len(transactions)}",
                        date=self._random_day(month_start),
                        merchant=self.rng.choice(list(merchants[category])),
                        category=category,
                        amount=round(amount, 2),
                        user_id=DEMO_USER_ID,
                    ))

        # Subscriptions bill the exact amount on the 1st
        for month in range(months_back):
            month_start = _month_start(self.today, month)
            for sub in subscriptions:
                transactions.append(Transaction(
                    id=f"sub_{month}_{sub.merchant}",
                    date=month_start,
                    merchant=sub.merchant,
                    category=sub.category,
                    amount=round(sub.amount, 2),
                    user_id=DEMO_USER_ID,
                    is_recurring=True,
                ))

        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    def _random_day(self, month_start: date) -> date:
        """Pick a day in the month, never later than today."""
        day = month_start.replace(day=self.rng.randint(1, MAX_DAY_OF_MONTH))
        return min(day, self.today)

    def to_csv(self, transactions: List[Transaction], filename: str = 'sample_transactions.csv') -> str:
        """
        Export transactions in the upload format (date,merchant,amount,category).

        Args:
            transactions: Transactions to write.
            filename: Output filename.

        Returns:
            The filename written.
        """
        with open(filename, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=['date', 'merchant', 'amount', 'category'])
            writer.writeheader()
            for txn in transactions:
                writer.writerow({
                    'date': txn.date.isoformat(),
                    'merchant': txn.merchant,
                    'amount': f"{txn.amount:.2f}",
                    'category': txn.category,
                })
        return filename

    def get_statistics(self, transactions: List[Transaction]) -> Dict:
        """
        Summarize a generated dataset for validation.

        Returns:
            Dict with totals per category, recurring count and date range.
        """
        by_category = defaultdict(lambda: {'count': 0, 'total': 0.0})
        for txn in transactions:
            by_category[txn.category]['count'] += 1
            by_category[txn.category]['total'] += txn.amount

        dates = [t.date for t in transactions]
        return {
            'total_transactions': len(transactions),
            'recurring': sum(1 for t in transactions if t.is_recurring),
            'first_date': min(dates).isoformat() if dates else None,
            'last_date': max(dates).isoformat() if dates else None,
            'by_category': {
                name: {'count': data['count'], 'total': round(data['total'], 2)}
                for name, data in by_category.items()
            },
        }


# =============================================================================
# Module-level function for main.py integration
# =============================================================================

def generate_synthetic_transactions(months_back: int = 6, seed: Optional[int] = None) -> List[Transaction]:
    """
    Generate the demo dataset loaded at startup.

    Args:
        months_back: Number of months of history.
        seed: Optional random seed.

    Returns:
        Transactions sorted newest-first.
    """
    return SyntheticDataGenerator(seed=seed).generate(months_back=months_back)


def generate_and_save():
    """Generate a sample dataset and write it as an uploadable CSV."""
    generator = SyntheticDataGenerator()
    transactions = generator.generate()
    generator.to_csv(transactions, 'sample_transactions.csv')

    stats = generator.get_statistics(transactions)
    print(f"Generated {stats['total_transactions']} transactions -> sample_transactions.csv")
    print(f"   Date range: {stats['first_date']} to {stats['last_date']}")
    print(f"   Recurring charges: {stats['recurring']}")
    for name, data in sorted(stats['by_category'].items()):
        print(f"   {name:20} | {data['count']:>4} txns | ${data['total']:>10,.2f}")

    return transactions


if __name__ == '__main__':
    generate_and_save()
