"""Totals and category breakdown over the most recent transactions."""

from collections import defaultdict
from typing import Callable, Dict, Sequence

from models import Transaction
from .observability import timed


class InsufficientDataError(ValueError):
    """Raised when an aggregate is requested over no transactions."""


def aggregate_by(
    transactions: Sequence[Transaction],
    key: Callable[[Transaction], str],
) -> Dict[str, Dict]:
    """
    Group transactions and accumulate spend per group.

    Returns:
        Mapping of group name to {'total', 'count'}, in first-seen order.
    """
    groups = defaultdict(lambda: {'total': 0.0, 'count': 0})
    for t in transactions:
        groups[key(t)]['total'] += t.amount
        groups[key(t)]['count'] += 1
    return dict(groups)


def top_group(groups: Dict[str, Dict]) -> str:
    """Name of the group with the highest total; ties keep first-seen."""
    return max(groups.items(), key=lambda item: item[1]['total'])[0]


@timed("summarize")
def summarize(transactions: Sequence[Transaction], limit: int = 100) -> Dict:
    """
    Summarize the first ``limit`` transactions in current order.

    Args:
        transactions: Dataset, most recent first.
        limit: How many leading transactions to include.

    Returns:
        Dict with total_spent, transaction_count, average_transaction,
        top_category and categories_breakdown.

    Raises:
        InsufficientDataError: If there is nothing to summarize.
    """
    recent = list(transactions[:limit])
    if not recent:
        raise InsufficientDataError("No transactions available to summarize")

    total_spent = sum(t.amount for t in recent)
    categories = aggregate_by(recent, lambda t: t.category)

    return {
        'total_spent': round(total_spent, 2),
        'transaction_count': len(recent),
        'average_transaction': round(total_spent / len(recent), 2),
        'top_category': top_group(categories),
        'categories_breakdown': {
            name: {'total': round(data['total'], 2), 'count': data['count']}
            for name, data in categories.items()
        },
    }
