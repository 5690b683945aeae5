"""
Domain types for the SmartFin demo dataset.

Includes:
    - Transaction (immutable spending record)
    - CategoryProfile, SubscriptionDef (generator inputs)
    - InsightType

Author: SmartFin Team
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


DEMO_USER_ID = "demo_user"


class InsightType(str, Enum):
    """Insight severity shown to the user."""
    WARNING = "warning"
    INFO = "info"
    ALERT = "alert"


@dataclass(frozen=True)
class Transaction:
    """
    A single spending record.

    Amounts are non-negative and rounded to cents. Records are never
    updated in place; the store only prepends or replaces.
    """
    id: str
    date: date
    merchant: str
    category: str
    amount: float
    user_id: str = DEMO_USER_ID
    is_recurring: Optional[bool] = None


@dataclass(frozen=True)
class CategoryProfile:
    """Monthly spending profile used to synthesize one category."""
    avg_monthly: float
    variance: float  # fraction of avg_monthly
    frequency: int   # expected transactions per month


@dataclass(frozen=True)
class SubscriptionDef:
    """A fixed monthly charge emitted on the 1st of every month."""
    merchant: str
    amount: float
    category: str
