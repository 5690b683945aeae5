"""
Pytest configuration and shared fixtures for SmartFin tests.

This file is automatically loaded by pytest and provides:
    - Transaction builders and sample data fixtures
    - A FastAPI TestClient with a seeded dataset
    - Common test utilities

Author: SmartFin Team
"""

import pytest
import sys
from pathlib import Path
from datetime import date, timedelta

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import Transaction  # noqa: E402


# =============================================================================
# Transaction Fixtures
# =============================================================================

def make_txn(amount, merchant="Target", category="Shopping", day=None, is_recurring=None, id=None):
    """Build a Transaction with sensible defaults."""
    txn_date = day or date(2024, 1, 15)
    return Transaction(
        id=id or f"t_{merchant}_{amount}_{txn_date.isoformat()}",
        date=txn_date,
        merchant=merchant,
        category=category,
        amount=amount,
        is_recurring=is_recurring,
    )


@pytest.fixture
def sample_transactions():
    """Hand-crafted transactions with known per-category totals.

    Shopping: 40.00 + 60.00 = 100.00
    Food & Dining: 25.50 + 24.50 + 10.00 = 60.00
    Housing: 1200.00
    """
    base_date = date(2024, 3, 10)
    return [
        make_txn(40.00, "Target", "Shopping", base_date, id="t1"),
        make_txn(25.50, "Chipotle", "Food & Dining", base_date - timedelta(days=1), id="t2"),
        make_txn(1200.00, "Mortgage Payment", "Housing", base_date - timedelta(days=2), id="t3"),
        make_txn(60.00, "Amazon", "Shopping", base_date - timedelta(days=3), id="t4"),
        make_txn(24.50, "Subway", "Food & Dining", base_date - timedelta(days=4), id="t5"),
        make_txn(10.00, "Subway", "Food & Dining", base_date - timedelta(days=4), id="t6"),
    ]


@pytest.fixture
def recurring_transactions():
    """Six months of three subscriptions, newest first."""
    transactions = []
    for month in range(6, 0, -1):
        for merchant, amount in [("Netflix", 15.99), ("Spotify", 9.99), ("Hulu", 12.99)]:
            transactions.append(make_txn(
                amount, merchant, "Entertainment", date(2024, month, 1),
                is_recurring=True, id=f"sub_{month}_{merchant}",
            ))
    return transactions


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(monkeypatch):
    """TestClient with a fixed-seed dataset; lifespan runs inside the context."""
    from fastapi.testclient import TestClient
    import main

    monkeypatch.setattr(main, "DATASET_SEED", 7)
    with TestClient(main.app) as test_client:
        yield test_client


# =============================================================================
# Test Utilities
# =============================================================================

def assert_cents(amount: float) -> None:
    """Assert that an amount carries at most two decimal places."""
    assert round(amount, 2) == amount, f"Amount not rounded to cents: {amount}"


def assert_newest_first(transactions) -> None:
    """Assert that transactions are sorted by date descending."""
    dates = [t.date for t in transactions]
    assert dates == sorted(dates, reverse=True), "Transactions are not newest-first"
