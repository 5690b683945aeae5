"""
Test Module: test_synthetic_data.py
Description: Unit tests for the synthetic dataset generator.

Tests:
    - Amount rounding and sign
    - Date ordering and upper bound
    - Subscription emission
    - Seeded reproducibility
    - CSV export round trip through the upload parser

Author: SmartFin Team
"""

from datetime import date

import pytest

from conftest import assert_cents, assert_newest_first
from models import CategoryProfile, SubscriptionDef
from services.csv_processor import CSVProcessor
from synthetic_data import (
    CATEGORY_MERCHANTS,
    CATEGORY_PROFILES,
    SUBSCRIPTIONS,
    SyntheticDataGenerator,
    generate_synthetic_transactions,
)


@pytest.fixture
def generator():
    return SyntheticDataGenerator(seed=42, today=date(2024, 6, 10))


class TestGeneratedAmounts:
    """Amounts are non-negative and rounded to cents."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_amounts_rounded_and_non_negative(self, seed):
        transactions = SyntheticDataGenerator(seed=seed).generate()
        assert transactions
        for txn in transactions:
            assert txn.amount >= 0
            assert_cents(txn.amount)

    def test_merchants_come_from_category_list(self, generator):
        for txn in generator.generate():
            if txn.is_recurring:
                continue
            assert txn.merchant in CATEGORY_MERCHANTS[txn.category]


class TestGeneratedDates:
    """Dates are newest-first and never in the future."""

    def test_sorted_newest_first(self, generator):
        assert_newest_first(generator.generate())

    def test_no_future_dates(self):
        today = date(2024, 6, 3)
        transactions = SyntheticDataGenerator(seed=5, today=today).generate()
        assert max(t.date for t in transactions) <= today

    def test_covers_requested_months(self, generator):
        transactions = generator.generate(months_back=3)
        months = {(t.date.year, t.date.month) for t in transactions}
        assert months == {(2024, 6), (2024, 5), (2024, 4)}

    def test_month_arithmetic_crosses_year_boundary(self):
        transactions = SyntheticDataGenerator(seed=1, today=date(2024, 2, 20)).generate(months_back=4)
        months = {(t.date.year, t.date.month) for t in transactions}
        assert (2023, 11) in months
        assert (2023, 12) in months


class TestSubscriptions:
    """Fixed subscriptions are billed monthly on the 1st."""

    def test_one_charge_per_subscription_per_month(self, generator):
        transactions = generator.generate(months_back=6)
        recurring = [t for t in transactions if t.is_recurring]

        assert len(recurring) == len(SUBSCRIPTIONS) * 6
        assert all(t.date.day == 1 for t in recurring)

    def test_subscription_amounts_are_exact(self, generator):
        expected = {s.merchant: s.amount for s in SUBSCRIPTIONS}
        for txn in generator.generate():
            if txn.is_recurring:
                assert txn.amount == expected[txn.merchant]

    def test_non_subscription_entries_are_not_flagged(self, generator):
        for txn in generator.generate():
            if txn.id.startswith("txn_"):
                assert txn.is_recurring is None


class TestCustomInputs:
    """The generator accepts caller-supplied tables."""

    def test_custom_tables(self):
        generator = SyntheticDataGenerator(seed=3, today=date(2024, 6, 10))
        transactions = generator.generate(
            categories={"Pets": CategoryProfile(avg_monthly=100, variance=0.0, frequency=5)},
            merchants={"Pets": ["Petco"]},
            subscriptions=[SubscriptionDef("BarkBox", 29.0, "Pets")],
            months_back=2,
        )

        assert {t.merchant for t in transactions} == {"Petco", "BarkBox"}
        assert {t.category for t in transactions} == {"Pets"}
        assert sum(1 for t in transactions if t.is_recurring) == 2

    def test_ids_are_unique(self, generator):
        transactions = generator.generate()
        assert len({t.id for t in transactions}) == len(transactions)

    def test_user_id_is_constant(self, generator):
        assert {t.user_id for t in generator.generate()} == {"demo_user"}


class TestDeterminism:
    """Seeded generation is reproducible."""

    def test_same_seed_same_output(self):
        today = date(2024, 6, 10)
        first = SyntheticDataGenerator(seed=99, today=today).generate()
        second = SyntheticDataGenerator(seed=99, today=today).generate()
        assert first == second

    def test_module_entry_point(self):
        transactions = generate_synthetic_transactions(months_back=1, seed=4)
        categories = {t.category for t in transactions if not t.is_recurring}
        assert categories == set(CATEGORY_PROFILES)


class TestExport:
    """CSV export uses the upload format."""

    def test_to_csv_is_uploadable(self, generator, tmp_path):
        transactions = generator.generate(months_back=1)
        path = generator.to_csv(transactions, str(tmp_path / "sample.csv"))

        parsed = CSVProcessor().parse(open(path).read())

        assert len(parsed) == len(transactions)
        assert sum(t.amount for t in parsed) == pytest.approx(sum(t.amount for t in transactions))

    def test_statistics(self, generator):
        transactions = generator.generate(months_back=2)
        stats = generator.get_statistics(transactions)

        assert stats["total_transactions"] == len(transactions)
        assert stats["recurring"] == len(SUBSCRIPTIONS) * 2
        assert stats["last_date"] <= "2024-06-10"
