"""
Test Module: test_csv_processor.py
Description: Unit tests for CSV upload parsing.

Author: SmartFin Team
"""

from datetime import date

import pytest

from services.csv_processor import CSVProcessor, DataValidationError


@pytest.fixture
def processor():
    return CSVProcessor()


class TestParsing:
    """Well-formed rows become transactions."""

    def test_single_row(self, processor):
        transactions = processor.parse("date,merchant,amount,category\n2024-01-01,Acme,12.50,Shopping")

        assert len(transactions) == 1
        txn = transactions[0]
        assert txn.date == date(2024, 1, 1)
        assert txn.merchant == "Acme"
        assert txn.amount == 12.50
        assert txn.category == "Shopping"
        assert txn.user_id == "demo_user"
        assert txn.id.startswith("upload_")

    def test_category_defaults_to_other(self, processor):
        transactions = processor.parse(
            "date,merchant,amount,category\n2024-01-01,Acme,3.00,\n2024-01-02,Beta,4.00"
        )
        assert [t.category for t in transactions] == ["Other", "Other"]

    def test_category_column_optional(self, processor):
        transactions = processor.parse("date,merchant,amount\n2024-01-01,Acme,3.00")
        assert transactions[0].category == "Other"

    def test_whitespace_and_blank_lines(self, processor):
        text = "date,merchant,amount,category\n\n 2024-01-01 , Acme ,  7.25 , Shopping \n\n"
        transactions = processor.parse(text)

        assert len(transactions) == 1
        assert transactions[0].merchant == "Acme"
        assert transactions[0].amount == 7.25

    def test_alternative_column_names(self, processor):
        transactions = processor.parse("Date,Description,Amount\n01/15/2024,Coffee Bar,$4.50")

        assert transactions[0].merchant == "Coffee Bar"
        assert transactions[0].date == date(2024, 1, 15)
        assert transactions[0].amount == 4.50

    def test_amounts_rounded_to_cents(self, processor):
        transactions = processor.parse("date,merchant,amount\n2024-01-01,Acme,3.14159")
        assert transactions[0].amount == 3.14

    def test_extra_field_on_first_row_is_dropped(self, processor):
        text = (
            "date,merchant,amount,category\n"
            "2024-01-01,Acme,12.50,Shopping,extra\n"
            "2024-01-02,Beta,5,Food"
        )
        transactions = processor.parse(text)

        assert [(t.date, t.merchant, t.amount, t.category) for t in transactions] == [
            (date(2024, 1, 1), "Acme", 12.50, "Shopping"),
            (date(2024, 1, 2), "Beta", 5.00, "Food"),
        ]
        assert processor.validation_warnings == []

    def test_iso_timestamp_date(self, processor):
        transactions = processor.parse("date,merchant,amount\n2024-01-15T10:30:00,Acme,1.00")
        assert transactions[0].date == date(2024, 1, 15)

    def test_ids_unique_across_parses(self, processor):
        text = "date,merchant,amount\n2024-01-01,Acme,1.00"
        assert processor.parse(text)[0].id != processor.parse(text)[0].id


class TestSkippedRows:
    """Incomplete or invalid rows are dropped and reported."""

    def test_missing_required_fields_skipped(self, processor):
        text = (
            "date,merchant,amount,category\n"
            ",Acme,1.00,Shopping\n"
            "2024-01-01,,1.00,Shopping\n"
            "2024-01-01,Acme,,Shopping\n"
            "2024-01-01,Acme,2.00,Shopping"
        )
        transactions = processor.parse(text)

        assert len(transactions) == 1
        assert processor.skipped_rows == 3
        assert any("missing" in w for w in processor.validation_warnings)

    def test_non_numeric_amount_rejected(self, processor):
        transactions = processor.parse("date,merchant,amount\n2024-01-01,Acme,abc\n2024-01-02,Beta,5")

        assert [t.merchant for t in transactions] == ["Beta"]
        assert any("invalid amount" in w for w in processor.validation_warnings)

    @pytest.mark.parametrize("amount", ["-5.00", "nan", "inf"])
    def test_negative_or_non_finite_rejected(self, processor, amount):
        assert processor.parse(f"date,merchant,amount\n2024-01-01,Acme,{amount}") == []

    @pytest.mark.parametrize("word", ["today", "now", "yesterday"])
    def test_relative_date_words_rejected(self, processor, word):
        transactions = processor.parse(f"date,merchant,amount\n{word},Acme,5")

        assert transactions == []
        assert processor.validation_warnings == [f"Skipped row with unparseable date: {word}"]

    def test_unparseable_date_rejected(self, processor):
        transactions = processor.parse("date,merchant,amount\nnot-a-date,Acme,5")

        assert transactions == []
        assert any("unparseable date" in w for w in processor.validation_warnings)


class TestEmptyAndInvalidFiles:
    """Empty input yields nothing; structural problems raise."""

    @pytest.mark.parametrize("text", ["", "   \n", "date,merchant,amount,category\n"])
    def test_no_rows(self, processor, text):
        assert processor.parse(text) == []

    def test_missing_required_columns(self, processor):
        with pytest.raises(DataValidationError, match="merchant"):
            processor.parse("date,amount\n2024-01-01,5")

    def test_columns_differing_only_in_case(self, processor):
        with pytest.raises(DataValidationError, match="Duplicate columns: date"):
            processor.parse("date,merchant,amount,Date\n2024-01-01,Acme,5,2024-01-02")
