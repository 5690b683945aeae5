"""
CSV parsing, validation, and normalization for uploaded transactions.

Expected layout (header required):
    date,merchant,amount,category

Validates:
    - Required columns exist (common alternatives are accepted)
    - Date format is parseable
    - Amounts are finite and non-negative

Rows missing a date, merchant or amount are skipped. Category defaults
to "Other".

Author: SmartFin Team
"""

import math
import re
import uuid
from datetime import datetime, date
from io import StringIO
from typing import List, Optional

import pandas as pd

from models import DEMO_USER_ID, Transaction


class DataValidationError(ValueError):
    """Exception for data validation failures."""

    def __init__(self, message: str, warnings: List[str] = None):
        super().__init__(message)
        self.warnings = warnings or []


class CSVProcessor:
    """Parse and normalize transaction CSV text into Transactions."""

    REQUIRED_COLUMNS = ["date", "merchant", "amount"]
    COLUMN_ALTERNATIVES = {
        "date": ["transaction_date", "trans_date", "txn_date"],
        "merchant": ["description", "name", "payee", "memo"],
        "amount": ["value", "sum", "total"],
    }
    DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%m-%d-%Y", "%Y/%m/%d"]
    ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}([T ]|$)")
    DEFAULT_CATEGORY = "Other"
    MAX_ROWS = 10000

    def __init__(self):
        self.validation_warnings: List[str] = []
        self.skipped_rows = 0

    def parse(self, text: str) -> List[Transaction]:
        """
        Parse CSV text into transactions, in file order.

        Args:
            text: Raw CSV with a header line.

        Returns:
            Parsed transactions. Empty if the text has no data rows.

        Raises:
            DataValidationError: If the CSV is malformed, too large, or lacks
                required columns.
        """
        self.validation_warnings = []
        self.skipped_rows = 0
        if not text or not text.strip():
            return []

        try:
            df = pd.read_csv(
                StringIO(text),
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                engine="python",
                # First column is data, never an implicit index
                index_col=False,
                # Extra trailing fields are dropped rather than failing the file
                on_bad_lines=lambda fields: fields,
            )
        except pd.errors.EmptyDataError:
            return []
        except pd.errors.ParserError as e:
            raise DataValidationError(f"Could not parse CSV: {e}")

        if len(df) > self.MAX_ROWS:
            raise DataValidationError(
                f"File too large: {len(df)} rows. Maximum allowed: {self.MAX_ROWS}"
            )

        df.columns = df.columns.str.lower().str.strip()
        duplicated = df.columns[df.columns.duplicated()]
        if len(duplicated):
            raise DataValidationError(
                f"Duplicate columns: {', '.join(sorted(set(duplicated)))}"
            )
        self._validate_columns(df)
        if "category" not in df.columns:
            df["category"] = ""

        df = df.fillna("")
        for col in ["date", "merchant", "amount", "category"]:
            df[col] = df[col].astype(str).str.strip()

        transactions = []
        missing = 0
        for _, row in df.iterrows():
            if not row["date"] or not row["merchant"] or not row["amount"]:
                missing += 1
                continue

            txn_date = self._parse_date(row["date"])
            if txn_date is None:
                self.validation_warnings.append(f"Skipped row with unparseable date: {row['date']}")
                continue

            amount = self._parse_amount(row["amount"])
            if amount is None:
                self.validation_warnings.append(f"Skipped row with invalid amount: {row['amount']}")
                continue

            transactions.append(Transaction(
                id=f"upload_{uuid.uuid4().hex[:12]}",
                date=txn_date,
                merchant=re.sub(r"\s+", " ", row["merchant"]),
                category=row["category"] or self.DEFAULT_CATEGORY,
                amount=amount,
                user_id=DEMO_USER_ID,
            ))

        if missing:
            self.validation_warnings.append(
                f"Skipped {missing} rows missing date, merchant or amount"
            )
        self.skipped_rows = len(df) - len(transactions)
        return transactions

    def _validate_columns(self, df: pd.DataFrame) -> None:
        """Validate that required columns exist, renaming alternatives."""
        missing = []
        for col in self.REQUIRED_COLUMNS:
            if col in df.columns:
                continue
            for alt in self.COLUMN_ALTERNATIVES.get(col, []):
                if alt in df.columns:
                    df.rename(columns={alt: col}, inplace=True)
                    break
            else:
                missing.append(col)

        if missing:
            raise DataValidationError(f"Missing required columns: {', '.join(missing)}")

    def _parse_date(self, val: str) -> Optional[date]:
        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(val, fmt).date()
            except ValueError:
                continue
        # pandas fallback for ISO timestamps only; words like "today" are rejected
        if not self.ISO_DATE_PATTERN.match(val):
            return None
        parsed = pd.to_datetime(val, errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date()

    def _parse_amount(self, val: str) -> Optional[float]:
        """Parse a currency amount; None if it is not a finite, non-negative number."""
        cleaned = re.sub(r"[$,]", "", val)
        try:
            amount = float(cleaned)
        except ValueError:
            return None
        if not math.isfinite(amount) or amount < 0:
            return None
        return round(amount, 2)
