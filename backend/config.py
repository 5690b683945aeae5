"""Environment-driven settings for the SmartFin demo API."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Synthetic dataset
DATASET_MONTHS = int(os.getenv("DATASET_MONTHS", "6"))
DATASET_SEED = _optional_int("DATASET_SEED")

# Analytics windows
SUMMARY_LIMIT = 100
INSIGHT_WINDOW = 30
DEFAULT_PAGE_SIZE = 50
