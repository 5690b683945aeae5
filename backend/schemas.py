"""Pydantic request/response schemas for type safety.

Fields are snake_case in Python and camelCase on the wire.
"""

from dataclasses import asdict
from datetime import date, datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from models import DEMO_USER_ID, Transaction

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope shared by every endpoint."""
    success: bool = True
    data: Optional[DataT] = None
    error: Optional[str] = None


# Request schemas
class TransactionIn(CamelModel):
    id: Optional[str] = None
    date: date
    merchant: str = Field(min_length=1)
    category: str = "Other"
    amount: float = Field(ge=0)
    user_id: str = DEMO_USER_ID
    is_recurring: Optional[bool] = None

    def to_domain(self, fallback_id: str) -> Transaction:
        return Transaction(
            id=self.id or fallback_id,
            date=self.date,
            merchant=self.merchant,
            category=self.category,
            amount=self.amount,
            user_id=self.user_id,
            is_recurring=self.is_recurring,
        )


class AnalyzeRequest(CamelModel):
    transactions: list[TransactionIn]


# Response schemas
class TransactionOut(CamelModel):
    id: str
    date: date
    merchant: str
    category: str
    amount: float
    user_id: str
    is_recurring: Optional[bool] = None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionOut":
        return cls(**asdict(txn))


class CategoryTotal(CamelModel):
    total: float
    count: int


class SummaryOut(CamelModel):
    total_spent: float
    transaction_count: int
    average_transaction: float
    top_category: str
    categories_breakdown: dict[str, CategoryTotal]


class TransactionPage(CamelModel):
    transactions: list[TransactionOut]
    total: int
    limit: int
    offset: int


class InsightOut(CamelModel):
    type: str
    category: str
    title: str
    description: str
    recommendation: Optional[str] = None
    potential_savings: Optional[float] = None
    subscriptions: Optional[list[str]] = None
    transactions: Optional[list[TransactionOut]] = None

    @classmethod
    def from_insight(cls, insight: dict) -> "InsightOut":
        data = dict(insight)
        if data.get("transactions") is not None:
            data["transactions"] = [TransactionOut.from_domain(t) for t in data["transactions"]]
        return cls(**data)


class InsightsOut(CamelModel):
    insights: list[InsightOut]
    generated_at: datetime
    period: str


class IndexQuote(CamelModel):
    symbol: str
    value: float
    change: float
    change_percent: float


class CommodityQuote(CamelModel):
    symbol: str
    value: float
    change: float
    unit: str


class MarketOut(CamelModel):
    indices: list[IndexQuote]
    commodities: list[CommodityQuote]
    timestamp: datetime


class EconomicIndicatorsOut(CamelModel):
    inflation_rate: float
    unemployment_rate: float
    federal_funds_rate: float
    gdp_growth: float
    consumer_confidence: float
    retail_sales: float
    mortgage_rate_30y: float = Field(alias="mortgageRate30Y")
    savings_rate: float
    last_updated: datetime
    source: str


class PatternsOut(CamelModel):
    daily_average: float
    weekly_average: float
    monthly_projection: float


class RecommendationOut(CamelModel):
    type: str
    text: str


class AnalysisOut(CamelModel):
    total_spent: float
    average_transaction: float
    categories: dict[str, CategoryTotal]
    merchants: dict[str, CategoryTotal]
    patterns: PatternsOut
    recommendations: list[RecommendationOut]


class UploadOut(CamelModel):
    transactions_added: int
    total_transactions: int
    warnings: list[str] = []


class HealthStatus(CamelModel):
    status: str
    uptime: float
    timestamp: datetime
    dataset_size: int = Field(ge=0)


class HealthResponse(HealthStatus):
    """Health fields at the top level, mirrored under ``data``."""
    success: bool = True
    data: HealthStatus
