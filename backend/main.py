"""
Module: main.py
Description: FastAPI application entry point for the SmartFin demo API.

This module provides REST API endpoints for:
    - Spending summary and insights over the demo dataset
    - Filtered, paginated transaction listing
    - Mock market snapshot and economic indicators
    - Ad-hoc pattern analysis of client-supplied transactions
    - CSV upload into the in-memory dataset

Every response uses the envelope {success, data?, error?}.

Author: SmartFin Team

Dependencies:
    - FastAPI for REST API framework
    - pandas for CSV parsing

Usage:
    uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import json
import time
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import (
    DATASET_MONTHS, DATASET_SEED, DEFAULT_PAGE_SIZE, HOST,
    INSIGHT_WINDOW, PORT, SUMMARY_LIMIT,
)
from schemas import (
    AnalysisOut, AnalyzeRequest, ApiResponse, EconomicIndicatorsOut,
    HealthResponse, HealthStatus, InsightOut, InsightsOut, MarketOut,
    SummaryOut, TransactionOut, TransactionPage, UploadOut,
)
from services import (
    CSVProcessor, DataValidationError, INDICATOR_SOURCE,
    InvalidTransactionsError, MarketDataProvider,
    analyze, derive_insights, summarize,
)
from services.observability import (
    logger, metrics, log_request, log_upload, route_template, timed_block,
)
from store import TransactionStore
from synthetic_data import SyntheticDataGenerator

PUBLIC_DIR = Path(__file__).parent / "public"


# =============================================================================
# Application Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Two-phase startup: build all shared state, then serve.

    Either load step failing aborts startup before the server accepts
    requests.
    """
    logger.info("Initializing SmartFin API")

    with timed_block("startup.dataset"):
        generator = SyntheticDataGenerator(seed=DATASET_SEED)
        app.state.store = TransactionStore(generator.generate(months_back=DATASET_MONTHS))

    with timed_block("startup.market"):
        provider = MarketDataProvider()
        provider.load()
        app.state.market = provider

    app.state.started_at = time.monotonic()
    metrics.gauge("dataset.size", len(app.state.store))
    logger.info("Dataset loaded", transactions=len(app.state.store), months=DATASET_MONTHS)

    yield

    logger.info("Shutting down SmartFin API")


# =============================================================================
# FastAPI Application Configuration
# =============================================================================

app = FastAPI(
    title="SmartFin API",
    description="""
    Demo personal-finance API over a synthetic spending dataset.

    ## Features
    - Spending summary and rule-based insights
    - Transaction filtering and pagination
    - Simulated market data and economic indicators
    - Spending pattern analysis
    - CSV upload
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_requests(request: Request, call_next):
    logger.set_context(method=request.method, path=request.url.path)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        log_request(route_template(request.scope), response.status_code, duration_ms)
        return response
    finally:
        logger.clear_context()


# =============================================================================
# Error Envelope
# =============================================================================

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return error_response(status.HTTP_400_BAD_REQUEST, errors)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


def internal_error(exc: Exception) -> HTTPException:
    """Log and convert an unexpected failure into a 500 for the envelope."""
    logger.exception("Request failed", error=type(exc).__name__)
    metrics.increment("http.errors")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


# =============================================================================
# Dependency Injection
# =============================================================================

def get_store(request: Request) -> TransactionStore:
    """Dependency: the shared in-memory dataset."""
    return request.app.state.store


def get_market(request: Request) -> MarketDataProvider:
    """Dependency: the loaded market data provider."""
    return request.app.state.market


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Dataset Endpoints
# =============================================================================

@app.get(
    "/api/summary",
    response_model=ApiResponse[SummaryOut],
    response_model_exclude_none=True,
    tags=["Dataset"],
    summary="Spending summary over the most recent transactions",
)
async def get_summary(store: TransactionStore = Depends(get_store)):
    """Totals, average and category breakdown over the latest 100 transactions."""
    try:
        summary = summarize(store.head(SUMMARY_LIMIT), limit=SUMMARY_LIMIT)
    except Exception as e:
        raise internal_error(e)
    return ApiResponse[SummaryOut](data=SummaryOut(**summary))


@app.get(
    "/api/transactions",
    response_model=ApiResponse[TransactionPage],
    response_model_exclude_none=True,
    tags=["Dataset"],
    summary="List transactions with optional filtering",
)
async def list_transactions(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=0),
    offset: int = Query(0, ge=0),
    category: Optional[str] = None,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    store: TransactionStore = Depends(get_store),
):
    """
    Filter by exact category and inclusive date bounds, then paginate.

    Example:
        GET /api/transactions?category=Shopping&startDate=2024-01-01&limit=10
    """
    try:
        filtered = store.all()
        if category:
            filtered = [t for t in filtered if t.category == category]
        if start_date:
            filtered = [t for t in filtered if t.date >= start_date]
        if end_date:
            filtered = [t for t in filtered if t.date <= end_date]

        page = filtered[offset:offset + limit]
        return ApiResponse[TransactionPage](data=TransactionPage(
            transactions=[TransactionOut.from_domain(t) for t in page],
            total=len(filtered),
            limit=limit,
            offset=offset,
        ))
    except Exception as e:
        raise internal_error(e)


@app.get(
    "/api/insights",
    response_model=ApiResponse[InsightsOut],
    response_model_exclude_none=True,
    tags=["Dataset"],
    summary="Rule-based spending insights",
)
async def get_insights(store: TransactionStore = Depends(get_store)):
    """Coffee, subscription, outlier and top-category insights over the latest 30 transactions."""
    try:
        insights = derive_insights(store.head(INSIGHT_WINDOW), window_size=INSIGHT_WINDOW)
    except Exception as e:
        raise internal_error(e)
    return ApiResponse[InsightsOut](data=InsightsOut(
        insights=[InsightOut.from_insight(i) for i in insights],
        generated_at=utc_now(),
        period=f"{INSIGHT_WINDOW} days",
    ))


# =============================================================================
# Market Endpoints
# =============================================================================

@app.get(
    "/api/market",
    response_model=ApiResponse[MarketOut],
    response_model_exclude_none=True,
    tags=["Market"],
    summary="Simulated real-time market snapshot",
)
async def get_market_data(market: MarketDataProvider = Depends(get_market)):
    try:
        snapshot = market.jitter(market.snapshot)
    except Exception as e:
        raise internal_error(e)
    return ApiResponse[MarketOut](data=MarketOut(**snapshot, timestamp=utc_now()))


@app.get(
    "/api/economic-indicators",
    response_model=ApiResponse[EconomicIndicatorsOut],
    response_model_exclude_none=True,
    tags=["Market"],
    summary="Static economic indicators",
)
async def get_economic_indicators(market: MarketDataProvider = Depends(get_market)):
    return ApiResponse[EconomicIndicatorsOut](data=EconomicIndicatorsOut(
        **market.indicators,
        last_updated=utc_now(),
        source=INDICATOR_SOURCE,
    ))


# =============================================================================
# Analysis & Upload Endpoints
# =============================================================================

@app.post(
    "/api/analyze",
    response_model=ApiResponse[AnalysisOut],
    response_model_exclude_none=True,
    tags=["Analysis"],
    summary="Analyze spending patterns for supplied transactions",
)
async def analyze_transactions(request: Request):
    """
    Analyze a client-supplied list of transactions.

    Example:
        POST /api/analyze
        {"transactions": [{"date": "2024-01-01", "merchant": "Acme",
                           "category": "Shopping", "amount": 12.5}]}

    Raises:
        HTTPException: 400 if the transactions list is missing, malformed
            or empty.
    """
    try:
        payload = AnalyzeRequest.model_validate(await request.json())
        transactions = [
            t.to_domain(f"analyze_{i}") for i, t in enumerate(payload.transactions)
        ]
        analysis = analyze(transactions)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, InvalidTransactionsError) as e:
        logger.warning("Rejected analysis request", error=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(InvalidTransactionsError()),
        )
    except Exception as e:
        raise internal_error(e)

    return ApiResponse[AnalysisOut](data=AnalysisOut(**analysis))


@app.post(
    "/api/upload-csv",
    response_model=ApiResponse[UploadOut],
    response_model_exclude_none=True,
    tags=["Upload"],
    summary="Upload transactions as raw CSV text",
)
async def upload_csv(request: Request, store: TransactionStore = Depends(get_store)):
    """
    Parse a CSV body (date,merchant,amount,category) and prepend its rows
    to the dataset.

    Example:
        POST /api/upload-csv
        Content-Type: text/plain

        date,merchant,amount,category
        2024-01-01,Acme,12.50,Shopping
    """
    content = await request.body()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        text = content.decode("latin-1")

    processor = CSVProcessor()
    try:
        transactions = processor.parse(text)
        total = store.prepend(transactions)
    except DataValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise internal_error(e)

    log_upload(len(transactions), processor.skipped_rows, total)
    return ApiResponse[UploadOut](data=UploadOut(
        transactions_added=len(transactions),
        total_transactions=total,
        warnings=processor.validation_warnings,
    ))


# =============================================================================
# System Endpoints
# =============================================================================

@app.get(
    "/api/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint",
)
async def health_check(request: Request, store: TransactionStore = Depends(get_store)):
    """
    Report liveness and the current dataset size.

    Example:
        GET /api/health
        Response: {"success": true, "status": "healthy", "datasetSize": 612, ...}
    """
    health = HealthStatus(
        status="healthy",
        uptime=time.monotonic() - request.app.state.started_at,
        timestamp=utc_now(),
        dataset_size=len(store),
    )
    return HealthResponse(**health.model_dump(), data=health)


@app.get(
    "/api/metrics",
    tags=["System"],
    summary="Get application metrics",
)
async def get_metrics():
    """Request counters and timing data collected since startup."""
    return ApiResponse[dict](data=metrics.get_summary())


# Static frontend; mounted last so /api routes take precedence
app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True, check_dir=False), name="public")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=HOST, port=PORT)
