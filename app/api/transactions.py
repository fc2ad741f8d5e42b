"""
Transactions API endpoints.
Faceted browsing: filtered/sorted/paged listing, filter options and totals.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from app.core.database import SessionLocal
from app.schemas.transaction import (
    FilterOptionsResponse,
    OverviewResponse,
    SummaryResponse,
    TransactionPageResponse,
)
from app.services.query_engine import TransactionQueryEngine, prepare_query
from app.services.transaction_store import SqlAlchemyTransactionStore, TransactionStore

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def get_transaction_store() -> TransactionStore:
    """Store dependency; overridden in tests."""
    return SqlAlchemyTransactionStore(SessionLocal)


def get_query_engine(store: TransactionStore = Depends(get_transaction_store)) -> TransactionQueryEngine:
    return TransactionQueryEngine(store)


def filter_params(
    search: Optional[str] = Query(None, description="Customer/product name substring or transaction ID"),
    region: Optional[str] = Query(None, description="Comma-separated regions, e.g. North,South"),
    category: Optional[str] = Query(None, description="Comma-separated product categories"),
    status: Optional[str] = Query(None, description="Comma-separated order statuses"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod", description="Comma-separated payment methods"),
    delivery_type: Optional[str] = Query(None, alias="deliveryType", description="Comma-separated delivery types"),
    gender: Optional[str] = Query(None, description="Comma-separated genders"),
    brand: Optional[str] = Query(None, description="Comma-separated brands"),
    tags: Optional[str] = Query(None, description="Comma-separated tags (any may match)"),
    age_min: Optional[str] = Query(None, alias="ageMin", description="Minimum age"),
    age_max: Optional[str] = Query(None, alias="ageMax", description="Maximum age"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date, e.g. 2024-01-01"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date (inclusive), e.g. 2024-12-31"),
) -> dict[str, Any]:
    """Collect raw filter parameters under their API names."""
    return {
        "search": search,
        "region": region,
        "category": category,
        "status": status,
        "paymentMethod": payment_method,
        "deliveryType": delivery_type,
        "gender": gender,
        "brand": brand,
        "tags": tags,
        "ageMin": age_min,
        "ageMax": age_max,
        "startDate": start_date,
        "endDate": end_date,
    }


def listing_params(
    filters: dict[str, Any] = Depends(filter_params),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field (default: Date)"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc (default: desc)"),
    page: Optional[str] = Query(None, description="Page number (default: 1)"),
    limit: Optional[str] = Query(None, description="Items per page, 1-100 (default: 10)"),
) -> dict[str, Any]:
    """Filter parameters plus sort and pagination."""
    return {**filters, "sortBy": sort_by, "sortOrder": sort_order, "page": page, "limit": limit}


@router.get("", response_model=TransactionPageResponse)
async def list_transactions(
    params: dict[str, Any] = Depends(listing_params),
    engine: TransactionQueryEngine = Depends(get_query_engine),
):
    """
    Filtered, searched, sorted and paginated transactions.
    Multi-value filters are comma-separated; values within a filter are ORed,
    different filters are ANDed.
    """
    query = prepare_query(params)
    return await run_in_threadpool(engine.list_transactions, query)


@router.get("/filters", response_model=FilterOptionsResponse)
async def get_filter_options(engine: TransactionQueryEngine = Depends(get_query_engine)):
    """Distinct values for every filterable field, across the whole dataset."""
    return await run_in_threadpool(engine.filter_options)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    params: dict[str, Any] = Depends(filter_params),
    engine: TransactionQueryEngine = Depends(get_query_engine),
):
    """Totals over ALL matching transactions, not just one page."""
    query = prepare_query(params)
    return await run_in_threadpool(engine.summarize, query)


@router.get("/overview", response_model=OverviewResponse)
async def get_overview(
    params: dict[str, Any] = Depends(listing_params),
    engine: TransactionQueryEngine = Depends(get_query_engine),
):
    """Page, filter options and summary for one request, computed concurrently."""
    query = prepare_query(params)
    return await engine.overview(query)
