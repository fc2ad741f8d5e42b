"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from app.api.transactions import get_transaction_store
from app.core.config import get_settings
from app.core.exceptions import StoreError
from app.services.predicate_builder import Predicate
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])

settings = get_settings()


@router.get("/health")
async def health_check(store: TransactionStore = Depends(get_transaction_store)):
    """Service health plus the number of loaded transactions."""
    try:
        records = await run_in_threadpool(store.count, Predicate())
    except StoreError as e:
        logger.warning(f"Health check could not reach the store: {e}")
        return {
            "status": "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "store": "unavailable",
        }

    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "store": "connected",
        "records": records,
    }
