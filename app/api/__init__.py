# API Routes
from app.api.health import router as health_router
from app.api.transactions import router as transactions_router

__all__ = ["health_router", "transactions_router"]
