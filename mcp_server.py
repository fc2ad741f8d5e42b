from typing import Optional

from mcp.server.fastmcp import FastMCP

# Import standard app components
from app.core.database import SessionLocal
from app.core.exceptions import QueryValidationError
from app.services.query_engine import TransactionQueryEngine, prepare_query
from app.services.transaction_store import SqlAlchemyTransactionStore

# Create an MCP server instance
mcp = FastMCP("Transaction-Explorer-Server")

engine = TransactionQueryEngine(SqlAlchemyTransactionStore(SessionLocal))


def _filters(
    search: Optional[str],
    region: Optional[str],
    category: Optional[str],
    status: Optional[str],
    payment_method: Optional[str],
    tags: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    delivery_type: Optional[str],
    gender: Optional[str],
    brand: Optional[str],
    age_min: Optional[str],
    age_max: Optional[str],
) -> dict:
    return {
        "search": search,
        "region": region,
        "category": category,
        "status": status,
        "paymentMethod": payment_method,
        "tags": tags,
        "startDate": start_date,
        "endDate": end_date,
        "deliveryType": delivery_type,
        "gender": gender,
        "brand": brand,
        "ageMin": age_min,
        "ageMax": age_max,
    }


@mcp.tool()
def search_transactions(
    search: Optional[str] = None,
    region: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    tags: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    delivery_type: Optional[str] = None,
    gender: Optional[str] = None,
    brand: Optional[str] = None,
    age_min: Optional[str] = None,
    age_max: Optional[str] = None,
    sort_by: str = "Date",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> dict:
    """Search transactions. Multi-value filters are comma-separated, dates are ISO-8601."""
    raw = _filters(
        search, region, category, status, payment_method, tags, start_date, end_date,
        delivery_type, gender, brand, age_min, age_max,
    )
    raw.update({"sortBy": sort_by, "sortOrder": sort_order, "page": page, "limit": limit})
    try:
        query = prepare_query(raw)
    except QueryValidationError as e:
        return {"error": str(e)}
    return engine.list_transactions(query).model_dump(mode="json", by_alias=True)


@mcp.tool()
def get_filter_options() -> dict:
    """Distinct values for each filterable field across the whole dataset."""
    return engine.filter_options().model_dump(mode="json", by_alias=True)


@mcp.tool()
def get_transaction_summary(
    search: Optional[str] = None,
    region: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    tags: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    delivery_type: Optional[str] = None,
    gender: Optional[str] = None,
    brand: Optional[str] = None,
    age_min: Optional[str] = None,
    age_max: Optional[str] = None,
) -> dict:
    """Units, amount, discount and record count over all matching transactions."""
    raw = _filters(
        search, region, category, status, payment_method, tags, start_date, end_date,
        delivery_type, gender, brand, age_min, age_max,
    )
    try:
        query = prepare_query(raw)
    except QueryValidationError as e:
        return {"error": str(e)}
    return engine.summarize(query).model_dump(mode="json", by_alias=True)


if __name__ == "__main__":
    # Start the standard streaming stdio server
    print("Starting Transaction Explorer MCP Server on stdio...")
    mcp.run()
