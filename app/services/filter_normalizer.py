"""
Request normalization.

Turns raw, stringly-typed query parameters (as they arrive on the query
string or from an MCP tool call) into FilterSpec, SortSpec and PageSpec.
Every query path goes through these functions exactly once per request.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Optional

from app.core.config import get_settings
from app.core.exceptions import QueryValidationError
from app.schemas.query import FilterSpec, PageSpec, SortSpec

logger = logging.getLogger(__name__)
settings = get_settings()

# Raw parameter name -> FilterSpec field, for comma-separated multi-selects
MULTI_VALUE_PARAMS = {
    "region": "region",
    "category": "category",
    "status": "status",
    "paymentMethod": "payment_method",
    "deliveryType": "delivery_type",
    "gender": "gender",
    "brand": "brand",
    "tags": "tags",
}

# Lower-cased sort name -> Transaction attribute
SORT_FIELD_MAP = {
    "date": "date",
    "amount": "final_amount",
    "finalamount": "final_amount",
    "totalamount": "total_amount",
    "name": "customer_name",
    "customername": "customer_name",
    "productname": "product_name",
    "category": "product_category",
    "productcategory": "product_category",
    "status": "order_status",
    "orderstatus": "order_status",
    "region": "customer_region",
    "customerregion": "customer_region",
    "paymentmethod": "payment_method",
    "transactionid": "transaction_id",
    "quantity": "quantity",
    "age": "age",
}


def split_multi_value(raw: Optional[str]) -> Optional[tuple[str, ...]]:
    """
    Split a comma-separated selection into trimmed, de-duplicated tokens.
    Returns None when nothing usable remains, meaning "no restriction".
    """
    if raw is None:
        return None
    tokens: list[str] = []
    for token in str(raw).split(","):
        token = token.strip()
        if token and token not in tokens:
            tokens.append(token)
    return tuple(tokens) or None


def parse_age(field: str, raw: Any) -> Optional[int]:
    """Blank -> open bound; anything else must be an integer."""
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise QueryValidationError(field, str(raw), "expected an integer")


def parse_date_bound(field: str, raw: Any, end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or date-time into a naive UTC datetime.
    A bare date used as an end bound covers the whole day.
    """
    if raw is None or str(raw).strip() == "":
        return None
    text = str(raw).strip()

    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise QueryValidationError(field, text, "expected an ISO-8601 date such as 2024-01-31")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_filters(raw: Mapping[str, Any]) -> FilterSpec:
    """
    Build a FilterSpec from raw request parameters.

    Args:
        raw: Parameter name -> value, using the API's camelCase names
             (search, region, paymentMethod, ageMin, startDate, ...).

    Returns:
        A validated FilterSpec. Absent or empty parameters impose no restriction.

    Raises:
        QueryValidationError: a supplied age bound is not an integer or a
        supplied date bound cannot be parsed.
    """
    search = raw.get("search")
    search = str(search).strip() if search is not None else ""

    values: dict[str, Any] = {"search": search or None}
    for param, field in MULTI_VALUE_PARAMS.items():
        values[field] = split_multi_value(raw.get(param))

    values["age_min"] = parse_age("ageMin", raw.get("ageMin"))
    values["age_max"] = parse_age("ageMax", raw.get("ageMax"))
    values["start_date"] = parse_date_bound("startDate", raw.get("startDate"))
    values["end_date"] = parse_date_bound("endDate", raw.get("endDate"), end_of_day=True)

    spec = FilterSpec(**values)
    logger.debug(f"Normalized filters: {spec.model_dump(exclude_none=True)}")
    return spec


def normalize_sort(sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> SortSpec:
    """
    Map a requested sort name onto a Transaction attribute.
    Unknown names pass through unchanged; the store decides whether they
    resolve to a real column.
    """
    name = (sort_by or "").strip() or settings.DEFAULT_SORT_BY
    order = (sort_order or "").strip().lower() or settings.DEFAULT_SORT_ORDER
    field = SORT_FIELD_MAP.get(name.lower(), name)
    return SortSpec(field=field, descending=order != "asc")


def _lenient_int(raw: Any) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return 0


def normalize_page(page: Any = None, limit: Any = None) -> PageSpec:
    """Clamp page to >= 1 and limit to [1, MAX_PAGE_SIZE]; zero or garbage means default."""
    page_number = max(1, _lenient_int(page) or 1)
    page_size = _lenient_int(limit) or settings.DEFAULT_PAGE_SIZE
    page_size = min(settings.MAX_PAGE_SIZE, max(1, page_size))
    return PageSpec(page=page_number, limit=page_size)
