"""
Facet Resolver.

Lists the distinct values of every filterable dimension across the whole
dataset. It never looks at the current filters, so choice lists stay stable
while the user narrows the result set.
"""

import logging
from typing import Any, Iterable

from app.core.config import get_settings
from app.core.redis import cache_get, cache_set
from app.schemas.transaction import FilterOptions
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)
settings = get_settings()

FACET_CACHE_KEY = "facets:filter-options"

# FilterOptions field -> Transaction attribute
FACET_ATTRIBUTES = {
    "regions": "customer_region",
    "categories": "product_category",
    "statuses": "order_status",
    "payment_methods": "payment_method",
    "delivery_types": "delivery_type",
    "brands": "brand",
    "genders": "gender",
}


def distinct_sorted(values: Iterable[Any]) -> list[str]:
    """Drop empty values, de-duplicate and sort ascending."""
    return sorted({str(value) for value in values if value})


def split_tags(raw_values: Iterable[Any]) -> list[str]:
    """Union-split comma-joined tag strings into sorted individual tags."""
    tags: set[str] = set()
    for raw in raw_values:
        if not raw:
            continue
        for tag in str(raw).split(","):
            tag = tag.strip()
            if tag:
                tags.add(tag)
    return sorted(tags)


class FacetResolver:
    """Computes FilterOptions from a store, optionally cached in Redis."""

    def __init__(self, store: TransactionStore, use_cache: bool = True):
        self.store = store
        self.use_cache = use_cache

    def resolve(self) -> FilterOptions:
        if self.use_cache:
            cached = cache_get(FACET_CACHE_KEY)
            if cached:
                logger.info("[CACHE HIT] Returning cached filter options")
                return FilterOptions(**cached)

        options = {
            field: distinct_sorted(self.store.distinct(attribute))
            for field, attribute in FACET_ATTRIBUTES.items()
        }
        options["tags"] = split_tags(self.store.distinct("tags"))
        result = FilterOptions(**options)

        if self.use_cache:
            cache_set(FACET_CACHE_KEY, result.model_dump(), ttl=settings.FACET_CACHE_TTL)
        return result
