"""
Transaction Query Engine.

Request-scoped orchestration of the faceted query:

    raw params -> normalize (once) -> build predicate (once)
               -> { facets | page | summary }

The page and the summary are always computed from the same Predicate
object, so the totals describe exactly the records being paged through.
Nothing is kept between requests.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from app.schemas.query import FilterSpec, PageSpec, SortSpec
from app.schemas.transaction import (
    FilterOptionsResponse,
    OverviewResponse,
    SummaryResponse,
    TransactionPageResponse,
)
from app.services.aggregator import Aggregator
from app.services.facet_resolver import FacetResolver
from app.services.filter_normalizer import normalize_filters, normalize_page, normalize_sort
from app.services.paginated_retriever import PaginatedRetriever
from app.services.predicate_builder import Predicate, build_predicate
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedQuery:
    """Normalized criteria plus the predicate compiled from them."""
    filters: FilterSpec
    predicate: Predicate
    sort: SortSpec
    page: PageSpec


def prepare_query(raw: Mapping[str, Any]) -> PreparedQuery:
    """
    Normalize raw request parameters and compile the predicate.
    Raises QueryValidationError before any store access.
    """
    filters = normalize_filters(raw)
    return PreparedQuery(
        filters=filters,
        predicate=build_predicate(filters),
        sort=normalize_sort(raw.get("sortBy"), raw.get("sortOrder")),
        page=normalize_page(raw.get("page"), raw.get("limit")),
    )


class TransactionQueryEngine:
    """Answers page, facet and summary questions against one store."""

    def __init__(self, store: TransactionStore, use_facet_cache: bool = True):
        self.store = store
        self.facet_resolver = FacetResolver(store, use_cache=use_facet_cache)
        self.retriever = PaginatedRetriever(store)
        self.aggregator = Aggregator(store)

    def list_transactions(self, query: PreparedQuery) -> TransactionPageResponse:
        page = self.retriever.retrieve(query.predicate, query.sort, query.page)
        logger.info(
            f"Listed page {query.page.page}/{page.pagination.total_pages} "
            f"({page.pagination.total_documents} matching)"
        )
        return TransactionPageResponse(data=page.data, pagination=page.pagination, filters=query.filters)

    def filter_options(self) -> FilterOptionsResponse:
        return FilterOptionsResponse(filters=self.facet_resolver.resolve())

    def summarize(self, query: PreparedQuery) -> SummaryResponse:
        return SummaryResponse(summary=self.aggregator.summarize(query.predicate))

    async def overview(self, query: PreparedQuery) -> OverviewResponse:
        """
        Compute page, facets and summary concurrently and join them.
        Any failure fails the whole response; no partial summary is returned.
        """
        try:
            page, options, summary = await asyncio.gather(
                asyncio.to_thread(self.retriever.retrieve, query.predicate, query.sort, query.page),
                asyncio.to_thread(self.facet_resolver.resolve),
                asyncio.to_thread(self.aggregator.summarize, query.predicate),
            )
        except asyncio.CancelledError:
            logger.info("Overview cancelled by caller")
            raise

        return OverviewResponse(
            data=page.data,
            pagination=page.pagination,
            filters=query.filters,
            filter_options=options,
            summary=summary,
        )
