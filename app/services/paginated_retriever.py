"""
Paginated Retriever.

Counts the predicate's matches first, then fetches only the requested
window of the sorted matching set.
"""

import logging
import math

from app.schemas.query import PageSpec, SortSpec
from app.schemas.transaction import PaginationMeta, TransactionPage, TransactionResponse
from app.services.predicate_builder import Predicate
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class PaginatedRetriever:
    def __init__(self, store: TransactionStore):
        self.store = store

    def retrieve(self, predicate: Predicate, sort: SortSpec, page: PageSpec) -> TransactionPage:
        """
        Return one page of matching transactions.

        No matches -> empty page with zero counts, without sorting or scanning.
        A page past the last one -> empty data, counts still reported.
        """
        total = self.store.count(predicate)
        if total == 0:
            return TransactionPage(
                data=[],
                pagination=PaginationMeta(
                    total_documents=0,
                    total_pages=0,
                    current_page=page.page,
                    limit=page.limit,
                    has_next_page=False,
                    has_prev_page=False,
                ),
            )

        total_pages = math.ceil(total / page.limit)
        if page.offset >= total:
            logger.info(f"Page {page.page} is past the last page ({total_pages})")
            records = []
        else:
            records = self.store.find(predicate, sort, skip=page.offset, limit=page.limit)

        return TransactionPage(
            data=[TransactionResponse.model_validate(record) for record in records],
            pagination=PaginationMeta(
                total_documents=total,
                total_pages=total_pages,
                current_page=page.page,
                limit=page.limit,
                has_next_page=page.page < total_pages,
                has_prev_page=page.page > 1,
            ),
        )
