"""Aggregator: totals over every record matching a predicate, independent of paging."""

import logging

from app.schemas.transaction import Summary
from app.services.predicate_builder import Predicate
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class Aggregator:
    def __init__(self, store: TransactionStore):
        self.store = store

    def summarize(self, predicate: Predicate) -> Summary:
        """
        Sum quantity, final amount and discount (total - final) over all matches.
        The store does the summing; matching records are never loaded here.
        """
        summary = self.store.aggregate(predicate)
        logger.debug(
            f"Summary: {summary.total_records} records, {summary.total_units} units, "
            f"{summary.total_amount:.2f} amount"
        )
        return summary
