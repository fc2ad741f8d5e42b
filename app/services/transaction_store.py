"""
Transaction store adapters.

The query engine talks to a store through four read primitives:
count(predicate), find(predicate, sort, skip, limit), distinct(attribute)
and aggregate(predicate). Two adapters are provided:

- SqlAlchemyTransactionStore translates the Predicate into a SQL WHERE
  clause so filtering, sorting and summing run inside the database.
- InMemoryTransactionStore evaluates the Predicate in-process over a list
  of records. Used for tests and small fixtures.

Both order ties by store order (load order) so pages never overlap.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, Protocol, Sequence

from sqlalchemy import and_, func, or_, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import StoreError
from app.models.transaction import Transaction
from app.schemas.query import SortSpec
from app.schemas.transaction import Summary
from app.services.predicate_builder import (
    ContainsAnyClause,
    MembershipClause,
    Predicate,
    RangeClause,
    TextSearchClause,
)

logger = logging.getLogger(__name__)


class TransactionStore(Protocol):
    def count(self, predicate: Predicate) -> int:
        """Number of records matching the predicate."""

    def find(self, predicate: Predicate, sort: SortSpec, skip: int, limit: int) -> list[Transaction]:
        """Matching records ordered by `sort`, windowed by skip/limit."""

    def distinct(self, attribute: str) -> list[Any]:
        """Distinct raw values of one attribute over the whole dataset."""

    def aggregate(self, predicate: Predicate) -> Summary:
        """Grouped sums over every matching record."""


# ─── SQL pushdown ───────────────────────────────────────────────


def compile_clause(clause: Any) -> ColumnElement[bool]:
    """Translate one predicate clause into a SQLAlchemy boolean expression."""
    if isinstance(clause, TextSearchClause):
        conditions = [
            getattr(Transaction, attribute).icontains(clause.term, autoescape=True)
            for attribute in clause.attributes
        ]
        if clause.id_value is not None:
            conditions.append(getattr(Transaction, clause.id_attribute) == clause.id_value)
        return or_(*conditions)

    if isinstance(clause, MembershipClause):
        return getattr(Transaction, clause.attribute).in_(clause.values)

    if isinstance(clause, ContainsAnyClause):
        column = getattr(Transaction, clause.attribute)
        return or_(*(column.icontains(needle, autoescape=True) for needle in clause.needles))

    if isinstance(clause, RangeClause):
        column = getattr(Transaction, clause.attribute)
        bounds = []
        if clause.lower is not None:
            bounds.append(column >= clause.lower)
        if clause.upper is not None:
            bounds.append(column <= clause.upper)
        return and_(true(), *bounds)

    raise TypeError(f"Unsupported clause: {clause!r}")


def compile_predicate(predicate: Predicate) -> ColumnElement[bool]:
    """Translate a whole Predicate. An empty predicate becomes TRUE."""
    if predicate.is_universal:
        return true()
    return and_(*(compile_clause(clause) for clause in predicate.clauses))


class SqlAlchemyTransactionStore:
    """
    Store backed by a SQLAlchemy session factory.
    Each primitive opens and closes its own session, so concurrent query
    paths never share one.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Store {operation} failed: {e}")
            raise StoreError(operation, e) from e
        finally:
            session.close()

    def count(self, predicate: Predicate) -> int:
        stmt = select(func.count(Transaction.id)).where(compile_predicate(predicate))
        with self._session("count") as session:
            return session.scalar(stmt) or 0

    def find(self, predicate: Predicate, sort: SortSpec, skip: int, limit: int) -> list[Transaction]:
        stmt = select(Transaction).where(compile_predicate(predicate))

        attribute = Transaction.resolve_attribute(sort.field)
        if attribute is None:
            logger.info(f"Unknown sort field {sort.field!r}, using store order")
        else:
            column = getattr(Transaction, attribute)
            stmt = stmt.order_by(column.desc() if sort.descending else column.asc())
        stmt = stmt.order_by(Transaction.id.asc()).offset(skip).limit(limit)

        with self._session("find") as session:
            return list(session.scalars(stmt).all())

    def distinct(self, attribute: str) -> list[Any]:
        column = getattr(Transaction, attribute)
        with self._session("distinct") as session:
            return list(session.scalars(select(column).distinct()).all())

    def aggregate(self, predicate: Predicate) -> Summary:
        stmt = select(
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.quantity), 0),
            func.coalesce(func.sum(Transaction.final_amount), 0.0),
            func.coalesce(func.sum(Transaction.total_amount - Transaction.final_amount), 0.0),
        ).where(compile_predicate(predicate))

        with self._session("aggregate") as session:
            count, units, amount, discount = session.execute(stmt).one()

        return Summary(
            total_units=int(units),
            total_amount=float(amount),
            total_discount=float(discount),
            total_records=int(count),
        )


# ─── In-process fallback ────────────────────────────────────────


def _sort_key(attribute: str):
    # None sorts first ascending (and last descending), like SQLite
    def key(record: Any) -> tuple:
        value = getattr(record, attribute, None)
        return (value is not None, value)
    return key


class InMemoryTransactionStore:
    """Store over an in-memory sequence of Transaction-shaped records."""

    def __init__(self, records: Iterable[Any] = ()):
        self._records: Sequence[Any] = tuple(records)

    def _matching(self, predicate: Predicate) -> list[Any]:
        if predicate.is_universal:
            return list(self._records)
        return [record for record in self._records if predicate.matches(record)]

    def count(self, predicate: Predicate) -> int:
        return len(self._matching(predicate))

    def find(self, predicate: Predicate, sort: SortSpec, skip: int, limit: int) -> list[Any]:
        rows = self._matching(predicate)
        attribute: Optional[str] = Transaction.resolve_attribute(sort.field)
        if attribute is not None:
            # list.sort is stable, reverse included, so ties keep store order
            rows.sort(key=_sort_key(attribute), reverse=sort.descending)
        return rows[skip:skip + limit]

    def distinct(self, attribute: str) -> list[Any]:
        seen: dict[Any, None] = {}
        for record in self._records:
            seen.setdefault(getattr(record, attribute, None), None)
        return list(seen)

    def aggregate(self, predicate: Predicate) -> Summary:
        summary = {"units": 0, "amount": 0.0, "discount": 0.0, "count": 0}
        for record in self._matching(predicate):
            summary["units"] += record.quantity or 0
            summary["amount"] += record.final_amount or 0.0
            summary["discount"] += (record.total_amount or 0.0) - (record.final_amount or 0.0)
            summary["count"] += 1
        return Summary(
            total_units=summary["units"],
            total_amount=summary["amount"],
            total_discount=summary["discount"],
            total_records=summary["count"],
        )
