"""
Predicate Builder.

Compiles a FilterSpec into a Predicate: a conjunction of tagged,
serializable per-dimension clauses. The same Predicate value is handed to
every query path. Store adapters either translate it into their own query
language (see transaction_store.compile_predicate) or evaluate it
in-process with Predicate.matches().

Clause semantics:
  - text_search   case-insensitive substring of any listed attribute,
                  OR exact equality with the id attribute when the term is an integer
  - in            exact membership in a set of values
  - contains_any  case-insensitive substring match of any needle
  - range         inclusive lower/upper bound, either side optional
"""

import re
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.query import FilterSpec

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

SEARCH_ATTRIBUTES = ("customer_name", "product_name")

# FilterSpec field -> Transaction attribute, for exact-match multi-selects
MEMBERSHIP_DIMENSIONS = {
    "region": "customer_region",
    "category": "product_category",
    "status": "order_status",
    "payment_method": "payment_method",
    "delivery_type": "delivery_type",
    "gender": "gender",
    "brand": "brand",
}


class _Clause(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextSearchClause(_Clause):
    kind: Literal["text_search"] = "text_search"
    term: str
    attributes: tuple[str, ...] = SEARCH_ATTRIBUTES
    id_attribute: str = "transaction_id"
    id_value: Optional[int] = None

    def matches(self, record: Any) -> bool:
        needle = self.term.lower()
        for attribute in self.attributes:
            value = getattr(record, attribute, None)
            if value is not None and needle in str(value).lower():
                return True
        return self.id_value is not None and getattr(record, self.id_attribute, None) == self.id_value


class MembershipClause(_Clause):
    kind: Literal["in"] = "in"
    attribute: str
    values: tuple[str, ...]

    def matches(self, record: Any) -> bool:
        return getattr(record, self.attribute, None) in self.values


class ContainsAnyClause(_Clause):
    kind: Literal["contains_any"] = "contains_any"
    attribute: str
    needles: tuple[str, ...]

    def matches(self, record: Any) -> bool:
        haystack = getattr(record, self.attribute, None)
        if not haystack:
            return False
        haystack = str(haystack).lower()
        return any(needle.lower() in haystack for needle in self.needles)


class RangeClause(_Clause):
    kind: Literal["range"] = "range"
    attribute: str
    lower: Optional[Union[datetime, int, float]] = None
    upper: Optional[Union[datetime, int, float]] = None

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.attribute, None)
        if value is None:
            return False
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value > self.upper:
            return False
        return True


Clause = Annotated[
    Union[TextSearchClause, MembershipClause, ContainsAnyClause, RangeClause],
    Field(discriminator="kind"),
]


class Predicate(BaseModel):
    """AND of clauses. No clauses matches every record."""
    model_config = ConfigDict(frozen=True)

    clauses: tuple[Clause, ...] = ()

    @property
    def is_universal(self) -> bool:
        return not self.clauses

    def matches(self, record: Any) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


def search_id_value(term: str) -> Optional[int]:
    """The integer a search term names, if it is one."""
    if _INTEGER_RE.match(term):
        value = int(term)
        # Ids are 64-bit integers in every store
        if -(2**63) <= value < 2**63:
            return value
    return None


def build_predicate(spec: FilterSpec) -> Predicate:
    """Compile a normalized FilterSpec into a Predicate."""
    clauses: list[_Clause] = []

    if spec.search:
        clauses.append(TextSearchClause(term=spec.search, id_value=search_id_value(spec.search)))

    for field, attribute in MEMBERSHIP_DIMENSIONS.items():
        selected = getattr(spec, field)
        if selected:
            clauses.append(MembershipClause(attribute=attribute, values=selected))

    # Tags are stored comma-joined, so selection is a substring test
    if spec.tags:
        clauses.append(ContainsAnyClause(attribute="tags", needles=spec.tags))

    if spec.age_min is not None or spec.age_max is not None:
        clauses.append(RangeClause(attribute="age", lower=spec.age_min, upper=spec.age_max))

    if spec.start_date is not None or spec.end_date is not None:
        clauses.append(RangeClause(attribute="date", lower=spec.start_date, upper=spec.end_date))

    return Predicate(clauses=tuple(clauses))
