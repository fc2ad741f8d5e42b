from datetime import datetime

import pytest
from conftest import SAMPLE_ROWS, build_sql_store, ids, make_row, make_transactions
from sqlalchemy.orm import sessionmaker

from app.core.database import create_db_engine
from app.core.exceptions import StoreError
from app.schemas.query import SortSpec
from app.services.filter_normalizer import normalize_filters, normalize_sort
from app.services.predicate_builder import Predicate, build_predicate
from app.services.transaction_store import InMemoryTransactionStore, SqlAlchemyTransactionStore

EVERYTHING = Predicate()

FILTER_CASES = [
    {},
    {"search": "42"},
    {"search": "bob"},
    {"search": "100%"},
    {"search": "_"},
    {"region": "North,South"},
    {"tags": "skincare"},
    {"tags": "Cotton,fitness"},
    {"ageMin": "30", "ageMax": "55"},
    {"startDate": "2024-03-15", "endDate": "2024-06-30"},
    {"gender": "Male", "deliveryType": "Standard,Express"},
    {"brand": "Nike,Zara", "status": "Pending"},
]


@pytest.mark.parametrize("raw", FILTER_CASES)
def test_sql_pushdown_agrees_with_in_process_evaluation(raw, memory_store, sql_store) -> None:
    predicate = build_predicate(normalize_filters(raw))
    sort = normalize_sort("transactionId", "asc")

    assert sql_store.count(predicate) == memory_store.count(predicate)
    assert ids(sql_store.find(predicate, sort, 0, 100)) == ids(memory_store.find(predicate, sort, 0, 100))
    assert sql_store.aggregate(predicate).model_dump() == pytest.approx(
        memory_store.aggregate(predicate).model_dump()
    )


ACCENTED_ROWS = [
    make_row(1, datetime(2024, 5, 1, 10, 0), "Élodie Durand", "Crème Hydratante", "Beauty", "Nivea",
             "Écologique,skincare", "West", "Female", 31, 2, 500.0, 450.0, "UPI", "Completed", "Standard"),
    make_row(2, datetime(2024, 5, 2, 10, 0), "Søren Ågård", "Wireless Earbuds", "Electronics", "Sony",
             "gadgets", "North", "Male", 44, 1, 2000.0, 1800.0, "Cash", "Completed", "Express"),
]


@pytest.mark.parametrize("raw", [
    {"search": "élodie"},
    {"search": "ÉLODIE"},
    {"search": "crème"},
    {"search": "ågård"},
    {"tags": "écologique"},
    {"tags": "ÉCOLOGIQUE,gadgets"},
])
def test_case_insensitive_matching_folds_non_ascii_letters(raw, tmp_path) -> None:
    sql_store = build_sql_store(tmp_path / "accented.db", rows=ACCENTED_ROWS)
    memory_store = InMemoryTransactionStore(make_transactions(ACCENTED_ROWS))
    predicate = build_predicate(normalize_filters(raw))

    assert memory_store.count(predicate) >= 1
    assert sql_store.count(predicate) == memory_store.count(predicate)


def test_like_wildcards_in_search_are_literal(sql_store) -> None:
    assert sql_store.count(build_predicate(normalize_filters({"search": "%"}))) == 0
    assert sql_store.count(build_predicate(normalize_filters({"search": "_"}))) == 0


def test_ties_keep_store_order_in_both_directions(store) -> None:
    newest = ids(store.find(EVERYTHING, normalize_sort("Date", "desc"), 0, 10))
    oldest = ids(store.find(EVERYTHING, normalize_sort("Date", "asc"), 0, 10))
    assert newest == [100, 5, 42, 4, 2, 1]
    assert oldest == [1, 2, 42, 4, 5, 100]


def test_raw_column_name_is_a_valid_sort_key(store) -> None:
    by_quantity = ids(store.find(EVERYTHING, normalize_sort("Quantity", "asc"), 0, 10))
    assert by_quantity == [2, 42, 100, 1, 4, 5]


def test_unknown_sort_field_uses_store_order(store) -> None:
    for direction in ("asc", "desc"):
        sort = SortSpec(field="definitely_not_a_column", descending=direction == "desc")
        assert ids(store.find(EVERYTHING, sort, 0, 10)) == [1, 2, 42, 4, 5, 100]


def test_null_values_sort_first_ascending_and_last_descending(store) -> None:
    assert ids(store.find(EVERYTHING, normalize_sort("age", "asc"), 0, 10))[0] == 5
    assert ids(store.find(EVERYTHING, normalize_sort("age", "desc"), 0, 10))[-1] == 5


def test_skip_and_limit_window_the_sorted_set(store) -> None:
    sort = normalize_sort("amount", "desc")
    assert ids(store.find(EVERYTHING, sort, 0, 2)) == [100, 2]
    assert ids(store.find(EVERYTHING, sort, 2, 2)) == [5, 4]
    assert ids(store.find(EVERYTHING, sort, 4, 2)) == [42, 1]


def test_distinct_returns_raw_values(store) -> None:
    assert sorted(store.distinct("customer_region")) == ["Central", "East", "North", "South", "West"]
    assert None in store.distinct("tags")


def test_aggregate_sums_the_whole_matching_set(store) -> None:
    summary = store.aggregate(EVERYTHING)
    assert summary.total_records == len(SAMPLE_ROWS)
    assert summary.total_units == 17
    assert summary.total_amount == pytest.approx(7110.0)
    assert summary.total_discount == pytest.approx(890.0)


def test_aggregate_of_nothing_is_zero(store) -> None:
    summary = store.aggregate(build_predicate(normalize_filters({"region": "Atlantis"})))
    assert summary.model_dump() == {
        "total_units": 0,
        "total_amount": 0.0,
        "total_discount": 0.0,
        "total_records": 0,
    }


def test_database_failures_surface_as_store_errors(tmp_path) -> None:
    # No tables were created in this database
    engine = create_db_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    store = SqlAlchemyTransactionStore(sessionmaker(bind=engine))

    with pytest.raises(StoreError) as exc_info:
        store.count(EVERYTHING)
    assert exc_info.value.operation == "count"

    with pytest.raises(StoreError):
        store.aggregate(EVERYTHING)


def test_sql_store_handles_an_empty_table(tmp_path) -> None:
    store = build_sql_store(tmp_path / "empty.db", rows=[])
    assert store.count(EVERYTHING) == 0
    assert store.aggregate(EVERYTHING).total_records == 0
    assert store.distinct("brand") == []
