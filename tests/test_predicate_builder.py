from datetime import datetime

from conftest import ids, make_transactions

from app.services.filter_normalizer import normalize_filters
from app.services.predicate_builder import (
    ContainsAnyClause,
    MembershipClause,
    Predicate,
    RangeClause,
    TextSearchClause,
    build_predicate,
    search_id_value,
)


def matching(raw: dict) -> list[int]:
    predicate = build_predicate(normalize_filters(raw))
    return ids(record for record in make_transactions() if predicate.matches(record))


def test_no_filters_match_everything() -> None:
    predicate = build_predicate(normalize_filters({}))
    assert predicate.is_universal
    assert matching({}) == [1, 2, 42, 4, 5, 100]


def test_search_is_a_case_insensitive_name_substring() -> None:
    assert matching({"search": "ALICE"}) == [1]
    assert matching({"search": "speaker"}) == [100]
    assert matching({"search": "face wash"}) == [1]


def test_numeric_search_matches_the_transaction_id_exactly() -> None:
    assert matching({"search": "42"}) == [42]
    assert matching({"search": "4"}) == [4]
    assert matching({"search": "7"}) == []


def test_search_id_value_only_for_integers() -> None:
    assert search_id_value("42") == 42
    assert search_id_value("+7") == 7
    assert search_id_value("4.2") is None
    assert search_id_value("42abc") is None
    assert search_id_value("9" * 30) is None


def test_multi_select_is_exact_membership() -> None:
    assert matching({"region": "North,South"}) == [1, 2, 5]
    assert matching({"region": "north"}) == []
    assert matching({"status": "Completed", "paymentMethod": "UPI"}) == [1]


def test_tags_match_any_selected_tag_as_substring() -> None:
    assert matching({"tags": "skincare"}) == [1, 5]
    assert matching({"tags": "cosmetic"}) == []
    assert matching({"tags": "skin,fitness"}) == [1, 42, 5]


def test_age_range_is_inclusive_and_excludes_unknown_ages() -> None:
    assert matching({"ageMin": "34", "ageMax": "52"}) == [2, 42, 4]
    assert matching({"ageMin": "60"}) == [100]
    assert 5 not in matching({"ageMax": "99"})


def test_date_range_is_inclusive_on_both_ends() -> None:
    assert matching({"startDate": "2024-03-15", "endDate": "2024-06-30"}) == [42, 4, 5]
    assert matching({"startDate": "2024-12-31"}) == [100]


def test_dimensions_are_anded_values_ored() -> None:
    assert matching({"region": "North,East", "gender": "Female", "category": "Beauty"}) == [1, 5]
    assert matching({"region": "North", "category": "Sports"}) == []


def test_clause_kinds_follow_the_spec_dimensions() -> None:
    predicate = build_predicate(normalize_filters({
        "search": "42",
        "region": "North",
        "tags": "organic",
        "ageMin": "18",
        "startDate": "2024-01-01",
    }))
    kinds = [type(clause) for clause in predicate.clauses]
    assert kinds == [TextSearchClause, MembershipClause, ContainsAnyClause, RangeClause, RangeClause]
    assert predicate.clauses[0].id_value == 42


def test_predicate_round_trips_through_json() -> None:
    predicate = build_predicate(normalize_filters({
        "region": "North,South",
        "tags": "organic",
        "startDate": "2024-01-01",
        "ageMax": "40",
    }))
    restored = Predicate.model_validate_json(predicate.model_dump_json())
    assert restored == predicate
    assert restored.clauses[3].lower == datetime(2024, 1, 1)
