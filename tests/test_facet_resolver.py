import pytest

from app.services import facet_resolver, seed_data
from app.services.facet_resolver import FACET_CACHE_KEY, FacetResolver, distinct_sorted, split_tags


class FakeCache:
    def __init__(self):
        self.values = {}

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value, ttl):
        self.values[key] = value
        return True

    def delete(self, key):
        self.values.pop(key, None)


@pytest.fixture
def fake_cache(monkeypatch):
    cache = FakeCache()
    monkeypatch.setattr(facet_resolver, "cache_get", cache.get)
    monkeypatch.setattr(facet_resolver, "cache_set", cache.set)
    monkeypatch.setattr(seed_data, "cache_delete", cache.delete)
    return cache


def test_split_tags_trims_and_dedupes() -> None:
    assert split_tags(["organic, skincare", "skincare,,", None, " casual "]) == ["casual", "organic", "skincare"]


def test_distinct_sorted_drops_empty_values() -> None:
    assert distinct_sorted(["West", "", None, "East", "West"]) == ["East", "West"]


def test_resolve_populates_and_reuses_the_cache(memory_store, fake_cache) -> None:
    first = FacetResolver(memory_store).resolve()
    assert FACET_CACHE_KEY in fake_cache.values

    fake_cache.values[FACET_CACHE_KEY]["regions"] = ["Cached"]
    second = FacetResolver(memory_store).resolve()

    assert first.regions == ["Central", "East", "North", "South", "West"]
    assert second.regions == ["Cached"]


def test_resolve_without_cache_ignores_it(memory_store, fake_cache) -> None:
    FacetResolver(memory_store, use_cache=False).resolve()
    assert fake_cache.values == {}


def test_seeding_invalidates_cached_facets(fake_cache, tmp_path, monkeypatch) -> None:
    from sqlalchemy.orm import sessionmaker

    from app.core.database import Base, create_db_engine

    engine = create_db_engine(f"sqlite:///{tmp_path / 'seed.db'}")
    Base.metadata.create_all(engine)
    monkeypatch.setattr(seed_data.settings, "SEED_CSV_PATH", "")
    monkeypatch.setattr(seed_data.settings, "SEED_DEMO_RECORDS", 20)
    fake_cache.values[FACET_CACHE_KEY] = {"regions": ["Stale"]}

    with sessionmaker(bind=engine)() as db:
        seed_data.seed_database(db)

    assert FACET_CACHE_KEY not in fake_cache.values
    engine.dispose()
