import threading
from unittest.mock import MagicMock

import pytest

from search_api.app.domain.registries import (
    REGISTRY_FORMATS,
    Registries,
    RegistryCache,
    build_snapshot,
)
from search_api.app.platform.exceptions import EngineUnavailable


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


HMRC = {"slug": "hm-revenue-customs", "link": "/government/organisations/hmrc",
        "content_id": "abc-123", "acronym": "HMRC"}


def test_build_snapshot_indexes_all_keys():
    snapshot = build_snapshot([HMRC], fetched_at=5.0)
    assert snapshot.fetched_at == 5.0
    assert snapshot.index["hm-revenue-customs"] is snapshot.index["abc-123"]
    assert snapshot.index["/government/organisations/hmrc"]["acronym"] == "HMRC"


def test_snapshot_is_immutable():
    snapshot = build_snapshot([HMRC], fetched_at=0)
    with pytest.raises(TypeError):
        snapshot.index["x"] = {}
    with pytest.raises(TypeError):
        snapshot.entries[0]["slug"] = "changed"


def test_cache_fetches_once_within_ttl():
    fetch = MagicMock(return_value=[HMRC])
    clock = FakeClock()
    cache = RegistryCache(fetch, ttl_seconds=100, clock=clock)

    assert cache.lookup("hm-revenue-customs")["acronym"] == "HMRC"
    clock.now = 99
    assert cache.lookup("abc-123") is not None
    assert fetch.call_count == 1


def test_cache_refreshes_after_ttl():
    fetch = MagicMock(side_effect=[[HMRC], [{"slug": "cabinet-office"}]])
    clock = FakeClock()
    cache = RegistryCache(fetch, ttl_seconds=100, clock=clock)

    assert cache.lookup("hm-revenue-customs") is not None
    clock.now = 100
    assert cache.lookup("hm-revenue-customs") is None
    assert cache.lookup("cabinet-office") == {"slug": "cabinet-office"}
    assert fetch.call_count == 2


def test_stale_snapshot_served_when_refresh_fails():
    fetch = MagicMock(side_effect=[[HMRC], EngineUnavailable("down")])
    clock = FakeClock()
    cache = RegistryCache(fetch, ttl_seconds=10, clock=clock)

    cache.snapshot()
    clock.now = 50
    assert cache.lookup("hm-revenue-customs")["slug"] == "hm-revenue-customs"


def test_first_load_failure_propagates():
    cache = RegistryCache(MagicMock(side_effect=EngineUnavailable("down")))
    with pytest.raises(EngineUnavailable):
        cache.all()


def test_stale_snapshot_served_while_other_reader_refreshes():
    """갱신 중인 다른 스레드가 있으면 기다리지 않고 이전 스냅샷을 돌려준다"""
    release = threading.Event()
    started = threading.Event()
    calls = []

    def fetch():
        calls.append(1)
        if len(calls) == 1:
            return [HMRC]
        started.set()
        release.wait(timeout=5)
        return [{"slug": "new"}]

    clock = FakeClock()
    cache = RegistryCache(fetch, ttl_seconds=10, clock=clock)
    old = cache.snapshot()
    clock.now = 20

    refresher = threading.Thread(target=cache.snapshot)
    refresher.start()
    assert started.wait(timeout=5)

    assert cache.snapshot() is old
    release.set()
    refresher.join(timeout=5)
    assert cache.lookup("new") == {"slug": "new"}
    assert len(calls) == 2


def test_registries_fetch_by_format():
    searcher = MagicMock()
    searcher.documents_by_format.return_value = iter([HMRC, {"slug": "dvla", "acronym": None}])
    registries = Registries(searcher, index="government", clock=FakeClock())

    assert "organisations" in registries
    assert "fish" not in registries
    assert set(REGISTRY_FORMATS) == {
        "organisations", "specialist_sectors", "policy_areas", "document_series",
        "document_collections", "world_locations", "people", "taxons",
    }
    assert registries.organisation_acronyms() == ["HMRC"]
    fmt, fields = REGISTRY_FORMATS["organisations"]
    searcher.documents_by_format.assert_called_once_with(fmt, fields, index="government")
    assert registries.get("people") is registries["people"]


def test_content_id_fields_share_registry_caches():
    searcher = MagicMock()
    searcher.documents_by_format.return_value = iter([HMRC])
    registries = Registries(searcher, clock=FakeClock())

    assert registries["organisation_content_ids"] is registries["organisations"]
    assert registries["topic_content_ids"] is registries["specialist_sectors"]
    assert registries["organisation_content_ids"].lookup("abc-123")["acronym"] == "HMRC"
    assert searcher.documents_by_format.call_count == 1
