"""
레지스트리 캐시.

기관/주제/국가 등 작은 참조 데이터를 TTL(기본 12시간) 동안 메모리에 두고
slug, link, content_id로 조회한다.

- 스냅샷은 불변 객체이며, 새로 다 받아온 뒤 참조를 한 번에 교체한다.
- 스냅샷이 있으면 조회는 막히지 않는다. 다른 스레드가 갱신 중이면 이전 스냅샷을 쓴다.
- 최초 적재만 락을 기다린다.
"""

from __future__ import annotations

import logging
import threading
import time
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional

from search_api.app.domain.ports import SearchPort
from search_api.app.platform.exceptions import EngineUnavailable

log = logging.getLogger(__name__)

JSONDict = dict[str, Any]

DEFAULT_TTL_SECONDS = 12 * 60 * 60
LOOKUP_KEYS = ("slug", "link", "content_id")


class RegistrySnapshot(NamedTuple):
    entries: tuple
    index: Mapping[str, Mapping[str, Any]]
    fetched_at: float


def build_snapshot(documents: Iterable[JSONDict], fetched_at: float) -> RegistrySnapshot:
    entries = []
    index: dict[str, Mapping[str, Any]] = {}
    for doc in documents:
        entry = MappingProxyType(dict(doc))
        entries.append(entry)
        for key in LOOKUP_KEYS:
            value = entry.get(key)
            if isinstance(value, list):
                value = value[0] if value else None
            if value:
                index.setdefault(str(value), entry)
    return RegistrySnapshot(tuple(entries), MappingProxyType(index), fetched_at)


class RegistryCache:
    """
    Args:
        fetch: 전체 데이터를 돌려주는 함수(레지스트리 문서 목록)
        ttl_seconds: 스냅샷 유효 시간
        clock: 현재 시각(epoch 초) 함수. 테스트에서 교체 가능
        name: 로그용 이름
    """

    def __init__(self, fetch: Callable[[], Iterable[JSONDict]],
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time,
                 name: str = "registry"):
        self._fetch = fetch
        self._ttl = ttl_seconds
        self._clock = clock
        self._name = name
        self._lock = threading.Lock()
        self._snapshot: Optional[RegistrySnapshot] = None

    def _refresh(self) -> None:
        started = self._clock()
        snapshot = build_snapshot(self._fetch(), started)
        self._snapshot = snapshot
        log.info("registry.refresh: name=%s entries=%d", self._name, len(snapshot.entries))

    def _is_fresh(self, snapshot: RegistrySnapshot) -> bool:
        return self._clock() - snapshot.fetched_at < self._ttl

    def snapshot(self) -> RegistrySnapshot:
        current = self._snapshot
        if current is None:
            with self._lock:
                if self._snapshot is None:
                    self._refresh()
                return self._snapshot
        if self._is_fresh(current):
            return current
        if self._lock.acquire(blocking=False):
            try:
                if self._snapshot is current:
                    self._refresh()
            except EngineUnavailable as e:
                log.warning("registry.refresh failed, serving stale: name=%s err=%s", self._name, e)
            finally:
                self._lock.release()
        return self._snapshot

    def lookup(self, key: str) -> Optional[Mapping[str, Any]]:
        return self.snapshot().index.get(key)

    def all(self) -> tuple:
        return self.snapshot().entries


ORGANISATION_FIELDS = [
    "slug", "content_id", "link", "title", "acronym",
    "organisation_type", "organisation_closed_state", "organisation_state",
    "logo_formatted_title", "organisation_brand", "organisation_crest", "logo_url",
    "closed_at", "public_timestamp", "analytics_identifier",
    "child_organisations", "parent_organisations",
    "superseded_organisations", "superseding_organisations",
]
BASE_FIELDS = ["slug", "content_id", "link", "title"]

# 결과 필드 → (레지스트리 문서 format, 가져올 필드)
REGISTRY_FORMATS = {
    "organisations": ("organisation", ORGANISATION_FIELDS),
    "specialist_sectors": ("specialist_sector", BASE_FIELDS),
    "policy_areas": ("topic", BASE_FIELDS),
    "document_series": ("document_series", BASE_FIELDS),
    "document_collections": ("document_collection", BASE_FIELDS),
    "world_locations": ("world_location", BASE_FIELDS),
    "people": ("person", BASE_FIELDS),
    "taxons": ("taxon", BASE_FIELDS),
}

# content_id로 참조하는 결과 필드 → 같은 레지스트리를 쓰는 필드
CONTENT_ID_FIELDS = {
    "organisation_content_ids": "organisations",
    "topic_content_ids": "specialist_sectors",
}


class Registries:
    """
    결과 필드 이름 → RegistryCache.
    앱 시작 시 한 번 만들어 주입한다(main.py lifespan).
    """

    def __init__(self, searcher: SearchPort, index: Optional[str] = None,
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self._caches: dict[str, RegistryCache] = {}
        for field, (format, fields) in REGISTRY_FORMATS.items():
            self._caches[field] = RegistryCache(
                self._fetcher(searcher, format, fields, index),
                ttl_seconds=ttl_seconds,
                clock=clock,
                name=field,
            )
        for field, target in CONTENT_ID_FIELDS.items():
            self._caches[field] = self._caches[target]

    @staticmethod
    def _fetcher(searcher: SearchPort, format: str, fields: list[str],
                 index: Optional[str]) -> Callable[[], list[JSONDict]]:
        return lambda: list(searcher.documents_by_format(format, fields, index=index))

    def __getitem__(self, name: str) -> RegistryCache:
        return self._caches[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self._caches.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self._caches

    def organisation_acronyms(self) -> list[str]:
        return [
            entry["acronym"] for entry in self._caches["organisations"].all()
            if entry.get("acronym")
        ]
