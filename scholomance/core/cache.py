"""Version-keyed stores for fast-pass results and enrichment records."""

from __future__ import annotations

from typing import Dict, Generic, Iterator, Optional, Tuple, TypeVar

from .types import EnrichmentRecord, SyntacticResult

CacheKey = Tuple[str, str]
V = TypeVar("V")


def cache_key(version: str, token: str) -> CacheKey:
    """Exact-match key; tokens must already be normalised."""

    return (str(version), str(token))


class KeyedStore(Generic[V]):
    """Plain mapping with no implicit eviction."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, V] = {}

    def get(self, key: CacheKey) -> Optional[V]:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: V) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(list(self._entries))


class EngineCache:
    """The fast-result store and the enrichment-record store of one engine.

    Both are cleared together; that is the only invalidation path.
    """

    def __init__(self) -> None:
        self.fast: KeyedStore[SyntacticResult] = KeyedStore()
        self.enriched: KeyedStore[EnrichmentRecord] = KeyedStore()

    def get_fast(self, key: CacheKey) -> Optional[SyntacticResult]:
        return self.fast.get(key)

    def set_fast(self, key: CacheKey, result: SyntacticResult) -> None:
        self.fast.set(key, result)

    def get_record(self, key: CacheKey) -> Optional[EnrichmentRecord]:
        return self.enriched.get(key)

    def set_record(self, key: CacheKey, record: EnrichmentRecord) -> None:
        self.enriched.set(key, record)

    def clear(self) -> None:
        self.fast.clear()
        self.enriched.clear()

    def stats(self) -> Dict[str, int]:
        return {"fast": len(self.fast), "enriched": len(self.enriched)}


__all__ = ["CacheKey", "cache_key", "KeyedStore", "EngineCache"]
