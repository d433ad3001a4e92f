"""인메모리 TTL 캐시"""

from __future__ import annotations

import fnmatch
import logging
import time
from typing import Any, Callable

from apt_ranker.config import settings

logger = logging.getLogger(__name__)


class TTLCache:
    """키별 만료 시간을 가진 단순 dict 캐시.

    만료된 항목은 get 에서 보이지 않으며, sweep() 호출 시 실제로 제거된다.
    """

    def __init__(self, default_ttl: int | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl = default_ttl if default_ttl is not None else settings.cache_ttl
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}
        self.hits = 0
        self.misses = 0

    def _alive(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and entry[0] > self._clock()

    def get(self, key: str, default: Any = None) -> Any:
        if self._alive(key):
            self.hits += 1
            return self._store[key][1]
        self.misses += 1
        return default

    def __contains__(self, key: str) -> bool:
        return self._alive(key)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + (ttl if ttl is not None else self.default_ttl)
        self._store[key] = (expires_at, value)
        logger.debug("캐시 저장: %s", key)

    def delete(self, key: str) -> int:
        return 1 if self._store.pop(key, None) is not None else 0

    def delete_pattern(self, pattern: str) -> int:
        """glob 패턴(예: 'transaction_*')에 맞는 키를 삭제한다."""
        matched = fnmatch.filter(list(self._store), pattern)
        for key in matched:
            del self._store[key]
        return len(matched)

    def clear(self) -> None:
        self._store.clear()
        logger.info("모든 캐시 삭제 완료")

    def sweep(self) -> int:
        """만료된 항목을 제거하고 제거 건수를 반환한다."""
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._store.items() if expires_at <= now]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug("캐시 만료 %d건 제거", len(expired))
        return len(expired)

    def keys(self) -> list[str]:
        return [key for key in self._store if self._alive(key)]

    def stats(self) -> dict:
        return {"hits": self.hits, "misses": self.misses, "keys": len(self.keys())}
