"""외부 데이터 소스 묶음 및 캐시 래핑"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from apt_ranker.schemas.complex import Lookup
from apt_ranker.schemas.deal import RawDeal, RentDeal
from apt_ranker.tools import kosis_api, naver_api, real_estate_api
from apt_ranker.tools.cache import TTLCache

logger = logging.getLogger(__name__)

DealFetcher = Callable[[str, str], Awaitable[list[RawDeal]]]
RentFetcher = Callable[[str, str], Awaitable[list[RentDeal]]]
RegionLookup = Callable[[str], Awaitable[Lookup[int]]]
CommuteLookup = Callable[[str, str], Awaitable[int]]

_MISSING = object()


@dataclass(frozen=True)
class DataSources:
    """분석 파이프라인이 사용하는 외부 조회 함수 묶음

    테스트에서는 네트워크 대신 가짜 async 함수를 주입한다.
    """

    fetch_deals: DealFetcher
    fetch_rent_deals: RentFetcher
    fetch_unsold: RegionLookup
    fetch_construction: RegionLookup
    fetch_nearest_transit: RegionLookup
    fetch_commute_minutes: CommuteLookup


def default_sources() -> DataSources:
    return DataSources(
        fetch_deals=real_estate_api.fetch_deals,
        fetch_rent_deals=real_estate_api.fetch_rent_deals,
        fetch_unsold=kosis_api.fetch_unsold,
        fetch_construction=kosis_api.fetch_construction,
        fetch_nearest_transit=naver_api.fetch_nearest_transit,
        fetch_commute_minutes=naver_api.fetch_commute_minutes,
    )


def cache_key(prefix: str, *args: str) -> str:
    """'transaction_11680_202501' 형태의 캐시 키"""
    return "_".join((prefix, *args))


def _cached(
    cache: TTLCache,
    prefix: str,
    func: Callable[..., Awaitable[Any]],
    ttl: int | None,
) -> Callable[..., Awaitable[Any]]:
    """읽기 관통(read-through) 캐시. 예외는 캐시하지 않고 그대로 전파한다.

    같은 키에 대한 동시 미스는 진행 중인 조회 1건을 공유한다.
    호출자가 취소되어도 조회는 끝까지 진행되어 캐시에 저장된다.
    """
    inflight: dict[str, asyncio.Task] = {}

    def _settle(key: str, task: asyncio.Task) -> None:
        inflight.pop(key, None)
        if not task.cancelled() and task.exception() is None:
            cache.set(key, task.result(), ttl)

    async def wrapper(*args: str) -> Any:
        key = cache_key(prefix, *args)
        cached = cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("캐시 히트: %s", key)
            return cached
        task = inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(func(*args))
            inflight[key] = task
            task.add_done_callback(functools.partial(_settle, key))
        else:
            logger.debug("진행 중인 조회 공유: %s", key)
        return await asyncio.shield(task)

    return wrapper


def with_cache(sources: DataSources, cache: TTLCache, ttl: int | None = None) -> DataSources:
    """각 조회 함수를 캐시로 감싼 새 DataSources 를 반환한다."""
    return DataSources(
        fetch_deals=_cached(cache, "transaction", sources.fetch_deals, ttl),
        fetch_rent_deals=_cached(cache, "rent", sources.fetch_rent_deals, ttl),
        fetch_unsold=_cached(cache, "unsold", sources.fetch_unsold, ttl),
        fetch_construction=_cached(cache, "construction", sources.fetch_construction, ttl),
        fetch_nearest_transit=_cached(cache, "station", sources.fetch_nearest_transit, ttl),
        fetch_commute_minutes=_cached(cache, "commute", sources.fetch_commute_minutes, ttl),
    )
