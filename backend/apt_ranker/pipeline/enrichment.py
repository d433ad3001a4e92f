"""단지별 부가 데이터 수집 (역세권, 미분양, 착공실적, 출퇴근, 전세 매칭)"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Iterable, TypeVar

from apt_ranker.config import settings
from apt_ranker.pipeline.sources import DataSources
from apt_ranker.schemas.complex import ComplexAggregate, EnrichmentBundle, NotFound
from apt_ranker.schemas.deal import RentDeal
from apt_ranker.schemas.household import HouseholdProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

RENT_AREA_TOLERANCE = 0.10
DEFAULT_COMMUTE_MINUTES = 60


def match_rent_deals(complex_: ComplexAggregate, rent_deals: Iterable[RentDeal]) -> tuple[RentDeal, ...]:
    """단지명 일치, 면적 ±10%, 월세 0원(전세)인 거래만 고른다."""
    if complex_.avg_area <= 0:
        return ()
    return tuple(
        r for r in rent_deals
        if r.apt_name == complex_.apt_name
        and abs(r.area - complex_.avg_area) / complex_.avg_area <= RENT_AREA_TOLERANCE
        and r.is_jeonse
    )


async def _soft(label: str, coro: Awaitable[T], default: T, timeout: float) -> T:
    """개별 조회를 timeout 으로 제한하고, 실패하면 기본값으로 대체한다."""
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except Exception as exc:
        logger.warning("  %s 조회 실패 → 기본값 사용: %s %s", label, type(exc).__name__, exc)
        return default


async def collect(
    complex_: ComplexAggregate,
    household: HouseholdProfile,
    all_rent_deals: Iterable[RentDeal],
    sources: DataSources,
    timeout: float | None = None,
) -> EnrichmentBundle:
    """역세권/미분양/착공/출퇴근 조회를 동시에 수행해 EnrichmentBundle 을 만든다.

    각 조회는 독립적으로 실패할 수 있으며, 실패 시 NotFound 또는 60분으로 대체된다.
    이 함수는 예외를 발생시키지 않는다.
    """
    timeout = timeout if timeout is not None else settings.api_timeout
    region = complex_.province

    transit, unsold, construction, commute = await asyncio.gather(
        _soft("역세권", sources.fetch_nearest_transit(complex_.address), NotFound("조회 실패"), timeout),
        _soft("미분양", sources.fetch_unsold(region), NotFound("조회 실패"), timeout),
        _soft("착공실적", sources.fetch_construction(region), NotFound("조회 실패"), timeout),
        _soft(
            "출퇴근",
            sources.fetch_commute_minutes(complex_.address, household.workplace),
            DEFAULT_COMMUTE_MINUTES,
            timeout,
        ),
    )

    return EnrichmentBundle(
        transit=transit,
        unsold=unsold,
        construction=construction,
        commute_minutes=commute,
        rent_deals=match_rent_deals(complex_, all_rent_deals),
    )

