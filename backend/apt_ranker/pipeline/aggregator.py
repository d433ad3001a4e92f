"""실거래 수집 및 단지별 집계"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from statistics import mean
from typing import Iterable

from apt_ranker.config import settings
from apt_ranker.errors import RegionNotFoundError
from apt_ranker.pipeline.geo import round_half_up
from apt_ranker.pipeline.regions import region_code
from apt_ranker.pipeline.sources import DataSources
from apt_ranker.pipeline.tables import DEFAULT_REGION_TABLES, RegionTables
from apt_ranker.schemas.complex import ComplexAggregate
from apt_ranker.schemas.deal import RawDeal, RentDeal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionDeals:
    """지역 × 기간 수집 결과 (조회 실패분은 빈 리스트로 합산됨)"""

    deals: list[RawDeal]
    rent_deals: list[RentDeal]
    searched_regions: list[str]
    failed_fetches: int = 0


# ---------------------------------------------------------------------------
# 1. 단지별 집계
# ---------------------------------------------------------------------------


def _aggregate(deals: list[RawDeal]) -> ComplexAggregate:
    first = deals[0]
    prices = [d.deal_amount for d in deals]
    return ComplexAggregate(
        apt_name=first.apt_name,
        dong=first.dong,
        jibun=first.jibun,
        build_year=first.build_year,
        deals=tuple(deals),
        avg_price=int(round_half_up(mean(prices))),
        avg_area=round_half_up(mean(d.area for d in deals), 1),
        min_price=min(prices),
        max_price=max(prices),
        transaction_count=len(deals),
        lawd_code=first.lawd_code,
    )


def group_by_complex(deals: Iterable[RawDeal]) -> list[ComplexAggregate]:
    """단지명 기준으로 거래를 묶어 단지별 통계를 계산한다.

    단지 순서는 처음 등장한 순서를 따른다. 거래가 없는 단지는 생성되지 않는다.
    """
    partitions: dict[str, list[RawDeal]] = {}
    for deal in deals:
        partitions.setdefault(deal.apt_name, []).append(deal)
    return [_aggregate(group) for group in partitions.values()]


# ---------------------------------------------------------------------------
# 2. 조회 기간
# ---------------------------------------------------------------------------


def trailing_year_months(today: date | None = None, months: int | None = None) -> list[str]:
    """이번 달부터 거슬러 올라간 N개월의 YYYYMM 목록 (최신 월 먼저)."""
    today = today or date.today()
    months = months if months is not None else settings.trailing_months

    result: list[str] = []
    year, month = today.year, today.month
    for _ in range(months):
        result.append(f"{year:04d}{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return result


# ---------------------------------------------------------------------------
# 3. 지역 × 기간 병렬 수집
# ---------------------------------------------------------------------------


async def collect_region_deals(
    regions: list[str],
    deal_ymds: list[str],
    sources: DataSources,
    tables: RegionTables = DEFAULT_REGION_TABLES,
    max_concurrency: int | None = None,
) -> RegionDeals:
    """지역별 법정동코드로 매매/전월세 실거래를 병렬 수집한다.

    - 법정동코드가 없는 지역은 경고 후 건너뛴다.
    - 개별 (지역, 월) 조회 실패는 빈 리스트로 대체한다.
    """
    codes: dict[str, str] = {}
    for region in regions:
        try:
            codes[region] = region_code(region, tables)
        except RegionNotFoundError as exc:
            logger.warning("%s (건너뜀)", exc.message)

    sem = asyncio.Semaphore(max_concurrency or settings.max_concurrency)
    failures = 0

    async def fetch_one(fetcher, label: str, lawd_cd: str, deal_ymd: str) -> list:
        nonlocal failures
        async with sem:
            try:
                return await fetcher(lawd_cd, deal_ymd)
            except Exception as exc:
                failures += 1
                logger.warning("  %s API 호출 실패 [%s %s]: %s", label, lawd_cd, deal_ymd, exc)
                return []

    # 같은 법정동코드를 가리키는 별칭 지역은 한 번만 조회
    pairs = [(code, ymd) for code in dict.fromkeys(codes.values()) for ymd in deal_ymds]
    trade_results, rent_results = await asyncio.gather(
        asyncio.gather(*[fetch_one(sources.fetch_deals, "매매", c, ymd) for c, ymd in pairs]),
        asyncio.gather(*[fetch_one(sources.fetch_rent_deals, "전월세", c, ymd) for c, ymd in pairs]),
    )

    deals = [d for batch in trade_results for d in batch]
    rents = [r for batch in rent_results for r in batch]
    logger.info(
        "실거래 수집 결과: 지역 %d곳 × %d개월, 매매 %d건, 전월세 %d건 (실패 %d회)",
        len(codes), len(deal_ymds), len(deals), len(rents), failures,
    )
    return RegionDeals(
        deals=deals,
        rent_deals=rents,
        searched_regions=list(codes),
        failed_fetches=failures,
    )
