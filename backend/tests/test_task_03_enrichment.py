"""Task-03: 부가 데이터 수집 (fail-soft) 및 전세 매칭 테스트"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from apt_ranker.pipeline.enrichment import collect, match_rent_deals
from apt_ranker.schemas.complex import EnrichmentBundle, Found, NotFound
from apt_ranker.schemas.household import HouseholdProfile
from conftest import build_sources, make_complex, make_rent

PROFILE = HouseholdProfile(budget=100000, workplace="강남")


# ---------------------------------------------------------------------------
# T-1: 전세 거래 매칭 (단지명 + 면적 ±10% + 월세 0)
# ---------------------------------------------------------------------------


def test_match_rent_deals_conditions():
    complex_ = make_complex(avg_area=84.9)
    rents = [
        make_rent(area=84.9),  # 매칭
        make_rent(area=92.0),  # +8.4% → 매칭
        make_rent(area=95.0),  # +11.9% → 제외
        make_rent(monthly_rent=100),  # 월세 → 제외
        make_rent(apt_name="은마"),  # 단지명 불일치 → 제외
    ]

    matched = match_rent_deals(complex_, rents)

    assert len(matched) == 2
    assert all(r.is_jeonse for r in matched)


def test_match_rent_deals_none():
    assert match_rent_deals(make_complex(), []) == ()


# ---------------------------------------------------------------------------
# T-2: 정상 수집
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_collect_all_sources():
    sources = build_sources(
        unsold=Found(0),
        construction=Found(1200),
        transit=Found(450),
        commute=25,
    )

    bundle = await collect(make_complex(), PROFILE, [make_rent()], sources)

    assert bundle.transit == Found(450)
    assert bundle.unsold == Found(0)
    assert bundle.construction == Found(1200)
    assert bundle.commute_minutes == 25
    assert len(bundle.rent_deals) == 1


@pytest.mark.asyncio
async def test_collect_passes_province_and_address():
    seen: dict[str, str] = {}
    base = build_sources()

    async def fetch_unsold(region: str):
        seen["unsold"] = region
        return NotFound()

    async def fetch_nearest_transit(address: str):
        seen["transit"] = address
        return NotFound()

    sources = replace(base, fetch_unsold=fetch_unsold, fetch_nearest_transit=fetch_nearest_transit)
    await collect(make_complex(dong="정자동", lawd_code="41135"), PROFILE, [], sources)

    assert seen["unsold"] == "경기"
    assert seen["transit"] == "경기 정자동 1"


# ---------------------------------------------------------------------------
# T-3: 개별 조회 실패 → 기본값 (예외 없음)
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_collect_soft_degrades_on_errors():
    async def boom(*args):
        raise RuntimeError("upstream down")

    sources = replace(
        build_sources(),
        fetch_unsold=boom,
        fetch_construction=boom,
        fetch_nearest_transit=boom,
        fetch_commute_minutes=boom,
    )

    bundle = await collect(make_complex(), PROFILE, [], sources)

    assert isinstance(bundle.transit, NotFound)
    assert isinstance(bundle.unsold, NotFound)
    assert isinstance(bundle.construction, NotFound)
    assert bundle.commute_minutes == 60


@pytest.mark.asyncio
async def test_collect_timeout_falls_back():
    async def slow(*args):
        await asyncio.sleep(5)
        return Found(1)

    sources = replace(build_sources(unsold=Found(10)), fetch_construction=slow)

    bundle = await collect(make_complex(), PROFILE, [], sources, timeout=0.01)

    assert isinstance(bundle.construction, NotFound)
    assert bundle.unsold == Found(10)


def test_neutral_bundle_defaults():
    bundle = EnrichmentBundle.neutral()
    assert isinstance(bundle.transit, NotFound)
    assert bundle.commute_minutes == 60
    assert bundle.rent_deals == ()
