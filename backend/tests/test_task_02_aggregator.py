"""Task-02: 실거래 집계 및 지역 × 기간 수집 테스트"""

from __future__ import annotations

from datetime import date

import pytest

from apt_ranker.errors import SourceError
from apt_ranker.pipeline.aggregator import collect_region_deals, group_by_complex, trailing_year_months
from conftest import build_sources, make_deal, make_rent


# ---------------------------------------------------------------------------
# T-1: 단지별 그룹핑
# ---------------------------------------------------------------------------


def test_group_by_complex_statistics():
    deals = [
        make_deal("래미안대치", 100000, area=84.0),
        make_deal("은마", 200000),
        make_deal("래미안대치", 101001, area=85.0),
    ]

    complexes = group_by_complex(deals)

    assert [c.apt_name for c in complexes] == ["래미안대치", "은마"]
    raemian = complexes[0]
    assert raemian.transaction_count == 2
    # (100000 + 101001) / 2 = 100500.5 → 반올림 100501
    assert raemian.avg_price == 100501
    assert raemian.avg_area == pytest.approx(84.5)
    assert raemian.min_price == 100000
    assert raemian.max_price == 101001
    assert len(raemian.deals) == 2


def test_group_by_complex_count_matches_partition():
    deals = [make_deal(f"단지{i % 3}", 50000 + i) for i in range(10)]
    complexes = group_by_complex(deals)

    assert sum(c.transaction_count for c in complexes) == 10
    for c in complexes:
        prices = [d.deal_amount for d in deals if d.apt_name == c.apt_name]
        assert c.transaction_count == len(prices)
        assert c.avg_price == int(sum(prices) / len(prices) + 0.5)


def test_group_by_complex_empty():
    assert group_by_complex([]) == []


def test_complex_address_uses_province_prefix():
    seoul = group_by_complex([make_deal(lawd_code="11680")])[0]
    gyeonggi = group_by_complex([make_deal(dong="정자동", lawd_code="41135")])[0]
    assert seoul.address == "서울 대치동 1"
    assert gyeonggi.province == "경기"


# ---------------------------------------------------------------------------
# T-2: 조회 기간 (달력 월 기준)
# ---------------------------------------------------------------------------


def test_trailing_year_months_crosses_year():
    assert trailing_year_months(date(2025, 2, 15), 3) == ["202502", "202501", "202412"]


def test_trailing_year_months_month_end():
    """31일 기준이어도 월 단위로 정확히 거슬러 올라간다."""
    assert trailing_year_months(date(2025, 3, 31), 2) == ["202503", "202502"]


# ---------------------------------------------------------------------------
# T-3: 부분 실패 허용 수집
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_collect_region_deals_partial_failure():
    """한 달 조회가 실패해도 나머지 기간 결과는 합산된다."""

    def deals(lawd_cd: str, deal_ymd: str):
        if deal_ymd == "202412":
            raise SourceError("MOLIT API 오류 [99]: LIMITED")
        return [make_deal(lawd_code=lawd_cd, deal_ymd=deal_ymd)]

    sources = build_sources(deals=deals, rents=[make_rent()])

    result = await collect_region_deals(["강남구"], ["202501", "202412"], sources)

    assert len(result.deals) == 1
    assert result.deals[0].deal_month == "1"
    assert len(result.rent_deals) == 2
    assert result.failed_fetches == 1


@pytest.mark.asyncio
async def test_collect_region_deals_skips_unknown_region():
    sources = build_sources(deals=lambda lawd_cd, ymd: [make_deal(lawd_code=lawd_cd)])

    result = await collect_region_deals(["강남구", "없는구"], ["202501"], sources)

    assert result.searched_regions == ["강남구"]
    assert len(result.deals) == 1


@pytest.mark.asyncio
async def test_collect_region_deals_alias_queried_once():
    """'강남' 과 '강남구' 는 같은 법정동코드 → 한 번만 조회."""
    calls: list[tuple[str, str]] = []

    def deals(lawd_cd: str, deal_ymd: str):
        calls.append((lawd_cd, deal_ymd))
        return []

    await collect_region_deals(["강남구", "강남"], ["202501"], build_sources(deals=deals))

    assert calls == [("11680", "202501")]
