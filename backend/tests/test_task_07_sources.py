"""Task-07: 외부 소스 클라이언트, 캐시 테스트

네트워크 호출은 모두 patch 로 대체한다.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import pytest

from apt_ranker.errors import FatalInputError, SourceError
from apt_ranker.pipeline.sources import with_cache
from apt_ranker.pipeline.tables import Coordinate
from apt_ranker.schemas.complex import Found, NotFound
from apt_ranker.tools import naver_api
from apt_ranker.tools.cache import TTLCache
from apt_ranker.tools.kosis_api import fetch_unsold, parse_construction_rows, parse_unsold_rows
from apt_ranker.tools.real_estate_api import (
    fetch_deals,
    parse_rent_xml,
    parse_trade_xml,
    validate_deal_ymd,
    validate_lawd_code,
)
from conftest import build_sources, make_deal


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


TRADE_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<response>
  <header>
    <resultCode>000</resultCode>
    <resultMsg>OK</resultMsg>
  </header>
  <body>
    <items>
      <item>
        <aptNm>래미안대치팰리스</aptNm>
        <umdNm>대치동</umdNm>
        <jibun>1027</jibun>
        <buildYear>2015</buildYear>
        <dealAmount> 285,000</dealAmount>
        <excluUseAr>84.97</excluUseAr>
        <floor>12</floor>
        <dealYear>2025</dealYear>
        <dealMonth>1</dealMonth>
        <dealDay>8</dealDay>
      </item>
      <item>
        <아파트>은마</아파트>
        <법정동>대치동</법정동>
        <지번>316</지번>
        <건축년도>1979</건축년도>
        <거래금액>245,000</거래금액>
        <전용면적>76.79</전용면적>
        <층>5</층>
        <년>2025</년>
        <월>1</월>
        <일>20</일>
      </item>
      <item>
        <umdNm>대치동</umdNm>
        <dealAmount>10,000</dealAmount>
      </item>
    </items>
  </body>
</response>
"""

RENT_XML = """\
<response>
  <header><resultCode>00</resultCode></header>
  <body>
    <items>
      <item>
        <aptNm>은마</aptNm>
        <umdNm>대치동</umdNm>
        <deposit>70,000</deposit>
        <monthlyRent>0</monthlyRent>
        <excluUseAr>76.79</excluUseAr>
        <dealYear>2025</dealYear>
        <dealMonth>1</dealMonth>
        <dealDay>3</dealDay>
        <contractType>갱신</contractType>
      </item>
      <item>
        <aptNm>은마</aptNm>
        <deposit>10,000</deposit>
        <monthlyRent>150</monthlyRent>
        <excluUseAr>76.79</excluUseAr>
      </item>
    </items>
  </body>
</response>
"""

ERROR_XML = """\
<response>
  <header>
    <resultCode>22</resultCode>
    <resultMsg>LIMITED NUMBER OF SERVICE REQUESTS EXCEEDS ERROR</resultMsg>
  </header>
</response>
"""


# ---------------------------------------------------------------------------
# T-1: MOLIT XML 파싱
# ---------------------------------------------------------------------------


def test_parse_trade_xml_english_and_korean_tags():
    deals = parse_trade_xml(TRADE_XML, lawd_code="11680")

    # 단지명 없는 세 번째 항목은 건너뜀
    assert len(deals) == 2
    first, second = deals
    assert first.apt_name == "래미안대치팰리스"
    assert first.deal_amount == 285000
    assert first.area == 84.97
    assert first.floor == 12
    assert first.deal_date == "2025-01-08"
    assert first.lawd_code == "11680"
    assert second.apt_name == "은마"
    assert second.build_year == "1979"
    assert second.deal_amount == 245000


def test_parse_rent_xml():
    rents = parse_rent_xml(RENT_XML, lawd_code="11680")

    assert len(rents) == 2
    assert rents[0].deposit == 70000
    assert rents[0].is_jeonse
    assert rents[0].contract_type == "갱신"
    assert rents[1].monthly_rent == 150
    assert not rents[1].is_jeonse


def test_parse_error_result_code():
    with pytest.raises(SourceError, match="22"):
        parse_trade_xml(ERROR_XML)


def test_parse_invalid_xml():
    with pytest.raises(SourceError):
        parse_trade_xml("<html>Service Unavailable")


@pytest.mark.parametrize("value", ["1168", "116800", "abcde", ""])
def test_validate_lawd_code_rejects(value):
    with pytest.raises(FatalInputError):
        validate_lawd_code(value)


@pytest.mark.parametrize("value", ["202513", "20250", "2025-01", ""])
def test_validate_deal_ymd_rejects(value):
    with pytest.raises(FatalInputError):
        validate_deal_ymd(value)


@pytest.mark.asyncio
async def test_fetch_deals_without_api_key():
    with patch("apt_ranker.tools.real_estate_api.settings") as mock_settings:
        mock_settings.molit_api_key = ""
        with pytest.raises(SourceError, match="MOLIT_API_KEY"):
            await fetch_deals("11680", "202501")


@pytest.mark.asyncio
async def test_fetch_deals_invalid_input_before_request():
    with pytest.raises(FatalInputError):
        await fetch_deals("11680", "2025")


# ---------------------------------------------------------------------------
# T-2: KOSIS 응답 파싱
# ---------------------------------------------------------------------------


def test_parse_unsold_rows_latest_period():
    rows = [
        {"C1_NM": "서울", "C2_NM": "계", "DT": "950", "PRD_DE": "202410"},
        {"C1_NM": "서울", "C2_NM": "계", "DT": "1,020", "PRD_DE": "202412"},
        {"C1_NM": "서울", "C2_NM": "강남구", "DT": "10", "PRD_DE": "202412"},
        {"C1_NM": "경기", "C2_NM": "계", "DT": "8000", "PRD_DE": "202412"},
    ]
    assert parse_unsold_rows(rows, "서울") == Found(1020)
    assert isinstance(parse_unsold_rows(rows, "부산"), NotFound)


def test_parse_construction_rows_sums_months():
    rows = [
        {"C1_NM": "총계", "C2_NM": "총계", "C3_NM": "서울", "DT": "1200", "PRD_DE": "202410"},
        {"C1_NM": "총계", "C2_NM": "총계", "C3_NM": "서울", "DT": "800", "PRD_DE": "202411"},
        {"C1_NM": "총계", "C2_NM": "민간", "C3_NM": "서울", "DT": "700", "PRD_DE": "202411"},
        {"C1_NM": "총계", "C2_NM": "총계", "C3_NM": "경기", "DT": "5000", "PRD_DE": "202411"},
    ]
    assert parse_construction_rows(rows, "서울") == Found(2000)
    assert isinstance(parse_construction_rows([], "서울"), NotFound)


@pytest.mark.asyncio
async def test_fetch_unsold_without_key():
    with patch("apt_ranker.tools.kosis_api.settings") as mock_settings:
        mock_settings.kosis_api_key = ""
        assert isinstance(await fetch_unsold("서울"), NotFound)


# ---------------------------------------------------------------------------
# T-3: 네이버 지오코딩 기반 조회
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_nearest_transit_found():
    with patch.object(naver_api, "geocode", AsyncMock(return_value=Coordinate(37.4979, 127.0276))):
        assert await naver_api.fetch_nearest_transit("서울 강남구 역삼동") == Found(0)


@pytest.mark.asyncio
async def test_nearest_transit_geocode_failure():
    with patch.object(naver_api, "geocode", AsyncMock(return_value=None)):
        assert isinstance(await naver_api.fetch_nearest_transit("어딘가"), NotFound)


@pytest.mark.asyncio
async def test_commute_minutes():
    gangnam = Coordinate(37.4979, 127.0276)
    pangyo = Coordinate(37.3949, 127.1111)

    with patch.object(naver_api, "geocode", AsyncMock(side_effect=[gangnam, gangnam])):
        assert await naver_api.fetch_commute_minutes("A", "B") == 0

    # 강남역 ↔ 판교역 직선 약 13.6km ÷ 30km/h ≈ 27분
    with patch.object(naver_api, "geocode", AsyncMock(side_effect=[gangnam, pangyo])):
        assert 25 <= await naver_api.fetch_commute_minutes("A", "B") <= 30

    with patch.object(naver_api, "geocode", AsyncMock(side_effect=[gangnam, None])):
        assert await naver_api.fetch_commute_minutes("A", "B") == 60


@pytest.mark.asyncio
async def test_geocode_without_keys():
    with patch("apt_ranker.tools.naver_api.settings") as mock_settings:
        mock_settings.naver_client_id = ""
        mock_settings.naver_client_secret = ""
        assert await naver_api.geocode("서울 강남구") is None


def test_availability_backoff():
    state = naver_api._Availability()
    assert not state.should_skip()
    state.disable()
    assert state.should_skip()
    state.enable()
    assert not state.should_skip()


# ---------------------------------------------------------------------------
# T-4: TTL 캐시
# ---------------------------------------------------------------------------


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_cache_expiry_and_sweep():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("transaction_11680_202501", [1])
    cache.set("unsold_서울", Found(3), ttl=100)

    assert cache.get("transaction_11680_202501") == [1]
    clock.now = 11
    assert cache.get("transaction_11680_202501") is None
    assert cache.keys() == ["unsold_서울"]
    assert cache.sweep() == 1
    assert cache.stats() == {"hits": 1, "misses": 1, "keys": 1}


def test_cache_delete_pattern_and_clear():
    cache = TTLCache(default_ttl=60)
    cache.set("transaction_11680_202501", 1)
    cache.set("transaction_11650_202501", 2)
    cache.set("rent_11680_202501", 3)

    assert cache.delete_pattern("transaction_*") == 2
    assert cache.keys() == ["rent_11680_202501"]
    assert cache.delete("rent_11680_202501") == 1
    assert cache.delete("rent_11680_202501") == 0
    cache.set("a", 1)
    cache.clear()
    assert cache.keys() == []


# ---------------------------------------------------------------------------
# T-5: 캐시 래핑된 소스
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_with_cache_read_through():
    calls: list[tuple[str, str]] = []

    def deals(lawd_cd: str, deal_ymd: str):
        calls.append((lawd_cd, deal_ymd))
        return [make_deal(lawd_code=lawd_cd)]

    cache = TTLCache(default_ttl=60)
    sources = with_cache(build_sources(deals=deals, unsold=Found(7)), cache)

    first = await sources.fetch_deals("11680", "202501")
    second = await sources.fetch_deals("11680", "202501")
    await sources.fetch_unsold("서울")

    assert first == second
    assert calls == [("11680", "202501")]
    assert "transaction_11680_202501" in cache.keys()
    assert "unsold_서울" in cache.keys()


@pytest.mark.asyncio
async def test_with_cache_does_not_cache_errors():
    failing = AsyncMock(side_effect=[SourceError("일시 오류"), [make_deal()]])
    cache = TTLCache(default_ttl=60)
    sources = with_cache(replace(build_sources(), fetch_deals=failing), cache)

    with pytest.raises(SourceError):
        await sources.fetch_deals("11680", "202501")
    assert cache.keys() == []

    assert len(await sources.fetch_deals("11680", "202501")) == 1
    assert failing.await_count == 2


@pytest.mark.asyncio
async def test_with_cache_shares_inflight_lookup():
    calls: list[str] = []
    release = asyncio.Event()

    async def slow_unsold(region: str):
        calls.append(region)
        await release.wait()
        return Found(42)

    cache = TTLCache(default_ttl=60)
    sources = with_cache(replace(build_sources(), fetch_unsold=slow_unsold), cache)

    pending = [asyncio.create_task(sources.fetch_unsold("서울")) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*pending)

    assert results == [Found(42)] * 5
    assert calls == ["서울"]
    assert cache.get("unsold_서울") == Found(42)


@pytest.mark.asyncio
async def test_with_cache_keeps_lookup_when_caller_times_out():
    release = asyncio.Event()

    async def slow_construction(region: str):
        await release.wait()
        return Found(900)

    cache = TTLCache(default_ttl=60)
    sources = with_cache(replace(build_sources(), fetch_construction=slow_construction), cache)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(sources.fetch_construction("경기"), timeout=0.01)

    release.set()
    assert await sources.fetch_construction("경기") == Found(900)
    assert "construction_경기" in cache.keys()
