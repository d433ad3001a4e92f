from __future__ import annotations

from collections.abc import AsyncGenerator, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apt_ranker.api.deps import get_cache, get_sources
from apt_ranker.main import app
from apt_ranker.pipeline.sources import DataSources
from apt_ranker.schemas.complex import ComplexAggregate, Lookup, NotFound
from apt_ranker.schemas.deal import RawDeal, RentDeal
from apt_ranker.tools.cache import TTLCache


# ---------------------------------------------------------------------------
# 테스트 데이터 헬퍼
# ---------------------------------------------------------------------------


def make_deal(
    apt_name: str = "래미안대치",
    deal_amount: int = 100000,
    *,
    dong: str = "대치동",
    build_year: str = "2020",
    area: float = 84.9,
    lawd_code: str = "11680",
    deal_ymd: str = "202502",
) -> RawDeal:
    return RawDeal(
        apt_name=apt_name,
        dong=dong,
        jibun="1",
        build_year=build_year,
        deal_amount=deal_amount,
        area=area,
        floor=10,
        deal_year=deal_ymd[:4],
        deal_month=str(int(deal_ymd[4:])),
        deal_day="15",
        lawd_code=lawd_code,
    )


def make_rent(
    apt_name: str = "래미안대치",
    deposit: int = 70000,
    monthly_rent: int = 0,
    area: float = 84.9,
) -> RentDeal:
    return RentDeal(apt_name=apt_name, dong="대치동", deposit=deposit, monthly_rent=monthly_rent, area=area)


def make_complex(
    apt_name: str = "래미안대치",
    avg_price: int = 100000,
    *,
    dong: str = "대치동",
    build_year: str = "2022",
    transaction_count: int = 12,
    avg_area: float = 84.9,
    lawd_code: str = "11680",
) -> ComplexAggregate:
    return ComplexAggregate(
        apt_name=apt_name,
        dong=dong,
        jibun="1",
        build_year=build_year,
        deals=(),
        avg_price=avg_price,
        avg_area=avg_area,
        min_price=avg_price,
        max_price=avg_price,
        transaction_count=transaction_count,
        lawd_code=lawd_code,
    )


def build_sources(
    deals: Callable[[str, str], list[RawDeal]] | list[RawDeal] = (),
    rents: Callable[[str, str], list[RentDeal]] | list[RentDeal] = (),
    *,
    unsold: Lookup[int] = NotFound("테스트"),
    construction: Lookup[int] = NotFound("테스트"),
    transit: Lookup[int] = NotFound("테스트"),
    commute: int = 60,
) -> DataSources:
    """네트워크 없이 고정 응답을 돌려주는 DataSources.

    deals/rents 에 함수를 넘기면 (lawd_cd, deal_ymd) 별로 응답을 정할 수 있다.
    """

    def _respond(response, lawd_cd: str, deal_ymd: str) -> list:
        if callable(response):
            return response(lawd_cd, deal_ymd)
        return [d for d in response if d.lawd_code in ("", lawd_cd)]

    async def fetch_deals(lawd_cd: str, deal_ymd: str) -> list[RawDeal]:
        return _respond(deals, lawd_cd, deal_ymd)

    async def fetch_rent_deals(lawd_cd: str, deal_ymd: str) -> list[RentDeal]:
        return _respond(rents, lawd_cd, deal_ymd)

    async def fetch_unsold(region: str) -> Lookup[int]:
        return unsold

    async def fetch_construction(region: str) -> Lookup[int]:
        return construction

    async def fetch_nearest_transit(address: str) -> Lookup[int]:
        return transit

    async def fetch_commute_minutes(home: str, workplace: str) -> int:
        return commute

    return DataSources(
        fetch_deals=fetch_deals,
        fetch_rent_deals=fetch_rent_deals,
        fetch_unsold=fetch_unsold,
        fetch_construction=fetch_construction,
        fetch_nearest_transit=fetch_nearest_transit,
        fetch_commute_minutes=fetch_commute_minutes,
    )


# ---------------------------------------------------------------------------
# API 클라이언트
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def api_state() -> AsyncGenerator[dict, None]:
    """테스트마다 교체 가능한 sources/cache 를 의존성으로 주입한다."""
    state = {"sources": build_sources(), "cache": TTLCache(default_ttl=60)}
    app.dependency_overrides[get_sources] = lambda: state["sources"]
    app.dependency_overrides[get_cache] = lambda: state["cache"]
    yield state
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(api_state: dict) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
