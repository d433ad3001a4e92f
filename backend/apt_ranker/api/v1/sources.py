"""원천 데이터 개별 조회 엔드포인트

각 응답은 {"cached": bool, "data": ...} 형태이며, cached 는 조회 직전에
같은 키가 캐시에 살아 있었는지를 나타낸다.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import asdict
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from apt_ranker.api.deps import get_cache, get_sources
from apt_ranker.api.v1.recommendations import lookup_json
from apt_ranker.errors import FatalInputError, SourceError
from apt_ranker.pipeline.sources import DataSources, cache_key
from apt_ranker.tools.cache import TTLCache
from apt_ranker.tools.real_estate_api import validate_deal_ymd, validate_lawd_code

logger = logging.getLogger(__name__)

router = APIRouter()


def _require(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise FatalInputError(f"{label}은(는) 필수입니다.")
    return value


async def _respond(cache: TTLCache, key: str, call: Awaitable[Any]) -> tuple[bool, Any]:
    cached = key in cache
    try:
        return cached, await call
    except (SourceError, httpx.HTTPError) as exc:
        logger.error("원천 데이터 조회 실패 [%s]: %s", key, exc)
        raise HTTPException(status_code=502, detail=f"외부 API 호출 실패: {exc}") from exc


def _bad_request(exc: FatalInputError) -> HTTPException:
    return HTTPException(status_code=400, detail=exc.message)


@router.get("/transaction")
async def get_transactions(
    lawd_cd: str = Query("", description="법정동코드 5자리"),
    deal_ymd: str = Query("", description="계약년월 (YYYYMM)"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """아파트 매매 실거래가를 조회합니다."""
    try:
        validate_lawd_code(lawd_cd)
        validate_deal_ymd(deal_ymd)
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, deals = await _respond(
        cache, cache_key("transaction", lawd_cd, deal_ymd), sources.fetch_deals(lawd_cd, deal_ymd)
    )
    return {"cached": cached, "data": [asdict(d) for d in deals]}


@router.get("/rent")
async def get_rent_deals(
    lawd_cd: str = Query("", description="법정동코드 5자리"),
    deal_ymd: str = Query("", description="계약년월 (YYYYMM)"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """아파트 전월세 실거래가를 조회합니다."""
    try:
        validate_lawd_code(lawd_cd)
        validate_deal_ymd(deal_ymd)
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, rents = await _respond(
        cache, cache_key("rent", lawd_cd, deal_ymd), sources.fetch_rent_deals(lawd_cd, deal_ymd)
    )
    return {"cached": cached, "data": [asdict(r) for r in rents]}


@router.get("/unsold")
async def get_unsold(
    region: str = Query("", description="광역 지역명 (예: 서울, 경기)"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """지역 미분양 주택 수를 조회합니다."""
    try:
        region = _require(region, "region(지역명)")
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, result = await _respond(cache, cache_key("unsold", region), sources.fetch_unsold(region))
    return {"cached": cached, "data": {"region": region, "unsold": lookup_json(result)}}


@router.get("/construction")
async def get_construction(
    region: str = Query("", description="광역 지역명 (예: 서울, 경기)"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """지역 최근 3개월 아파트 착공 실적을 조회합니다."""
    try:
        region = _require(region, "region(지역명)")
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, result = await _respond(cache, cache_key("construction", region), sources.fetch_construction(region))
    return {"cached": cached, "data": {"region": region, "construction": lookup_json(result)}}


@router.get("/nearest-station")
async def get_nearest_station(
    address: str = Query("", description="주소 (예: 서울 강남구 개포동)"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """주소에서 가장 가까운 주요 지하철역까지의 거리(m)를 조회합니다."""
    try:
        address = _require(address, "address(주소)")
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, result = await _respond(cache, cache_key("station", address), sources.fetch_nearest_transit(address))
    return {"cached": cached, "data": {"address": address, "distance": lookup_json(result)}}


@router.get("/commute-time")
async def get_commute_time(
    home: str = Query("", description="집 주소"),
    workplace: str = Query("", description="직장 주소"),
    sources: DataSources = Depends(get_sources),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """집과 직장 사이의 예상 출퇴근 시간(분)을 계산합니다."""
    try:
        home = _require(home, "home(집 주소)")
        workplace = _require(workplace, "workplace(직장 주소)")
    except FatalInputError as exc:
        raise _bad_request(exc) from exc

    cached, minutes = await _respond(
        cache, cache_key("commute", home, workplace), sources.fetch_commute_minutes(home, workplace)
    )
    return {"cached": cached, "data": {"home": home, "workplace": workplace, "estimated_time": minutes}}
