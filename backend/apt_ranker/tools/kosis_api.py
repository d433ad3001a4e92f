"""통계청 KOSIS API 클라이언트 - 미분양 현황 / 주택건설 착공실적"""

from __future__ import annotations

import logging

import httpx

from apt_ranker.config import settings
from apt_ranker.schemas.complex import Found, Lookup, NotFound

logger = logging.getLogger(__name__)

KOSIS_URL = "https://kosis.kr/openapi/Param/statisticsParameterData.do"

# 국토교통부 제공 통계표
UNSOLD_TABLE_ID = "DT_MLTM_2082"  # 시·군·구별 미분양현황
UNSOLD_ITEM_ID = "13103871087T1+"
CONSTRUCTION_TABLE_ID = "DT_MLTM_5386"  # 주택건설 착공실적
CONSTRUCTION_ITEM_ID = "13103766971T1+"
RECENT_PERIODS = 3


def _to_int(value) -> int:
    try:
        return int(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return 0


# ---------------------------------------------------------------------------
# 1. 응답 파싱
# ---------------------------------------------------------------------------


def parse_unsold_rows(rows: list[dict], region: str) -> Lookup[int]:
    """미분양 응답에서 지역 합계("계") 행을 찾는다. 여러 기간이면 최신 기간 우선."""
    matched = [
        row for row in rows
        if region in (row.get("C1_NM") or "") and row.get("C2_NM") == "계" and row.get("DT")
    ]
    if not matched:
        return NotFound(f"{region} 미분양 데이터 없음")

    latest = max(matched, key=lambda row: row.get("PRD_DE") or "")
    count = _to_int(latest["DT"])
    logger.debug("%s 미분양: %d호 (%s)", region, count, latest.get("PRD_DE", ""))
    return Found(count)


def parse_construction_rows(rows: list[dict], region: str) -> Lookup[int]:
    """착공실적 응답에서 총계/총계/지역 행의 DT 를 합산한다 (최근 3개월 합계)."""
    matched = [
        row for row in rows
        if row.get("C1_NM") == "총계"
        and row.get("C2_NM") == "총계"
        and region in (row.get("C3_NM") or "")
    ]
    if not matched:
        return NotFound(f"{region} 착공실적 데이터 없음")

    volume = sum(_to_int(row.get("DT")) for row in matched)
    logger.debug("%s 아파트 착공실적: %d호 (%d개월)", region, volume, len(matched))
    return Found(volume)


# ---------------------------------------------------------------------------
# 2. API 호출
# ---------------------------------------------------------------------------


async def _fetch_rows(table_id: str, item_id: str, levels: int) -> list[dict]:
    params = {
        "method": "getList",
        "apiKey": settings.kosis_api_key,
        "itmId": item_id,
        "format": "json",
        "jsonVD": "Y",
        "prdSe": "M",
        "newEstPrdCnt": str(RECENT_PERIODS),
        "orgId": "116",
        "tblId": table_id,
    }
    for level in range(1, 9):
        params[f"objL{level}"] = "ALL" if level <= levels else ""

    async with httpx.AsyncClient(timeout=settings.api_timeout) as client:
        response = await client.get(KOSIS_URL, params=params, headers={"User-Agent": "Mozilla/5.0"})
        response.raise_for_status()

    data = response.json()
    # 오류 시 KOSIS 는 {"err": ..., "errMsg": ...} 객체를 반환한다
    if not isinstance(data, list):
        logger.warning("KOSIS 응답 오류 [%s]: %s", table_id, data.get("errMsg", data) if isinstance(data, dict) else data)
        return []
    logger.debug("KOSIS %s 응답: %d건", table_id, len(data))
    return data


async def fetch_unsold(region: str) -> Lookup[int]:
    """지역 미분양 주택 수(호)를 조회한다. 키 미설정 시 NotFound."""
    if not settings.kosis_api_key:
        return NotFound("KOSIS_API_KEY 미설정")
    rows = await _fetch_rows(UNSOLD_TABLE_ID, UNSOLD_ITEM_ID, levels=2)
    return parse_unsold_rows(rows, region)


async def fetch_construction(region: str) -> Lookup[int]:
    """지역 최근 3개월 아파트 착공 물량(호)을 조회한다."""
    if not settings.kosis_api_key:
        return NotFound("KOSIS_API_KEY 미설정")
    rows = await _fetch_rows(CONSTRUCTION_TABLE_ID, CONSTRUCTION_ITEM_ID, levels=3)
    return parse_construction_rows(rows, region)
