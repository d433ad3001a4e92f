"""Naver Cloud Maps 지오코딩 클라이언트 - 역세권 / 출퇴근 시간 추정"""

from __future__ import annotations

import logging
import time

import httpx

from apt_ranker.config import settings
from apt_ranker.pipeline.geo import distance, nearest_landmark, round_half_up
from apt_ranker.pipeline.tables import DEFAULT_SCORING_TABLES, Coordinate, ScoringTables
from apt_ranker.schemas.complex import Found, Lookup, NotFound

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://naveropenapi.apigw.ntruss.com/map-geocode/v2/geocode"

# 인증 실패(401/403) 후 재시도까지 대기 시간 (초)
RETRY_AFTER_SECONDS = 300
# 직선거리 기반 출퇴근 추정 평균 속도 (km/h)
COMMUTE_SPEED_KMH = 30
DEFAULT_COMMUTE_MINUTES = 60


class _Availability:
    """인증 실패 시 일정 시간 동안 호출을 건너뛰기 위한 프로세스 전역 상태"""

    def __init__(self) -> None:
        self.available = True
        self.disabled_at = 0.0

    def should_skip(self) -> bool:
        if self.available:
            return False
        return time.monotonic() - self.disabled_at < RETRY_AFTER_SECONDS

    def disable(self) -> None:
        if self.available:
            logger.info("[Fallback] 네이버 Maps API 미활성화 - fallback 모드로 전환")
        self.available = False
        self.disabled_at = time.monotonic()

    def enable(self) -> None:
        if not self.available:
            logger.info("[네이버 API] 서비스 활성화 확인")
        self.available = True

    def reset(self) -> None:
        self.available = True
        self.disabled_at = 0.0


availability = _Availability()


async def geocode(address: str) -> Coordinate | None:
    """주소를 좌표로 변환한다. 키 미설정, 인증 실패, 검색 결과 없음이면 None."""
    if not settings.naver_client_id or not settings.naver_client_secret:
        return None
    if availability.should_skip():
        return None

    headers = {
        "X-NCP-APIGW-API-KEY-ID": settings.naver_client_id,
        "X-NCP-APIGW-API-KEY": settings.naver_client_secret,
    }
    try:
        async with httpx.AsyncClient(timeout=settings.api_timeout) as client:
            response = await client.get(GEOCODE_URL, headers=headers, params={"query": address})
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in (401, 403):
            availability.disable()
            return None
        raise

    addresses = response.json().get("addresses") or []
    if not addresses:
        logger.debug("지오코딩 결과 없음: %s", address)
        return None

    availability.enable()
    first = addresses[0]
    return Coordinate(lat=float(first["y"]), lng=float(first["x"]))


async def fetch_nearest_transit(
    address: str,
    tables: ScoringTables = DEFAULT_SCORING_TABLES,
) -> Lookup[int]:
    """주소에서 가장 가까운 주요 지하철역까지 거리(m)를 구한다."""
    location = await geocode(address)
    if location is None:
        return NotFound(f"지오코딩 실패: {address}")

    nearest = nearest_landmark(location, tables.major_stations.items())
    if nearest is None:
        return NotFound("역 좌표 테이블 비어 있음")
    logger.debug("최근접 역: %s → %s (%.0fm)", address, nearest.name, nearest.distance_m)
    return Found(int(round_half_up(nearest.distance_m)))


async def fetch_commute_minutes(home_address: str, workplace_address: str) -> int:
    """두 주소의 직선거리를 평균 30km/h 로 나누어 출퇴근 시간(분)을 추정한다."""
    home = await geocode(home_address)
    work = await geocode(workplace_address)
    if home is None or work is None:
        return DEFAULT_COMMUTE_MINUTES

    km = distance(home.lat, home.lng, work.lat, work.lng) / 1000
    return int(round_half_up(km / COMMUTE_SPEED_KMH * 60))
