"""좌표/거리 유틸리티"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from apt_ranker.pipeline.tables import DEFAULT_SCORING_TABLES, Coordinate, ScoringTables
from apt_ranker.schemas.complex import Found, Lookup, NotFound

EARTH_RADIUS_M = 6_371_000

# 업무지구까지 거리(km) 상한 → 가중치 배율. 마지막 구간 초과 시 FAR_FACTOR.
DISTANCE_BANDS: tuple[tuple[float, float], ...] = (
    (2, 1.0),
    (5, 0.9),
    (10, 0.8),
    (15, 0.7),
    (20, 0.6),
    (30, 0.5),
)
FAR_FACTOR = 0.3


@dataclass(frozen=True)
class NearestLandmark:
    name: str
    distance_m: float


@dataclass(frozen=True)
class DistrictProximity:
    """최근접 업무지구와 거리 기반 점수"""

    district: str
    distance_km: float
    score: int


def round_half_up(value: float, digits: int = 0) -> float:
    """0.5를 항상 올림하는 반올림 (내장 round 의 banker's rounding 대신 사용)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine 공식으로 두 좌표 간 거리(m)를 계산한다."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def nearest_landmark(
    point: Coordinate,
    landmarks: Iterable[tuple[str, Coordinate]],
) -> NearestLandmark | None:
    """좌표 테이블을 순회하여 가장 가까운 지점을 찾는다. 동일 거리면 먼저 나온 항목."""
    best: NearestLandmark | None = None
    for name, coord in landmarks:
        d = distance(point.lat, point.lng, coord.lat, coord.lng)
        if best is None or d < best.distance_m:
            best = NearestLandmark(name=name, distance_m=d)
    return best


def dong_coordinates(dong: str, tables: ScoringTables = DEFAULT_SCORING_TABLES) -> Coordinate | None:
    """동 이름을 대략적인 중심 좌표로 변환한다 (정확 매칭 → 양방향 부분 매칭)."""
    if not dong:
        return None
    coords = tables.dong_coordinates
    if dong in coords:
        return coords[dong]
    for key, coord in coords.items():
        if key in dong or dong in key:
            return coord
    return None


def proximity_factor(distance_km: float) -> float:
    for limit, factor in DISTANCE_BANDS:
        if distance_km <= limit:
            return factor
    return FAR_FACTOR


def nearest_business_district(
    dong: str,
    tables: ScoringTables = DEFAULT_SCORING_TABLES,
) -> Lookup[DistrictProximity]:
    """단지 동에서 가장 가까운 주요 업무지구와 근접도 점수를 구한다."""
    coord = dong_coordinates(dong, tables)
    if coord is None:
        return NotFound(f"좌표 미등록 동: {dong}")

    weights = {d.name: d.weight for d in tables.business_districts}
    nearest = nearest_landmark(coord, ((d.name, d.coord) for d in tables.business_districts))
    if nearest is None:
        return NotFound("업무지구 테이블 비어 있음")

    distance_km = nearest.distance_m / 1000
    score = weights[nearest.name] * proximity_factor(distance_km)
    return Found(
        DistrictProximity(
            district=nearest.name,
            distance_km=distance_km,
            score=int(round_half_up(score)),
        )
    )
