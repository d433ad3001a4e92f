"""직장 위치 → 추천 거주 지역 해석"""

from __future__ import annotations

import logging
from typing import Callable

from apt_ranker.errors import FatalInputError, RegionNotFoundError
from apt_ranker.pipeline.tables import DEFAULT_REGION_TABLES, RegionTables
from apt_ranker.schemas.household import HouseholdProfile

logger = logging.getLogger(__name__)

WORKPLACE_DELIMITER = "/"

# 지역 해석 전략: (segment, tables) → 지역 목록 또는 None (다음 전략으로)
Strategy = Callable[[str, RegionTables], "tuple[str, ...] | None"]


# ---------------------------------------------------------------------------
# 1. 단일 직장 → 지역 매칭 전략
# ---------------------------------------------------------------------------


def _exact_match(segment: str, tables: RegionTables) -> tuple[str, ...] | None:
    return tables.workplace_regions.get(segment)


def _substring_match(segment: str, tables: RegionTables) -> tuple[str, ...] | None:
    for key, regions in tables.workplace_regions.items():
        if key in segment or segment in key:
            return regions
    return None


def _literal_fallback(segment: str, tables: RegionTables) -> tuple[str, ...] | None:
    return (segment,)


REGION_STRATEGIES: tuple[Strategy, ...] = (_exact_match, _substring_match, _literal_fallback)


def _first_match(
    segment: str,
    tables: RegionTables,
    strategies: tuple[Strategy, ...],
) -> tuple[str, ...]:
    for strategy in strategies:
        regions = strategy(segment, tables)
        if regions:
            return regions
    return ()


def resolve_regions(
    workplace_text: str,
    tables: RegionTables = DEFAULT_REGION_TABLES,
    strategies: tuple[Strategy, ...] = REGION_STRATEGIES,
) -> list[str]:
    """직장 위치 문자열을 추천 거주 지역 목록으로 변환한다.

    "화성/과천" 처럼 '/'로 구분된 복수 직장을 지원하며, 각 직장에 대해
    정확 매칭 → 부분 매칭 → 입력값 그대로 순서로 시도한다.
    결과는 중복 제거되며 처음 등장한 순서를 유지한다.
    """
    if not workplace_text or not workplace_text.strip():
        return [tables.default_region]

    resolved: dict[str, None] = {}
    for segment in workplace_text.split(WORKPLACE_DELIMITER):
        segment = segment.strip()
        if not segment:
            continue
        for region in _first_match(segment, tables, strategies):
            resolved.setdefault(region, None)
    return list(resolved) or [tables.default_region]


# ---------------------------------------------------------------------------
# 2. 맞벌이 중간 지점
# ---------------------------------------------------------------------------


def resolve_midpoint_regions(
    workplace_a: str,
    workplace_b: str,
    tables: RegionTables = DEFAULT_REGION_TABLES,
) -> list[str]:
    """두 직장의 중간 지점 지역을 조회한다. 매칭 실패 시 빈 리스트."""
    a, b = workplace_a.strip(), workplace_b.strip()
    table = tables.midpoint_regions

    for key in (f"{a}-{b}", f"{b}-{a}"):
        if key in table:
            return list(table[key])

    for key, regions in table.items():
        w1, w2 = key.split("-", 1)
        if (w1 in a and w2 in b) or (w2 in a and w1 in b):
            return list(regions)
    return []


def household_regions(
    profile: HouseholdProfile,
    tables: RegionTables = DEFAULT_REGION_TABLES,
) -> list[str]:
    """가구 프로필의 검색 지역: 본인 직장 → 배우자 직장 → 중간 지점 순."""
    regions: dict[str, None] = dict.fromkeys(resolve_regions(profile.workplace, tables))
    logger.info("직장: %s → 추천 지역: %s", profile.workplace, ", ".join(regions))

    if profile.spouse_workplace:
        spouse = resolve_regions(profile.spouse_workplace, tables)
        logger.info("배우자 직장: %s → 추천 지역: %s", profile.spouse_workplace, ", ".join(spouse))
        regions.update(dict.fromkeys(spouse))

        middle = resolve_midpoint_regions(profile.workplace, profile.spouse_workplace, tables)
        if middle:
            logger.info("중간 지점 지역: %s", ", ".join(middle))
        regions.update(dict.fromkeys(middle))

    return list(regions)


# ---------------------------------------------------------------------------
# 3. 지역명 → 법정동코드
# ---------------------------------------------------------------------------


def region_code(region: str, tables: RegionTables = DEFAULT_REGION_TABLES) -> str:
    """지역명을 법정동코드 5자리로 변환한다. 미등록 지역은 RegionNotFoundError."""
    name = (region or "").strip()
    if not name:
        raise FatalInputError("region(지역명)은 필수입니다.")
    code = tables.region_codes.get(name)
    if code is None:
        raise RegionNotFoundError(name)
    return code


