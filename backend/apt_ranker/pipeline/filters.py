"""예산 / 연식 / 대단지 / 최소 점수 필터

각 필터는 독립적으로 조합 가능하며 입력 순서를 유지한다.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from apt_ranker.schemas.complex import ComplexAggregate
from apt_ranker.schemas.ranking import RankedResult

logger = logging.getLogger(__name__)

LARGE_COMPLEX_MIN_DEALS = 5


def filter_by_budget(
    complexes: Iterable[ComplexAggregate],
    budget: int,
    tolerance: float = 0.1,
) -> list[ComplexAggregate]:
    """평균가가 예산 ±tolerance 안에 드는 단지. 결과가 없으면 '예산 이하'로 완화한다."""
    complexes = list(complexes)
    low, high = budget * (1 - tolerance), budget * (1 + tolerance)

    filtered = [c for c in complexes if low <= c.avg_price <= high]
    if filtered:
        return filtered

    widened = [c for c in complexes if c.avg_price <= budget]
    logger.info(
        "예산 ±%d%% 범위(%s~%s만원) 결과 0건 → 예산 이하로 완화: %d건",
        round(tolerance * 100), f"{low:,.0f}", f"{high:,.0f}", len(widened),
    )
    return widened


def filter_by_build_year(
    complexes: Iterable[ComplexAggregate],
    max_age: int = 20,
    current_year: int | None = None,
) -> list[ComplexAggregate]:
    """건축연도가 (올해 - max_age) 이상인 단지만 남긴다. 건축연도가 숫자가 아니면 제외."""
    min_year = (current_year or date.today().year) - max_age
    result: list[ComplexAggregate] = []
    for c in complexes:
        try:
            year = int(c.build_year)
        except ValueError:
            continue
        if year >= min_year:
            result.append(c)
    return result


def filter_large_complexes(
    complexes: Iterable[ComplexAggregate],
    min_deals: int = LARGE_COMPLEX_MIN_DEALS,
) -> list[ComplexAggregate]:
    """거래 건수를 세대수 대리 지표로 보고 대단지(약 500세대 이상)만 남긴다."""
    return [c for c in complexes if c.transaction_count >= min_deals]


def filter_by_min_score(results: Iterable[RankedResult], min_score: int) -> list[RankedResult]:
    return [r for r in results if r.total_score >= min_score]
