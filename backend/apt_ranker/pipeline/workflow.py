"""추천 분석 워크플로우

지역 해석 → 실거래 수집 → 단지 집계 → 예산/연식 필터 → 부가 데이터 수집 (병렬)
→ 점수 계산 → 정렬/Top-N
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Iterable

from apt_ranker.config import settings
from apt_ranker.errors import EmptyResultError, FatalInputError
from apt_ranker.pipeline import enrichment, filters, ranking, scoring
from apt_ranker.pipeline.aggregator import collect_region_deals, group_by_complex, trailing_year_months
from apt_ranker.pipeline.regions import household_regions
from apt_ranker.pipeline.sources import DataSources, default_sources
from apt_ranker.pipeline.tables import (
    DEFAULT_REGION_TABLES,
    DEFAULT_SCORING_TABLES,
    RegionTables,
    ScoringTables,
)
from apt_ranker.schemas.complex import ComplexAggregate, EnrichmentBundle
from apt_ranker.schemas.deal import RentDeal
from apt_ranker.schemas.household import AnalysisOptions, HouseholdProfile
from apt_ranker.schemas.ranking import RankedResult

logger = logging.getLogger(__name__)

# 호출자가 단계별 진행 상황을 관찰하기 위한 훅: (단계명, 세부 정보)
StageHook = Callable[[str, dict[str, Any]], None]

# 점수 분포가 이 값보다 적은 고유 총점으로 뭉치면 경고
MIN_DISTINCT_SCORES = 5


def _notify(hook: StageHook | None, stage: str, **detail: Any) -> None:
    if hook is not None:
        hook(stage, detail)


# ---------------------------------------------------------------------------
# 1. 단계별 진입점 (조합/테스트용)
# ---------------------------------------------------------------------------


def score(
    complex_: ComplexAggregate,
    bundle: EnrichmentBundle | None = None,
    tables: ScoringTables = DEFAULT_SCORING_TABLES,
    current_year: int | None = None,
) -> RankedResult:
    """단지 1곳의 세부 점수, 총점, 판정, 추천 사유를 계산한다."""
    bundle = bundle or EnrichmentBundle.neutral()
    scores = scoring.compute_scores(complex_, bundle, tables, current_year)
    total = scoring.total_score(scores)
    return RankedResult(
        complex=complex_,
        scores=scores,
        total_score=total,
        verdict=ranking.verdict(total),
        narrative=scoring.generate_narrative(complex_, scores, current_year),
        enrichment=bundle,
    )


def apply_filters(
    complexes: list[ComplexAggregate],
    budget: int,
    options: AnalysisOptions | None = None,
    current_year: int | None = None,
) -> list[ComplexAggregate]:
    """예산 → 연식 → (선택) 대단지 순서로 필터링한다. 중간 결과가 비면 EmptyResultError."""
    options = options or AnalysisOptions()

    in_budget = filters.filter_by_budget(complexes, budget, options.budget_tolerance)
    logger.info("예산 필터: %d → %d개 단지", len(complexes), len(in_budget))
    if not in_budget:
        raise EmptyResultError("예산 범위 내 아파트를 찾을 수 없습니다. 예산을 조정해보세요.")

    recent = filters.filter_by_build_year(in_budget, options.max_building_age, current_year)
    logger.info("연식 필터(%d년 이내): %d → %d개 단지", options.max_building_age, len(in_budget), len(recent))
    if not recent:
        raise EmptyResultError(
            f"예산 범위 내 {options.max_building_age}년 이내 아파트를 찾을 수 없습니다. "
            "예산이나 지역을 조정해보세요."
        )

    if options.large_complex_only:
        large = filters.filter_large_complexes(recent)
        logger.info("대단지 필터: %d → %d개 단지", len(recent), len(large))
        return large
    return recent


def log_score_distribution(results: list[RankedResult]) -> dict[str, int]:
    """총점 분포(최고/최저/고유 점수 개수)를 기록하고 반환한다."""
    if not results:
        return {"max": 0, "min": 0, "distinct": 0}
    totals = [r.total_score for r in results]
    distribution = {"max": max(totals), "min": min(totals), "distinct": len(set(totals))}
    logger.info(
        "점수 분포: 최고 %d점, 최저 %d점, 고유 점수 %d개",
        distribution["max"], distribution["min"], distribution["distinct"],
    )
    if len(results) >= MIN_DISTINCT_SCORES and distribution["distinct"] < MIN_DISTINCT_SCORES:
        logger.warning("점수 다양성 부족: %d개 단지 중 고유 점수 %d개", len(results), distribution["distinct"])
    return distribution


# ---------------------------------------------------------------------------
# 2. 전체 분석
# ---------------------------------------------------------------------------


async def _enrich_all(
    complexes: list[ComplexAggregate],
    profile: HouseholdProfile,
    rent_deals: Iterable[RentDeal],
    sources: DataSources,
) -> list[EnrichmentBundle]:
    sem = asyncio.Semaphore(settings.max_concurrency)
    rent_deals = list(rent_deals)

    async def enrich_one(c: ComplexAggregate) -> EnrichmentBundle:
        async with sem:
            return await enrichment.collect(c, profile, rent_deals, sources)

    return await asyncio.gather(*[enrich_one(c) for c in complexes])


async def analyze(
    profile: HouseholdProfile,
    sources: DataSources | None = None,
    options: AnalysisOptions | None = None,
    *,
    current_year: int | None = None,
    today: date | None = None,
    scoring_tables: ScoringTables = DEFAULT_SCORING_TABLES,
    region_tables: RegionTables = DEFAULT_REGION_TABLES,
    on_stage: StageHook | None = None,
) -> list[RankedResult]:
    """가구 프로필로 추천 단지 Top-N 을 계산한다.

    Raises:
        FatalInputError: 예산이 0 이하이거나 직장 정보가 없는 경우 (외부 호출 전)
        EmptyResultError: 실거래 0건, 또는 예산/연식 필터 후 단지 0개
    """
    if profile.budget is None or profile.budget <= 0:
        raise FatalInputError("예산은 0보다 커야 합니다.")
    if not profile.workplace or not profile.workplace.strip():
        raise FatalInputError("직장 위치를 입력해주세요.")

    sources = sources or default_sources()
    options = options or AnalysisOptions()
    today = today or date.today()
    current_year = current_year or today.year

    # 1) 검색 지역
    regions = household_regions(profile, region_tables)
    _notify(on_stage, "regions", regions=regions)

    # 2) 최근 N개월 매매/전월세 수집
    deal_ymds = trailing_year_months(today, settings.trailing_months)
    collected = await collect_region_deals(regions, deal_ymds, sources, region_tables)
    _notify(
        on_stage, "collect",
        deals=len(collected.deals), rent_deals=len(collected.rent_deals), failed=collected.failed_fetches,
    )
    if not collected.deals:
        raise EmptyResultError(
            f"검색한 지역({', '.join(regions)})에서 실거래가 데이터를 찾을 수 없습니다."
        )

    # 3) 단지 집계 + 필터
    complexes = group_by_complex(collected.deals)
    logger.info("단지 집계: 거래 %d건 → %d개 단지", len(collected.deals), len(complexes))
    candidates = apply_filters(complexes, profile.budget, options, current_year)
    _notify(on_stage, "filter", complexes=len(complexes), candidates=len(candidates))

    # 4) 부가 데이터 (단지별 병렬, 실패 시 기본값)
    bundles = await _enrich_all(candidates, profile, collected.rent_deals, sources)
    _notify(on_stage, "enrich", complexes=len(bundles))

    # 5) 점수 → 정렬
    scored = [score(c, b, scoring_tables, current_year) for c, b in zip(candidates, bundles)]
    log_score_distribution(scored)

    if options.min_score is not None:
        scored = filters.filter_by_min_score(scored, options.min_score)
    results = ranking.rank(scored, options.top_n)

    for i, r in enumerate(results, 1):
        logger.debug(
            "  %2d. %s (%s) %d점 [%s] %s",
            i, r.complex.apt_name, r.complex.dong, r.total_score, r.verdict.text, r.narrative,
        )
    _notify(on_stage, "rank", results=len(results))
    return results
