"""8개 항목 투자 점수 계산

모든 함수는 부수효과가 없는 순수 함수이며, 세부 점수는 0~100 정수로 클램프된다.
구간 경계와 가중치는 고정 정책값이다.
"""

from __future__ import annotations

import logging
from datetime import date
from statistics import mean

from apt_ranker.pipeline.geo import nearest_business_district, round_half_up
from apt_ranker.pipeline.tables import (
    DEFAULT_BRAND_SCORE,
    DEFAULT_EDUCATION_SCORE,
    DEFAULT_LOCATION_KEYWORD_SCORE,
    DEFAULT_SCORING_TABLES,
    ScoringTables,
)
from apt_ranker.schemas.complex import ComplexAggregate, EnrichmentBundle, Found, Lookup, NotFound
from apt_ranker.schemas.deal import RentDeal
from apt_ranker.schemas.ranking import ScoreSet

logger = logging.getLogger(__name__)

WEIGHTS: dict[str, float] = {
    "location": 0.30,
    "household": 0.15,
    "supply": 0.15,
    "education": 0.10,
    "market": 0.10,
    "brand": 0.10,
    "age": 0.10,
    "psychology": 0.05,
}

# 역세권 거리(m) 상한 → 가점
TRANSIT_BANDS: tuple[tuple[int, int], ...] = ((300, 15), (500, 12), (800, 8), (1000, 4))
# 착공 물량(호) 미만 → 가감점 (0호는 별도 +25)
CONSTRUCTION_BANDS: tuple[tuple[int, int], ...] = ((1000, 15), (3000, 5), (5000, -10))
# 미분양(호) 미만 → 가감점 (0호는 별도 +50)
UNSOLD_BANDS: tuple[tuple[int, int], ...] = ((500, 30), (1000, 10), (2000, -20))

FALLBACK_NARRATIVE = "안정적인 투자처."
MAX_REASONS = 3


def clamp_score(value: float) -> int:
    return int(round_half_up(max(0.0, min(100.0, value))))


def building_age(build_year: str, current_year: int | None = None) -> int | None:
    """건축연도 문자열 → 연식. 숫자가 아니면 None."""
    try:
        year = int(str(build_year).strip())
    except ValueError:
        return None
    return (current_year or date.today().year) - year


# ---------------------------------------------------------------------------
# 1. 입지
# ---------------------------------------------------------------------------


def _keyword_score(dong: str, tiers: tuple[tuple[int, tuple[str, ...]], ...], default: int) -> int:
    for score, keywords in tiers:
        if any(k in dong for k in keywords):
            return score
    return default


def location_score(
    complex_: ComplexAggregate,
    transit: Lookup[int],
    tables: ScoringTables = DEFAULT_SCORING_TABLES,
) -> int:
    """입지 점수: 기본 50 + 업무지구 근접도(최대 40) + 역세권(최대 15)."""
    score = 50.0
    dong = complex_.dong

    match nearest_business_district(dong, tables):
        case Found(value=proximity):
            score += proximity.score * 0.4
        case NotFound():
            # 좌표 매핑 실패 시 동 이름 휴리스틱 (최대 30)
            score += _keyword_score(dong, tables.location_keywords, DEFAULT_LOCATION_KEYWORD_SCORE)

    match transit:
        case Found(value=meters):
            score += next((bonus for limit, bonus in TRANSIT_BANDS if meters <= limit), 0)
        case NotFound():
            score += 10 if any(k in dong for k in tables.transit_keywords) else 5

    return clamp_score(score)


# ---------------------------------------------------------------------------
# 2. 세대수 / 브랜드 / 학군 / 상품성
# ---------------------------------------------------------------------------


def household_score(transaction_count: int) -> int:
    """거래 건수를 단지 규모의 대리 지표로 사용한다."""
    if transaction_count >= 10:
        return 100
    if transaction_count >= 5:
        return 85
    if transaction_count >= 3:
        return 70
    return 50


def brand_score(apt_name: str, tables: ScoringTables = DEFAULT_SCORING_TABLES) -> int:
    return _keyword_score(apt_name, tables.brand_tiers, DEFAULT_BRAND_SCORE)


def education_score(dong: str, tables: ScoringTables = DEFAULT_SCORING_TABLES) -> int:
    return _keyword_score(dong, tables.education_tiers, DEFAULT_EDUCATION_SCORE)


def age_score(build_year: str, current_year: int | None = None) -> int:
    age = building_age(build_year, current_year)
    if age is None:
        return 60
    if age <= 5:
        return 95
    if age <= 10:
        return 90
    if age <= 15:
        return 80
    if age <= 20:
        return 70
    if age >= 30:
        return 75  # 재건축 기대
    return 60


# ---------------------------------------------------------------------------
# 3. 공급 / 심리
# ---------------------------------------------------------------------------


def supply_score(construction: Lookup[int]) -> int:
    """공급 점수: 최근 3개월 착공 물량이 적을수록 높다. 데이터 없으면 기본 75."""
    score = 75
    match construction:
        case Found(value=volume):
            if volume == 0:
                score += 25
            else:
                score += next((delta for limit, delta in CONSTRUCTION_BANDS if volume < limit), -25)
    return clamp_score(score)


def psychology_score(unsold: Lookup[int]) -> int:
    """시장 심리 점수: 미분양이 적을수록 높다. 데이터 없으면 기본 50."""
    score = 50
    match unsold:
        case Found(value=count):
            if count == 0:
                score += 50
            else:
                score += next((delta for limit, delta in UNSOLD_BANDS if count < limit), -40)
    return clamp_score(score)


# ---------------------------------------------------------------------------
# 4. 시장성 (거래량, 가격대, 전세가율)
# ---------------------------------------------------------------------------


def jeonse_ratio(complex_: ComplexAggregate, rent_deals: tuple[RentDeal, ...] | list[RentDeal]) -> float | None:
    """매칭된 전세 보증금 평균 / 평균 매매가 × 100 (소수점 1자리). 매칭 없으면 None."""
    if not rent_deals or complex_.avg_price <= 0:
        return None
    avg_deposit = mean(r.deposit for r in rent_deals)
    return round_half_up(avg_deposit / complex_.avg_price * 100, 1)


def _price_band_bonus(avg_price: int) -> int:
    if 80000 <= avg_price <= 200000:
        return 10
    if 50000 <= avg_price < 80000:
        return 7
    if 200000 < avg_price <= 300000:
        return 7
    return -5


def _jeonse_band_bonus(ratio: float | None) -> int:
    if ratio is None:
        return 7
    if 70 <= ratio <= 80:
        return 15
    if 65 <= ratio < 70:
        return 11
    if 80 < ratio < 85:
        return 10
    if 60 <= ratio < 65:
        return 8
    if ratio >= 85:
        return 5
    return 3


def market_score(transaction_count: int, avg_price: int, ratio: float | None) -> int:
    """시장성 점수: 기본 45 + 유동성(최대 30) + 가격대 + 전세가율 구간."""
    score = 45 + min(30.0, transaction_count * 1.5)
    score += _price_band_bonus(avg_price)
    score += _jeonse_band_bonus(ratio)
    return clamp_score(score)


# ---------------------------------------------------------------------------
# 5. 종합
# ---------------------------------------------------------------------------


def compute_scores(
    complex_: ComplexAggregate,
    enrichment: EnrichmentBundle,
    tables: ScoringTables = DEFAULT_SCORING_TABLES,
    current_year: int | None = None,
) -> ScoreSet:
    ratio = jeonse_ratio(complex_, enrichment.rent_deals)
    return ScoreSet(
        location=location_score(complex_, enrichment.transit, tables),
        household=household_score(complex_.transaction_count),
        brand=brand_score(complex_.apt_name, tables),
        supply=supply_score(enrichment.construction),
        education=education_score(complex_.dong, tables),
        age=age_score(complex_.build_year, current_year),
        market=market_score(complex_.transaction_count, complex_.avg_price, ratio),
        psychology=psychology_score(enrichment.unsold),
        jeonse_ratio=ratio,
    )


def total_score(scores: ScoreSet) -> int:
    """가중합 총점 (0~100 정수)."""
    weighted = sum(getattr(scores, name) * weight for name, weight in WEIGHTS.items())
    return clamp_score(weighted)


def generate_narrative(
    complex_: ComplexAggregate,
    scores: ScoreSet,
    current_year: int | None = None,
) -> str:
    """점수 구간별 추천 사유를 고정 순서로 평가해 앞의 3개를 문장으로 만든다."""
    reasons: list[str] = []

    if scores.brand >= 95:
        reasons.append("1군 브랜드로 환금성 우수")
    elif scores.brand >= 90:
        reasons.append("프리미엄 브랜드")

    age = building_age(complex_.build_year, current_year)
    if age is not None:
        if age <= 5:
            reasons.append("신축으로 상품성 최상")
        elif age <= 10:
            reasons.append("준신축으로 시설 우수")
        elif age >= 30:
            reasons.append("재건축 잠재력")

    if scores.location >= 85:
        reasons.append("핵심 입지로 직주근접 우수")
    elif scores.location >= 75:
        reasons.append("우수한 입지")
    elif scores.location >= 65:
        reasons.append("양호한 입지")

    if scores.education >= 95:
        reasons.append("최상위 학군(8학군/초품아)")
    elif scores.education >= 85:
        reasons.append("우수 학군")

    ratio = scores.jeonse_ratio
    if ratio is not None:
        if 70 <= ratio <= 80:
            reasons.append(f"전세가율 {ratio:g}%로 매수 적기")
        elif ratio >= 80:
            reasons.append(f"전세가율 {ratio:g}%로 갭투자 주의")

    if complex_.transaction_count >= 15:
        reasons.append("거래 활발로 유동성 우수")

    if scores.supply >= 85:
        reasons.append("미분양 없어 수요 강함")

    if not reasons:
        return FALLBACK_NARRATIVE
    return ", ".join(reasons[:MAX_REASONS]) + "."
