"""점수 및 추천 결과 스키마"""

from dataclasses import asdict, dataclass, field
from enum import Enum

from apt_ranker.schemas.complex import ComplexAggregate, EnrichmentBundle


class VerdictLabel(str, Enum):
    STRONG_RECOMMEND = "strong-recommend"  # 강력 추천
    RECOMMEND = "recommend"  # 추천
    NEUTRAL = "neutral"  # 보통
    NOT_RECOMMENDED = "not-recommended"  # 비추천


@dataclass(frozen=True)
class ScoreSet:
    """8개 항목 세부 점수 (각 0~100)"""

    location: int
    household: int
    brand: int
    supply: int
    education: int
    age: int
    market: int
    psychology: int
    jeonse_ratio: float | None = None  # 전세가율 (%)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Verdict:
    label: VerdictLabel
    text: str
    description: str


@dataclass(frozen=True)
class RankedResult:
    """단지별 최종 분석 결과"""

    complex: ComplexAggregate
    scores: ScoreSet
    total_score: int
    verdict: Verdict
    narrative: str
    enrichment: EnrichmentBundle = field(default_factory=EnrichmentBundle)
