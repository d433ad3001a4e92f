"""사용자(가구) 입력 스키마"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HouseholdProfile:
    """예산(만원)과 직장 위치. 맞벌이면 배우자 직장도 입력한다."""

    budget: int
    workplace: str
    spouse_workplace: str | None = None


@dataclass(frozen=True)
class AnalysisOptions:
    """선택 필터 및 랭킹 옵션"""

    large_complex_only: bool = False
    min_score: int | None = None
    top_n: int = 10
    budget_tolerance: float = 0.1
    max_building_age: int = 20
