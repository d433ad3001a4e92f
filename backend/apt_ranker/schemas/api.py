"""HTTP 요청 스키마 (pydantic)"""

from __future__ import annotations

from pydantic import BaseModel, Field

from apt_ranker.schemas.household import AnalysisOptions, HouseholdProfile


class RecommendationRequest(BaseModel):
    budget: int = Field(gt=0, description="예산 (만원)")
    workplace: str = Field(min_length=1, description="직장 위치 ('/'로 복수 입력 가능)")
    spouse_workplace: str | None = Field(default=None, description="배우자 직장 위치 (맞벌이)")
    large_complex_only: bool = Field(default=False, description="대단지만 보기")
    min_score: int | None = Field(default=None, ge=0, le=100, description="최소 총점")
    top_n: int = Field(default=10, ge=1, le=50, description="추천 단지 수")

    def to_profile(self) -> HouseholdProfile:
        return HouseholdProfile(
            budget=self.budget,
            workplace=self.workplace.strip(),
            spouse_workplace=(self.spouse_workplace or "").strip() or None,
        )

    def to_options(self) -> AnalysisOptions:
        return AnalysisOptions(
            large_complex_only=self.large_complex_only,
            min_score=self.min_score,
            top_n=self.top_n,
        )
