"""정렬 / Top-N / 투자 판정"""

from __future__ import annotations

from typing import Iterable

from apt_ranker.config import settings
from apt_ranker.schemas.ranking import RankedResult, Verdict, VerdictLabel

# (최소 총점, 판정) - 높은 구간부터 검사
VERDICT_BANDS: tuple[tuple[int, Verdict], ...] = (
    (80, Verdict(VerdictLabel.STRONG_RECOMMEND, "강력 추천", "투자 가치 매우 높음")),
    (70, Verdict(VerdictLabel.RECOMMEND, "추천", "투자 가치 있음")),
    (60, Verdict(VerdictLabel.NEUTRAL, "보통", "신중히 검토 필요")),
)
NOT_RECOMMENDED = Verdict(VerdictLabel.NOT_RECOMMENDED, "비추천", "투자 재고 권장")


def verdict(total_score: int) -> Verdict:
    for threshold, v in VERDICT_BANDS:
        if total_score >= threshold:
            return v
    return NOT_RECOMMENDED


def rank(results: Iterable[RankedResult], top_n: int | None = None) -> list[RankedResult]:
    """총점 내림차순 안정 정렬 후 상위 N개. 동점이면 입력 순서를 유지한다."""
    top_n = top_n if top_n is not None else settings.top_n
    ordered = sorted(results, key=lambda r: -r.total_score)
    return ordered[:top_n]
