"""추천 단지 분석 엔드포인트"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from apt_ranker.api.deps import get_sources
from apt_ranker.errors import EmptyResultError, FatalInputError, RegionNotFoundError
from apt_ranker.pipeline.sources import DataSources
from apt_ranker.pipeline.workflow import analyze
from apt_ranker.schemas.api import RecommendationRequest
from apt_ranker.schemas.complex import Found
from apt_ranker.schemas.ranking import RankedResult

router = APIRouter()


def lookup_json(value) -> dict:
    if isinstance(value, Found):
        return {"value": value.value, "has_data": True}
    return {"value": None, "has_data": False}


def serialize_result(result: RankedResult, rank: int) -> dict:
    """RankedResult 를 응답용 dict 로 변환한다 (개별 거래 목록 제외)."""
    c = result.complex
    e = result.enrichment
    return {
        "rank": rank,
        "apt_name": c.apt_name,
        "dong": c.dong,
        "jibun": c.jibun,
        "address": c.address,
        "build_year": c.build_year,
        "lawd_code": c.lawd_code,
        "avg_price": c.avg_price,
        "avg_area": c.avg_area,
        "min_price": c.min_price,
        "max_price": c.max_price,
        "transaction_count": c.transaction_count,
        "scores": result.scores.as_dict(),
        "total_score": result.total_score,
        "verdict": {
            "label": result.verdict.label.value,
            "text": result.verdict.text,
            "description": result.verdict.description,
        },
        "narrative": result.narrative,
        "enrichment": {
            "transit_distance": lookup_json(e.transit),
            "unsold": lookup_json(e.unsold),
            "construction": lookup_json(e.construction),
            "commute_minutes": e.commute_minutes,
            "rent_deals": [asdict(r) for r in e.rent_deals],
        },
    }


@router.post("")
async def create_recommendations(
    body: RecommendationRequest,
    sources: DataSources = Depends(get_sources),
) -> dict:
    """예산과 직장 위치로 추천 아파트 Top-N 을 계산합니다."""
    try:
        results = await analyze(body.to_profile(), sources, body.to_options())
    except RegionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except FatalInputError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except EmptyResultError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

    return {
        "count": len(results),
        "results": [serialize_result(r, i) for i, r in enumerate(results, 1)],
    }
