"""지역 조회 엔드포인트"""

from fastapi import APIRouter, HTTPException, Query

from apt_ranker.errors import FatalInputError, RegionNotFoundError
from apt_ranker.pipeline.regions import household_regions, region_code
from apt_ranker.schemas.household import HouseholdProfile

router = APIRouter()


@router.get("/search")
async def search_region(region: str = Query("", description="지역명 (예: 강남구)")) -> dict:
    """지역명으로 법정동코드를 조회합니다."""
    try:
        lawd_cd = region_code(region)
    except RegionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except FatalInputError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return {"region": region.strip(), "lawd_cd": lawd_cd}


@router.get("/resolve")
async def resolve_workplace(
    workplace: str = Query(..., min_length=1),
    spouse_workplace: str | None = Query(None),
) -> dict:
    """직장 위치로 검색 대상 거주 지역을 계산합니다."""
    profile = HouseholdProfile(budget=1, workplace=workplace, spouse_workplace=spouse_workplace or None)
    return {"regions": household_regions(profile)}
