from fastapi import APIRouter, Depends, HTTPException, Query

from apt_ranker.api.deps import get_cache
from apt_ranker.tools.cache import TTLCache

router = APIRouter()


@router.get("/stats")
async def cache_stats(cache: TTLCache = Depends(get_cache)) -> dict:
    return cache.stats()


@router.delete("")
async def flush_cache(
    pattern: str | None = Query(None, description="삭제할 키의 glob 패턴 (예: transaction_*)"),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    """캐시를 비웁니다. pattern 이 있으면 일치하는 키만 삭제합니다."""
    if pattern:
        removed = cache.delete_pattern(pattern)
        return {"message": f"캐시 {removed}건이 삭제되었습니다.", "deleted": removed}
    cache.clear()
    return {"message": "캐시가 삭제되었습니다."}


@router.delete("/{key}")
async def delete_cache_key(key: str, cache: TTLCache = Depends(get_cache)) -> dict:
    """캐시 키 1건을 삭제합니다."""
    if not cache.delete(key):
        raise HTTPException(status_code=404, detail=f"캐시 키가 없습니다: {key}")
    return {"message": "캐시가 삭제되었습니다.", "deleted": 1}
