import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apt_ranker.api.router import api_router
from apt_ranker.config import settings
from apt_ranker.pipeline.sources import default_sources, with_cache
from apt_ranker.tools.cache import TTLCache

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    """애플리케이션 로깅을 설정한다."""
    log_format = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
    date_format = "%H:%M:%S"
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stderr,
        force=True,
    )

    # 외부 라이브러리 로그는 WARNING 이상만, 앱 로그만 상세 출력
    logging.getLogger().setLevel(logging.WARNING)
    logging.getLogger("apt_ranker").setLevel(level)
    logging.getLogger("httpx").setLevel(logging.WARNING)


_setup_logging()


async def _sweep_cache(cache: TTLCache, interval: float) -> None:
    """만료된 캐시 항목을 주기적으로 제거한다."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            logger.debug("캐시 정리: %d건 만료", removed)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: 캐시 + 외부 소스 구성
    cache = TTLCache(settings.cache_ttl)
    app.state.cache = cache
    app.state.sources = with_cache(default_sources(), cache, settings.cache_ttl)
    sweeper = asyncio.create_task(_sweep_cache(cache, settings.cache_sweep_interval))
    yield
    # Shutdown
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(
    title="아파트 투자 추천",
    description="예산과 직장 위치를 기반으로 실거래가를 분석하여 투자 가치가 높은 아파트 Top 10을 추천합니다.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


def run() -> None:
    """개발 서버 실행 (apt-ranker 콘솔 스크립트)."""
    import uvicorn

    uvicorn.run("apt_ranker.main:app", host=settings.host, port=settings.port, reload=settings.debug)
