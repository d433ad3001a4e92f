from fastapi import Request

from apt_ranker.pipeline.sources import DataSources
from apt_ranker.tools.cache import TTLCache


def get_sources(request: Request) -> DataSources:
    return request.app.state.sources


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache
