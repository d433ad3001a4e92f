"""분석 파이프라인 예외 정의

FatalInputError / EmptyResultError 만 분석 경계를 넘어 호출자에게 전달된다.
SourceError 는 수집 단계에서 흡수되어 빈 결과로 대체된다.
"""

from __future__ import annotations


class AnalysisError(Exception):
    """분석 파이프라인 예외의 공통 부모."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FatalInputError(AnalysisError):
    """필수 입력값 누락 또는 형식 오류 (외부 호출 전에 거부)."""


class RegionNotFoundError(FatalInputError):
    """법정동코드 테이블에 없는 지역명."""

    def __init__(self, region: str) -> None:
        super().__init__(f"'{region}'에 대한 법정동코드가 등록되지 않았습니다.")
        self.region = region


class EmptyResultError(AnalysisError):
    """조회/필터 결과가 비어 검색 조건 완화가 필요한 경우."""


class SourceError(Exception):
    """외부 데이터 소스의 오류 응답 또는 파싱 실패."""
