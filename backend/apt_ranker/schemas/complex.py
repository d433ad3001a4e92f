"""단지 집계 및 부가 데이터 스키마"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

from apt_ranker.schemas.deal import RawDeal, RentDeal

T = TypeVar("T")

# 법정동코드 앞 2자리 → 광역 지역명 (KOSIS 지역 필터용)
PROVINCE_BY_CODE_PREFIX: dict[str, str] = {
    "11": "서울",
    "26": "부산",
    "27": "대구",
    "28": "인천",
    "29": "광주",
    "30": "대전",
    "31": "울산",
    "36": "세종",
    "41": "경기",
    "43": "충북",
    "44": "충남",
    "46": "전남",
    "47": "경북",
    "48": "경남",
    "50": "제주",
    "51": "강원",
    "52": "전북",
}
DEFAULT_PROVINCE = "서울"


@dataclass(frozen=True)
class Found(Generic[T]):
    """외부 조회 성공 값"""

    value: T


@dataclass(frozen=True)
class NotFound:
    """외부 조회 실패 또는 데이터 없음"""

    reason: str = ""


Lookup = Union[Found[T], NotFound]


@dataclass(frozen=True)
class ComplexAggregate:
    """분석 기간 내 아파트 단지 1곳의 집계 결과

    거래가 1건 이상 있을 때만 생성된다 (aggregator.group_by_complex 참고).
    """

    apt_name: str
    dong: str
    jibun: str
    build_year: str
    deals: tuple[RawDeal, ...]
    avg_price: int  # 만원
    avg_area: float  # ㎡, 소수점 1자리
    min_price: int
    max_price: int
    transaction_count: int
    lawd_code: str = ""

    @property
    def province(self) -> str:
        return PROVINCE_BY_CODE_PREFIX.get(self.lawd_code[:2], DEFAULT_PROVINCE)

    @property
    def address(self) -> str:
        return " ".join(p for p in (self.province, self.dong, self.jibun) if p)


@dataclass(frozen=True)
class EnrichmentBundle:
    """단지별 부가 데이터 (역세권, 미분양, 착공실적, 출퇴근, 전세 거래)"""

    transit: Lookup[int] = field(default_factory=lambda: NotFound("미조회"))  # 최근접 역 거리 (m)
    unsold: Lookup[int] = field(default_factory=lambda: NotFound("미조회"))  # 지역 미분양 (호)
    construction: Lookup[int] = field(default_factory=lambda: NotFound("미조회"))  # 최근 3개월 착공 (호)
    commute_minutes: int = 60
    rent_deals: tuple[RentDeal, ...] = ()

    @classmethod
    def neutral(cls) -> EnrichmentBundle:
        return cls()
