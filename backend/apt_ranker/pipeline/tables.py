"""정적 키워드/좌표 테이블

브랜드 등급, 학군 등급, 업무지구 좌표, 지역 매핑 등 프로세스 전역 읽기 전용 상수.
점수 계산/지역 해석 함수에 tables= 인자로 주입된다.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class BusinessDistrict:
    name: str
    coord: Coordinate
    weight: int  # 업무지구 중요도 (0~100)


@dataclass(frozen=True)
class ScoringTables:
    """점수 계산용 정적 테이블"""

    # 브랜드 등급 (점수, 키워드), 앞 등급부터 검사
    brand_tiers: tuple[tuple[int, tuple[str, ...]], ...]
    # 학군 등급 (점수, 동 키워드)
    education_tiers: tuple[tuple[int, tuple[str, ...]], ...]
    # 좌표 매핑 실패 시 입지 휴리스틱 (가점, 동 키워드)
    location_keywords: tuple[tuple[int, tuple[str, ...]], ...]
    # 역세권 추정 키워드 (역 좌표 조회 실패 시)
    transit_keywords: tuple[str, ...]
    business_districts: tuple[BusinessDistrict, ...]
    dong_coordinates: Mapping[str, Coordinate]
    major_stations: Mapping[str, Coordinate]


@dataclass(frozen=True)
class RegionTables:
    """지역 해석용 정적 테이블"""

    workplace_regions: Mapping[str, tuple[str, ...]]
    midpoint_regions: Mapping[str, tuple[str, ...]]
    region_codes: Mapping[str, str]
    default_region: str = "강남구"


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(d)


def _c(lat: float, lng: float) -> Coordinate:
    return Coordinate(lat, lng)


# ---------------------------------------------------------------------------
# 1. 점수 계산 테이블
# ---------------------------------------------------------------------------

BRAND_TIERS: tuple[tuple[int, tuple[str, ...]], ...] = (
    # 1군
    (95, ("래미안", "자이", "힐스테이트", "더샵")),
    # 2군
    (90, ("아이파크", "e편한세상", "푸르지오", "롯데캐슬", "캐슬")),
    # 3군
    (85, ("두산위브", "위브", "디에이치", "SK")),
    # 4군
    (80, ("호반", "포레나", "포스코", "한화", "대림", "금강", "반도", "유보라")),
    # 기타 중견 브랜드
    (75, ("경남", "신동아", "삼성", "벽산", "쌍용", "진흥", "동원", "동남", "우미린", "코오롱")),
)
DEFAULT_BRAND_SCORE = 65

EDUCATION_TIERS: tuple[tuple[int, tuple[str, ...]], ...] = (
    # 최상위 (8학군 등)
    (95, ("대치동", "개포동", "도곡동", "수서동", "압구정동", "청담동")),
    # 우수
    (85, (
        "서초동", "반포동", "잠원동", "목동", "중계동", "노원구",
        "정자동", "서현동", "분당동", "수내동", "판교동", "삼평동",
        "이매동", "야탑동",
        "송파", "잠실", "문정동",
    )),
    # 양호
    (75, ("구미동", "운중동", "백현동", "대장동", "마곡", "상암동", "가락동", "방이동")),
)
DEFAULT_EDUCATION_SCORE = 65

LOCATION_KEYWORDS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (30, ("대치동", "압구정동", "청담동")),
    (28, ("삼성동", "역삼동", "논현동")),
    (27, ("개포동", "도곡동", "세곡동")),
    (26, ("서초동", "반포동", "잠원동")),
    (25, ("판교", "삼평동", "백현동")),
    (24, ("정자동", "서현동", "분당동")),
    (23, ("이매동", "야탑동", "수내동")),
    (24, ("마곡", "발산동", "여의도")),
    (22, ("구미동", "운중동", "금곡동")),
    (21, ("잠실", "송파", "문정동")),
)
DEFAULT_LOCATION_KEYWORD_SCORE = 15

TRANSIT_KEYWORDS: tuple[str, ...] = (
    "역삼", "강남", "삼성", "판교", "정자", "야탑", "서현", "수내", "잠실",
)

BUSINESS_DISTRICTS: tuple[BusinessDistrict, ...] = (
    # 강남권
    BusinessDistrict("강남역", _c(37.4979, 127.0276), 100),
    BusinessDistrict("삼성역", _c(37.5087, 127.0633), 95),
    BusinessDistrict("역삼역", _c(37.5003, 127.0364), 90),
    BusinessDistrict("선릉역", _c(37.5045, 127.0493), 90),
    # 서초권
    BusinessDistrict("서초역", _c(37.4837, 127.0059), 85),
    BusinessDistrict("교대역", _c(37.4934, 127.0143), 85),
    BusinessDistrict("양재역", _c(37.4844, 127.0344), 80),
    # 판교
    BusinessDistrict("판교역", _c(37.3949, 127.1111), 90),
    BusinessDistrict("판교테크노밸리", _c(37.4020, 127.1070), 90),
    # 동탄
    BusinessDistrict("동탄역", _c(37.2015, 127.0700), 70),
    # 여의도
    BusinessDistrict("여의도역", _c(37.5214, 126.9245), 90),
    BusinessDistrict("여의도공원", _c(37.5282, 126.9248), 85),
    # 마곡
    BusinessDistrict("마곡나루역", _c(37.5615, 126.8245), 85),
    BusinessDistrict("LG사이언스파크", _c(37.5650, 126.8130), 85),
    # 송파/잠실
    BusinessDistrict("잠실역", _c(37.5133, 127.1000), 85),
    BusinessDistrict("석촌역", _c(37.5059, 127.1058), 80),
    # 도심
    BusinessDistrict("광화문", _c(37.5720, 126.9769), 75),
    BusinessDistrict("시청역", _c(37.5653, 126.9770), 75),
)

DONG_COORDINATES: dict[str, Coordinate] = {
    # 강남구
    "대치동": _c(37.4947, 127.0626),
    "개포동": _c(37.4787, 127.0466),
    "도곡동": _c(37.4893, 127.0512),
    "역삼동": _c(37.5004, 127.0364),
    "삼성동": _c(37.5087, 127.0633),
    "논현동": _c(37.5107, 127.0275),
    "압구정동": _c(37.5265, 127.0280),
    "청담동": _c(37.5225, 127.0483),
    # 서초구
    "서초동": _c(37.4838, 127.0165),
    "반포동": _c(37.5053, 127.0040),
    "잠원동": _c(37.5144, 127.0120),
    "방배동": _c(37.4790, 126.9937),
    # 송파구
    "잠실동": _c(37.5133, 127.1000),
    "문정동": _c(37.4857, 127.1217),
    "가락동": _c(37.4959, 127.1182),
    # 강동구
    "천호동": _c(37.5387, 127.1238),
    "둔촌동": _c(37.5270, 127.1357),
    # 분당
    "분당동": _c(37.3777, 127.1178),
    "정자동": _c(37.3603, 127.1083),
    "서현동": _c(37.3841, 127.1214),
    "이매동": _c(37.3905, 127.1261),
    "야탑동": _c(37.4112, 127.1280),
    "수내동": _c(37.3835, 127.0964),
    # 판교
    "판교동": _c(37.3949, 127.1111),
    "삼평동": _c(37.4020, 127.1070),
    "백현동": _c(37.3932, 127.1023),
    # 용인
    "수지구": _c(37.3236, 127.0896),
    "기흥구": _c(37.2760, 127.1158),
    "구미동": _c(37.2971, 127.0846),
    "운중동": _c(37.3126, 127.0958),
    # 화성/수원
    "화성시": _c(37.1996, 126.8312),
    "수원시": _c(37.2636, 127.0286),
    # 과천
    "과천시": _c(37.4292, 126.9873),
    "중앙동": _c(37.4331, 126.9885),
    "별양동": _c(37.4280, 126.9790),
    "부림동": _c(37.4370, 126.9930),
    # 안양
    "안양시": _c(37.3943, 126.9568),
    "평촌동": _c(37.3895, 126.9513),
    "범계동": _c(37.3895, 126.9490),
    # 영등포/마포
    "영등포구": _c(37.5264, 126.8962),
    "여의도동": _c(37.5214, 126.9245),
    "마포구": _c(37.5663, 126.9015),
    # 강서
    "강서구": _c(37.5509, 126.8495),
    "마곡동": _c(37.5650, 126.8130),
    # 화성 동탄
    "반송동": _c(37.1970, 127.0755),
    "청계동": _c(37.2015, 127.0700),
    "오산동": _c(37.2070, 127.0850),
    "목동": _c(37.1920, 127.0630),
    "산척동": _c(37.1880, 127.0520),
    "능동": _c(37.1850, 127.0720),
    "장지동": _c(37.1770, 127.0580),
    "영천동": _c(37.2100, 127.0780),
    "기산동": _c(37.1820, 127.0680),
}

MAJOR_STATIONS: dict[str, Coordinate] = {
    "강남역": _c(37.4979, 127.0276),
    "역삼역": _c(37.5003, 127.0364),
    "선릉역": _c(37.5045, 127.0493),
    "삼성역": _c(37.5087, 127.0633),
    "교대역": _c(37.4934, 127.0143),
    "서초역": _c(37.4837, 127.0059),
    "판교역": _c(37.3949, 127.1111),
    "양재역": _c(37.4844, 127.0344),
    "잠실역": _c(37.5133, 127.1000),
    "종로3가역": _c(37.5712, 126.9912),
}


# ---------------------------------------------------------------------------
# 2. 지역 해석 테이블
# ---------------------------------------------------------------------------

WORKPLACE_REGIONS: dict[str, tuple[str, ...]] = {
    # 서울 강남권
    "강남": ("강남구", "서초구", "송파구", "강동구", "분당구", "수지구"),
    "강남구": ("강남구", "서초구", "송파구", "강동구", "분당구"),
    "서초": ("서초구", "강남구", "송파구", "관악구", "동작구", "과천시"),
    "서초구": ("서초구", "강남구", "송파구", "관악구", "과천시"),
    "송파": ("송파구", "강남구", "강동구", "하남시", "분당구"),
    "송파구": ("송파구", "강남구", "강동구", "하남시"),
    # 판교/분당권
    "판교": ("분당구", "수지구", "기흥구", "용인시", "성남시"),
    "분당": ("분당구", "수지구", "용인시", "성남시"),
    "분당구": ("분당구", "수지구", "용인시", "성남시"),
    "성남": ("성남시", "분당구", "수지구", "하남시"),
    # 여의도/영등포권
    "여의도": ("영등포구", "마포구", "양천구", "강서구", "광명시"),
    "영등포": ("영등포구", "마포구", "양천구", "광명시"),
    # 강서/마곡권
    "마곡": ("강서구", "양천구", "김포시", "부천시"),
    "강서": ("강서구", "양천구", "김포시", "부천시"),
    # 수원/화성/동탄권
    "수원": ("수원시", "용인시", "화성시", "오산시"),
    "화성": ("화성시", "수원시", "용인시", "오산시", "평택시"),
    "동탄": ("화성시", "수원시", "용인시", "오산시"),
    "평택": ("평택시", "화성시", "오산시"),
    # 과천/안양권
    "과천": ("과천시", "안양시", "군포시", "의왕시", "서초구"),
    "안양": ("안양시", "과천시", "군포시", "의왕시"),
    # 용인권
    "용인": ("용인시", "수지구", "기흥구", "성남시", "화성시"),
    "수지": ("수지구", "용인시", "분당구"),
    "기흥": ("기흥구", "용인시", "수원시"),
}


def _symmetric(pairs: dict[tuple[str, str], tuple[str, ...]]) -> dict[str, tuple[str, ...]]:
    """("A", "B") 쌍을 "A-B", "B-A" 두 키로 등록한다."""
    table: dict[str, tuple[str, ...]] = {}
    for (a, b), regions in pairs.items():
        table[f"{a}-{b}"] = regions
        table[f"{b}-{a}"] = regions
    return table


MIDPOINT_REGIONS: dict[str, tuple[str, ...]] = _symmetric({
    ("화성", "과천"): ("의왕시", "수원시", "군포시", "안양시"),
    ("화성", "강남"): ("수원시", "용인시", "성남시", "분당구"),
    ("화성", "서초"): ("수원시", "용인시", "성남시", "과천시"),
    ("과천", "강남"): ("서초구", "강남구", "관악구"),
    ("과천", "서초"): ("서초구", "강남구", "관악구"),
    ("판교", "강남"): ("분당구", "성남시", "서초구"),
    ("판교", "서초"): ("분당구", "성남시", "서초구"),
    ("여의도", "강남"): ("영등포구", "동작구", "서초구"),
    ("여의도", "서초"): ("영등포구", "동작구", "서초구"),
    ("마곡", "강남"): ("영등포구", "양천구", "강서구"),
    ("수원", "강남"): ("용인시", "성남시", "분당구"),
    ("수원", "서초"): ("용인시", "성남시", "과천시"),
    ("용인", "강남"): ("성남시", "분당구"),
    ("용인", "서초"): ("성남시", "분당구", "과천시"),
    ("평택", "과천"): ("화성시", "수원시", "의왕시"),
    ("평택", "강남"): ("화성시", "수원시", "용인시"),
})

REGION_CODES: dict[str, str] = {
    # 서울 25개 구
    "강남구": "11680",
    "강동구": "11740",
    "강북구": "11305",
    "강서구": "11500",
    "관악구": "11620",
    "광진구": "11215",
    "구로구": "11530",
    "금천구": "11545",
    "노원구": "11350",
    "도봉구": "11320",
    "동대문구": "11230",
    "동작구": "11590",
    "마포구": "11440",
    "서대문구": "11410",
    "서초구": "11650",
    "성동구": "11200",
    "성북구": "11290",
    "송파구": "11710",
    "양천구": "11470",
    "영등포구": "11560",
    "용산구": "11170",
    "은평구": "11380",
    "종로구": "11110",
    "중구": "11140",
    "중랑구": "11260",
    # 경기도 주요 시
    "수원시": "41110",
    "성남시": "41130",
    "분당구": "41135",
    "수정구": "41131",
    "중원구": "41133",
    "고양시": "41280",
    "용인시": "41460",
    "수지구": "41465",
    "기흥구": "41463",
    "처인구": "41461",
    "부천시": "41190",
    "안산시": "41270",
    "안양시": "41170",
    "만안구": "41171",
    "동안구": "41173",
    "남양주시": "41360",
    "화성시": "41590",
    "평택시": "41220",
    "의정부시": "41150",
    "시흥시": "41390",
    "파주시": "41480",
    "김포시": "41570",
    "광명시": "41210",
    "광주시": "41610",
    "군포시": "41410",
    "오산시": "41370",
    "이천시": "41500",
    "양주시": "41630",
    "안성시": "41550",
    "구리시": "41310",
    "포천시": "41650",
    "의왕시": "41430",
    "하남시": "41450",
    "여주시": "41670",
    "과천시": "41290",
    # 주요 지역/동 별칭
    "판교": "41135",
    "판교동": "41135",
    "삼평동": "41135",
    "백현동": "41135",
    "마곡": "11500",
    "마곡동": "11500",
    "여의도": "11560",
    "목동": "11470",
    "잠실": "11710",
    "강남": "11680",
    "서초": "11650",
    "송파": "11710",
    "화성": "41590",
    "수원": "41110",
    "용인": "41460",
    "과천": "41290",
    "안양": "41170",
    "평택": "41220",
    "군포": "41410",
    "의왕": "41430",
    "하남": "41450",
    "광주": "41610",
}


DEFAULT_SCORING_TABLES = ScoringTables(
    brand_tiers=BRAND_TIERS,
    education_tiers=EDUCATION_TIERS,
    location_keywords=LOCATION_KEYWORDS,
    transit_keywords=TRANSIT_KEYWORDS,
    business_districts=BUSINESS_DISTRICTS,
    dong_coordinates=_frozen(DONG_COORDINATES),
    major_stations=_frozen(MAJOR_STATIONS),
)

DEFAULT_REGION_TABLES = RegionTables(
    workplace_regions=_frozen(WORKPLACE_REGIONS),
    midpoint_regions=_frozen(MIDPOINT_REGIONS),
    region_codes=_frozen(REGION_CODES),
)
