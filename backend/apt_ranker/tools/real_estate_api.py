"""국토교통부 아파트 실거래가 API 클라이언트 (매매 / 전월세)"""

from __future__ import annotations

import logging
import re
from urllib.parse import quote, unquote, urlencode
import xml.etree.ElementTree as ET

import httpx

from apt_ranker.config import settings
from apt_ranker.errors import FatalInputError, SourceError
from apt_ranker.schemas.deal import RawDeal, RentDeal

logger = logging.getLogger(__name__)

MOLIT_BASE_URL = "https://apis.data.go.kr/1613000"

# 거래유형별 API 경로 (공공데이터포털 신규 엔드포인트)
API_ENDPOINTS: dict[str, str] = {
    "아파트매매": "/RTMSDataSvcAptTrade/getRTMSDataSvcAptTrade",
    "아파트전월세": "/RTMSDataSvcAptRent/getRTMSDataSvcAptRent",
}

# 정상 응답 코드 (신규 API "000", 구 API "00")
SUCCESS_CODES = frozenset({"00", "000"})

LAWD_CODE_PATTERN = re.compile(r"^\d{5}$")
DEAL_YMD_PATTERN = re.compile(r"^\d{4}(0[1-9]|1[0-2])$")


# ---------------------------------------------------------------------------
# 1. 입력 검증
# ---------------------------------------------------------------------------


def validate_lawd_code(lawd_cd: str) -> str:
    if not lawd_cd or not LAWD_CODE_PATTERN.match(lawd_cd):
        raise FatalInputError(f"법정동코드(LAWD_CD)는 5자리 숫자여야 합니다: {lawd_cd!r}")
    return lawd_cd


def validate_deal_ymd(deal_ymd: str) -> str:
    if not deal_ymd or not DEAL_YMD_PATTERN.match(deal_ymd):
        raise FatalInputError(f"계약년월(DEAL_YMD)은 YYYYMM 형식이어야 합니다: {deal_ymd!r}")
    return deal_ymd


# ---------------------------------------------------------------------------
# 2. XML 파싱
# ---------------------------------------------------------------------------


def _parse_amount(text: str | None) -> int:
    """만원 단위 금액 문자열("12,500")을 정수로 변환한다."""
    raw = (text or "0").strip().replace(",", "")
    try:
        return int(raw)
    except ValueError:
        return 0


def _parse_float(text: str | None) -> float:
    raw = (text or "0").strip()
    try:
        return float(raw)
    except ValueError:
        return 0.0


def _parse_floor(text: str | None) -> int:
    raw = (text or "0").strip()
    try:
        return int(raw)
    except ValueError:
        return 0


def _text(item: ET.Element, *tag_names: str) -> str:
    """여러 태그명 중 첫 번째로 값이 있는 것을 반환한다 (한글/영어 호환)."""
    for tag in tag_names:
        val = (item.findtext(tag) or "").strip()
        if val:
            return val
    return ""


def _items(xml_text: str) -> list[ET.Element]:
    """응답 헤더의 resultCode 를 확인하고 item 목록을 반환한다."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise SourceError(f"MOLIT 응답 XML 파싱 실패: {exc}") from exc

    result_code = (root.findtext(".//resultCode") or "").strip()
    if result_code and result_code not in SUCCESS_CODES:
        result_msg = (root.findtext(".//resultMsg") or "").strip()
        raise SourceError(f"MOLIT API 오류 [{result_code}]: {result_msg}")
    return root.findall(".//item")


def parse_trade_xml(xml_text: str, lawd_code: str = "") -> list[RawDeal]:
    """매매 실거래 XML 응답을 RawDeal 리스트로 변환한다. 단지명 없는 항목은 건너뛴다."""
    deals: list[RawDeal] = []
    for item in _items(xml_text):
        apt_name = _text(item, "aptNm", "아파트")
        if not apt_name:
            continue
        deals.append(
            RawDeal(
                apt_name=apt_name,
                dong=_text(item, "umdNm", "법정동"),
                jibun=_text(item, "jibun", "지번"),
                build_year=_text(item, "buildYear", "건축년도"),
                deal_amount=_parse_amount(_text(item, "dealAmount", "거래금액")),
                area=_parse_float(_text(item, "excluUseAr", "전용면적")),
                floor=_parse_floor(_text(item, "floor", "층")),
                deal_year=_text(item, "dealYear", "년"),
                deal_month=_text(item, "dealMonth", "월"),
                deal_day=_text(item, "dealDay", "일"),
                lawd_code=lawd_code,
            )
        )
    return deals


def parse_rent_xml(xml_text: str, lawd_code: str = "") -> list[RentDeal]:
    """전월세 실거래 XML 응답을 RentDeal 리스트로 변환한다."""
    deals: list[RentDeal] = []
    for item in _items(xml_text):
        apt_name = _text(item, "aptNm", "아파트", "단지명")
        if not apt_name:
            continue
        deals.append(
            RentDeal(
                apt_name=apt_name,
                dong=_text(item, "umdNm", "법정동"),
                deposit=_parse_amount(_text(item, "deposit", "보증금액")),
                monthly_rent=_parse_amount(_text(item, "monthlyRent", "월세금액")),
                area=_parse_float(_text(item, "excluUseAr", "전용면적")),
                build_year=_text(item, "buildYear", "건축년도"),
                contract_year=_text(item, "dealYear", "계약년도", "년"),
                contract_month=_text(item, "dealMonth", "계약월", "월"),
                contract_day=_text(item, "dealDay", "계약일", "일"),
                contract_type=_text(item, "contractType", "계약구분"),
                lawd_code=lawd_code,
            )
        )
    return deals


# ---------------------------------------------------------------------------
# 3. API 호출
# ---------------------------------------------------------------------------


async def _request(endpoint_key: str, lawd_cd: str, deal_ymd: str) -> str:
    validate_lawd_code(lawd_cd)
    validate_deal_ymd(deal_ymd)
    if not settings.molit_api_key:
        raise SourceError("MOLIT_API_KEY가 설정되지 않았습니다.")

    # serviceKey의 +, /, = 등 특수문자를 percent-encoding 처리
    raw_key = unquote(settings.molit_api_key)
    encoded_key = quote(raw_key, safe="")
    other_params = urlencode({
        "LAWD_CD": lawd_cd,
        "DEAL_YMD": deal_ymd,
        "pageNo": 1,
        "numOfRows": 1000,
    })
    url = f"{MOLIT_BASE_URL}{API_ENDPOINTS[endpoint_key]}?serviceKey={encoded_key}&{other_params}"

    async with httpx.AsyncClient(timeout=settings.api_timeout) as client:
        response = await client.get(url)
        response.raise_for_status()
    return response.text


async def fetch_deals(lawd_cd: str, deal_ymd: str) -> list[RawDeal]:
    """아파트 매매 실거래가를 조회한다.

    Args:
        lawd_cd: 법정동코드 5자리
        deal_ymd: 계약년월 (YYYYMM)
    """
    xml_text = await _request("아파트매매", lawd_cd, deal_ymd)
    deals = parse_trade_xml(xml_text, lawd_code=lawd_cd)
    logger.debug("  MOLIT 매매 [%s %s]: %d건", lawd_cd, deal_ymd, len(deals))
    return deals


async def fetch_rent_deals(lawd_cd: str, deal_ymd: str) -> list[RentDeal]:
    """아파트 전월세 실거래가를 조회한다."""
    xml_text = await _request("아파트전월세", lawd_cd, deal_ymd)
    deals = parse_rent_xml(xml_text, lawd_code=lawd_cd)
    logger.debug("  MOLIT 전월세 [%s %s]: %d건", lawd_cd, deal_ymd, len(deals))
    return deals
