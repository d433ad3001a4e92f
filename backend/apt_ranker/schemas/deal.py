"""실거래 원천 데이터 스키마 (금액 단위: 만원)"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawDeal:
    """아파트 매매 실거래 1건"""

    apt_name: str
    dong: str  # 법정동
    jibun: str
    build_year: str
    deal_amount: int  # 거래금액 (만원)
    area: float  # 전용면적 (㎡)
    floor: int
    deal_year: str
    deal_month: str
    deal_day: str
    lawd_code: str = ""  # 조회에 사용한 법정동코드 5자리

    @property
    def deal_date(self) -> str:
        return f"{self.deal_year}-{self.deal_month.zfill(2)}-{self.deal_day.zfill(2)}"


@dataclass(frozen=True)
class RentDeal:
    """아파트 전월세 실거래 1건"""

    apt_name: str
    dong: str
    deposit: int  # 보증금 (만원)
    monthly_rent: int  # 월세 (만원, 전세일 경우 0)
    area: float
    build_year: str = ""
    contract_year: str = ""
    contract_month: str = ""
    contract_day: str = ""
    contract_type: str = ""  # 계약구분 (신규/갱신)
    lawd_code: str = ""

    @property
    def is_jeonse(self) -> bool:
        return self.monthly_rent == 0
