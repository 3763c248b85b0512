"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum

from core.constants import MONTH_NAMES


class EntryType(str, Enum):
    """재고 거래 유형"""

    ADDED = "ADDED"  # 입고
    RETURNED = "RETURNED"  # 반품 입고
    SOLD = "SOLD"  # 판매
    EXPIRED = "EXPIRED"  # 수동 만료 처리
    DAMAGED = "DAMAGED"  # 파손
    ADJUSTMENT = "ADJUSTMENT"  # 조정 (부호 있는 수량)

    @property
    def is_addition(self) -> bool:
        """수량 부호와 무관하게 입고 계열인지 여부 (ADJUSTMENT 제외)"""
        return self in (EntryType.ADDED, EntryType.RETURNED)


@dataclass(frozen=True)
class StockKey:
    """재고 원장 범위 (불변)

    극장 + 상품 조합. 모든 원장 작업의 직렬화 단위.
    """

    theater_id: str
    product_id: str

    def __str__(self) -> str:
        return f"{self.theater_id}:{self.product_id}"


@dataclass(frozen=True, order=True)
class MonthKey:
    """연/월 (불변, 정렬 가능)

    필드 순서대로 비교되므로 (year, month) 시간순 정렬이 보장됨.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month는 1~12 사이여야 합니다: {self.month}")

    @classmethod
    def of(cls, value) -> "MonthKey":
        """date/datetime에서 생성"""
        return cls(year=value.year, month=value.month)

    @property
    def name(self) -> str:
        """영문 월 이름 (예: January)"""
        return MONTH_NAMES[self.month]

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"
