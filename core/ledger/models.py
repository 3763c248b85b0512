"""
재고 원장 도메인 모델

LedgerEntry: 월별 원장 내 단일 거래 기록
MonthlyLedger: (극장, 상품, 연, 월) 단위 원장 문서

entries 배열 순서가 잔액 계산의 기준 (날짜로 재정렬하지 않음).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import uuid4

from core.types import EntryType, MonthKey, StockKey


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    # datetime 문자열도 허용 (앞 10자리 = YYYY-MM-DD)
    return date.fromisoformat(str(value)[:10])


@dataclass
class LedgerEntry:
    """원장 거래 기록

    stock_added / used_stock / expired_stock / damage_stock 은 유형에서 파생되는
    표시용 필드 (모두 0 이상). balance 는 이 기록 반영 후 잔액.
    """

    date: date
    type: EntryType
    quantity: int
    id: str = field(default_factory=lambda: str(uuid4()))
    stock_added: int = 0
    used_stock: int = 0
    expired_stock: int = 0
    damage_stock: int = 0
    balance: int = 0
    expire_date: date | None = None
    batch_number: str | None = None
    notes: str | None = None

    @property
    def remaining(self) -> int:
        """만료 가능한 잔여 수량 (입고분 중 미소진분)"""
        return self.stock_added - self.used_stock - self.expired_stock - self.damage_stock

    @property
    def month_key(self) -> MonthKey:
        """거래가 발생한 월"""
        return MonthKey.of(self.date)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용)"""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "type": self.type.value,
            "quantity": self.quantity,
            "stockAdded": self.stock_added,
            "usedStock": self.used_stock,
            "expiredStock": self.expired_stock,
            "damageStock": self.damage_stock,
            "balance": self.balance,
            "expireDate": self.expire_date.isoformat() if self.expire_date else None,
            "batchNumber": self.batch_number,
            "notes": self.notes,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "LedgerEntry":
        """딕셔너리에서 생성 (역직렬화용)"""
        return LedgerEntry(
            id=data["id"],
            date=_parse_date(data["date"]),
            type=EntryType(data["type"]),
            quantity=int(data["quantity"]),
            stock_added=int(data.get("stockAdded", 0)),
            used_stock=int(data.get("usedStock", 0)),
            expired_stock=int(data.get("expiredStock", 0)),
            damage_stock=int(data.get("damageStock", 0)),
            balance=int(data.get("balance", 0)),
            expire_date=_parse_date(data.get("expireDate")),
            batch_number=data.get("batchNumber"),
            notes=data.get("notes"),
        )


@dataclass
class MonthlyLedger:
    """월별 재고 원장

    carry_forward 는 기초 잔액 (직전 월 기말 잔액).
    expired_carry_forward_stock 은 이전 월 입고분 중 이번 달에 만료된 수량.
    합계 필드는 저장 시마다 entries 에서 재계산됨 (recompute_totals).
    """

    theater_id: str
    product_id: str
    year: int
    month_number: int
    carry_forward: int = 0
    entries: list[LedgerEntry] = field(default_factory=list)
    expired_carry_forward_stock: int = 0
    total_stock_added: int = 0
    total_used_stock: int = 0
    total_expired_stock: int = 0
    total_damage_stock: int = 0

    @classmethod
    def empty(cls, key: StockKey, month: MonthKey, carry_forward: int = 0) -> "MonthlyLedger":
        """빈 월 원장 생성"""
        return cls(
            theater_id=key.theater_id,
            product_id=key.product_id,
            year=month.year,
            month_number=month.month,
            carry_forward=max(0, carry_forward),
        )

    @property
    def stock_key(self) -> StockKey:
        return StockKey(self.theater_id, self.product_id)

    @property
    def month_key(self) -> MonthKey:
        return MonthKey(self.year, self.month_number)

    @property
    def month_name(self) -> str:
        return self.month_key.name

    @property
    def closing_balance(self) -> int:
        """기말 잔액: 마지막 기록의 잔액, 기록이 없으면 carry_forward"""
        if self.entries:
            return self.entries[-1].balance
        return self.carry_forward

    @property
    def opening_for_append(self) -> int:
        """신규 기록 추가 시 기준 잔액"""
        return self.closing_balance

    def find_entry(self, entry_id: str) -> int | None:
        """기록 인덱스 조회 (없으면 None)"""
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return index
        return None

    def recompute_totals(self) -> None:
        """entries 로부터 합계 재계산"""
        self.total_stock_added = sum(e.stock_added for e in self.entries)
        self.total_used_stock = sum(e.used_stock for e in self.entries)
        self.total_expired_stock = sum(e.expired_stock for e in self.entries)
        self.total_damage_stock = sum(e.damage_stock for e in self.entries)

    def statistics(self) -> dict[str, int]:
        """월간 통계 (표시용)"""
        self.recompute_totals()
        return {
            "totalAdded": self.total_stock_added,
            "totalSold": self.total_used_stock,
            "totalExpired": self.total_expired_stock,
            "expiredOldStock": self.expired_carry_forward_stock,
            "totalDamaged": self.total_damage_stock,
            "openingBalance": max(0, self.carry_forward),
            "closingBalance": max(0, self.closing_balance),
        }

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (API 응답용)"""
        return {
            "theaterId": self.theater_id,
            "productId": self.product_id,
            "period": {
                "year": self.year,
                "month": self.month_number,
                "monthName": self.month_name,
            },
            "carryForward": self.carry_forward,
            "expiredCarryForwardStock": self.expired_carry_forward_stock,
            "entries": [e.to_dict() for e in self.entries],
            "statistics": self.statistics(),
            "closingBalance": self.closing_balance,
        }
