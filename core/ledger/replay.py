"""
잔액 재계산 (BalanceReplayer)

기초 잔액 + 순서가 정해진 기록 목록 → 잔액과 표시 필드를 다시 계산한 새 목록.
순수 함수 (I/O 없음, 입력 객체 변경 없음).

재계산 모드:
- STANDARD: 유형의 주 필드만 유형+수량에서 파생, 나머지 소진 필드는 저장값 유지.
  변화량 = stock_added - used_stock - expired_stock - damage_stock.
  기록 추가, 유통기한 스캔, 이월 체인 보정에서 사용.
- REBUILD: 기록 수정 경로. 모든 기록의 used_stock / damage_stock 을 0으로 초기화 후
  유형에서 재파생. 단, 수정 대상 기록은 호출자가 입력한 값을 그대로 사용.
- SIGNED: 기록 삭제 경로. 유형별 부호만 적용 (ADJUSTMENT 는 부호 있는 수량 그대로),
  표시 필드는 건드리지 않음.

clamp=True 이면 매 단계 잔액을 0 이상으로 보정하고, 보정된 값이 다음 단계로 전달됨.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from core.ledger.models import LedgerEntry
from core.types import EntryType


class ReplayMode(str, Enum):
    """재계산 모드"""

    STANDARD = "STANDARD"
    REBUILD = "REBUILD"
    SIGNED = "SIGNED"


@dataclass(frozen=True)
class ManualOverride:
    """수정 대상 기록에 호출자가 직접 입력한 소진 수량"""

    used_stock: int = 0
    damage_stock: int = 0


@dataclass(frozen=True)
class ClampEvent:
    """잔액이 음수가 되어 0으로 보정된 지점"""

    entry_id: str
    unclamped: int


@dataclass
class ReplayResult:
    """재계산 결과"""

    entries: list[LedgerEntry]
    opening_balance: int
    clamps: list[ClampEvent] = field(default_factory=list)

    @property
    def closing_balance(self) -> int:
        if self.entries:
            return self.entries[-1].balance
        return self.opening_balance


def _adds_stock(entry: LedgerEntry) -> bool:
    if entry.type == EntryType.ADJUSTMENT:
        return entry.quantity > 0
    return entry.type.is_addition


def derive_display_fields(entry: LedgerEntry) -> LedgerEntry:
    """유형 + 수량에서 주 표시 필드를 파생한 사본 반환

    ADDED / RETURNED / 양수 ADJUSTMENT → stock_added
    SOLD / 음수(0 포함) ADJUSTMENT → used_stock
    EXPIRED → expired_stock, DAMAGED → damage_stock
    """
    qty = abs(entry.quantity)

    if _adds_stock(entry):
        return replace(entry, stock_added=qty)

    # 소진 계열은 자기 필드만 남기고 나머지 소진 필드는 0
    if entry.type == EntryType.EXPIRED:
        return replace(entry, stock_added=0, used_stock=0, expired_stock=qty, damage_stock=0)
    if entry.type == EntryType.DAMAGED:
        return replace(entry, stock_added=0, used_stock=0, expired_stock=0, damage_stock=qty)

    # SOLD, ADJUSTMENT(<=0)
    return replace(entry, stock_added=0, used_stock=qty, expired_stock=0, damage_stock=0)


def field_delta(entry: LedgerEntry) -> int:
    """표시 필드 기준 잔액 변화량"""
    return entry.stock_added - entry.used_stock - entry.expired_stock - entry.damage_stock


def signed_delta(entry: LedgerEntry) -> int:
    """유형 + 부호 기준 잔액 변화량 (삭제 경로 규칙)"""
    if entry.type == EntryType.ADJUSTMENT:
        return entry.quantity
    if entry.type.is_addition:
        return abs(entry.quantity)
    return -abs(entry.quantity)


def apply_entry(opening: int, entry: LedgerEntry) -> tuple[LedgerEntry, ClampEvent | None]:
    """단일 기록 반영 (기록 추가 경로)

    Args:
        opening: 직전 잔액
        entry: 반영할 기록 (호출자가 입력한 used/damage 포함 가능)

    Returns:
        (잔액이 채워진 기록 사본, 보정 발생 시 ClampEvent)
    """
    # 수동 소진 수량은 입고 계열 기록에만 허용
    if _adds_stock(entry):
        entry = replace(entry, expired_stock=0)
    else:
        entry = replace(entry, used_stock=0, expired_stock=0, damage_stock=0)

    derived = derive_display_fields(entry)
    unclamped = opening + field_delta(derived)
    clamp = ClampEvent(derived.id, unclamped) if unclamped < 0 else None
    return replace(derived, balance=max(0, unclamped)), clamp


def replay_balances(
    opening: int,
    entries: list[LedgerEntry],
    mode: ReplayMode = ReplayMode.STANDARD,
    clamp: bool | None = None,
    overrides: dict[str, ManualOverride] | None = None,
) -> ReplayResult:
    """잔액 재계산

    Args:
        opening: 기초 잔액
        entries: 저장 순서 그대로의 기록 목록
        mode: 재계산 모드
        clamp: 단계별 0 이상 보정 여부 (None 이면 SIGNED 는 False, 나머지는 True)
        overrides: REBUILD 모드에서 기록 ID별 수동 입력값

    Returns:
        ReplayResult (새 기록 목록, 보정 지점)
    """
    if clamp is None:
        clamp = mode != ReplayMode.SIGNED
    overrides = overrides or {}

    running = opening
    result: list[LedgerEntry] = []
    clamps: list[ClampEvent] = []

    for entry in entries:
        if mode == ReplayMode.SIGNED:
            current = entry
            running += signed_delta(entry)
        else:
            if mode == ReplayMode.REBUILD:
                override = overrides.get(entry.id)
                if override is not None:
                    # 수정 대상: 이전 유형의 표시 필드를 모두 비우고 재파생
                    entry = replace(
                        entry, stock_added=0, used_stock=0, expired_stock=0, damage_stock=0
                    )
                    if _adds_stock(entry):
                        entry = replace(
                            entry,
                            used_stock=override.used_stock,
                            damage_stock=override.damage_stock,
                        )
                else:
                    entry = replace(entry, used_stock=0, damage_stock=0)
            current = derive_display_fields(entry)
            running += field_delta(current)

        if clamp and running < 0:
            clamps.append(ClampEvent(current.id, running))
            running = 0

        result.append(replace(current, balance=running))

    return ReplayResult(entries=result, opening_balance=opening, clamps=clamps)
