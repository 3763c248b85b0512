"""
유통기한 스캐너 (ExpiryScanner)

한 (극장, 상품)의 모든 월 원장을 훑어 만료 시점이 지난 입고분의 잔여 수량을
만료 처리한다.

- 입고 월 == 만료 월: 해당 기록의 expired_stock 에 직접 가산 → 그 달 잔액 재계산
- 입고 월 != 만료 월: 만료 월 원장의 expired_carry_forward_stock 에 기록
  (입고 기록은 변경하지 않음)

expired_carry_forward_stock 은 매 스캔마다 전체 재집계 값으로 덮어씀 (누적 아님).
입고 기록이 변경되지 않으므로 재스캔 시 같은 값이 다시 계산되어 중복 집계되지 않음.
"""

import copy
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from core.constants import ExpiryRules
from core.ledger.models import MonthlyLedger
from core.ledger.replay import ClampEvent, ReplayMode, replay_balances
from core.types import MonthKey

logger = logging.getLogger(__name__)


def expiry_threshold(expire_date: date) -> datetime:
    """만료 적용 시각 (만료일 다음날 00:01, 원장 현지 시각)"""
    next_day = expire_date + timedelta(days=ExpiryRules.GRACE_DAYS)
    return datetime.combine(
        next_day,
        time(ExpiryRules.ACTIVATION_HOUR, ExpiryRules.ACTIVATION_MINUTE),
    )


def is_expired(expire_date: date, now: datetime) -> bool:
    """now 시점에 만료 처리 대상인지 여부"""
    return now >= expiry_threshold(expire_date)


@dataclass
class ExpiryScanResult:
    """스캔 결과

    ledgers: 갱신된 원장 목록 (입력 순서 유지, 사본)
    replayed: 같은 달 만료로 잔액을 재계산한 월
    carry_forward_updated: expired_carry_forward_stock 값이 바뀐 월
    """

    ledgers: list[MonthlyLedger]
    replayed: set[MonthKey] = field(default_factory=set)
    carry_forward_updated: set[MonthKey] = field(default_factory=set)
    expired_quantity: int = 0
    clamps: list[ClampEvent] = field(default_factory=list)

    @property
    def expiry_occurred(self) -> bool:
        return bool(self.replayed or self.carry_forward_updated)

    @property
    def changed_months(self) -> set[MonthKey]:
        return self.replayed | self.carry_forward_updated


class ExpiryScanner:
    """유통기한 스캐너

    입력 원장은 변경하지 않고 사본을 갱신하여 반환.
    """

    def scan(self, ledgers: list[MonthlyLedger], now: datetime) -> ExpiryScanResult:
        """전체 월 스캔

        Args:
            ledgers: 한 (극장, 상품)의 전체 월 원장
            now: 판정 기준 시각 (원장 현지 시각, naive)

        Returns:
            ExpiryScanResult
        """
        working = [copy.deepcopy(ledger) for ledger in ledgers]
        by_month = {ledger.month_key: ledger for ledger in working}
        result = ExpiryScanResult(ledgers=working)

        carried: dict[MonthKey, int] = defaultdict(int)
        dirty: set[MonthKey] = set()

        for ledger in working:
            for entry in ledger.entries:
                if entry.expire_date is None:
                    continue
                if not is_expired(entry.expire_date, now):
                    continue

                remaining = entry.remaining
                if remaining <= 0:
                    continue

                origin = MonthKey.of(entry.date)
                expiry = MonthKey.of(entry.expire_date)

                if origin == expiry:
                    entry.expired_stock += remaining
                    dirty.add(ledger.month_key)
                    result.expired_quantity += remaining
                    logger.info(
                        "당월 재고 만료 처리",
                        extra={
                            "stock_key": str(ledger.stock_key),
                            "month": str(ledger.month_key),
                            "entry_id": entry.id,
                            "quantity": remaining,
                        },
                    )
                else:
                    carried[expiry] += remaining

        # 같은 달 만료: 잔액 재계산
        for month in sorted(dirty):
            ledger = by_month[month]
            replay = replay_balances(ledger.carry_forward, ledger.entries, ReplayMode.STANDARD)
            ledger.entries = replay.entries
            result.clamps.extend(replay.clamps)
            result.replayed.add(month)

        # 이월 만료: 만료 월 원장에 덮어쓰기
        for month, quantity in sorted(carried.items()):
            ledger = by_month.get(month)
            if ledger is None:
                logger.debug(
                    f"이월 만료 대상 월 원장 없음: {month} (수량 {quantity}), 생성 후 재스캔 시 반영"
                )
                continue
            if ledger.expired_carry_forward_stock != quantity:
                logger.info(
                    "이월 재고 만료 반영",
                    extra={
                        "stock_key": str(ledger.stock_key),
                        "month": str(month),
                        "before": ledger.expired_carry_forward_stock,
                        "after": quantity,
                    },
                )
                result.expired_quantity += max(0, quantity - ledger.expired_carry_forward_stock)
                ledger.expired_carry_forward_stock = quantity
                result.carry_forward_updated.add(month)

        return result
