"""
이월 체인 보정 (CarryForwardChain)

(year, month) 오름차순으로 월 원장을 순회하며
carry_forward(N) == closing_balance(N-1) 를 맞춘다 (첫 달은 0).

한 달을 보정하면 그 달의 기말 잔액이 바뀌어 다음 달 기대값도 바뀌므로,
변경이 없을 때까지 패스를 반복한다 (고정점).
"""

import copy
import logging
from dataclasses import dataclass, field

from core.constants import Defaults
from core.ledger.models import MonthlyLedger
from core.ledger.replay import ClampEvent, ReplayMode, replay_balances
from core.types import MonthKey

logger = logging.getLogger(__name__)


@dataclass
class ChainResult:
    """체인 보정 결과"""

    ledgers: list[MonthlyLedger]
    changed: set[MonthKey] = field(default_factory=set)
    passes: int = 0
    converged: bool = True
    clamps: list[ClampEvent] = field(default_factory=list)


class CarryForwardChain:
    """이월 체인 보정기

    Args:
        max_passes: 최대 반복 횟수 (초과 시 경고 후 현재 상태 반환)
    """

    def __init__(self, max_passes: int = Defaults.CHAIN_MAX_PASSES):
        if max_passes < 1:
            raise ValueError("max_passes는 1 이상이어야 합니다")
        self.max_passes = max_passes

    def run_pass(self, ledgers: list[MonthlyLedger], result: ChainResult) -> bool:
        """1회 패스 (정렬된 원장 목록을 직접 갱신)

        Returns:
            이번 패스에서 변경이 있었는지 여부
        """
        changed = False
        previous: MonthlyLedger | None = None

        for ledger in ledgers:
            # carry_forward 는 0 이상 (삭제 경로의 음수 기말 잔액은 이월하지 않음)
            expected = max(0, previous.closing_balance) if previous is not None else 0

            if ledger.carry_forward != expected:
                logger.info(
                    f"이월 잔액 보정: {ledger.month_name} {ledger.year} "
                    f"{ledger.carry_forward} → {expected}",
                    extra={"stock_key": str(ledger.stock_key)},
                )
                ledger.carry_forward = expected
                replay = replay_balances(expected, ledger.entries, ReplayMode.STANDARD)
                ledger.entries = replay.entries
                result.clamps.extend(replay.clamps)
                result.changed.add(ledger.month_key)
                changed = True

            previous = ledger

        return changed

    def reconcile(self, ledgers: list[MonthlyLedger]) -> ChainResult:
        """고정점까지 체인 보정

        Args:
            ledgers: 한 (극장, 상품)의 전체 월 원장 (순서 무관)

        Returns:
            ChainResult (시간순 정렬된 사본)
        """
        working = sorted(
            (copy.deepcopy(ledger) for ledger in ledgers),
            key=lambda ledger: ledger.month_key,
        )
        result = ChainResult(ledgers=working)

        while result.passes < self.max_passes:
            result.passes += 1
            if not self.run_pass(working, result):
                return result

        result.converged = False
        logger.warning(
            f"이월 체인 보정이 {self.max_passes}회 내에 수렴하지 않음",
            extra={"months": len(working)},
        )
        return result
