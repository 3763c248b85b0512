"""
core/ledger/chain.py 테스트

이월 잔액 보정, 고정점 수렴, 최대 반복 횟수 테스트
"""

from datetime import date

import pytest

from core.ledger.chain import CarryForwardChain
from core.ledger.models import LedgerEntry, MonthlyLedger
from core.ledger.replay import replay_balances
from core.types import EntryType, MonthKey, StockKey

KEY = StockKey("theater-1", "cola")


def build_month(month: MonthKey, carry_forward: int, *entries: tuple[EntryType, int]) -> MonthlyLedger:
    ledger = MonthlyLedger.empty(KEY, month, carry_forward)
    ledger.entries = replay_balances(
        carry_forward,
        [
            LedgerEntry(date=date(month.year, month.month, 1), type=type_, quantity=qty)
            for type_, qty in entries
        ],
    ).entries
    return ledger


def assert_chain_consistent(ledgers: list[MonthlyLedger]) -> None:
    assert ledgers[0].carry_forward == 0
    for previous, current in zip(ledgers, ledgers[1:]):
        assert current.carry_forward == max(0, previous.closing_balance)


class TestCarryForwardChain:
    """CarryForwardChain 테스트"""

    def test_already_consistent(self) -> None:
        """이미 일치하면 변경 없음 (1회 패스)"""
        ledgers = [
            build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 100)),
            build_month(MonthKey(2026, 2), 100, (EntryType.SOLD, 10)),
        ]

        result = CarryForwardChain().reconcile(ledgers)

        assert result.changed == set()
        assert result.passes == 1
        assert result.converged is True

    def test_drift_propagates(self) -> None:
        """1월 수정 → 2월, 3월까지 연쇄 보정"""
        ledgers = [
            build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 100), (EntryType.SOLD, 30)),
            build_month(MonthKey(2026, 2), 100, (EntryType.SOLD, 20)),
            build_month(MonthKey(2026, 3), 80),
        ]

        result = CarryForwardChain().reconcile(ledgers)

        jan, feb, mar = result.ledgers
        assert feb.carry_forward == 70
        assert feb.closing_balance == 50
        assert mar.carry_forward == 50
        assert result.changed == {MonthKey(2026, 2), MonthKey(2026, 3)}
        assert_chain_consistent(result.ledgers)

    def test_first_month_reset_to_zero(self) -> None:
        """첫 달의 carry_forward 는 0"""
        ledgers = [build_month(MonthKey(2026, 1), 15, (EntryType.ADDED, 10))]

        result = CarryForwardChain().reconcile(ledgers)

        assert result.ledgers[0].carry_forward == 0
        assert result.ledgers[0].closing_balance == 10

    def test_sorts_chronologically(self) -> None:
        """입력 순서와 무관하게 시간순 처리 (연도 경계 포함)"""
        ledgers = [
            build_month(MonthKey(2026, 1), 0),
            build_month(MonthKey(2025, 12), 0, (EntryType.ADDED, 40)),
        ]

        result = CarryForwardChain().reconcile(ledgers)

        assert [m.month_key for m in result.ledgers] == [MonthKey(2025, 12), MonthKey(2026, 1)]
        assert result.ledgers[1].carry_forward == 40

    def test_negative_closing_not_carried(self) -> None:
        """음수 기말 잔액은 0으로 이월"""
        january = build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 10))
        january.entries[-1].balance = -5
        february = build_month(MonthKey(2026, 2), 3)

        result = CarryForwardChain().reconcile([january, february])

        assert result.ledgers[1].carry_forward == 0

    def test_clamp_recorded(self) -> None:
        """이월 감소로 잔액 부족 시 clamp 기록"""
        ledgers = [
            build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 5)),
            build_month(MonthKey(2026, 2), 50, (EntryType.SOLD, 20)),
        ]

        result = CarryForwardChain().reconcile(ledgers)

        assert result.ledgers[1].closing_balance == 0
        assert len(result.clamps) == 1

    def test_input_not_mutated(self) -> None:
        """입력 원장 불변"""
        february = build_month(MonthKey(2026, 2), 999)
        ledgers = [build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 1)), february]

        CarryForwardChain().reconcile(ledgers)

        assert february.carry_forward == 999

    def test_max_passes_exceeded(self) -> None:
        """최대 반복 횟수 내 미수렴 시 converged=False"""
        ledgers = [
            build_month(MonthKey(2026, 1), 0, (EntryType.ADDED, 10)),
            build_month(MonthKey(2026, 2), 0),
        ]

        result = CarryForwardChain(max_passes=1).reconcile(ledgers)

        assert result.converged is False
        assert result.passes == 1
        # 보정 자체는 적용됨
        assert result.ledgers[1].carry_forward == 10

    def test_invalid_max_passes(self) -> None:
        """max_passes 는 1 이상"""
        with pytest.raises(ValueError):
            CarryForwardChain(max_passes=0)
