"""LedgerStore 통합 테스트"""

from datetime import date

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.models import LedgerEntry, MonthlyLedger
from core.ledger.replay import replay_balances
from core.ledger.store import LedgerStore
from core.types import EntryType, MonthKey, StockKey

KEY = StockKey("theater-1", "popcorn")


def month_with(month: MonthKey, carry_forward: int, *entries: LedgerEntry) -> MonthlyLedger:
    ledger = MonthlyLedger.empty(KEY, month, carry_forward)
    ledger.entries = replay_balances(carry_forward, list(entries)).entries
    return ledger


class TestLedgerStore:
    """LedgerStore 테스트"""

    @pytest.mark.asyncio
    async def test_save_and_get(self, db: SQLiteAdapter) -> None:
        """저장 후 조회 (기록 순서, 필드 보존)"""
        store = LedgerStore(db)
        ledger = month_with(
            MonthKey(2026, 1),
            0,
            LedgerEntry(
                id="a",
                date=date(2026, 1, 5),
                type=EntryType.ADDED,
                quantity=100,
                expire_date=date(2026, 2, 3),
                batch_number="B-1",
            ),
            LedgerEntry(id="s", date=date(2026, 1, 10), type=EntryType.SOLD, quantity=30),
        )

        await store.save(ledger)
        loaded = await store.get_month(KEY, MonthKey(2026, 1))

        assert loaded is not None
        assert [e.id for e in loaded.entries] == ["a", "s"]
        assert loaded.entries[0].expire_date == date(2026, 2, 3)
        assert loaded.entries[0].batch_number == "B-1"
        assert loaded.closing_balance == 70
        assert loaded.total_stock_added == 100
        assert loaded.total_used_stock == 30

    @pytest.mark.asyncio
    async def test_get_missing(self, db: SQLiteAdapter) -> None:
        store = LedgerStore(db)

        assert await store.get_month(KEY, MonthKey(2026, 1)) is None

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, db: SQLiteAdapter) -> None:
        """같은 월 재저장 시 덮어쓰기 (행 1개 유지)"""
        store = LedgerStore(db)
        ledger = month_with(MonthKey(2026, 1), 0)
        await store.save(ledger)

        ledger.carry_forward = 12
        await store.save(ledger)

        months = await store.list_months(KEY)
        assert len(months) == 1
        assert months[0].carry_forward == 12

    @pytest.mark.asyncio
    async def test_list_months_ordered_with_range(self, db: SQLiteAdapter) -> None:
        """시간순 정렬 + 기간 필터 (연도 경계 포함)"""
        store = LedgerStore(db)
        for month in (MonthKey(2026, 2), MonthKey(2025, 11), MonthKey(2026, 1), MonthKey(2025, 12)):
            await store.save(month_with(month, 0))

        all_months = await store.list_months(KEY)
        ranged = await store.list_months(KEY, start=MonthKey(2025, 12), end=MonthKey(2026, 1))

        assert [m.month_key for m in all_months] == [
            MonthKey(2025, 11),
            MonthKey(2025, 12),
            MonthKey(2026, 1),
            MonthKey(2026, 2),
        ]
        assert [m.month_key for m in ranged] == [MonthKey(2025, 12), MonthKey(2026, 1)]

    @pytest.mark.asyncio
    async def test_previous_balance_uses_latest_earlier_month(self, db: SQLiteAdapter) -> None:
        """직전 월이 비어 있으면 그 이전의 가장 최근 월 사용"""
        store = LedgerStore(db)
        await store.save(
            month_with(
                MonthKey(2025, 11),
                0,
                LedgerEntry(date=date(2025, 11, 1), type=EntryType.ADDED, quantity=40),
            )
        )

        assert await store.get_previous_balance(KEY, MonthKey(2026, 2)) == 40
        assert await store.get_previous_balance(KEY, MonthKey(2025, 11)) == 0

    @pytest.mark.asyncio
    async def test_keys_isolated(self, db: SQLiteAdapter) -> None:
        """(극장, 상품) 별 격리"""
        store = LedgerStore(db)
        other = StockKey("theater-2", "popcorn")
        await store.save(month_with(MonthKey(2026, 1), 0))
        await store.save(MonthlyLedger.empty(other, MonthKey(2026, 1), 9))

        assert await store.get_previous_balance(other, MonthKey(2026, 2)) == 9
        assert await store.list_stock_keys() == [KEY, other]

    @pytest.mark.asyncio
    async def test_save_batch_partial_update(self, db: SQLiteAdapter) -> None:
        """expired_carry_forward_only 는 해당 필드만 갱신"""
        store = LedgerStore(db)
        january = month_with(MonthKey(2026, 1), 0)
        february = month_with(MonthKey(2026, 2), 5)
        await store.save(january)
        await store.save(february)

        january.carry_forward = 3
        february.expired_carry_forward_stock = 7
        february.carry_forward = 999  # 부분 갱신에서는 무시됨

        saved = await store.save_batch(full=[january], expired_carry_forward_only=[february])

        assert saved == 2
        jan = await store.get_month(KEY, MonthKey(2026, 1))
        feb = await store.get_month(KEY, MonthKey(2026, 2))
        assert jan.carry_forward == 3
        assert feb.expired_carry_forward_stock == 7
        assert feb.carry_forward == 5

    @pytest.mark.asyncio
    async def test_save_batch_empty(self, db: SQLiteAdapter) -> None:
        assert await LedgerStore(db).save_batch(full=[]) == 0
