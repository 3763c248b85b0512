"""
재고 원장 저장소 (LedgerRepository)

MonthlyLedger 문서 저장 및 조회.
(theater_id, product_id) 와 기간 범위로 조회 가능.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from core.ledger.models import LedgerEntry, MonthlyLedger
from core.types import MonthKey, StockKey

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_SELECT_COLUMNS = """
    theater_id, product_id, year, month_number,
    carry_forward, expired_carry_forward_stock,
    total_stock_added, total_used_stock, total_expired_stock, total_damage_stock,
    entries_json
"""


def _row_to_ledger(row: Mapping[str, Any]) -> MonthlyLedger:
    entries = [LedgerEntry.from_dict(item) for item in json.loads(row["entries_json"] or "[]")]
    return MonthlyLedger(
        theater_id=row["theater_id"],
        product_id=row["product_id"],
        year=row["year"],
        month_number=row["month_number"],
        carry_forward=row["carry_forward"],
        expired_carry_forward_stock=row["expired_carry_forward_stock"],
        total_stock_added=row["total_stock_added"],
        total_used_stock=row["total_used_stock"],
        total_expired_stock=row["total_expired_stock"],
        total_damage_stock=row["total_damage_stock"],
        entries=entries,
    )


def _period_index(month: MonthKey) -> int:
    return month.year * 12 + month.month


class LedgerStore:
    """재고 원장 저장소

    월 원장 1건 = monthly_stock 1행.
    저장 시마다 합계와 기말 잔액을 entries 에서 재계산.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_month(self, key: StockKey, month: MonthKey) -> MonthlyLedger | None:
        """월 원장 조회

        Returns:
            MonthlyLedger 또는 None (없음)
        """
        row = await self.db.fetchone(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM monthly_stock
            WHERE theater_id = ? AND product_id = ? AND year = ? AND month_number = ?
            """,
            (key.theater_id, key.product_id, month.year, month.month),
        )
        return _row_to_ledger(row) if row else None

    async def list_months(
        self,
        key: StockKey,
        start: MonthKey | None = None,
        end: MonthKey | None = None,
    ) -> list[MonthlyLedger]:
        """기간 내 월 원장 목록 (시간순)

        Args:
            key: (극장, 상품)
            start: 시작 월 (포함, None이면 제한 없음)
            end: 종료 월 (포함, None이면 제한 없음)
        """
        sql = f"""
            SELECT {_SELECT_COLUMNS}
            FROM monthly_stock
            WHERE theater_id = ? AND product_id = ?
        """
        params: list[Any] = [key.theater_id, key.product_id]

        if start is not None:
            sql += " AND (year * 12 + month_number) >= ?"
            params.append(_period_index(start))
        if end is not None:
            sql += " AND (year * 12 + month_number) <= ?"
            params.append(_period_index(end))

        sql += " ORDER BY year ASC, month_number ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_ledger(row) for row in rows]

    async def get_previous(self, key: StockKey, month: MonthKey) -> MonthlyLedger | None:
        """지정 월 이전의 가장 최근 월 원장 (없으면 None)"""
        row = await self.db.fetchone(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM monthly_stock
            WHERE theater_id = ? AND product_id = ?
              AND (year * 12 + month_number) < ?
            ORDER BY year DESC, month_number DESC
            LIMIT 1
            """,
            (key.theater_id, key.product_id, _period_index(month)),
        )
        return _row_to_ledger(row) if row else None

    async def get_previous_balance(self, key: StockKey, month: MonthKey) -> int:
        """직전 월 기말 잔액 (없으면 0)"""
        previous = await self.get_previous(key, month)
        return max(0, previous.closing_balance) if previous else 0

    async def list_stock_keys(self) -> list[StockKey]:
        """원장이 존재하는 모든 (극장, 상품) 목록"""
        rows = await self.db.fetchall(
            """
            SELECT DISTINCT theater_id, product_id
            FROM monthly_stock
            ORDER BY theater_id, product_id
            """
        )
        return [StockKey(row["theater_id"], row["product_id"]) for row in rows]

    # -------------------------------------------------------------------------
    # 저장
    # -------------------------------------------------------------------------

    async def _upsert(self, ledger: MonthlyLedger) -> None:
        ledger.recompute_totals()
        entries_json = json.dumps([e.to_dict() for e in ledger.entries], ensure_ascii=False)

        await self.db.execute(
            """
            INSERT INTO monthly_stock (
                theater_id, product_id, year, month_number, month_name,
                carry_forward, expired_carry_forward_stock,
                total_stock_added, total_used_stock, total_expired_stock, total_damage_stock,
                closing_balance, entries_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(theater_id, product_id, year, month_number) DO UPDATE SET
                carry_forward = excluded.carry_forward,
                expired_carry_forward_stock = excluded.expired_carry_forward_stock,
                total_stock_added = excluded.total_stock_added,
                total_used_stock = excluded.total_used_stock,
                total_expired_stock = excluded.total_expired_stock,
                total_damage_stock = excluded.total_damage_stock,
                closing_balance = excluded.closing_balance,
                entries_json = excluded.entries_json,
                updated_at = datetime('now')
            """,
            (
                ledger.theater_id,
                ledger.product_id,
                ledger.year,
                ledger.month_number,
                ledger.month_name,
                ledger.carry_forward,
                ledger.expired_carry_forward_stock,
                ledger.total_stock_added,
                ledger.total_used_stock,
                ledger.total_expired_stock,
                ledger.total_damage_stock,
                ledger.closing_balance,
                entries_json,
            ),
        )

    async def _update_expired_carry_forward(self, ledger: MonthlyLedger) -> None:
        await self.db.execute(
            """
            UPDATE monthly_stock
            SET expired_carry_forward_stock = ?, updated_at = datetime('now')
            WHERE theater_id = ? AND product_id = ? AND year = ? AND month_number = ?
            """,
            (
                ledger.expired_carry_forward_stock,
                ledger.theater_id,
                ledger.product_id,
                ledger.year,
                ledger.month_number,
            ),
        )

    async def save(self, ledger: MonthlyLedger) -> None:
        """월 원장 저장 (Upsert, 합계 재계산)"""
        async with self.db.transaction():
            await self._upsert(ledger)

        logger.debug(f"Saved monthly ledger: {ledger.stock_key} {ledger.month_key}")

    async def save_batch(
        self,
        full: Iterable[MonthlyLedger],
        expired_carry_forward_only: Iterable[MonthlyLedger] = (),
    ) -> int:
        """여러 월 원장을 한 트랜잭션으로 저장

        Args:
            full: 전체 저장할 원장
            expired_carry_forward_only: expired_carry_forward_stock 필드만 갱신할 원장

        Returns:
            저장된 원장 수
        """
        full = list(full)
        partial = list(expired_carry_forward_only)
        if not full and not partial:
            return 0

        async with self.db.transaction():
            for ledger in full:
                await self._upsert(ledger)
            for ledger in partial:
                await self._update_expired_carry_forward(ledger)

        return len(full) + len(partial)
