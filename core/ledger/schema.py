"""
재고 원장 스키마 초기화

Web/스크립트 시작 시 자동으로 원장 테이블 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """원장 스키마 초기화

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    # monthly_stock: (극장, 상품, 연, 월) 당 1행, 기록은 JSON 배열 (저장 순서 = 계산 순서)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS monthly_stock (
            id                          INTEGER PRIMARY KEY AUTOINCREMENT,
            theater_id                  TEXT NOT NULL,
            product_id                  TEXT NOT NULL,
            year                        INTEGER NOT NULL,
            month_number                INTEGER NOT NULL,
            month_name                  TEXT NOT NULL,

            carry_forward               INTEGER NOT NULL DEFAULT 0,
            expired_carry_forward_stock INTEGER NOT NULL DEFAULT 0,

            total_stock_added           INTEGER NOT NULL DEFAULT 0,
            total_used_stock            INTEGER NOT NULL DEFAULT 0,
            total_expired_stock         INTEGER NOT NULL DEFAULT 0,
            total_damage_stock          INTEGER NOT NULL DEFAULT 0,
            closing_balance             INTEGER NOT NULL DEFAULT 0,

            entries_json                TEXT NOT NULL DEFAULT '[]',

            created_at                  TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at                  TEXT NOT NULL DEFAULT (datetime('now')),

            UNIQUE(theater_id, product_id, year, month_number)
        )
    """)

    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_monthly_stock_key "
        "ON monthly_stock(theater_id, product_id, year, month_number)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_monthly_stock_period "
        "ON monthly_stock(year, month_number)"
    )

    await db.commit()
    logger.debug("원장 테이블 생성 완료")
