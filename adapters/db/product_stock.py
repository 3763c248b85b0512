"""
Product 재고 게이트웨이 (SQLite)

원장 기말 잔액을 product_stock.current_stock 에 반영.
IProductStockGateway Protocol 구현.
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_product_stock_schema(db: SQLiteAdapter) -> None:
    """product_stock 테이블 생성 (외부 Product 집계의 currentStock 캐시)"""
    await db.execute("""
        CREATE TABLE IF NOT EXISTS product_stock (
            theater_id       TEXT NOT NULL,
            product_id       TEXT NOT NULL,
            current_stock    INTEGER NOT NULL DEFAULT 0,
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),

            PRIMARY KEY (theater_id, product_id)
        )
    """)
    await db.commit()


class SQLiteProductStockGateway:
    """product_stock 테이블 기반 Product 재고 갱신

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def update_product_stock(
        self,
        product_id: str,
        theater_id: str,
        fields: dict[str, Any],
    ) -> None:
        """상품 재고 필드 갱신 (현재는 currentStock 만 지원)"""
        if "currentStock" not in fields:
            raise ValueError(f"지원하지 않는 필드: {sorted(fields)}")

        current_stock = int(fields["currentStock"])

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO product_stock (theater_id, product_id, current_stock)
                VALUES (?, ?, ?)
                ON CONFLICT(theater_id, product_id) DO UPDATE SET
                    current_stock = excluded.current_stock,
                    updated_at = datetime('now')
                """,
                (theater_id, product_id, current_stock),
            )

        logger.debug(
            "상품 재고 갱신",
            extra={
                "theater_id": theater_id,
                "product_id": product_id,
                "current_stock": current_stock,
            },
        )

    async def get_current_stock(self, product_id: str, theater_id: str) -> int | None:
        """상품 현재 재고 조회 (없으면 None)"""
        row = await self.db.fetchone(
            """
            SELECT current_stock FROM product_stock
            WHERE theater_id = ? AND product_id = ?
            """,
            (theater_id, product_id),
        )
        return int(row["current_stock"]) if row else None
