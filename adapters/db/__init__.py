"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리.
"""

from adapters.db.product_stock import SQLiteProductStockGateway
from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    init_schema,
)

__all__ = [
    "SQLiteAdapter",
    "SQLiteProductStockGateway",
    "create_connection",
    "init_schema",
]
