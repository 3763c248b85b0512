"""
SQLite 어댑터

WAL 모드 연결 + 이름으로 접근 가능한 행(aiosqlite.Row).
Web 요청과 유지보수 스크립트가 같은 DB 파일을 동시에 열 수 있도록 설정.

트랜잭션은 중첩 가능 (안쪽 transaction()은 바깥 트랜잭션에 합류,
가장 바깥에서만 커밋/롤백).
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

import aiosqlite

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"
BUSY_TIMEOUT_MS = 30000  # 다른 프로세스 쓰기 대기 (30초)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성

    쓰기 연결은 WAL 모드로 전환, 읽기 전용 연결은 query_only 로 보호.

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체 (row_factory = aiosqlite.Row)
    """
    db_path_str = str(db_path)
    in_memory = db_path_str == MEMORY_DB

    if readonly and not in_memory:
        conn = await aiosqlite.connect(f"file:{Path(db_path).as_posix()}?mode=ro", uri=True)
        await conn.execute("PRAGMA query_only=ON")
    else:
        if not in_memory:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(db_path_str)
        await conn.execute("PRAGMA journal_mode=WAL")

    await conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    conn.row_factory = aiosqlite.Row

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    사용 예시:
    ```python
    async with SQLiteAdapter(settings.db_path) as db:
        async with db.transaction():
            await db.execute("UPDATE monthly_stock SET ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """transaction() 블록 내부인지 여부"""
        return self._tx_depth > 0

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        """연결 생성 (이미 연결되어 있으면 무시)"""
        if self._conn is None:
            self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._tx_depth = 0
            logger.debug("SQLite 연결 종료", extra={"db_path": str(self.db_path)})

    async def execute(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()
        return await conn.execute(sql, tuple(parameters or ()))

    async def fetchone(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> aiosqlite.Row | None:
        """단일 행 조회 (컬럼명/인덱스 접근 가능)"""
        cursor = await self.execute(sql, parameters)
        try:
            return await cursor.fetchone()
        finally:
            await cursor.close()

    async def fetchall(
        self,
        sql: str,
        parameters: Iterable[Any] | None = None,
    ) -> list[aiosqlite.Row]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return list(await cursor.fetchall())
        finally:
            await cursor.close()

    async def commit(self) -> None:
        """커밋 (transaction() 내부에서는 바깥 블록이 커밋)"""
        if self._conn is not None and not self.in_transaction:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLiteAdapter"]:
        """트랜잭션 컨텍스트 매니저

        가장 바깥 블록이 성공하면 커밋, 예외 시 롤백.
        안쪽 블록은 바깥 트랜잭션에 합류하고 예외만 전파.
        """
        conn = self._require_conn()

        self._tx_depth += 1
        outermost = self._tx_depth == 1
        try:
            yield self
        except Exception:
            if outermost:
                await conn.rollback()
            raise
        else:
            if outermost:
                await conn.commit()
        finally:
            self._tx_depth -= 1

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        row = await self.fetchone(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        )
        return row is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (재고 원장 + Product 재고 테이블, 재실행 안전)

    Args:
        adapter: 연결된 SQLiteAdapter (쓰기 가능)
    """
    from adapters.db.product_stock import init_product_stock_schema
    from core.ledger.schema import init_ledger_schema

    await init_ledger_schema(adapter)
    await init_product_stock_schema(adapter)

    logger.info("스키마 초기화 완료", extra={"db_path": str(adapter.db_path)})
