"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.product_stock import SQLiteProductStockGateway
from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.service import LedgerService
from core.ledger.store import LedgerStore
from core.utils.keyed_lock import KeyedLock


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    재고 조회도 만료 스캔/이월 보정 결과를 저장하므로 항상 쓰기 세션 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 키별 락 (프로세스 내 모든 요청이 공유)
# =========================================================================

# 요청마다 LedgerService 가 새로 만들어지므로 락은 모듈 단위로 유지
_stock_locks = KeyedLock()


def get_stock_locks() -> KeyedLock:
    """(극장, 상품) 키별 락 반환"""
    return _stock_locks


async def get_ledger_service(
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
    locks: KeyedLock = Depends(get_stock_locks),
) -> LedgerService:
    """요청 단위 LedgerService 생성"""
    return LedgerService(
        store=LedgerStore(db),
        product_gateway=SQLiteProductStockGateway(db),
        locks=locks,
        config=settings.ledger,
    )
