"""
FastAPI 애플리케이션

재고 원장 API 라우터 등록 및 도메인 예외 → HTTP 응답 매핑.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.ledger.service import EntryNotFoundError, LedgerError, LedgerNotFoundError
from core.logging import setup_logging
from web.routes import health, stock

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """시작 시 로깅/스키마 초기화"""
    setup_logging("web")
    settings = get_settings()

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    logger.info(
        "Web: 재고 원장 API 시작",
        extra={"db_path": str(settings.db_path), "timezone": settings.ledger.timezone},
    )
    yield
    logger.info("Web: 재고 원장 API 종료")


app = FastAPI(
    title="Concession Stock API",
    description="극장 매점 월별 재고 원장 API",
    version="1.0.0",
    lifespan=lifespan,
)

# 매점 관리 화면(별도 프론트엔드)에서 호출
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """원장 도메인 예외 매핑 (월/기록 없음 → 404, 그 외 → 400)"""
    status_code = 404 if isinstance(exc, (LedgerNotFoundError, EntryNotFoundError)) else 400
    logger.info(
        f"원장 요청 거부: {exc}",
        extra={"path": request.url.path, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(health.router)
app.include_router(stock.router)
