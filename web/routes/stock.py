"""
재고 원장 라우트

월별 재고 조회 및 기록 추가/수정/삭제 API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from core.ledger.service import LedgerError, LedgerService
from core.types import MonthKey, StockKey
from web.dependencies import get_ledger_service
from web.models.requests import StockEntryCreateRequest, StockEntryUpdateRequest
from web.models.responses import MonthlyStockResponse, StockMutationResponse
from web.services.stock_service import StockService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stock", tags=["Stock"])


@router.get("/{theater_id}/{product_id}", response_model=MonthlyStockResponse)
async def get_monthly_stock(
    theater_id: str = Path(..., description="극장 ID"),
    product_id: str = Path(..., description="상품 ID"),
    year: int | None = Query(default=None, ge=1, description="연도 (기본: 이번 달)"),
    month: int | None = Query(default=None, ge=1, le=12, description="월 (기본: 이번 달)"),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> MonthlyStockResponse:
    """월 재고 원장 조회

    조회 시 유통기한 만료 처리와 이월 잔액 보정이 먼저 수행되며,
    해당 월 원장이 없으면 직전 월 기말 잔액으로 생성.
    """
    service = StockService(ledger_service)
    key = StockKey(theater_id, product_id)

    try:
        return await service.get_monthly_stock(key, service.resolve_month(year, month))
    except LedgerError:
        raise
    except Exception as e:
        logger.error(f"재고 조회 실패: {key}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch stock data: {e}")


@router.post(
    "/{theater_id}/{product_id}",
    response_model=StockMutationResponse,
    status_code=201,
)
async def add_stock_entry(
    request: StockEntryCreateRequest,
    theater_id: str = Path(..., description="극장 ID"),
    product_id: str = Path(..., description="상품 ID"),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> StockMutationResponse:
    """재고 기록 추가

    기록 일자의 월 원장에 추가 (없으면 생성). balance 입력값은 무시.
    """
    service = StockService(ledger_service)
    key = StockKey(theater_id, product_id)

    try:
        return await service.add_entry(key, request)
    except LedgerError:
        raise
    except Exception as e:
        logger.error(f"재고 기록 추가 실패: {key}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add stock entry: {e}")


@router.put("/{theater_id}/{product_id}/{entry_id}", response_model=StockMutationResponse)
async def update_stock_entry(
    request: StockEntryUpdateRequest,
    theater_id: str = Path(..., description="극장 ID"),
    product_id: str = Path(..., description="상품 ID"),
    entry_id: str = Path(..., description="기록 ID"),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> StockMutationResponse:
    """재고 기록 수정

    요청 date 의 월 원장에서 기록을 찾아 수정 후 해당 월 전체 재계산.
    """
    service = StockService(ledger_service)
    key = StockKey(theater_id, product_id)

    try:
        return await service.update_entry(key, entry_id, request)
    except LedgerError:
        raise
    except Exception as e:
        logger.error(f"재고 기록 수정 실패: {key} {entry_id}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update stock entry: {e}")


@router.delete("/{theater_id}/{product_id}/{entry_id}", response_model=StockMutationResponse)
async def delete_stock_entry(
    theater_id: str = Path(..., description="극장 ID"),
    product_id: str = Path(..., description="상품 ID"),
    entry_id: str = Path(..., description="기록 ID"),
    year: int = Query(..., ge=1, description="연도"),
    month: int = Query(..., ge=1, le=12, description="월"),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> StockMutationResponse:
    """재고 기록 삭제

    남은 기록으로 해당 월 잔액 재계산.
    """
    service = StockService(ledger_service)
    key = StockKey(theater_id, product_id)

    try:
        return await service.delete_entry(key, MonthKey(year, month), entry_id)
    except LedgerError:
        raise
    except Exception as e:
        logger.error(f"재고 기록 삭제 실패: {key} {entry_id}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete stock entry: {e}")
