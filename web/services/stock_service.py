"""
재고 원장 Web 서비스

요청 스키마 → 도메인 객체 변환, LedgerService 호출, 응답 스키마 생성.
"""

import logging

from core.ledger.models import LedgerEntry, MonthlyLedger
from core.ledger.service import EntryUpdate, LedgerService
from core.types import MonthKey, StockKey
from core.utils.timezone import now_local
from web.models.requests import StockEntryCreateRequest, StockEntryUpdateRequest
from web.models.responses import (
    MonthlyStockResponse,
    StockEntryResponse,
    StockMutationResponse,
)

logger = logging.getLogger(__name__)


def to_month_response(ledger: MonthlyLedger) -> MonthlyStockResponse:
    return MonthlyStockResponse.model_validate(ledger.to_dict())


def to_entry_response(entry: LedgerEntry) -> StockEntryResponse:
    return StockEntryResponse.model_validate(entry.to_dict())


class StockService:
    """재고 원장 Web 서비스

    Args:
        ledger_service: 요청 단위 LedgerService
    """

    def __init__(self, ledger_service: LedgerService):
        self.ledger_service = ledger_service

    def resolve_month(self, year: int | None, month: int | None) -> MonthKey:
        """조회 월 결정 (생략 시 현지 기준 이번 달)

        Raises:
            ValueError: month 범위 오류
        """
        current = MonthKey.of(now_local(self.ledger_service.config.zone))
        return MonthKey(
            year if year is not None else current.year,
            month if month is not None else current.month,
        )

    async def get_monthly_stock(self, key: StockKey, month: MonthKey) -> MonthlyStockResponse:
        ledger = await self.ledger_service.get_month(key, month)
        return to_month_response(ledger)

    async def add_entry(
        self,
        key: StockKey,
        request: StockEntryCreateRequest,
    ) -> StockMutationResponse:
        """재고 기록 추가 (request.balance 는 무시)"""
        entry = LedgerEntry(
            date=request.date,
            type=request.type,
            quantity=request.quantity,
            used_stock=request.used_stock,
            damage_stock=request.damage_stock,
            expire_date=request.expire_date,
            batch_number=request.batch_number,
            notes=request.notes,
        )
        ledger, saved = await self.ledger_service.append_entry(key, entry)

        return StockMutationResponse(
            message="Stock entry added successfully",
            entry=to_entry_response(saved),
            ledger=to_month_response(ledger),
        )

    async def update_entry(
        self,
        key: StockKey,
        entry_id: str,
        request: StockEntryUpdateRequest,
    ) -> StockMutationResponse:
        """재고 기록 수정

        대상 월은 요청 date 의 월. 다른 월로 기록을 옮기지 않음.
        """
        changes = EntryUpdate(
            date=request.date,
            type=request.type,
            quantity=request.quantity,
            expire_date=request.expire_date,
            batch_number=request.batch_number,
            notes=request.notes,
            used_stock=request.used_stock,
            damage_stock=request.damage_stock,
        )
        ledger, entry = await self.ledger_service.update_entry(
            key, MonthKey.of(request.date), entry_id, changes
        )

        return StockMutationResponse(
            message="Stock entry updated successfully",
            entry=to_entry_response(entry),
            ledger=to_month_response(ledger),
        )

    async def delete_entry(
        self,
        key: StockKey,
        month: MonthKey,
        entry_id: str,
    ) -> StockMutationResponse:
        ledger = await self.ledger_service.delete_entry(key, month, entry_id)

        return StockMutationResponse(
            message="Stock entry deleted successfully",
            ledger=to_month_response(ledger),
        )
