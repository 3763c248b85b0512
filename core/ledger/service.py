"""
재고 원장 서비스

조회/추가/수정/삭제 작업을 (theater_id, product_id) 단위로 직렬화하여 실행.

조회 파이프라인 (전체 월 읽기 → 메모리 계산 → 한 트랜잭션으로 쓰기):
    1. ExpiryScanner: 만료 처리
    2. CarryForwardChain: 이월 잔액 보정 (고정점까지)
    3. 요청 월 GetOrCreate

변경 작업은 한 달만 수정 후 해당 월만 재계산하고,
기말 잔액을 Product 집계에 반영한다 (실패해도 원장 작업은 성공).
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable

from adapters.interfaces import IProductStockGateway
from core.config.loader import LedgerConfig
from core.ledger.chain import CarryForwardChain
from core.ledger.expiry import ExpiryScanner
from core.ledger.models import LedgerEntry, MonthlyLedger
from core.ledger.replay import (
    ClampEvent,
    ManualOverride,
    ReplayMode,
    apply_entry,
    replay_balances,
)
from core.ledger.store import LedgerStore
from core.types import EntryType, MonthKey, StockKey
from core.utils.keyed_lock import KeyedLock
from core.utils.timezone import now_local

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """원장 작업 예외 베이스"""

    pass


class LedgerNotFoundError(LedgerError):
    """월 원장 없음"""

    def __init__(self, key: StockKey, month: MonthKey):
        super().__init__(f"Monthly ledger not found: {key} {month}")
        self.key = key
        self.month = month


class EntryNotFoundError(LedgerError):
    """원장 기록 없음"""

    def __init__(self, key: StockKey, month: MonthKey, entry_id: str):
        super().__init__(f"Stock entry not found: {entry_id} ({key} {month})")
        self.key = key
        self.month = month
        self.entry_id = entry_id


@dataclass(frozen=True)
class EntryUpdate:
    """기록 수정 요청 (PUT 의미: 지정 필드 전체 교체)

    used_stock / damage_stock 은 수정 대상 기록에만 그대로 적용됨.
    """

    date: date
    type: EntryType
    quantity: int
    expire_date: date | None = None
    batch_number: str | None = None
    notes: str | None = None
    used_stock: int = 0
    damage_stock: int = 0


@dataclass
class ReconcileReport:
    """전체 월 보정 결과 (조회 파이프라인 1~2단계)"""

    key: StockKey
    expired_quantity: int = 0
    expiry_occurred: bool = False
    chain_changed: int = 0
    chain_passes: int = 0
    saved: int = 0


class LedgerService:
    """재고 원장 서비스

    Args:
        store: 원장 저장소
        product_gateway: Product 재고 갱신 게이트웨이
        locks: 키별 락 (프로세스 내 공유 인스턴스 사용)
        config: 원장 설정
        clock: 현재 현지 시각(naive) 공급 함수 (테스트에서 고정 시각 주입)
    """

    def __init__(
        self,
        store: LedgerStore,
        product_gateway: IProductStockGateway,
        locks: KeyedLock | None = None,
        config: LedgerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.product_gateway = product_gateway
        self.locks = locks or KeyedLock()
        self.config = config or LedgerConfig()
        self.clock = clock or (lambda: now_local(self.config.zone))
        self.scanner = ExpiryScanner()
        self.chain = CarryForwardChain(self.config.chain_max_passes)

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    def _log_clamps(self, ledger_label: str, clamps: list[ClampEvent]) -> None:
        for clamp in clamps:
            logger.warning(
                f"잔액 음수 보정 (0으로 처리): {ledger_label}",
                extra={"entry_id": clamp.entry_id, "unclamped": clamp.unclamped},
            )

    async def _push_stock(self, ledger: MonthlyLedger) -> bool:
        """기말 잔액을 Product 집계에 반영 (실패 시 로그만)"""
        try:
            await self.product_gateway.update_product_stock(
                ledger.product_id,
                ledger.theater_id,
                {"currentStock": ledger.closing_balance},
            )
            return True
        except Exception as e:
            logger.warning(
                f"상품 재고 갱신 실패: {e}",
                extra={
                    "theater_id": ledger.theater_id,
                    "product_id": ledger.product_id,
                    "closing_balance": ledger.closing_balance,
                },
                exc_info=True,
            )
            return False

    async def _get_or_create(self, key: StockKey, month: MonthKey) -> MonthlyLedger:
        ledger = await self.store.get_month(key, month)
        if ledger is not None:
            return ledger

        carry_forward = await self.store.get_previous_balance(key, month)
        ledger = MonthlyLedger.empty(key, month, carry_forward)
        await self.store.save(ledger)

        logger.info(
            f"월 원장 생성: {key} {ledger.month_name} {ledger.year}",
            extra={"carry_forward": carry_forward},
        )
        return ledger

    async def _require_month(self, key: StockKey, month: MonthKey) -> MonthlyLedger:
        ledger = await self.store.get_month(key, month)
        if ledger is None:
            raise LedgerNotFoundError(key, month)
        return ledger

    async def _reconcile(self, key: StockKey) -> ReconcileReport:
        report = ReconcileReport(key=key)
        ledgers = await self.store.list_months(key)
        if not ledgers:
            return report

        # 1단계: 유통기한 스캔
        scan = self.scanner.scan(ledgers, self.clock())
        self._log_clamps(f"{key} expiry", scan.clamps)

        # 2단계: 이월 체인 보정 (스캔 결과 위에서)
        chain = self.chain.reconcile(scan.ledgers)
        self._log_clamps(f"{key} chain", chain.clamps)

        full_months = scan.replayed | chain.changed
        partial_months = scan.carry_forward_updated - full_months

        report.saved = await self.store.save_batch(
            full=[m for m in chain.ledgers if m.month_key in full_months],
            expired_carry_forward_only=[m for m in chain.ledgers if m.month_key in partial_months],
        )
        report.expired_quantity = scan.expired_quantity
        report.expiry_occurred = scan.expiry_occurred
        report.chain_changed = len(chain.changed)
        report.chain_passes = chain.passes

        if report.saved:
            logger.info(
                f"원장 보정 완료: {key}",
                extra={
                    "expired_quantity": report.expired_quantity,
                    "chain_changed": report.chain_changed,
                    "saved": report.saved,
                },
            )
        return report

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_month(self, key: StockKey, month: MonthKey) -> MonthlyLedger:
        """월 원장 조회 (GetOrCreate 후 만료 스캔 + 이월 보정)

        대상 월을 먼저 만들어 두어야 이전 월 입고분의 만료가 첫 조회부터 반영됨.
        만료가 발생한 경우에만 Product 재고를 갱신.
        """
        async with self.locks.hold(key):
            await self._get_or_create(key, month)
            report = await self._reconcile(key)
            ledger = await self._require_month(key, month)

            if report.expiry_occurred:
                await self._push_stock(ledger)

            return ledger

    async def get_or_create(self, key: StockKey, month: MonthKey) -> MonthlyLedger:
        """월 원장 GetOrCreate (보정 없음)

        없으면 직전 월 기말 잔액을 carry_forward 로 하여 생성.
        """
        async with self.locks.hold(key):
            return await self._get_or_create(key, month)

    async def reconcile(self, key: StockKey) -> ReconcileReport:
        """만료 스캔 + 이월 보정만 수행 (유지보수 스크립트용)"""
        async with self.locks.hold(key):
            return await self._reconcile(key)

    async def reconcile_all(self) -> list[ReconcileReport]:
        """원장이 존재하는 모든 (극장, 상품) 보정"""
        reports = []
        for key in await self.store.list_stock_keys():
            reports.append(await self.reconcile(key))
        return reports

    # -------------------------------------------------------------------------
    # 변경
    # -------------------------------------------------------------------------

    async def append_entry(
        self,
        key: StockKey,
        entry: LedgerEntry,
    ) -> tuple[MonthlyLedger, LedgerEntry]:
        """기록 추가

        기준 잔액 = 마지막 기록 잔액 (없으면 carry_forward).
        입고 계열 기록은 호출자가 입력한 used_stock / damage_stock 을 반영.

        Returns:
            (저장된 월 원장, 저장된 기록)
        """
        month = entry.month_key

        async with self.locks.hold(key):
            ledger = await self._get_or_create(key, month)

            saved_entry, clamp = apply_entry(ledger.opening_for_append, entry)
            if clamp is not None:
                self._log_clamps(f"{key} {month} append", [clamp])

            ledger.entries.append(saved_entry)
            await self.store.save(ledger)

            logger.info(
                f"재고 기록 추가: {key} {month} {saved_entry.type.value} {saved_entry.quantity}",
                extra={"entry_id": saved_entry.id, "balance": saved_entry.balance},
            )

            await self._push_stock(ledger)
            return ledger, saved_entry

    async def update_entry(
        self,
        key: StockKey,
        month: MonthKey,
        entry_id: str,
        changes: EntryUpdate,
    ) -> tuple[MonthlyLedger, LedgerEntry]:
        """기록 수정

        수정 후 해당 월 전체를 carry_forward 부터 REBUILD 모드로 재계산.

        Raises:
            LedgerNotFoundError: 월 원장 없음
            EntryNotFoundError: 기록 없음
        """
        async with self.locks.hold(key):
            ledger = await self._require_month(key, month)
            index = ledger.find_entry(entry_id)
            if index is None:
                raise EntryNotFoundError(key, month, entry_id)

            ledger.entries[index] = replace(
                ledger.entries[index],
                date=changes.date,
                type=changes.type,
                quantity=changes.quantity,
                expire_date=changes.expire_date,
                batch_number=changes.batch_number,
                notes=changes.notes,
            )

            replay = replay_balances(
                ledger.carry_forward,
                ledger.entries,
                ReplayMode.REBUILD,
                overrides={
                    entry_id: ManualOverride(
                        used_stock=changes.used_stock,
                        damage_stock=changes.damage_stock,
                    )
                },
            )
            self._log_clamps(f"{key} {month} update", replay.clamps)
            ledger.entries = replay.entries
            await self.store.save(ledger)

            logger.info(
                f"재고 기록 수정: {key} {month}",
                extra={"entry_id": entry_id, "closing_balance": ledger.closing_balance},
            )

            await self._push_stock(ledger)
            return ledger, ledger.entries[index]

    async def delete_entry(
        self,
        key: StockKey,
        month: MonthKey,
        entry_id: str,
    ) -> MonthlyLedger:
        """기록 삭제

        남은 기록을 SIGNED 모드로 재계산 (clamp 여부는 ledger.delete_clamps_balance).

        Raises:
            LedgerNotFoundError: 월 원장 없음
            EntryNotFoundError: 기록 없음
        """
        async with self.locks.hold(key):
            ledger = await self._require_month(key, month)
            index = ledger.find_entry(entry_id)
            if index is None:
                raise EntryNotFoundError(key, month, entry_id)

            del ledger.entries[index]

            replay = replay_balances(
                ledger.carry_forward,
                ledger.entries,
                ReplayMode.SIGNED,
                clamp=self.config.delete_clamps_balance,
            )
            self._log_clamps(f"{key} {month} delete", replay.clamps)
            ledger.entries = replay.entries

            if ledger.closing_balance < 0:
                logger.warning(
                    f"삭제 후 기말 잔액 음수: {key} {month}",
                    extra={"closing_balance": ledger.closing_balance},
                )

            await self.store.save(ledger)

            logger.info(
                f"재고 기록 삭제: {key} {month}",
                extra={"entry_id": entry_id, "closing_balance": ledger.closing_balance},
            )

            await self._push_stock(ledger)
            return ledger
