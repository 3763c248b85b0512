"""
월별 재고 원장 시스템

(극장, 상품) 단위로 입고/판매/파손/만료를 월별 원장에 기록하고,
월 간 이월 잔액과 유통기한 만료를 자동 보정.

사용 예시:
```python
from core.ledger import LedgerService, LedgerStore

service = LedgerService(LedgerStore(db), product_gateway)

# 조회 (만료 스캔 + 이월 보정 포함)
ledger = await service.get_month(StockKey("t1", "p1"), MonthKey(2026, 1))

# 기록 추가
ledger, entry = await service.append_entry(
    StockKey("t1", "p1"),
    LedgerEntry(date=date(2026, 1, 5), type=EntryType.ADDED, quantity=100),
)
```
"""

from core.ledger.chain import CarryForwardChain, ChainResult
from core.ledger.expiry import ExpiryScanner, ExpiryScanResult, expiry_threshold
from core.ledger.models import LedgerEntry, MonthlyLedger
from core.ledger.replay import (
    ManualOverride,
    ReplayMode,
    ReplayResult,
    apply_entry,
    replay_balances,
)
from core.ledger.service import (
    EntryNotFoundError,
    EntryUpdate,
    LedgerError,
    LedgerNotFoundError,
    LedgerService,
    ReconcileReport,
)
from core.ledger.store import LedgerStore

__all__ = [
    # 핵심 클래스
    "LedgerService",
    "LedgerStore",
    "LedgerEntry",
    "MonthlyLedger",
    # 계산
    "ReplayMode",
    "ReplayResult",
    "ManualOverride",
    "apply_entry",
    "replay_balances",
    "ExpiryScanner",
    "ExpiryScanResult",
    "expiry_threshold",
    "CarryForwardChain",
    "ChainResult",
    # 요청/결과
    "EntryUpdate",
    "ReconcileReport",
    # 예외
    "LedgerError",
    "LedgerNotFoundError",
    "EntryNotFoundError",
]
