#!/usr/bin/env python3
"""
재고 현황 출력 스크립트

(극장, 상품)의 월별 원장 요약과 Product 재고 캐시를 비교 출력.
DB를 변경하지 않음 (읽기 전용).

사용법:
    python scripts/stock_status.py --theater T1 --product P1
    python scripts/stock_status.py --theater T1 --product P1 --entries
"""

import argparse
import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.product_stock import SQLiteProductStockGateway
from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger.store import LedgerStore
from core.types import StockKey


async def main(settings_path: Path | None, key: StockKey, show_entries: bool) -> int:
    settings = get_settings(settings_path)

    if not Path(settings.db_path).exists():
        print(f"DB 파일 없음: {settings.db_path}")
        return 1

    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        ledgers = await LedgerStore(db).list_months(key)
        current_stock = await SQLiteProductStockGateway(db).get_current_stock(
            key.product_id, key.theater_id
        )

    print(f"DB Path: {settings.db_path}")
    print(f"Key: {key}")
    print(f"Months: {len(ledgers)}")

    previous_closing = None
    for ledger in ledgers:
        stats = ledger.statistics()
        # 직전 월 기말 잔액과 이월 잔액 불일치 표시
        mark = ""
        if previous_closing is not None and ledger.carry_forward != max(0, previous_closing):
            mark = "  (!) 이월 불일치"
        print(
            f"  {ledger.month_key} {ledger.month_name:<9} "
            f"open={stats['openingBalance']:>6} added={stats['totalAdded']:>6} "
            f"sold={stats['totalSold']:>6} expired={stats['totalExpired']:>6} "
            f"old_expired={stats['expiredOldStock']:>6} damaged={stats['totalDamaged']:>6} "
            f"close={stats['closingBalance']:>6}{mark}"
        )
        if show_entries:
            for e in ledger.entries:
                print(
                    f"      {e.date} {e.type.value:<10} qty={e.quantity:>5} "
                    f"bal={e.balance:>6} exp={e.expire_date or '-'} id={e.id[:8]}"
                )
        previous_closing = ledger.closing_balance

    print(f"\nProduct currentStock: {current_stock if current_stock is not None else 'N/A'}")
    if ledgers and current_stock is not None and current_stock != ledgers[-1].closing_balance:
        print("  (!) 마지막 월 기말 잔액과 다름 (다음 조회/변경 시 갱신됨)")

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="재고 원장 현황 출력")
    parser.add_argument("--settings", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument("--theater", required=True, help="극장 ID")
    parser.add_argument("--product", required=True, help="상품 ID")
    parser.add_argument("--entries", action="store_true", help="기록 상세 출력")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.settings, StockKey(args.theater, args.product), args.entries)))
