#!/usr/bin/env python3
"""
재고 원장 일괄 보정 스크립트

원장이 존재하는 모든 (극장, 상품)에 대해 유통기한 만료 처리와
이월 잔액 보정을 수행. Product 재고는 갱신하지 않음 (조회 시 반영).

사용법:
    python scripts/repair_chain.py
    python scripts/repair_chain.py --theater T1 --product P1
    python scripts/repair_chain.py --settings config/settings.yaml
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.product_stock import SQLiteProductStockGateway
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.ledger.service import LedgerService, ReconcileReport
from core.ledger.store import LedgerStore
from core.logging import setup_logging
from core.types import StockKey

logger = logging.getLogger(__name__)


def print_report(reports: list[ReconcileReport]) -> None:
    changed = [r for r in reports if r.saved]

    print(f"\n대상: {len(reports)}개 (극장, 상품), 보정: {len(changed)}개")
    for r in changed:
        print(
            f"  - {r.key}: 만료 {r.expired_quantity}개, "
            f"이월 보정 {r.chain_changed}개월 ({r.chain_passes}회), 저장 {r.saved}개월"
        )


async def main(settings_path: Path | None, theater: str | None, product: str | None) -> int:
    settings = get_settings(settings_path)

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

        service = LedgerService(
            store=LedgerStore(db),
            product_gateway=SQLiteProductStockGateway(db),
            config=settings.ledger,
        )

        if theater and product:
            reports = [await service.reconcile(StockKey(theater, product))]
        else:
            reports = await service.reconcile_all()

    print_report(reports)
    logger.info("원장 일괄 보정 완료", extra={"keys": len(reports)})
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="재고 원장 만료/이월 일괄 보정")
    parser.add_argument("--settings", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument("--theater", default=None, help="극장 ID (--product 와 함께 사용)")
    parser.add_argument("--product", default=None, help="상품 ID (--theater 와 함께 사용)")
    args = parser.parse_args()

    if bool(args.theater) != bool(args.product):
        parser.error("--theater 와 --product 는 함께 지정해야 합니다")

    setup_logging("scripts")
    sys.exit(asyncio.run(main(args.settings, args.theater, args.product)))
