"""
core/ledger/models.py 테스트

LedgerEntry 직렬화, MonthlyLedger 잔액/통계 테스트
"""

from datetime import date

from core.ledger.models import LedgerEntry, MonthlyLedger
from core.types import EntryType, MonthKey, StockKey

KEY = StockKey("theater-1", "popcorn")


class TestLedgerEntry:
    """LedgerEntry 테스트"""

    def test_default_id_unique(self) -> None:
        """ID 자동 생성"""
        a = LedgerEntry(date=date(2026, 1, 1), type=EntryType.ADDED, quantity=1)
        b = LedgerEntry(date=date(2026, 1, 1), type=EntryType.ADDED, quantity=1)

        assert a.id != b.id

    def test_remaining(self) -> None:
        """잔여 수량 = 입고 - 사용 - 만료 - 파손"""
        entry = LedgerEntry(
            date=date(2026, 1, 1),
            type=EntryType.ADDED,
            quantity=100,
            stock_added=100,
            used_stock=30,
            expired_stock=10,
            damage_stock=5,
        )

        assert entry.remaining == 55

    def test_to_dict_camel_case(self) -> None:
        """API 키는 camelCase"""
        entry = LedgerEntry(
            id="e1",
            date=date(2026, 1, 5),
            type=EntryType.ADDED,
            quantity=100,
            stock_added=100,
            balance=100,
            expire_date=date(2026, 1, 31),
            batch_number="B1",
        )

        data = entry.to_dict()

        assert data["id"] == "e1"
        assert data["date"] == "2026-01-05"
        assert data["type"] == "ADDED"
        assert data["stockAdded"] == 100
        assert data["expireDate"] == "2026-01-31"
        assert data["batchNumber"] == "B1"
        assert data["notes"] is None

    def test_from_dict_accepts_datetime_string(self) -> None:
        """ISO datetime 문자열도 날짜로 파싱"""
        entry = LedgerEntry.from_dict(
            {
                "id": "e2",
                "date": "2026-01-05T10:30:00.000Z",
                "type": "SOLD",
                "quantity": 3,
                "expireDate": "",
            }
        )

        assert entry.date == date(2026, 1, 5)
        assert entry.type == EntryType.SOLD
        assert entry.expire_date is None
        assert entry.used_stock == 0

    def test_month_key(self) -> None:
        entry = LedgerEntry(date=date(2026, 2, 28), type=EntryType.SOLD, quantity=1)

        assert entry.month_key == MonthKey(2026, 2)


class TestMonthlyLedger:
    """MonthlyLedger 테스트"""

    def test_empty(self) -> None:
        """빈 원장: 기말 = carry_forward"""
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 2), carry_forward=70)

        assert ledger.entries == []
        assert ledger.closing_balance == 70
        assert ledger.opening_for_append == 70
        assert ledger.month_name == "February"

    def test_empty_negative_carry_forward_clamped(self) -> None:
        """carry_forward 는 0 이상"""
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 2), carry_forward=-4)

        assert ledger.carry_forward == 0

    def test_closing_balance_last_entry(self) -> None:
        """기말 = 마지막 기록 잔액"""
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 1))
        ledger.entries = [
            LedgerEntry(date=date(2026, 1, 1), type=EntryType.ADDED, quantity=10, balance=10),
            LedgerEntry(date=date(2026, 1, 2), type=EntryType.SOLD, quantity=4, balance=6),
        ]

        assert ledger.closing_balance == 6

    def test_find_entry(self) -> None:
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 1))
        ledger.entries = [
            LedgerEntry(id="a", date=date(2026, 1, 1), type=EntryType.ADDED, quantity=1),
            LedgerEntry(id="b", date=date(2026, 1, 1), type=EntryType.SOLD, quantity=1),
        ]

        assert ledger.find_entry("b") == 1
        assert ledger.find_entry("zzz") is None

    def test_statistics(self) -> None:
        """통계는 기록에서 재집계"""
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 2), carry_forward=70)
        ledger.expired_carry_forward_stock = 12
        ledger.entries = [
            LedgerEntry(
                date=date(2026, 2, 1), type=EntryType.ADDED, quantity=10,
                stock_added=10, balance=80,
            ),
            LedgerEntry(
                date=date(2026, 2, 2), type=EntryType.SOLD, quantity=20,
                used_stock=20, balance=60,
            ),
            LedgerEntry(
                date=date(2026, 2, 3), type=EntryType.DAMAGED, quantity=2,
                damage_stock=2, balance=58,
            ),
        ]

        stats = ledger.statistics()

        assert stats == {
            "totalAdded": 10,
            "totalSold": 20,
            "totalExpired": 0,
            "expiredOldStock": 12,
            "totalDamaged": 2,
            "openingBalance": 70,
            "closingBalance": 58,
        }
        assert ledger.total_used_stock == 20

    def test_to_dict_period(self) -> None:
        ledger = MonthlyLedger.empty(KEY, MonthKey(2026, 3), carry_forward=5)

        data = ledger.to_dict()

        assert data["theaterId"] == "theater-1"
        assert data["productId"] == "popcorn"
        assert data["period"] == {"year": 2026, "month": 3, "monthName": "March"}
        assert data["closingBalance"] == 5
        assert data["statistics"]["openingBalance"] == 5
