"""
pytest 공통 fixture 정의

임시 설정 파일, 임시 SQLite DB, 원장 서비스 fixture
"""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.mock.product_stock import MockProductStockGateway
from core.config.loader import LedgerConfig, Settings
from core.ledger.service import LedgerService
from core.ledger.store import LedgerStore
from core.types import StockKey


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
database:
  path: {(temp_dir / "stock_test.db").as_posix()}

ledger:
  timezone: Asia/Kolkata
  delete_clamps_balance: false
  chain_max_passes: 10

web:
  host: 127.0.0.1
  port: 8123
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(temp_dir / "ledger_test.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def stock_key() -> StockKey:
    """테스트용 (극장, 상품)"""
    return StockKey("theater-1", "popcorn-large")


@pytest.fixture
def gateway() -> MockProductStockGateway:
    return MockProductStockGateway()


class FixedClock:
    """테스트용 고정 시각 (현지 naive)"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 15, 12, 0))


@pytest.fixture
def service(db: SQLiteAdapter, gateway: MockProductStockGateway, clock: FixedClock) -> LedgerService:
    """Mock 게이트웨이 + 고정 시각 LedgerService"""
    return LedgerService(
        store=LedgerStore(db),
        product_gateway=gateway,
        config=LedgerConfig(),
        clock=clock,
    )
