"""
Mock Product 재고 게이트웨이

테스트용 Mock.
IProductStockGateway Protocol 준수.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass
class StockPushRecord:
    """재고 갱신 기록"""

    product_id: str
    theater_id: str
    fields: dict[str, Any]
    timestamp: datetime
    succeeded: bool


class MockProductStockGateway:
    """Mock Product 재고 게이트웨이

    모든 갱신 요청을 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    gateway = MockProductStockGateway()

    await gateway.update_product_stock("p1", "t1", {"currentStock": 70})

    assert gateway.pushes[-1].fields == {"currentStock": 70}
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 갱신 실패 (에러 시나리오 테스트용)
        """
        self.should_fail = should_fail
        self.pushes: list[StockPushRecord] = []

    async def update_product_stock(
        self,
        product_id: str,
        theater_id: str,
        fields: dict[str, Any],
    ) -> None:
        """재고 갱신 (기록 후 should_fail이면 예외)"""
        self.pushes.append(
            StockPushRecord(
                product_id=product_id,
                theater_id=theater_id,
                fields=dict(fields),
                timestamp=datetime.now(timezone.utc),
                succeeded=not self.should_fail,
            )
        )

        if self.should_fail:
            raise ConnectionError("Mock product stock update failure")

    @property
    def last_stock(self) -> int | None:
        """마지막으로 성공한 currentStock 값"""
        for record in reversed(self.pushes):
            if record.succeeded:
                return record.fields.get("currentStock")
        return None

    def clear(self) -> None:
        """기록 초기화"""
        self.pushes.clear()
