"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IProductStockGateway(Protocol):
    """Product 집계 재고 갱신 인터페이스

    원장 작업 후 기말 잔액을 상품의 currentStock 으로 밀어넣는 경계.
    실패는 호출 측(원장 서비스)에서 로그만 남기고 무시됨.
    """

    async def update_product_stock(
        self,
        product_id: str,
        theater_id: str,
        fields: dict[str, Any],
    ) -> None:
        """상품 재고 필드 갱신

        Args:
            product_id: 상품 ID
            theater_id: 극장 ID
            fields: 갱신할 필드 (예: {"currentStock": 70})
        """
        ...
