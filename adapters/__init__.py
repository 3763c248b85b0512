"""
어댑터 레이어

외부 저장소(DB, Product 집계 등)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import IProductStockGateway

__all__ = [
    # Interfaces
    "IProductStockGateway",
]
