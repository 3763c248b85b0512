"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    StockEntryCreateRequest,
    StockEntryUpdateRequest,
)
from web.models.responses import (
    HealthResponse,
    MonthlyStockResponse,
    StockEntryResponse,
    StockMutationResponse,
)

__all__ = [
    # Requests
    "StockEntryCreateRequest",
    "StockEntryUpdateRequest",
    # Responses
    "HealthResponse",
    "MonthlyStockResponse",
    "StockEntryResponse",
    "StockMutationResponse",
]
