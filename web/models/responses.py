"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StockEntryResponse(_CamelModel):
    """재고 기록 응답"""

    id: str = Field(..., description="기록 ID")
    date: str = Field(..., description="거래 일자 (YYYY-MM-DD)")
    type: str = Field(..., description="기록 유형")
    quantity: int = Field(..., description="수량")
    stock_added: int = Field(..., alias="stockAdded", description="입고 수량")
    used_stock: int = Field(..., alias="usedStock", description="사용 수량")
    expired_stock: int = Field(..., alias="expiredStock", description="만료 수량")
    damage_stock: int = Field(..., alias="damageStock", description="파손 수량")
    balance: int = Field(..., description="기록 반영 후 잔액")
    expire_date: str | None = Field(default=None, alias="expireDate", description="유통기한")
    batch_number: str | None = Field(default=None, alias="batchNumber", description="배치 번호")
    notes: str | None = Field(default=None, description="메모")


class StockStatisticsResponse(_CamelModel):
    """월간 통계 응답"""

    total_added: int = Field(..., alias="totalAdded")
    total_sold: int = Field(..., alias="totalSold")
    total_expired: int = Field(..., alias="totalExpired")
    expired_old_stock: int = Field(..., alias="expiredOldStock", description="이전 월 입고분 중 이번 달 만료")
    total_damaged: int = Field(..., alias="totalDamaged")
    opening_balance: int = Field(..., alias="openingBalance")
    closing_balance: int = Field(..., alias="closingBalance")


class PeriodResponse(_CamelModel):
    """원장 기간"""

    year: int
    month: int
    month_name: str = Field(..., alias="monthName")


class MonthlyStockResponse(_CamelModel):
    """월 원장 응답"""

    theater_id: str = Field(..., alias="theaterId")
    product_id: str = Field(..., alias="productId")
    period: PeriodResponse
    carry_forward: int = Field(..., alias="carryForward")
    expired_carry_forward_stock: int = Field(..., alias="expiredCarryForwardStock")
    entries: list[StockEntryResponse] = Field(default_factory=list)
    statistics: StockStatisticsResponse
    closing_balance: int = Field(..., alias="closingBalance")


class StockMutationResponse(_CamelModel):
    """기록 추가/수정/삭제 응답"""

    success: bool = True
    message: str
    entry: StockEntryResponse | None = None
    ledger: MonthlyStockResponse
