"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.types import EntryType


class StockEntryRequest(BaseModel):
    """재고 기록 요청 (추가/수정 공통)

    balance 는 호환을 위해 받기만 하고 무시 (항상 서버에서 재계산).
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "date": "2026-01-05",
                    "type": "ADDED",
                    "quantity": 100,
                    "expireDate": "2026-01-31",
                    "batchNumber": "B-0105",
                },
                {
                    "date": "2026-01-10",
                    "type": "SOLD",
                    "quantity": 30,
                },
            ]
        },
    )

    date: datetime.date = Field(..., description="거래 일자")
    type: EntryType = Field(..., description="기록 유형")
    quantity: int = Field(..., gt=0, description="수량 (양수)")
    used_stock: int = Field(default=0, ge=0, alias="usedStock", description="입고분 중 사용 수량")
    damage_stock: int = Field(default=0, ge=0, alias="damageStock", description="입고분 중 파손 수량")
    balance: int | None = Field(default=None, description="무시됨 (서버에서 재계산)")
    expire_date: datetime.date | None = Field(default=None, alias="expireDate", description="유통기한")
    batch_number: str | None = Field(default=None, alias="batchNumber", description="배치 번호")
    notes: str | None = Field(default=None, description="메모")


class StockEntryCreateRequest(StockEntryRequest):
    """재고 기록 추가 요청"""

    pass


class StockEntryUpdateRequest(StockEntryRequest):
    """재고 기록 수정 요청 (전체 교체, 대상 월은 date 로 결정)"""

    pass
