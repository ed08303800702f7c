"""Order domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class MarkPrintedRequest(BaseModel):
    """Schema for the bulk mark-printed operation"""

    orderIds: list[int]

    @field_validator("orderIds")
    @classmethod
    def validate_order_ids(cls, v):
        if not v:
            raise ValueError("At least one order ID is required")
        return v


class SkippedOrder(BaseModel):
    order_id: int
    status: str


class MarkPrintedResponse(BaseModel):
    updated: list[int]
    skipped: list[SkippedOrder]


class OrderResponse(BaseModel):
    """Schema for order response"""

    id: int
    recipientId: Optional[int]
    occasionId: Optional[int]
    targetYear: int
    occasionType: str
    occasionDate: date
    occasionNotes: Optional[str] = None
    cardType: str
    cardVariation: Optional[str] = None
    status: str
    printDate: Optional[datetime] = None
    mailDate: Optional[datetime] = None
    recipientName: str
    recipientAddress: str
    returnName: str
    returnAddress: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BatchRunSummary(BaseModel):
    """Result of one create-due-orders pass"""

    run_date: str
    examined: int
    created: int
    deferred: int
    not_due: int
    skipped: int
    failed: int
    created_order_ids: list[int]
    skipped_occasions: list[dict]
    failures: list[dict]
