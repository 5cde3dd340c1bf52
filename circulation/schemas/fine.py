import enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from circulation.core.utils import as_utc


class FineStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"
    OVERDUE = "overdue"


class Fine(BaseModel):
    id: str
    loan_id: Optional[str] = None
    member_id: str
    amount: float = Field(..., ge=0)
    days_overdue: int = 0
    status: FineStatus = FineStatus.PENDING
    created_at: datetime
    paid_at: Optional[datetime] = None
    waived_at: Optional[datetime] = None
    waived_by: Optional[str] = None
    waiver_reason: Optional[str] = None

    @field_validator("created_at", "paid_at", "waived_at")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value)

    @property
    def is_settled(self) -> bool:
        return self.status in (FineStatus.PAID, FineStatus.WAIVED)

    class Config:
        from_attributes = True


class FineQuote(BaseModel):
    days_overdue: int
    fine_amount: float


class FineStatistics(BaseModel):
    total_fines: int = 0
    total_pending: int = 0
    total_paid: int = 0
    total_waived: int = 0
    total_overdue: int = 0
    pending_amount: float = 0.0
    paid_amount: float = 0.0
    waived_amount: float = 0.0
