import enum
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from circulation.core.utils import as_utc


class ReservationStatus(str, enum.Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Reservation(BaseModel):
    id: str
    book_id: str
    member_id: str
    reservation_date: datetime
    expiry_date: datetime
    status: ReservationStatus = ReservationStatus.ACTIVE
    priority: int = Field(..., ge=1)

    @field_validator("reservation_date", "expiry_date")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    class Config:
        from_attributes = True
