import enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator
from circulation.core.utils import as_utc


class LoanStatus(str, enum.Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    OVERDUE = "overdue"


class Loan(BaseModel):
    id: str
    book_id: str
    member_id: str
    borrow_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    status: LoanStatus = LoanStatus.ACTIVE
    fine_amount: float = 0.0

    @field_validator("borrow_date", "due_date", "return_date")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value)

    @property
    def is_returned(self) -> bool:
        return self.return_date is not None

    def is_overdue(self, now: datetime) -> bool:
        return self.return_date is None and now > self.due_date

    def status_at(self, now: datetime) -> LoanStatus:
        """The stored status, with `overdue` derived for unreturned loans past due."""
        if self.is_overdue(now):
            return LoanStatus.OVERDUE
        return self.status

    class Config:
        from_attributes = True
