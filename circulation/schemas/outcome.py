from typing import Any, Optional
from pydantic import BaseModel
from .loan import Loan
from .fine import Fine


class ErrorDetail(BaseModel):
    kind: str
    message: str


class Outcome(BaseModel):
    """What the core hands back across its boundary: a value or a typed error."""
    ok: bool
    value: Any = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def success(cls, value=None):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc):
        return cls(ok=False, error=ErrorDetail(kind=exc.kind.value, message=str(exc)))


class ReturnReceipt(BaseModel):
    loan: Loan
    fine: Optional[Fine] = None


class InventoryRecord(BaseModel):
    book_id: str
    total_copies: int
    available_copies: int
    status: str
