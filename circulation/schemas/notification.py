from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class Notification(BaseModel):
    member_id: str = Field(..., min_length=1, max_length=50)
    type: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1)
    reservation_id: Optional[str] = None
    date: Optional[datetime] = None

    class Config:
        from_attributes = True
