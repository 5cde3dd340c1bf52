import enum
from typing import Optional
from pydantic import BaseModel


class MemberStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Member(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    status: MemberStatus = MemberStatus.ACTIVE

    @property
    def is_eligible(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    class Config:
        from_attributes = True
