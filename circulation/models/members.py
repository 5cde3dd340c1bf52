from sqlalchemy import Column, String, DateTime, Enum as SQLAlchemyEnum
from sqlalchemy.sql import func
from circulation.schemas.member import MemberStatus
from . import Base

class Member(Base):
    __tablename__ = 'members'

    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255))
    status = Column(SQLAlchemyEnum(MemberStatus), nullable=False, default=MemberStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=func.now())
