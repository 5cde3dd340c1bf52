from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, Enum as SQLAlchemyEnum
from circulation.schemas.fine import FineStatus
from . import Base

class Fine(Base):
    __tablename__ = 'fines'

    id = Column(String(50), primary_key=True)
    loan_id = Column(String(50), ForeignKey('loans.id', ondelete='SET NULL'))
    member_id = Column(String(50), ForeignKey('members.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    days_overdue = Column(Integer, nullable=False, default=0)
    status = Column(SQLAlchemyEnum(FineStatus), nullable=False, default=FineStatus.PENDING)
    created_at = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True))
    waived_at = Column(DateTime(timezone=True))
    waived_by = Column(String(50))
    waiver_reason = Column(String)
