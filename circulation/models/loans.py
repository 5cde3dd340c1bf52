from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum as SQLAlchemyEnum
from circulation.schemas.loan import LoanStatus
from . import Base

class Loan(Base):
    __tablename__ = 'loans'

    id = Column(String(50), primary_key=True)
    book_id = Column(String(50), ForeignKey('books.id', ondelete='CASCADE'), nullable=False, index=True)
    member_id = Column(String(50), ForeignKey('members.id', ondelete='CASCADE'), nullable=False, index=True)
    borrow_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    return_date = Column(DateTime(timezone=True))
    status = Column(SQLAlchemyEnum(LoanStatus), nullable=False, default=LoanStatus.ACTIVE)
    fine_amount = Column(Float, nullable=False, default=0.0)
