from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum as SQLAlchemyEnum
from circulation.schemas.reservation import ReservationStatus
from . import Base

class Reservation(Base):
    __tablename__ = 'reservations'

    id = Column(String(50), primary_key=True)
    book_id = Column(String(50), ForeignKey('books.id', ondelete='CASCADE'), nullable=False, index=True)
    member_id = Column(String(50), ForeignKey('members.id', ondelete='CASCADE'), nullable=False, index=True)
    reservation_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(SQLAlchemyEnum(ReservationStatus), nullable=False, default=ReservationStatus.ACTIVE)
    priority = Column(Integer, nullable=False)
