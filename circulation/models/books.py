#!/usr/bin/env python 

"""
    Book Model for Circulation,
    including the copy counters kept by the inventory ledger.
    
    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, Enum as SQLAlchemyEnum
from sqlalchemy.sql import func
from circulation.schemas.book import BookStatus
from . import Base

class Book(Base):
    __tablename__ = 'books'
    
    id = Column(String(50), primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(20))
    category = Column(String(100))
    total_copies = Column(Integer, nullable=False, default=1)
    available_copies = Column(Integer, nullable=False, default=1)
    status = Column(SQLAlchemyEnum(BookStatus), nullable=False, default=BookStatus.AVAILABLE)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('available_copies >= 0', name='available_not_negative'),
        CheckConstraint('available_copies <= total_copies', name='available_within_total'),
    )
