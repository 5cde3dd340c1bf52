#!/usr/bin/env python

"""
    Persistence collaborator for Circulation.

    The core never keeps records of its own between calls; every
    operation reads what it needs through a `Repository` and writes its
    mutations back through it. `MemoryRepository` serves tests and
    embedded use, `SQLRepository` stores records in the tables of
    `circulation.models`.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import abc
import logging
import threading
from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from circulation import models
from circulation.core.exceptions import PersistenceError
from circulation.schemas import (
    Book, Member, Loan, Fine, Reservation,
    LoanStatus, ReservationStatus
)

logger = logging.getLogger(__name__)


class Repository(abc.ABC):

    # books
    @abc.abstractmethod
    def get_book(self, book_id: str) -> Optional[Book]: ...

    @abc.abstractmethod
    def save_book(self, book: Book) -> Book: ...

    @abc.abstractmethod
    def list_books(self) -> List[Book]: ...

    # members
    @abc.abstractmethod
    def get_member(self, member_id: str) -> Optional[Member]: ...

    @abc.abstractmethod
    def save_member(self, member: Member) -> Member: ...

    # loans
    @abc.abstractmethod
    def get_loan(self, loan_id: str) -> Optional[Loan]: ...

    @abc.abstractmethod
    def save_loan(self, loan: Loan) -> Loan: ...

    @abc.abstractmethod
    def loans_for_member(self, member_id: str) -> List[Loan]: ...

    @abc.abstractmethod
    def active_loans(self) -> List[Loan]: ...

    def active_loans_for_book(self, book_id: str) -> List[Loan]:
        return [l for l in self.active_loans() if l.book_id == book_id]

    def active_loans_for_member(self, member_id: str) -> List[Loan]:
        return [l for l in self.loans_for_member(member_id) if l.return_date is None]

    # fines
    @abc.abstractmethod
    def get_fine(self, fine_id: str) -> Optional[Fine]: ...

    @abc.abstractmethod
    def save_fine(self, fine: Fine) -> Fine: ...

    @abc.abstractmethod
    def list_fines(self) -> List[Fine]: ...

    def fines_for_member(self, member_id: str) -> List[Fine]:
        return [f for f in self.list_fines() if f.member_id == member_id]

    # reservations
    @abc.abstractmethod
    def get_reservation(self, reservation_id: str) -> Optional[Reservation]: ...

    @abc.abstractmethod
    def save_reservation(self, reservation: Reservation) -> Reservation: ...

    @abc.abstractmethod
    def reservations_for_book(self, book_id: str, status: Optional[ReservationStatus] = None) -> List[Reservation]: ...

    @abc.abstractmethod
    def reservations_for_member(self, member_id: str) -> List[Reservation]: ...

    @abc.abstractmethod
    def active_reservations(self) -> List[Reservation]: ...


class MemoryRepository(Repository):
    """Dictionaries of records. Stores and hands out copies, so a caller
    holding a record never sees another caller's later writes."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._books: Dict[str, Book] = {}
        self._members: Dict[str, Member] = {}
        self._loans: Dict[str, Loan] = {}
        self._fines: Dict[str, Fine] = {}
        self._reservations: Dict[str, Reservation] = {}

    def _get(self, table, key):
        with self._lock:
            record = table.get(key)
            return record.model_copy(deep=True) if record else None

    def _put(self, table, record):
        with self._lock:
            table[record.id] = record.model_copy(deep=True)
        return record

    def _select(self, table, predicate=None):
        with self._lock:
            return [
                r.model_copy(deep=True) for r in table.values()
                if predicate is None or predicate(r)
            ]

    def get_book(self, book_id):
        return self._get(self._books, book_id)

    def save_book(self, book):
        return self._put(self._books, book)

    def list_books(self):
        return self._select(self._books)

    def get_member(self, member_id):
        return self._get(self._members, member_id)

    def save_member(self, member):
        return self._put(self._members, member)

    def get_loan(self, loan_id):
        return self._get(self._loans, loan_id)

    def save_loan(self, loan):
        return self._put(self._loans, loan)

    def loans_for_member(self, member_id):
        return self._select(self._loans, lambda l: l.member_id == member_id)

    def active_loans(self):
        return self._select(self._loans, lambda l: l.return_date is None)

    def get_fine(self, fine_id):
        return self._get(self._fines, fine_id)

    def save_fine(self, fine):
        return self._put(self._fines, fine)

    def list_fines(self):
        return self._select(self._fines)

    def get_reservation(self, reservation_id):
        return self._get(self._reservations, reservation_id)

    def save_reservation(self, reservation):
        return self._put(self._reservations, reservation)

    def reservations_for_book(self, book_id, status=None):
        return self._select(self._reservations, lambda r: (
            r.book_id == book_id and (status is None or r.status == status)))

    def reservations_for_member(self, member_id):
        return self._select(self._reservations, lambda r: r.member_id == member_id)

    def active_reservations(self):
        return self._select(
            self._reservations, lambda r: r.status == ReservationStatus.ACTIVE)


class SQLRepository(Repository):
    """Records stored through a SQLAlchemy session (see `circulation.core.db`)."""

    def __init__(self, session) -> None:
        self.session = session

    def _query(self, row_cls):
        # Other sessions may have written since this one last loaded a row.
        return self.session.query(row_cls).populate_existing()

    def _get(self, row_cls, schema, key):
        row = self.session.get(row_cls, key, populate_existing=True)
        return schema.model_validate(row) if row is not None else None

    def _put(self, row_cls, record):
        try:
            self.session.merge(row_cls(**record.model_dump()))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save {row_cls.__tablename__} record {record.id}: {e}")
            raise PersistenceError(f"Failed to save {row_cls.__tablename__} record: {str(e)}.") from e
        return record

    def get_book(self, book_id):
        return self._get(models.books.Book, Book, book_id)

    def save_book(self, book):
        return self._put(models.books.Book, book)

    def list_books(self):
        return [Book.model_validate(r) for r in self._query(models.books.Book).all()]

    def get_member(self, member_id):
        return self._get(models.members.Member, Member, member_id)

    def save_member(self, member):
        return self._put(models.members.Member, member)

    def get_loan(self, loan_id):
        return self._get(models.loans.Loan, Loan, loan_id)

    def save_loan(self, loan):
        return self._put(models.loans.Loan, loan)

    def loans_for_member(self, member_id):
        rows = self._query(models.loans.Loan).filter(
            models.loans.Loan.member_id == member_id).all()
        return [Loan.model_validate(r) for r in rows]

    def active_loans(self):
        rows = self._query(models.loans.Loan).filter(
            models.loans.Loan.return_date == None).all()
        return [Loan.model_validate(r) for r in rows]

    def active_loans_for_book(self, book_id):
        rows = self._query(models.loans.Loan).filter(
            models.loans.Loan.book_id == book_id,
            models.loans.Loan.status == LoanStatus.ACTIVE,
            models.loans.Loan.return_date == None).all()
        return [Loan.model_validate(r) for r in rows]

    def get_fine(self, fine_id):
        return self._get(models.fines.Fine, Fine, fine_id)

    def save_fine(self, fine):
        return self._put(models.fines.Fine, fine)

    def list_fines(self):
        return [Fine.model_validate(r) for r in self._query(models.fines.Fine).all()]

    def fines_for_member(self, member_id):
        rows = self._query(models.fines.Fine).filter(
            models.fines.Fine.member_id == member_id).all()
        return [Fine.model_validate(r) for r in rows]

    def get_reservation(self, reservation_id):
        return self._get(models.reservations.Reservation, Reservation, reservation_id)

    def save_reservation(self, reservation):
        return self._put(models.reservations.Reservation, reservation)

    def reservations_for_book(self, book_id, status=None):
        query = self._query(models.reservations.Reservation).filter(
            models.reservations.Reservation.book_id == book_id)
        if status is not None:
            query = query.filter(models.reservations.Reservation.status == status)
        return [Reservation.model_validate(r) for r in query.all()]

    def reservations_for_member(self, member_id):
        rows = self._query(models.reservations.Reservation).filter(
            models.reservations.Reservation.member_id == member_id).all()
        return [Reservation.model_validate(r) for r in rows]

    def active_reservations(self):
        rows = self._query(models.reservations.Reservation).filter(
            models.reservations.Reservation.status == ReservationStatus.ACTIVE).all()
        return [Reservation.model_validate(r) for r in rows]
