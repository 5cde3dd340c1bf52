#!/usr/bin/env python

"""
    The boundary of the Circulation core.

    `CirculationAPI` wires the ledger, loan, fine and reservation services
    around one repository and one set of per-book locks, and turns every
    `CirculationError` into an `Outcome` so no core error escapes as an
    exception. Storage failures (`PersistenceError`) and programming
    errors still propagate: retrying those is the caller's call.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from functools import wraps
from circulation.configs import DB_URI, LOAN_PERIOD_DAYS, RESERVATION_EXPIRY_DAYS, FINE_PAYMENT_DAYS
from circulation.core import db
from circulation.core.locks import BookLocks
from circulation.core.repository import MemoryRepository, SQLRepository
from circulation.core.inventory import InventoryLedger
from circulation.core.fines import FineCalculator, FineService
from circulation.core.loans import LoanService
from circulation.core.reservations import ReservationQueue
from circulation.core.exceptions import CirculationError, PersistenceError
from circulation.core.utils import resolve_now
from circulation.schemas import Book, Member, Outcome

logger = logging.getLogger(__name__)


def returns_outcome(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return Outcome.success(func(*args, **kwargs))
        except PersistenceError:
            raise
        except CirculationError as e:
            logger.debug(f"{func.__name__} failed with {e.kind.value}: {e}")
            return Outcome.failure(e)
    return wrapper


class CirculationAPI:

    def __init__(self, repo=None, notifier=None, fine_policy=None,
                 loan_period_days=LOAN_PERIOD_DAYS,
                 reservation_expiry_days=RESERVATION_EXPIRY_DAYS,
                 fine_payment_days=FINE_PAYMENT_DAYS):
        self.repo = repo or MemoryRepository()
        self.locks = BookLocks()
        self.ledger = InventoryLedger(self.repo, self.locks)
        self.fines = FineService(self.repo, FineCalculator(fine_policy), fine_payment_days)
        self.loans = LoanService(self.repo, self.ledger, self.fines, loan_period_days)
        self.reservations = ReservationQueue(
            self.repo, self.ledger, notifier, reservation_expiry_days)

    @classmethod
    def from_uri(cls, uri=DB_URI, **kwargs):
        """An API backed by the SQL tables at `uri`, created if missing."""
        return cls(repo=SQLRepository(db.init(uri)), **kwargs)

    # ---- catalog & membership supply
    @returns_outcome
    def add_book(self, book: Book):
        return self.ledger.register(book)

    @returns_outcome
    def add_member(self, member: Member):
        return self.repo.save_member(member)

    # ---- inventory
    @returns_outcome
    def book(self, book_id):
        return self.ledger.get(book_id)

    @returns_outcome
    def inventory(self):
        return self.ledger.snapshot()

    @returns_outcome
    def check_inventory(self, book_id):
        return self.ledger.check(book_id)

    # ---- borrow & return
    @returns_outcome
    def borrow(self, member_id, book_id, now=None):
        return self.loans.borrow(member_id, book_id, now=now)

    @returns_outcome
    def return_loan(self, loan_id, now=None):
        return self.loans.return_loan(loan_id, now=now)

    @returns_outcome
    def history(self, member_id):
        return self.loans.history(member_id)

    @returns_outcome
    def overdue_loans(self, now=None):
        return self.loans.overdue_loans(now)

    @returns_outcome
    def preview_fine(self, loan_id, as_of=None):
        return self.loans.preview_fine(loan_id, as_of)

    # ---- fines
    @returns_outcome
    def assess_fine(self, member_id, amount, reason=None, now=None):
        fine = self.fines.assess(member_id, amount, now=now)
        logger.info(f"Administrative fine {fine.id} on member {member_id}: {reason or 'no reason given'}")
        return fine

    @returns_outcome
    def pay_fine(self, fine_id, now=None):
        return self.fines.pay(fine_id, now=now)

    @returns_outcome
    def waive_fine(self, fine_id, waived_by, reason, now=None):
        return self.fines.waive(fine_id, waived_by, reason, now=now)

    @returns_outcome
    def fines_for_member(self, member_id, unpaid_only=False):
        if unpaid_only:
            return self.fines.unpaid(member_id)
        return self.fines.fines_for_member(member_id)

    @returns_outcome
    def fine_statistics(self):
        return self.fines.statistics(self.repo.list_fines())

    # ---- reservations
    @returns_outcome
    def reserve(self, member_id, book_id, now=None):
        return self.reservations.reserve(member_id, book_id, now=now)

    @returns_outcome
    def cancel_reservation(self, reservation_id):
        return self.reservations.cancel(reservation_id)

    @returns_outcome
    def fulfill_next(self, book_id):
        return self.reservations.fulfill_next(book_id)

    @returns_outcome
    def queue(self, book_id):
        return self.reservations.queue(book_id)

    @returns_outcome
    def expire_stale(self, now=None):
        return self.reservations.expire_stale(now)

    # ---- periodic sweep
    @returns_outcome
    def sweep(self, now=None):
        """Expire stale reservations and age unpaid fines; meant for a timer."""
        now = resolve_now(now)
        expired = self.reservations.expire_stale(now)
        overdue = self.fines.mark_overdue(now)
        return {"expired_reservations": expired, "overdue_fines": overdue}
