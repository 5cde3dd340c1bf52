#!/usr/bin/env python

"""
    Borrow and return for Circulation.

    A loan is created `active` and moves once, to `returned`. `overdue`
    is never stored: it is derived from the due date whenever a loan is
    looked at (see `Loan.status_at`).

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
import datetime
from typing import Iterator, List, Optional
from circulation.configs import LOAN_PERIOD_DAYS
from circulation.core.utils import resolve_now, new_id
from circulation.core.exceptions import (
    NotFoundError,
    AlreadyBorrowedError,
    MemberHasOverdueError,
    MemberNotEligibleError,
    OutOfStockError
)
from circulation.schemas import Loan, LoanStatus, Member, FineQuote, ReturnReceipt

logger = logging.getLogger(__name__)


def eligible_member(repo, member_id: str) -> Member:
    if not (member := repo.get_member(member_id)):
        raise NotFoundError(f"Member {member_id} not found.")
    if not member.is_eligible:
        raise MemberNotEligibleError(f"Member {member_id} is {member.status.value}.")
    return member


class LoanHistory:
    """A member's loans, newest first. Reads the repository each time it
    is iterated, so it can be walked again to see later changes."""

    def __init__(self, repo, member_id: str):
        self.repo = repo
        self.member_id = member_id

    def __iter__(self) -> Iterator[Loan]:
        loans = self.repo.loans_for_member(self.member_id)
        yield from sorted(loans, key=lambda l: l.borrow_date, reverse=True)


class LoanService:

    def __init__(self, repo, ledger, fines, loan_period_days: int = LOAN_PERIOD_DAYS):
        self.repo = repo
        self.ledger = ledger
        self.fines = fines
        self.locks = ledger.locks
        self.loan_period = datetime.timedelta(days=loan_period_days)

    def get(self, loan_id: str) -> Loan:
        if not (loan := self.repo.get_loan(loan_id)):
            raise NotFoundError(f"Loan {loan_id} not found.")
        return loan

    def borrow(self, member_id: str, book_id: str, now: Optional[datetime.datetime] = None) -> Loan:
        """
        Lend a copy of a book to a member.

        Args:
            member_id: The borrowing member.
            book_id: The title to lend a copy of.
            now: Borrow time; the loan is due `loan_period_days` later.

        Returns:
            The new active Loan.

        Raises:
            NotFoundError: If the book or member is unknown.
            MemberNotEligibleError: If the member is suspended.
            AlreadyBorrowedError: If the member still holds a copy of this book.
            MemberHasOverdueError: If any of the member's loans is past due.
            OutOfStockError: If no copy is on the shelf.
        """
        now = resolve_now(now)
        with self.locks.hold(book_id):
            self.ledger.get(book_id)
            eligible_member(self.repo, member_id)

            active = self.repo.active_loans_for_member(member_id)
            if any(l.book_id == book_id for l in active):
                raise AlreadyBorrowedError(
                    f"Member {member_id} already has book {book_id} on loan.")
            if overdue := [l.id for l in active if l.is_overdue(now)]:
                logger.warning(f"Borrow refused: member {member_id} has overdue loans {overdue}")
                raise MemberHasOverdueError(
                    f"Member {member_id} has {len(overdue)} overdue loan(s).")

            try:
                self.ledger.decrement_available(book_id)
            except OutOfStockError:
                logger.warning(f"Borrow refused: book {book_id} out of stock for member {member_id}")
                raise

            loan = Loan(
                id=new_id("loan"),
                book_id=book_id,
                member_id=member_id,
                borrow_date=now,
                due_date=now + self.loan_period,
            )
            try:
                self.repo.save_loan(loan)
            except Exception:
                logger.error(f"Borrow of book {book_id} by member {member_id} not saved; putting the copy back")
                self.ledger.increment_available(book_id, notify=False)
                raise
        logger.info(f"Loan {loan.id}: member {member_id} borrowed book {book_id}, due {loan.due_date.isoformat()}")
        return loan

    def return_loan(self, loan_id: str, now: Optional[datetime.datetime] = None) -> ReturnReceipt:
        """
        Close an active loan, charging a fine if it came back late.

        The copy count, the closed loan and the fine are saved together:
        if any of them fails the others are put back and the loan stays
        active, so the return can be retried. The reservation queue only
        hears about the copy once all three are saved.

        Raises:
            NotFoundError: If there is no active loan `loan_id`.
            ConsistencyError: If the book already has every copy on the shelf.
        """
        now = resolve_now(now)
        loan = self._active(loan_id)
        with self.locks.hold(loan.book_id):
            # Re-read under the lock; a concurrent return may have won.
            loan = self._active(loan_id)
            original = loan.model_copy(deep=True)
            book = self.ledger.increment_available(loan.book_id, notify=False)

            quote = self.fines.calculator.calculate(loan.due_date, now)
            loan.return_date = now
            loan.status = LoanStatus.RETURNED
            loan.fine_amount = quote.fine_amount
            fine = None
            try:
                self.repo.save_loan(loan)
                if quote.fine_amount > 0:
                    fine = self.fines.assess(
                        loan.member_id, quote.fine_amount, loan_id=loan.id,
                        days_overdue=quote.days_overdue, now=now)
            except Exception:
                logger.error(f"Return of loan {loan_id} not saved; loan stays active")
                self.ledger.decrement_available(loan.book_id)
                self.repo.save_loan(original)
                raise

            self.ledger.announce(book)
        logger.info(f"Loan {loan.id} returned, fine {loan.fine_amount:.2f}")
        return ReturnReceipt(loan=loan, fine=fine)

    def _active(self, loan_id):
        loan = self.repo.get_loan(loan_id)
        if not loan or loan.return_date is not None:
            raise NotFoundError(f"No active loan {loan_id}.")
        return loan

    def history(self, member_id: str) -> LoanHistory:
        return LoanHistory(self.repo, member_id)

    def return_history(self, member_id: str) -> List[Loan]:
        returned = [l for l in self.repo.loans_for_member(member_id) if l.is_returned]
        return sorted(returned, key=lambda l: l.return_date, reverse=True)

    def active_loans(self) -> List[Loan]:
        return self.repo.active_loans()

    def overdue_loans(self, now: Optional[datetime.datetime] = None) -> List[Loan]:
        now = resolve_now(now)
        return [l for l in self.repo.active_loans() if l.is_overdue(now)]

    def preview_fine(self, loan_id: str, as_of: Optional[datetime.datetime] = None) -> FineQuote:
        """Fine-to-date for a loan; returned loans are priced at their return date."""
        loan = self.get(loan_id)
        return self.fines.calculator.calculate(loan.due_date, loan.return_date or as_of)
