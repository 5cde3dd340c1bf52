#!/usr/bin/env python

"""
    Fines for Circulation.

    `FineCalculator` is pure: it maps a due date and a point in time to
    days overdue and an amount, so it can be called repeatedly to preview
    a fine before the book comes back. `FineService` keeps the fine
    records a member owes and moves them through pending, overdue, paid
    and waived.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import math
import logging
import datetime
import threading
from typing import Iterable, List, Optional
from pydantic import BaseModel, Field, ValidationError
from circulation.configs import (
    FINE_DAILY_RATE, FINE_MAX, FINE_GRACE_PERIOD_DAYS, FINE_PAYMENT_DAYS
)
from circulation.core.utils import as_utc, resolve_now, new_id
from circulation.core.exceptions import (
    NotFoundError,
    FineAlreadySettledError,
    InvalidPolicyError,
    InvalidFineError
)
from circulation.schemas import Fine, FineStatus, FineQuote, FineStatistics

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class FinePolicy(BaseModel):
    daily_rate: float = Field(default=FINE_DAILY_RATE, ge=0)
    max_fine: float = Field(default=FINE_MAX, ge=0)
    grace_period_days: int = Field(default=FINE_GRACE_PERIOD_DAYS, ge=0)

    class Config:
        frozen = True


class FineCalculator:

    def __init__(self, policy: Optional[FinePolicy] = None, **overrides):
        try:
            self.policy = policy or FinePolicy(**overrides)
        except ValidationError as e:
            raise InvalidPolicyError(f"Invalid fine policy: {e}") from e

    def days_overdue(self, due_date: datetime.datetime, as_of: Optional[datetime.datetime] = None) -> int:
        """Whole days past due, rounding any partial day up, less the grace period."""
        as_of = resolve_now(as_of)
        elapsed = (as_of - as_utc(due_date)).total_seconds() / SECONDS_PER_DAY
        return max(0, math.ceil(elapsed) - self.policy.grace_period_days)

    def fine_amount(self, days_overdue: int) -> float:
        amount = min(days_overdue * self.policy.daily_rate, self.policy.max_fine)
        return round(amount, 2)

    def calculate(self, due_date: datetime.datetime, as_of: Optional[datetime.datetime] = None) -> FineQuote:
        days = self.days_overdue(due_date, as_of)
        return FineQuote(days_overdue=days, fine_amount=self.fine_amount(days))


class FineService:

    UNPAID = (FineStatus.PENDING, FineStatus.OVERDUE)

    def __init__(self, repo, calculator: Optional[FineCalculator] = None, payment_days: int = FINE_PAYMENT_DAYS):
        self.repo = repo
        self.calculator = calculator or FineCalculator()
        self.payment_days = payment_days
        self._lock = threading.Lock()

    def get(self, fine_id: str) -> Fine:
        if not (fine := self.repo.get_fine(fine_id)):
            raise NotFoundError(f"Fine {fine_id} not found.")
        return fine

    def assess(self, member_id: str, amount: float, loan_id: Optional[str] = None,
               days_overdue: int = 0, now: Optional[datetime.datetime] = None) -> Fine:
        """Record a fine. Used for late returns and for administrative charges."""
        if not self.repo.get_member(member_id):
            raise NotFoundError(f"Member {member_id} not found.")
        try:
            fine = Fine(
                id=new_id("fine"),
                loan_id=loan_id,
                member_id=member_id,
                amount=amount,
                days_overdue=days_overdue,
                created_at=resolve_now(now),
            )
        except ValidationError as e:
            raise InvalidFineError(f"Invalid fine for member {member_id}: {e}") from e
        self.repo.save_fine(fine)
        logger.info(f"Assessed fine {fine.id} of {amount:.2f} on member {member_id}")
        return fine

    def pay(self, fine_id: str, now: Optional[datetime.datetime] = None) -> Fine:
        with self._lock:
            fine = self._unsettled(fine_id)
            fine.status = FineStatus.PAID
            fine.paid_at = resolve_now(now)
            self.repo.save_fine(fine)
        logger.info(f"Fine {fine_id} paid by member {fine.member_id}")
        return fine

    def waive(self, fine_id: str, waived_by: str, reason: str,
              now: Optional[datetime.datetime] = None) -> Fine:
        with self._lock:
            fine = self._unsettled(fine_id)
            fine.status = FineStatus.WAIVED
            fine.waived_at = resolve_now(now)
            fine.waived_by = waived_by
            fine.waiver_reason = reason
            self.repo.save_fine(fine)
        logger.info(f"Fine {fine_id} waived by {waived_by}: {reason}")
        return fine

    def _unsettled(self, fine_id):
        fine = self.get(fine_id)
        if fine.is_settled:
            raise FineAlreadySettledError(f"Fine {fine_id} is already {fine.status.value}.")
        return fine

    def mark_overdue(self, now: Optional[datetime.datetime] = None) -> List[Fine]:
        """Pending fines left unpaid past the payment window become overdue."""
        now = resolve_now(now)
        deadline = now - datetime.timedelta(days=self.payment_days)
        marked = []
        with self._lock:
            for fine in self.repo.list_fines():
                if fine.status == FineStatus.PENDING and fine.created_at < deadline:
                    fine.status = FineStatus.OVERDUE
                    self.repo.save_fine(fine)
                    marked.append(fine)
        if marked:
            logger.info(f"Marked {len(marked)} fine(s) overdue")
        return marked

    def fines_for_member(self, member_id: str) -> List[Fine]:
        return sorted(self.repo.fines_for_member(member_id),
                      key=lambda f: f.created_at, reverse=True)

    def unpaid(self, member_id: str) -> List[Fine]:
        return [f for f in self.fines_for_member(member_id) if f.status in self.UNPAID]

    def balance(self, member_id: str) -> float:
        return round(sum(f.amount for f in self.unpaid(member_id)), 2)

    @classmethod
    def statistics(cls, fines: Iterable[Fine]) -> FineStatistics:
        stats = FineStatistics()
        for fine in fines:
            stats.total_fines += 1
            if fine.status == FineStatus.PENDING:
                stats.total_pending += 1
            elif fine.status == FineStatus.OVERDUE:
                stats.total_overdue += 1
            elif fine.status == FineStatus.PAID:
                stats.total_paid += 1
                stats.paid_amount += fine.amount
            elif fine.status == FineStatus.WAIVED:
                stats.total_waived += 1
                stats.waived_amount += fine.amount
            if fine.status in cls.UNPAID:
                stats.pending_amount += fine.amount
        return stats
