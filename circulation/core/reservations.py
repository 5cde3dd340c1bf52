#!/usr/bin/env python

"""
    Reservation queues for Circulation.

    Each book has a waitlist of `active` reservations whose priorities
    are always exactly 1..N. Whenever a reservation leaves the queue
    (cancelled, fulfilled, expired) the rest are recompacted: sorted by
    their current priority and renumbered from 1, so the people behind
    keep their relative order.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
import datetime
from collections import defaultdict
from typing import List, Optional
from circulation.configs import RESERVATION_EXPIRY_DAYS
from circulation.core.utils import utcnow, resolve_now, new_id
from circulation.core.loans import eligible_member
from circulation.core.notifications import LogNotifier
from circulation.core.exceptions import NotFoundError, AlreadyReservedError
from circulation.schemas import Reservation, ReservationStatus, Notification

logger = logging.getLogger(__name__)


def queue_order(reservation: Reservation):
    return (reservation.priority, reservation.reservation_date)


class ReservationQueue:

    def __init__(self, repo, ledger, notifier=None, expiry_days: int = RESERVATION_EXPIRY_DAYS):
        self.repo = repo
        self.ledger = ledger
        self.locks = ledger.locks
        self.notifier = notifier or LogNotifier()
        self.expiry = datetime.timedelta(days=expiry_days)
        ledger.subscribe(self._on_copy_available)

    def _on_copy_available(self, book):
        self.fulfill_next(book.id)

    def get(self, reservation_id: str) -> Reservation:
        if not (reservation := self.repo.get_reservation(reservation_id)):
            raise NotFoundError(f"Reservation {reservation_id} not found.")
        return reservation

    def queue(self, book_id: str) -> List[Reservation]:
        """Active reservations for a book, head of the queue first."""
        active = self.repo.reservations_for_book(book_id, status=ReservationStatus.ACTIVE)
        return sorted(active, key=queue_order)

    def next_in_queue(self, book_id: str) -> Optional[Reservation]:
        queue = self.queue(book_id)
        return queue[0] if queue else None

    def reservations_for_member(self, member_id: str) -> List[Reservation]:
        return sorted(self.repo.reservations_for_member(member_id),
                      key=lambda r: r.reservation_date, reverse=True)

    def reserve(self, member_id: str, book_id: str, now: Optional[datetime.datetime] = None) -> Reservation:
        """Join the back of a book's queue. Allowed whether or not a copy is on the shelf."""
        now = resolve_now(now)
        with self.locks.hold(book_id):
            self.ledger.get(book_id)
            eligible_member(self.repo, member_id)
            queue = self.queue(book_id)
            if any(r.member_id == member_id for r in queue):
                raise AlreadyReservedError(
                    f"Member {member_id} already has an active reservation for book {book_id}.")
            reservation = Reservation(
                id=new_id("res"),
                book_id=book_id,
                member_id=member_id,
                reservation_date=now,
                expiry_date=now + self.expiry,
                priority=len(queue) + 1,
            )
            self.repo.save_reservation(reservation)
            self.ledger.refresh_status(book_id)
        logger.info(f"Reservation {reservation.id}: member {member_id} is #{reservation.priority} for book {book_id}")
        return reservation

    def cancel(self, reservation_id: str) -> Reservation:
        reservation = self._active(reservation_id)
        with self.locks.hold(reservation.book_id):
            reservation = self._active(reservation_id)
            self._close(reservation, ReservationStatus.CANCELLED)
        logger.info(f"Reservation {reservation_id} cancelled")
        return reservation

    def fulfill_next(self, book_id: str) -> Optional[Reservation]:
        """Mark the head of the queue fulfilled. Inventory is left to the
        caller, who may turn the reservation into a loan."""
        with self.locks.hold(book_id):
            if not (head := self.next_in_queue(book_id)):
                return None
            self._close(head, ReservationStatus.FULFILLED)
        logger.info(f"Reservation {head.id} fulfilled for member {head.member_id} on book {book_id}")
        notification = Notification(
            member_id=head.member_id,
            type="reservation_fulfilled",
            message=f"A copy of book {book_id} is waiting for you.",
            reservation_id=head.id,
            date=utcnow(),
        )
        try:
            self.notifier.send(notification)
        except Exception:
            # The reservation stays fulfilled; only the message is lost.
            logger.exception(f"Could not notify member {head.member_id} about reservation {head.id}")
        return head

    def expire_stale(self, now: Optional[datetime.datetime] = None) -> List[Reservation]:
        now = resolve_now(now)
        stale = defaultdict(list)
        for r in self.repo.active_reservations():
            if r.expiry_date < now:
                stale[r.book_id].append(r.id)

        expired = []
        for book_id, reservation_ids in stale.items():
            with self.locks.hold(book_id):
                for reservation_id in reservation_ids:
                    r = self.repo.get_reservation(reservation_id)
                    if r and r.is_active and r.expiry_date < now:
                        r.status = ReservationStatus.EXPIRED
                        self.repo.save_reservation(r)
                        expired.append(r)
                self._recompact(book_id)
                self.ledger.refresh_status(book_id)
        if expired:
            logger.info(f"Expired {len(expired)} reservation(s) across {len(stale)} book(s)")
        return expired

    def _active(self, reservation_id):
        reservation = self.repo.get_reservation(reservation_id)
        if not reservation or not reservation.is_active:
            raise NotFoundError(f"No active reservation {reservation_id}.")
        return reservation

    def _close(self, reservation, status):
        reservation.status = status
        self.repo.save_reservation(reservation)
        self._recompact(reservation.book_id)
        self.ledger.refresh_status(reservation.book_id)

    def _recompact(self, book_id):
        for priority, r in enumerate(self.queue(book_id), start=1):
            if r.priority != priority:
                r.priority = priority
                self.repo.save_reservation(r)
