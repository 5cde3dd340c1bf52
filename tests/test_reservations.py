#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_reservations
    ~~~~~~~~~~~~~~~~~~~~~~~

    Reservation queues: priorities, recompaction and fulfilment.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
import pytest
from circulation.core.exceptions import (
    NotFoundError,
    AlreadyReservedError,
    MemberNotEligibleError
)
from circulation.schemas import BookStatus, ReservationStatus, MemberStatus

DAY = datetime.timedelta(days=1)


@pytest.fixture
def library(add_book, add_member):
    add_book("b1", copies=1)
    for member_id in ("m1", "m2", "m3", "m4"):
        add_member(member_id)

def priorities(api, book_id="b1"):
    return [(r.member_id, r.priority) for r in api.reservations.queue(book_id)]


def test_priorities_in_arrival_order(api, library, now):
    reservations = [
        api.reservations.reserve(m, "b1", now=now + i * DAY)
        for i, m in enumerate(("m1", "m2", "m3"))
    ]
    assert [r.priority for r in reservations] == [1, 2, 3]
    assert reservations[0].expiry_date == now + 30 * DAY
    assert reservations[0].status == ReservationStatus.ACTIVE

def test_cancel_recompacts(api, library, now):
    first = api.reservations.reserve("m1", "b1", now=now)
    api.reservations.reserve("m2", "b1", now=now + DAY)
    api.reservations.reserve("m3", "b1", now=now + 2 * DAY)

    cancelled = api.reservations.cancel(first.id)

    assert cancelled.status == ReservationStatus.CANCELLED
    assert priorities(api) == [("m2", 1), ("m3", 2)]

def test_cancel_middle_keeps_relative_order(api, library, now):
    for i, m in enumerate(("m1", "m2", "m3", "m4")):
        api.reservations.reserve(m, "b1", now=now + i * DAY)
    second = api.reservations.queue("b1")[1]

    api.reservations.cancel(second.id)

    assert priorities(api) == [("m1", 1), ("m3", 2), ("m4", 3)]

def test_fulfill_next_after_cancel(api, library, notifier, now):
    first = api.reservations.reserve("m1", "b1", now=now)
    second = api.reservations.reserve("m2", "b1", now=now + DAY)
    api.reservations.reserve("m3", "b1", now=now + 2 * DAY)
    api.reservations.cancel(first.id)

    fulfilled = api.reservations.fulfill_next("b1")

    assert fulfilled.id == second.id
    assert fulfilled.status == ReservationStatus.FULFILLED
    assert priorities(api) == [("m3", 1)]
    notifier.send.assert_called_once()
    notification = notifier.send.call_args.args[0]
    assert notification.member_id == "m2"
    assert notification.reservation_id == second.id

def test_fulfill_next_on_empty_queue(api, library, notifier):
    assert api.reservations.fulfill_next("b1") is None
    notifier.send.assert_not_called()

def test_fulfill_does_not_touch_inventory(api, library, now):
    api.reservations.reserve("m1", "b1", now=now)
    api.reservations.fulfill_next("b1")
    assert api.ledger.get("b1").available_copies == 1

def test_already_reserved(api, library, now):
    first = api.reservations.reserve("m1", "b1", now=now)
    with pytest.raises(AlreadyReservedError):
        api.reservations.reserve("m1", "b1", now=now)

    # Once out of the queue the member may join again, at the back
    api.reservations.reserve("m2", "b1", now=now)
    api.reservations.cancel(first.id)
    again = api.reservations.reserve("m1", "b1", now=now + DAY)
    assert again.priority == 2

def test_cancel_unknown_or_inactive(api, library, now):
    reservation = api.reservations.reserve("m1", "b1", now=now)
    api.reservations.cancel(reservation.id)
    with pytest.raises(NotFoundError):
        api.reservations.cancel(reservation.id)
    with pytest.raises(NotFoundError):
        api.reservations.cancel("res_missing")

def test_reserve_checks_book_and_member(api, library, add_member, now):
    add_member("m5", status=MemberStatus.SUSPENDED)
    with pytest.raises(MemberNotEligibleError):
        api.reservations.reserve("m5", "b1", now=now)
    with pytest.raises(NotFoundError):
        api.reservations.reserve("m1", "missing", now=now)
    with pytest.raises(NotFoundError):
        api.reservations.reserve("nobody", "b1", now=now)
    assert api.reservations.queue("b1") == []

def test_book_status_follows_queue(api, library, now):
    api.loans.borrow("m1", "b1", now=now)
    assert api.ledger.get("b1").status == BookStatus.BORROWED

    reservation = api.reservations.reserve("m2", "b1", now=now)
    assert api.ledger.get("b1").status == BookStatus.RESERVED

    api.reservations.cancel(reservation.id)
    assert api.ledger.get("b1").status == BookStatus.BORROWED

def test_return_fulfills_head_of_queue(api, library, notifier, now):
    loan = api.loans.borrow("m1", "b1", now=now)
    waiting = api.reservations.reserve("m2", "b1", now=now + DAY)
    api.reservations.reserve("m3", "b1", now=now + 2 * DAY)

    api.loans.return_loan(loan.id, now=now + 5 * DAY)

    assert api.reservations.get(waiting.id).status == ReservationStatus.FULFILLED
    assert priorities(api) == [("m3", 1)]
    book = api.ledger.get("b1")
    assert book.available_copies == 1
    assert book.status == BookStatus.AVAILABLE
    assert notifier.send.call_args.args[0].member_id == "m2"

    # The notified member collects the copy as an ordinary borrow
    api.loans.borrow("m2", "b1", now=now + 6 * DAY)
    assert api.ledger.get("b1").status == BookStatus.RESERVED

def test_expire_stale(api, library, now):
    api.reservations.reserve("m1", "b1", now=now)
    api.reservations.reserve("m2", "b1", now=now + 10 * DAY)
    api.reservations.reserve("m3", "b1", now=now + 20 * DAY)

    expired = api.reservations.expire_stale(now + 35 * DAY)

    assert [r.member_id for r in expired] == ["m1"]
    assert expired[0].status == ReservationStatus.EXPIRED
    assert priorities(api) == [("m2", 1), ("m3", 2)]
    assert api.reservations.expire_stale(now + 35 * DAY) == []

def test_next_in_queue_peeks(api, library, now):
    assert api.reservations.next_in_queue("b1") is None
    api.reservations.reserve("m1", "b1", now=now)
    api.reservations.reserve("m2", "b1", now=now + DAY)
    assert api.reservations.next_in_queue("b1").member_id == "m1"
    assert len(api.reservations.queue("b1")) == 2

def test_reservations_for_member(api, library, add_book, now):
    add_book("b2", copies=2, title="Dune")
    api.reservations.reserve("m1", "b1", now=now)
    api.reservations.reserve("m1", "b2", now=now + DAY)
    assert [r.book_id for r in api.reservations.reservations_for_member("m1")] == ["b2", "b1"]

def test_failing_notifier_does_not_break_return(api, library, notifier, now):
    notifier.send.side_effect = RuntimeError("mail server down")
    loan = api.loans.borrow("m1", "b1", now=now)
    waiting = api.reservations.reserve("m2", "b1", now=now + DAY)

    receipt = api.loans.return_loan(loan.id, now=now + 5 * DAY)

    assert receipt.loan.is_returned
    assert api.reservations.get(waiting.id).status == ReservationStatus.FULFILLED
    assert api.ledger.check("b1").available_copies == 1
    notifier.send.assert_called_once()
