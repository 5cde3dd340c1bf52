#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_api
    ~~~~~~~~~~~~~~

    The CirculationAPI boundary: outcomes, error kinds and failure handling.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
import threading
import pytest
from circulation.core.api import CirculationAPI
from circulation.core.repository import MemoryRepository
from circulation.core.exceptions import PersistenceError
from circulation.schemas import Book, Member, LoanStatus

DAY = datetime.timedelta(days=1)


@pytest.fixture
def library(add_book, add_member):
    add_book("b1", copies=1)
    add_book("b2", copies=2, title="Dune")
    for member_id in ("m1", "m2"):
        add_member(member_id)


def test_success_outcome(api, library, now):
    outcome = api.borrow("m1", "b1", now=now)
    assert outcome.ok
    assert outcome.error is None
    assert outcome.value.status == LoanStatus.ACTIVE

@pytest.mark.parametrize("call, kind", [
    (lambda api, now: api.borrow("m1", "missing", now=now), "not_found"),
    (lambda api, now: api.return_loan("loan_missing", now=now), "not_found"),
    (lambda api, now: api.cancel_reservation("res_missing"), "not_found"),
    (lambda api, now: api.pay_fine("fine_missing"), "not_found"),
])
def test_not_found_outcomes(api, library, now, call, kind):
    outcome = call(api, now)
    assert not outcome.ok
    assert outcome.value is None
    assert outcome.error.kind == kind

def test_error_kinds(api, library, now):
    api.borrow("m1", "b1", now=now)
    assert api.borrow("m2", "b1", now=now).error.kind == "out_of_stock"
    assert api.borrow("m1", "b1", now=now).error.kind == "already_borrowed"
    assert api.borrow("m1", "b2", now=now + 20 * DAY).error.kind == "member_has_overdue"

    api.reserve("m2", "b1", now=now)
    assert api.reserve("m2", "b1", now=now).error.kind == "already_reserved"

    api.add_member(Member(id="m3", name="M3", status="suspended"))
    assert api.borrow("m3", "b2", now=now).error.kind == "member_not_eligible"
    assert api.reserve("m3", "b1", now=now).error.kind == "member_not_eligible"

def test_consistency_error_outcome(api, library):
    book = api.book("b2").value
    book.available_copies = 1
    api.repo.save_book(book)

    outcome = api.check_inventory("b2")
    assert outcome.error.kind == "consistency_error"

def test_fine_round_trip(api, library, now):
    loan = api.borrow("m1", "b1", now=now).value
    receipt = api.return_loan(loan.id, now=loan.due_date + 60 * DAY).value
    assert receipt.fine.amount == 50.0

    assert [f.id for f in api.fines_for_member("m1", unpaid_only=True).value] == [receipt.fine.id]
    assert api.pay_fine(receipt.fine.id).ok
    assert api.pay_fine(receipt.fine.id).error.kind == "fine_already_settled"
    assert api.fines_for_member("m1", unpaid_only=True).value == []
    assert api.fine_statistics().value.paid_amount == 50.0

def test_administrative_fine_and_waiver(api, library, now):
    fine = api.assess_fine("m2", 12.5, reason="Damaged cover", now=now).value
    assert fine.loan_id is None

    waived = api.waive_fine(fine.id, waived_by="lib_1", reason="First offence").value
    assert waived.status.value == "waived"

def test_history_outcome_is_iterable(api, library, now):
    api.borrow("m1", "b1", now=now)
    api.borrow("m1", "b2", now=now + DAY)
    history = api.history("m1").value
    assert [l.book_id for l in history] == ["b2", "b1"]
    assert [l.book_id for l in history] == ["b2", "b1"]

def test_queue_and_fulfill(api, library, now):
    api.borrow("m1", "b1", now=now)
    api.reserve("m2", "b1", now=now)
    assert [r.member_id for r in api.queue("b1").value] == ["m2"]
    assert api.fulfill_next("b1").value.member_id == "m2"
    assert api.fulfill_next("b1").value is None

def test_sweep(api, library, now):
    api.reserve("m1", "b2", now=now)
    api.assess_fine("m2", 4.0, now=now)

    result = api.sweep(now + 40 * DAY).value

    assert [r.member_id for r in result["expired_reservations"]] == ["m1"]
    assert [f.member_id for f in result["overdue_fines"]] == ["m2"]
    assert api.expire_stale(now + 41 * DAY).value == []

def test_inventory_report(api, library, now):
    api.borrow("m1", "b2", now=now)
    report = {r.book_id: r for r in api.inventory().value}
    assert (report["b2"].total_copies, report["b2"].available_copies) == (2, 1)
    assert report["b1"].status == "available"

def test_last_copy_race_has_one_winner(api, library, add_member, now):
    members = [add_member(f"racer{i}").id for i in range(12)]
    barrier = threading.Barrier(len(members))
    outcomes = []

    def attempt(member_id):
        barrier.wait()
        outcomes.append(api.borrow(member_id, "b1", now=now))

    threads = [threading.Thread(target=attempt, args=(m,)) for m in members]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [o for o in outcomes if o.ok]
    assert len(winners) == 1
    assert {o.error.kind for o in outcomes if not o.ok} == {"out_of_stock"}
    assert api.book("b1").value.available_copies == 0
    assert len(api.repo.active_loans_for_book("b1")) == 1


def test_naive_times_are_read_as_utc(api, library):
    first = api.borrow("m1", "b1", now=datetime.datetime(2024, 1, 1)).value
    assert first.borrow_date.tzinfo is not None

    outcome = api.borrow("m1", "b2", now=datetime.datetime(2024, 3, 1))
    assert outcome.error.kind == "member_has_overdue"

    receipt = api.return_loan(first.id, now=datetime.datetime(2024, 1, 18)).value
    assert receipt.fine.amount == 3.0
    assert api.preview_fine(first.id, as_of=datetime.datetime(2024, 2, 1)).value.days_overdue == 3
    assert api.sweep(datetime.datetime(2024, 6, 1)).ok

def test_fine_for_unknown_member(api, library, now):
    outcome = api.assess_fine("nobody", 5.0, now=now)
    assert outcome.error.kind == "not_found"
    assert api.fine_statistics().value.total_fines == 0

def test_negative_fine_is_rejected(api, library, now):
    outcome = api.assess_fine("m1", -5.0, now=now)
    assert not outcome.ok
    assert outcome.error.kind == "invalid_fine"
    assert api.fines_for_member("m1").value == []


class FailingRepository(MemoryRepository):
    """Raises on the chosen save method while `failing` is set."""

    def __init__(self, method):
        super().__init__()
        self.failing = True
        original = getattr(self, method)

        def save(record):
            if self.failing:
                raise PersistenceError("disk full")
            return original(record)
        setattr(self, method, save)


@pytest.fixture
def make_api():
    def _make(method):
        api = CirculationAPI(repo=FailingRepository(method))
        api.add_book(Book(id="b1", title="Emma", author="Jane Austen",
                          total_copies=1, available_copies=1))
        api.add_member(Member(id="m1", name="Emma Davis"))
        return api
    return _make


def test_failed_borrow_puts_copy_back(make_api, now):
    api = make_api("save_loan")
    with pytest.raises(PersistenceError):
        api.borrow("m1", "b1", now=now)

    assert api.book("b1").value.available_copies == 1
    assert api.check_inventory("b1").ok

    api.repo.failing = False
    assert api.borrow("m1", "b1", now=now).ok

def test_failed_return_keeps_loan_active(make_api, now):
    api = make_api("save_fine")
    api.repo.failing = False
    loan = api.borrow("m1", "b1", now=now).value
    api.repo.failing = True

    with pytest.raises(PersistenceError):
        api.return_loan(loan.id, now=loan.due_date + 3 * DAY)

    assert api.repo.get_loan(loan.id).status == LoanStatus.ACTIVE
    assert api.book("b1").value.available_copies == 0
    assert api.check_inventory("b1").ok

    api.repo.failing = False
    receipt = api.return_loan(loan.id, now=loan.due_date + 3 * DAY).value
    assert receipt.fine.amount == 3.0
    assert api.check_inventory("b1").value.available_copies == 1
