#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.conftest
    ~~~~~~~~~~~~~~

    Shared fixtures: a fixed clock, a fine policy and an in-memory library.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
import pytest
from unittest.mock import MagicMock
from circulation.core.api import CirculationAPI
from circulation.core.fines import FinePolicy
from circulation.core.notifications import Notifier
from circulation.schemas import Book, Member, MemberStatus


@pytest.fixture
def now():
    return datetime.datetime(2024, 1, 22, 12, 0, tzinfo=datetime.timezone.utc)

@pytest.fixture
def policy():
    return FinePolicy(daily_rate=1.0, max_fine=50.0, grace_period_days=0)

@pytest.fixture
def notifier():
    return MagicMock(spec=Notifier)

@pytest.fixture
def api(notifier, policy):
    return CirculationAPI(
        notifier=notifier,
        fine_policy=policy,
        loan_period_days=14,
        reservation_expiry_days=30,
        fine_payment_days=30,
    )

@pytest.fixture
def add_book(api):
    def _add(book_id="b1", copies=1, title="1984"):
        book = Book(id=book_id, title=title, author="George Orwell",
                    total_copies=copies, available_copies=copies)
        return api.ledger.register(book)
    return _add

@pytest.fixture
def add_member(api):
    def _add(member_id, status=MemberStatus.ACTIVE):
        member = Member(id=member_id, name=member_id.title(), status=status)
        return api.repo.save_member(member)
    return _add
