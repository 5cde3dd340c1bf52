#!/usr/bin/env python

"""
    Errors raised by the Circulation core.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    OUT_OF_STOCK = "out_of_stock"
    ALREADY_RESERVED = "already_reserved"
    ALREADY_BORROWED = "already_borrowed"
    MEMBER_HAS_OVERDUE = "member_has_overdue"
    MEMBER_NOT_ELIGIBLE = "member_not_eligible"
    CONSISTENCY_ERROR = "consistency_error"
    FINE_ALREADY_SETTLED = "fine_already_settled"
    INVALID_POLICY = "invalid_policy"
    INVALID_FINE = "invalid_fine"
    PERSISTENCE_ERROR = "persistence_error"


class CirculationError(Exception):
    kind = None

class NotFoundError(CirculationError):
    kind = ErrorKind.NOT_FOUND

class OutOfStockError(CirculationError):
    kind = ErrorKind.OUT_OF_STOCK

class AlreadyReservedError(CirculationError):
    kind = ErrorKind.ALREADY_RESERVED

class AlreadyBorrowedError(CirculationError):
    kind = ErrorKind.ALREADY_BORROWED

class MemberHasOverdueError(CirculationError):
    kind = ErrorKind.MEMBER_HAS_OVERDUE

class MemberNotEligibleError(CirculationError):
    kind = ErrorKind.MEMBER_NOT_ELIGIBLE

class ConsistencyError(CirculationError):
    kind = ErrorKind.CONSISTENCY_ERROR

class FineAlreadySettledError(CirculationError):
    kind = ErrorKind.FINE_ALREADY_SETTLED

class InvalidPolicyError(CirculationError):
    kind = ErrorKind.INVALID_POLICY

class InvalidFineError(CirculationError):
    kind = ErrorKind.INVALID_FINE

class PersistenceError(CirculationError):
    """Storage failure. Not converted at the API boundary; callers own retries."""
    kind = ErrorKind.PERSISTENCE_ERROR
