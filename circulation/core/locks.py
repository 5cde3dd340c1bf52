#!/usr/bin/env python

"""
    Per-book locking for Circulation.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import threading
from contextlib import contextmanager


class BookLocks:
    """One mutual-exclusion scope per book.

    Every operation that changes a book's copy counts or its reservation
    queue runs inside `hold(book_id)`. The locks are re-entrant because a
    return hands the freed copy to the reservation queue while still
    holding the book.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def _lock_for(self, book_id):
        with self._guard:
            if book_id not in self._locks:
                self._locks[book_id] = threading.RLock()
            return self._locks[book_id]

    @contextmanager
    def hold(self, book_id):
        lock = self._lock_for(book_id)
        with lock:
            yield
