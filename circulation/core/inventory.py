#!/usr/bin/env python

"""
    Inventory ledger for Circulation.

    Owns `Book.available_copies` and `Book.status`; no other part of the
    core writes either field. Keeps `0 <= available_copies <= total_copies`
    and tells its subscribers whenever a copy comes back on the shelf.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import Callable, List
from circulation.core.locks import BookLocks
from circulation.core.exceptions import (
    NotFoundError,
    OutOfStockError,
    ConsistencyError
)
from circulation.schemas import Book, BookStatus, ReservationStatus, InventoryRecord

logger = logging.getLogger(__name__)


class InventoryLedger:

    def __init__(self, repo, locks=None):
        self.repo = repo
        self.locks = locks or BookLocks()
        self._listeners: List[Callable[[Book], None]] = []

    def subscribe(self, listener: Callable[[Book], None]) -> None:
        """Register a callback for the "copy became available" event."""
        self._listeners.append(listener)

    def get(self, book_id: str) -> Book:
        if not (book := self.repo.get_book(book_id)):
            raise NotFoundError(f"Book {book_id} not found.")
        return book

    def derive_status(self, book: Book) -> BookStatus:
        if book.available_copies > 0:
            return BookStatus.AVAILABLE
        if self.repo.reservations_for_book(book.id, status=ReservationStatus.ACTIVE):
            return BookStatus.RESERVED
        return BookStatus.BORROWED

    def register(self, book: Book) -> Book:
        """Accept a book from the catalog, deriving its status."""
        with self.locks.hold(book.id):
            book.status = self.derive_status(book)
            self.repo.save_book(book)
        logger.info(f"Registered book {book.id} with {book.available_copies}/{book.total_copies} copies available")
        return book

    def refresh_status(self, book_id: str) -> Book:
        with self.locks.hold(book_id):
            book = self.get(book_id)
            status = self.derive_status(book)
            if status != book.status:
                book.status = status
                self.repo.save_book(book)
            return book

    def decrement_available(self, book_id: str) -> Book:
        with self.locks.hold(book_id):
            book = self.get(book_id)
            if book.available_copies == 0:
                raise OutOfStockError(f"No copies of book {book_id} available.")
            book.available_copies -= 1
            book.status = self.derive_status(book)
            self.repo.save_book(book)
            return book

    def increment_available(self, book_id: str, notify: bool = True) -> Book:
        """Put a copy back on the shelf.

        With `notify=False` the subscribers are not told; callers that still
        have work to save, or that are undoing a decrement, announce the copy
        themselves once it is really back.
        """
        with self.locks.hold(book_id):
            book = self.get(book_id)
            if book.available_copies >= book.total_copies:
                logger.error(
                    f"Inventory corruption on book {book_id}: return would exceed "
                    f"{book.total_copies} total copies")
                raise ConsistencyError(
                    f"Book {book_id} already has all {book.total_copies} copies available.")
            book.available_copies += 1
            book.status = self.derive_status(book)
            self.repo.save_book(book)
            if notify:
                self.announce(book)
            return book

    def announce(self, book: Book) -> None:
        """Fire the "copy became available" event. The copy is already
        saved, so a failing subscriber is logged and does not undo it."""
        for listener in self._listeners:
            try:
                listener(book)
            except Exception:
                logger.exception(f"Copy-available subscriber {listener!r} failed for book {book.id}")

    def check(self, book_id: str) -> Book:
        """Verify available copies against the loans still out."""
        with self.locks.hold(book_id):
            book = self.get(book_id)
            on_loan = len(self.repo.active_loans_for_book(book_id))
            if book.available_copies != book.total_copies - on_loan:
                logger.error(
                    f"Inventory mismatch on book {book_id}: available={book.available_copies} "
                    f"total={book.total_copies} on_loan={on_loan}")
                raise ConsistencyError(
                    f"Book {book_id} shows {book.available_copies} available copies "
                    f"but {on_loan} of {book.total_copies} are on loan.")
            return book

    def snapshot(self) -> List[InventoryRecord]:
        return [
            InventoryRecord(
                book_id=b.id,
                total_copies=b.total_copies,
                available_copies=b.available_copies,
                status=b.status.value,
            ) for b in self.repo.list_books()
        ]
