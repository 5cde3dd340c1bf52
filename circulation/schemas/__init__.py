from .book import Book, BookStatus
from .member import Member, MemberStatus
from .loan import Loan, LoanStatus
from .fine import Fine, FineStatus, FineQuote, FineStatistics
from .reservation import Reservation, ReservationStatus
from .outcome import Outcome, ErrorDetail, ReturnReceipt, InventoryRecord
from .notification import Notification

__all__ = [
    "Book", "BookStatus",
    "Member", "MemberStatus",
    "Loan", "LoanStatus",
    "Fine", "FineStatus", "FineQuote", "FineStatistics",
    "Reservation", "ReservationStatus",
    "Outcome", "ErrorDetail", "ReturnReceipt", "InventoryRecord",
    "Notification",
]
