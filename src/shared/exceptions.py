"""Custom exceptions for the receipt tracker application."""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failure a core operation can report."""

    INVALID_PRICE = "INVALID_PRICE"
    INVALID_PRICE_FORMAT = "INVALID_PRICE_FORMAT"
    NULL_FIELD = "NULL_FIELD"
    INVALID_DATE = "INVALID_DATE"
    DATE_RANGE_PARSE_ERROR = "DATE_RANGE_PARSE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL = "INTERNAL"


class ReceiptTrackerException(Exception):
    """Base exception for all receipt tracker errors."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def detail(self) -> str:
        return self.message


class InvalidPriceError(ReceiptTrackerException):
    """Raised when an uploaded or edited price is unparsable or negative."""

    kind = ErrorKind.INVALID_PRICE

    def __init__(self, message: str = "Price could not be parsed"):
        super().__init__(message, status_code=400)


class InvalidPriceFormatError(ReceiptTrackerException):
    """Raised when a price filter bound is not a number."""

    kind = ErrorKind.INVALID_PRICE_FORMAT

    def __init__(self, message: str = "Price must be a number"):
        super().__init__(message, status_code=400)


class NullFieldError(ReceiptTrackerException):
    """Raised when a required filter field is missing entirely."""

    kind = ErrorKind.NULL_FIELD

    def __init__(self, message: str = "Required field is missing"):
        super().__init__(message, status_code=400)


class InvalidDateError(ReceiptTrackerException):
    """Raised when a transaction timestamp is malformed or in the future."""

    kind = ErrorKind.INVALID_DATE

    def __init__(self, message: str = "Transaction date is invalid"):
        super().__init__(message, status_code=400)


class DateRangeParseError(ReceiptTrackerException):
    """Raised when a date range phrase cannot be split or parsed."""

    kind = ErrorKind.DATE_RANGE_PARSE_ERROR

    def __init__(self, message: str = "Date range could not be parsed"):
        super().__init__(message, status_code=400)


class NotFoundError(ReceiptTrackerException):
    """Raised when a resource is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class DatabaseError(ReceiptTrackerException):
    """Raised when database operations fail."""

    kind = ErrorKind.DATABASE_ERROR

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)
