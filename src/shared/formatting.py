"""Formatting utilities shared by every entry point that accepts receipt fields."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from .exceptions import InvalidDateError, InvalidPriceError

CENT = Decimal('0.01')

# Plain decimal notation, optionally signed, with an optional exponent.
DECIMAL_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')

_WHITESPACE = re.compile(r'\s+')


def sanitize_text(value: str) -> str:
    """
    Lowercase text with exactly one space between words and no outer whitespace.

    Args:
        value: Raw text (category, store name or search term)

    Returns:
        Sanitized text, possibly empty
    """
    return _WHITESPACE.sub(' ', value.strip()).lower()


def sanitize_categories(values: Iterable[str]) -> List[str]:
    """
    Sanitize each category, dropping blanks and duplicates, keeping first-seen order.

    Args:
        values: Raw category labels

    Returns:
        Unique non-empty sanitized categories
    """
    labels = (sanitize_text(value) for value in values)
    return list(dict.fromkeys(label for label in labels if label))


def parse_decimal(value: str) -> Optional[Decimal]:
    """Parse a finite decimal string, or return None if it isn't one."""
    candidate = value.strip()
    if not DECIMAL_PATTERN.match(candidate):
        return None

    try:
        return Decimal(candidate)
    except InvalidOperation:
        return None


def parse_and_round_price(value: str) -> Decimal:
    """
    Convert a price string into a Decimal rounded half-up to 2 decimal places.

    Args:
        value: Price string from the upload or edit form

    Returns:
        Rounded price

    Raises:
        InvalidPriceError: If the price is not a number or is negative
    """
    if value is None:
        raise InvalidPriceError("Price could not be parsed.")

    price = parse_decimal(value)
    if price is None:
        raise InvalidPriceError("Price could not be parsed.")

    if price < 0:
        raise InvalidPriceError("Price must be positive.")

    try:
        return price.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidPriceError("Price is too large.")


def parse_and_validate_timestamp(value: str, current_time: int) -> int:
    """
    Convert a millisecond timestamp string and check that it is not in the future.

    Args:
        value: Timestamp string in milliseconds since epoch
        current_time: Reference time in milliseconds since epoch

    Returns:
        Transaction timestamp

    Raises:
        InvalidDateError: If the value is not an integer or is after current_time
    """
    if value is None or not INTEGER_PATTERN.fullmatch(value):
        raise InvalidDateError("Transaction date must be a long.")

    timestamp = int(value)
    if timestamp > current_time:
        raise InvalidDateError("Transaction date must be in the past.")

    return timestamp


def capitalize_words(value: str) -> str:
    """Uppercase the first letter of each word and lowercase the rest."""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in value.split())
