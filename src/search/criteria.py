"""Search criteria built from the receipt search form."""

import math
import re
from datetime import datetime, tzinfo
from typing import FrozenSet, Optional

from dateutil import tz
from dateutil.parser import parserinfo
from pydantic import BaseModel

from shared.exceptions import DateRangeParseError, InvalidPriceFormatError, NullFieldError
from shared.formatting import parse_decimal, sanitize_text

UTC = 'UTC'

# Milliseconds equivalent to 23:59:59.999.
MILLISECONDS_TO_END_OF_DAY = 24 * 60 * 60 * 1000 - 1

DATE_RANGE_SEPARATOR = '-'

# Long-form date after sanitizing, e.g. "june 1, 2020" or "sept. 30 2020".
LONG_DATE_PATTERN = re.compile(r'^([a-z]+)\.? (\d{1,2}),? (\d{4})$')

_MONTHS = parserinfo()


class QueryCriteria(BaseModel):
    """Validated filter for a receipt search. Empty category or store means any."""

    timezone: str
    category: FrozenSet[str]
    start_timestamp: int
    end_timestamp: int
    store: str
    min_price: float
    max_price: float

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)[1]


def resolve_timezone(timezone_id: Optional[str]):
    """
    Look up a timezone by IANA identifier.

    Unknown or empty identifiers fall back to UTC rather than failing.

    Args:
        timezone_id: IANA identifier such as "America/Chicago"

    Returns:
        Tuple of the identifier actually used and its tzinfo
    """
    name = (timezone_id or '').strip()

    # gettz('') returns the host's local zone and gettz reads absolute paths as
    # tz files, so only relative IANA-style names are looked up.
    if not name or name.startswith(('/', ':')) or '..' in name:
        return UTC, tz.UTC

    try:
        zone = tz.gettz(name)
    except (ValueError, OSError):
        zone = None

    if zone is None:
        return UTC, tz.UTC

    return name, zone


def date_to_milliseconds(phrase: str, zone: tzinfo) -> int:
    """
    Convert a long-form date ("June 1, 2020") to local midnight in ms since epoch.

    Raises:
        DateRangeParseError: If the phrase is not a valid long-form date
    """
    match = LONG_DATE_PATTERN.match(sanitize_text(phrase))
    if not match:
        raise DateRangeParseError(f"Unparseable date: \"{phrase.strip()}\"")

    month_name, day, year = match.groups()
    month = _MONTHS.month(month_name)
    if month is None:
        raise DateRangeParseError(f"Unknown month: \"{month_name}\"")

    try:
        midnight = datetime(int(year), month, int(day), tzinfo=zone)
    except ValueError as e:
        raise DateRangeParseError(f"Invalid date \"{phrase.strip()}\": {e}")

    # Zones that skip midnight on a DST change start the day at the first valid instant.
    midnight = tz.resolve_imaginary(midnight)
    return int(midnight.timestamp()) * 1000


def parse_date_range(date_range: str, zone: tzinfo):
    """
    Split "June 1, 2020 - June 30, 2020" into inclusive millisecond bounds.

    Returns:
        Tuple of (start of the first day, last millisecond of the second day)

    Raises:
        DateRangeParseError: If the range does not have exactly two parsable dates
    """
    dates = date_range.split(DATE_RANGE_SEPARATOR)
    if len(dates) != 2:
        raise DateRangeParseError(f"Date range must have a start and an end: \"{date_range}\"")

    start_timestamp = date_to_milliseconds(dates[0], zone)
    end_timestamp = date_to_milliseconds(dates[1], zone) + MILLISECONDS_TO_END_OF_DAY

    return start_timestamp, end_timestamp


def parse_price_bound(value: Optional[str], field_name: str) -> float:
    """
    Parse a price filter bound. No rounding or sign check applies here.

    Raises:
        NullFieldError: If the bound is absent
        InvalidPriceFormatError: If the bound is not a number
    """
    _require(value, field_name)

    price = parse_decimal(value)
    if price is None or not math.isfinite(float(price)):
        raise InvalidPriceFormatError(f"{field_name} must be a number: \"{value}\"")

    return float(price)


def build_query_criteria(
    timezone_id: Optional[str],
    category: Optional[str],
    date_range: Optional[str],
    store: Optional[str],
    min_price: Optional[str],
    max_price: Optional[str]
) -> QueryCriteria:
    """
    Build search criteria from the raw search form fields.

    Args:
        timezone_id: IANA timezone of the user; falls back to UTC
        category: Category to match, empty for any
        date_range: Two long-form dates separated by "-"
        store: Store to match, empty for any
        min_price: Inclusive lower price bound
        max_price: Inclusive upper price bound

    Returns:
        Immutable QueryCriteria

    Raises:
        NullFieldError: If a field other than the timezone is absent
        DateRangeParseError: If the date range cannot be parsed
        InvalidPriceFormatError: If a price bound is not a number
    """
    timezone_name, zone = resolve_timezone(timezone_id)

    _require(category, 'category')
    formatted_category = sanitize_text(category)
    categories = frozenset([formatted_category]) if formatted_category else frozenset()

    _require(date_range, 'dateRange')
    start_timestamp, end_timestamp = parse_date_range(date_range, zone)

    _require(store, 'store')

    return QueryCriteria(
        timezone=timezone_name,
        category=categories,
        start_timestamp=start_timestamp,
        end_timestamp=end_timestamp,
        store=sanitize_text(store),
        min_price=parse_price_bound(min_price, 'minPrice'),
        max_price=parse_price_bound(max_price, 'maxPrice')
    )


def _require(value: Optional[str], field_name: str) -> None:
    if value is None:
        raise NullFieldError(f"{field_name} is required")
