"""Parser for OCR and text categorization results."""

import re
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from receipts.models import AnalysisResults
from shared.formatting import sanitize_categories

logger = logging.getLogger(__name__)

# Minimum confidence for a detected logo to be trusted as the store name.
LOGO_DETECTION_CONFIDENCE_THRESHOLD = 0.6

# U.S. dates such as 6/29/20 or 06-29-2020, with the same separator twice.
DATE_PATTERN = re.compile(r'\d?\d([/-])\d?\d\1\d{2}(\d{2})?')

# Prices in dollars such as $12.34 or 12.34.
PRICE_PATTERN = re.compile(r'\$?\d+\.\d\d')

TOTAL_PATTERN = re.compile(r'total', re.IGNORECASE)

CATEGORY_SEPARATOR = re.compile(r'/| & ')


class ReceiptParser:
    """Extracts receipt fields from the raw text of a receipt image."""

    @staticmethod
    def analyze(
        raw_text: Optional[str],
        current_time: int,
        category_paths: Iterable[str] = (),
        logo: Optional[str] = None,
        logo_score: float = 0.0
    ) -> AnalysisResults:
        """
        Build analysis results from OCR output.

        Args:
            raw_text: Full text detected in the image, None if none was found
            current_time: Reference time in ms since epoch, used to place 2-digit years
            category_paths: Classification labels such as "/Food & Drink/Restaurants"
            logo: Description of the most likely logo in the image
            logo_score: Confidence of the logo detection in [0, 1]

        Returns:
            Extracted fields; anything not found is left as None
        """
        store = None
        if logo and logo_score > LOGO_DETECTION_CONFIDENCE_THRESHOLD:
            store = logo

        if not raw_text:
            return AnalysisResults(store=store)

        tokens = raw_text.split()
        results = AnalysisResults(
            raw_text=raw_text,
            categories=ReceiptParser.parse_categories(category_paths),
            store=store,
            timestamp=ReceiptParser.find_date(tokens, current_time),
            price=ReceiptParser.find_total_price(tokens)
        )

        logger.debug(
            f"Extracted store={results.store}, timestamp={results.timestamp}, "
            f"price={results.price}, categories={results.categories}"
        )
        return results

    @staticmethod
    def parse_categories(category_paths: Iterable[str]) -> List[str]:
        """Split labels like "/Food & Drink/Restaurants" into food, drink, restaurants."""
        parts = []
        for path in category_paths:
            parts.extend(
                part for part in CATEGORY_SEPARATOR.split(path[1:] if path.startswith('/') else path)
                if part.strip()
            )

        return sanitize_categories(parts)

    @staticmethod
    def find_date(tokens: List[str], current_time: int) -> Optional[int]:
        """
        Return the first date on the receipt as UTC midnight in ms since epoch.

        Only the first date-like token is considered; if its month or day is
        invalid, no date is returned.
        """
        date = next((token for token in tokens if DATE_PATTERN.fullmatch(token)), None)
        if date is None:
            return None

        separator = '-' if '-' in date else '/'
        month, day, year = (int(part) for part in date.split(separator))

        # Two-digit years are read as 20xx first.
        if len(date.rsplit(separator, 1)[1]) == 2:
            year += 2000

        try:
            transaction_date = datetime(year, month, day, tzinfo=timezone.utc)
        except ValueError:
            logger.warning(f"Invalid date on receipt: {date}")
            return None

        if transaction_date.timestamp() * 1000 > current_time:
            transaction_date = ReceiptParser._previous_century(transaction_date)

        return int(transaction_date.timestamp()) * 1000

    @staticmethod
    def _previous_century(value: datetime) -> datetime:
        try:
            return value.replace(year=value.year - 100)
        except ValueError:
            # February 29th in a year that is not a leap year.
            return value.replace(year=value.year - 100, day=28)

    @staticmethod
    def find_total_price(tokens: List[str]) -> Optional[Decimal]:
        """Return the price after the last "total", falling back to the largest price."""
        price = ReceiptParser._find_price_after_total(tokens)
        if price is None:
            price = ReceiptParser._find_largest_price(tokens)
        return price

    @staticmethod
    def _find_price_after_total(tokens: List[str]) -> Optional[Decimal]:
        price = None
        found_after_latest_total = True

        # Keep the first price after each "total" token; the last one wins.
        for token in tokens:
            if TOTAL_PATTERN.search(token):
                found_after_latest_total = False
            elif not found_after_latest_total and PRICE_PATTERN.fullmatch(token):
                price = ReceiptParser._parse_price(token)
                found_after_latest_total = True

        return price

    @staticmethod
    def _find_largest_price(tokens: List[str]) -> Optional[Decimal]:
        prices = [ReceiptParser._parse_price(token) for token in tokens if PRICE_PATTERN.fullmatch(token)]
        return max(prices) if prices else None

    @staticmethod
    def _parse_price(token: str) -> Decimal:
        return Decimal(token.lstrip('$'))
