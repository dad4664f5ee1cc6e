"""Receipt service for creating, editing and analyzing receipts."""

import uuid
import logging
from typing import Any, Dict, Iterable, Optional

from receipts.models import AnalysisResults, Receipt, ReceiptUpdate
from receipts.repository import ReceiptRepository
from ocr_processor.parser import ReceiptParser
from shared.exceptions import NullFieldError
from shared.formatting import (
    parse_and_round_price,
    parse_and_validate_timestamp,
    sanitize_categories,
    sanitize_text
)

logger = logging.getLogger(__name__)


def format_receipt_update(form: Dict[str, Any], current_time: int) -> ReceiptUpdate:
    """
    Validate and format the fields of the upload or edit form.

    Args:
        form: Raw form fields: categories, store, price, date
        current_time: Reference time in ms since epoch

    Returns:
        Formatted receipt fields

    Raises:
        NullFieldError: If categories or store are missing
        InvalidPriceError: If the price is invalid or negative
        InvalidDateError: If the date is invalid or in the future
    """
    categories = form.get('categories')
    if categories is None:
        raise NullFieldError("categories is required")
    if isinstance(categories, str):
        categories = [categories]

    store = form.get('store')
    if store is None:
        raise NullFieldError("store is required")

    return ReceiptUpdate(
        categories=sanitize_categories(categories),
        store=sanitize_text(store),
        price=parse_and_round_price(_as_text(form.get('price'))),
        timestamp=parse_and_validate_timestamp(_as_text(form.get('date')), current_time)
    )


def _as_text(value: Any) -> Optional[str]:
    # JSON bodies may carry numbers where the form sent strings.
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ReceiptService:
    """Service for managing receipts."""

    def __init__(self, repository: Optional[ReceiptRepository] = None):
        """Initialize receipt service."""
        self.repository = repository or ReceiptRepository()

    def create_receipt(
        self,
        user_id: str,
        form: Dict[str, Any],
        current_time: int,
        raw_text: Optional[str] = None
    ) -> Receipt:
        """
        Create a receipt from the upload form.

        Raises:
            NullFieldError, InvalidPriceError, InvalidDateError: If the form is invalid
        """
        fields = format_receipt_update(form, current_time)

        receipt = Receipt(
            user_id=user_id,
            receipt_id=str(uuid.uuid4()),
            raw_text=raw_text,
            **fields.model_dump()
        )

        return self.repository.save(receipt)

    def update_receipt(
        self,
        user_id: str,
        receipt_id: str,
        form: Dict[str, Any],
        current_time: int
    ) -> Receipt:
        """
        Replace the editable fields of a receipt with the edit form values.

        Raises:
            NotFoundError: If receipt not found
            NullFieldError, InvalidPriceError, InvalidDateError: If the form is invalid
        """
        fields = format_receipt_update(form, current_time)
        return self.repository.apply_update(user_id, receipt_id, fields)

    def delete_receipt(self, user_id: str, receipt_id: str) -> None:
        """
        Delete receipt.

        Raises:
            NotFoundError: If receipt not found
        """
        self.repository.delete(user_id, receipt_id)

    @staticmethod
    def analyze(
        raw_text: Optional[str],
        current_time: int,
        category_paths: Iterable[str] = (),
        logo: Optional[str] = None,
        logo_score: float = 0.0
    ) -> AnalysisResults:
        """Suggest receipt fields from OCR and categorization output."""
        return ReceiptParser.analyze(
            raw_text,
            current_time,
            category_paths=category_paths,
            logo=logo,
            logo_score=logo_score
        )
