"""Search service for finding receipts."""

import logging
from typing import Any, Dict, List, Optional

from receipts.models import Receipt
from receipts.repository import ReceiptRepository
from search.criteria import QueryCriteria, build_query_criteria

logger = logging.getLogger(__name__)

# Query string parameter for each search form field.
SEARCH_PARAMETERS = ('timeZoneId', 'category', 'dateRange', 'store', 'minPrice', 'maxPrice')


def criteria_from_params(params: Dict[str, Any]) -> QueryCriteria:
    """
    Build criteria from search form parameters.

    Raises:
        NullFieldError: If a required parameter is missing
        DateRangeParseError: If the date range cannot be parsed
        InvalidPriceFormatError: If a price bound is not a number
    """
    return build_query_criteria(*(params.get(name) for name in SEARCH_PARAMETERS))


class SearchService:
    """Service for searching a user's receipts."""

    def __init__(self, repository: Optional[ReceiptRepository] = None):
        """Initialize search service."""
        self.repository = repository or ReceiptRepository()

    def search(self, user_id: str, criteria: QueryCriteria) -> List[Receipt]:
        """
        Find the user's receipts matching the criteria, most recent first.

        Args:
            user_id: User ID
            criteria: Validated search criteria

        Returns:
            Matching receipts
        """
        receipts = self.repository.find_matching(user_id, criteria)
        return sorted(receipts, key=lambda receipt: receipt.timestamp or 0, reverse=True)
