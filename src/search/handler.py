"""Lambda handler for receipt search."""

import os
import logging
from typing import Dict, Any, Optional
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import success_response, error_response, exception_response, unauthorized_response
from shared.request import get_user_id, get_query_params
from shared.result import attempt
from shared.exceptions import ReceiptTrackerException
from search.service import SearchService, criteria_from_params

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

_search_service: Optional[SearchService] = None


def get_search_service() -> SearchService:
    """Create the search service on first use."""
    global _search_service
    if _search_service is None:
        _search_service = SearchService()
    return _search_service


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for receipt search.

    Handles:
    - GET /receipts/search - Search receipts by date range, category, store and price

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        # Log request
        logger.info(f"Request: {event.get('httpMethod')} {event.get('path')}")

        user_id = get_user_id(event)
        if not user_id:
            return unauthorized_response("User must be logged in to search receipts")

        if event.get('path') == '/receipts/search' and event.get('httpMethod') == 'GET':
            return handle_search(event, user_id)

        return error_response("Route not found", status_code=404)

    except ReceiptTrackerException as e:
        logger.error(f"Application error: {str(e)}")
        return exception_response(e)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


def handle_search(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle receipt search.

    Args:
        event: Lambda event
        user_id: User ID

    Returns:
        API Gateway response
    """
    result = attempt(criteria_from_params, get_query_params(event))
    if not result.ok:
        logger.warning(f"Rejected search criteria ({result.kind.value}): {result.detail}")
        return exception_response(result.error)

    receipts = get_search_service().search(user_id, result.value)

    return success_response(data={
        'receipts': [receipt.model_dump() for receipt in receipts],
        'count': len(receipts)
    })
