"""Lambda handler for spending analytics."""

import os
import logging
from typing import Dict, Any, Optional
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import success_response, error_response, exception_response, unauthorized_response
from shared.request import get_user_id
from shared.exceptions import ReceiptTrackerException
from receipts.repository import ReceiptRepository
from analytics.aggregator import compute_spending_analytics

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

_repository: Optional[ReceiptRepository] = None


def get_repository() -> ReceiptRepository:
    """Create the receipt repository on first use."""
    global _repository
    if _repository is None:
        _repository = ReceiptRepository()
    return _repository


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for spending analytics.

    Handles:
    - GET /analytics - Spending totals per store and per category

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        logger.info(f"Request: {event.get('httpMethod')} {event.get('path')}")

        user_id = get_user_id(event)
        if not user_id:
            return unauthorized_response("User must be logged in to view analytics")

        if event.get('path') == '/analytics' and event.get('httpMethod') == 'GET':
            receipts = get_repository().list_for_user(user_id)
            analytics = compute_spending_analytics(receipts)
            return success_response(data=analytics.model_dump())

        return error_response("Route not found", status_code=404)

    except ReceiptTrackerException as e:
        logger.error(f"Application error: {str(e)}")
        return exception_response(e)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)
