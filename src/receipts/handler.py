"""Lambda handler for receipt operations."""

import os
import logging
from typing import Dict, Any, Optional
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import (
    success_response,
    error_response,
    exception_response,
    validation_error_response,
    unauthorized_response
)
from shared.request import get_user_id, get_body, current_time_millis
from shared.exceptions import ReceiptTrackerException
from receipts.service import ReceiptService

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

_receipt_service: Optional[ReceiptService] = None


def get_receipt_service() -> ReceiptService:
    """Create the receipt service on first use."""
    global _receipt_service
    if _receipt_service is None:
        _receipt_service = ReceiptService()
    return _receipt_service


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for receipt operations.

    Handles:
    - POST /receipts - Create receipt from the upload form
    - POST /receipts/analysis - Suggest fields from OCR output
    - PUT /receipts/{id} - Edit receipt
    - DELETE /receipts/{id} - Delete receipt

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
            return unauthorized_response("User must be logged in to manage receipts")

        http_method = event.get('httpMethod')
        path = event.get('path') or ''

        # Route request
        if path == '/receipts' and http_method == 'POST':
            return handle_create(event, user_id)
        elif path == '/receipts/analysis' and http_method == 'POST':
            return handle_analysis(event)
        elif path.startswith('/receipts/') and http_method == 'PUT':
            return handle_update(event, user_id)
        elif path.startswith('/receipts/') and http_method == 'DELETE':
            return handle_delete(event, user_id)
        else:
            return error_response("Route not found", status_code=404)

    except ReceiptTrackerException as e:
        logger.warning(f"Application error: {str(e)}")
        return exception_response(e)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


def handle_create(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle receipt creation."""
    body = get_body(event)

    receipt = get_receipt_service().create_receipt(
        user_id=user_id,
        form=body,
        current_time=current_time_millis(),
        raw_text=body.get('raw_text')
    )

    logger.info(f"Receipt created successfully: {receipt.receipt_id}")

    return success_response(
        data=receipt.model_dump(),
        message="Receipt created successfully",
        status_code=201
    )


def handle_analysis(event: Dict[str, Any]) -> Dict[str, Any]:
    """Handle analysis of OCR output for the receipt form."""
    body = get_body(event)

    results = get_receipt_service().analyze(
        raw_text=body.get('raw_text'),
        current_time=current_time_millis(),
        category_paths=body.get('categories') or [],
        logo=body.get('logo'),
        logo_score=float(body.get('logo_score') or 0.0)
    )

    return success_response(data=results.model_dump())


def handle_update(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle receipt edit."""
    receipt_id = (event.get('pathParameters') or {}).get('id')
    if not receipt_id:
        return validation_error_response("Receipt ID is required")

    receipt = get_receipt_service().update_receipt(
        user_id=user_id,
        receipt_id=receipt_id,
        form=get_body(event),
        current_time=current_time_millis()
    )

    logger.info(f"Receipt updated successfully: {receipt_id}")

    return success_response(
        data=receipt.model_dump(),
        message="Receipt updated successfully"
    )


def handle_delete(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle receipt deletion."""
    receipt_id = (event.get('pathParameters') or {}).get('id')
    if not receipt_id:
        return validation_error_response("Receipt ID is required")

    get_receipt_service().delete_receipt(user_id, receipt_id)

    logger.info(f"Receipt deleted successfully: {receipt_id}")

    return success_response(message="Receipt deleted successfully")
