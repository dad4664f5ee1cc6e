"""Helpers for reading API Gateway proxy events."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .exceptions import ReceiptTrackerException


def get_user_id(event: Dict[str, Any]) -> Optional[str]:
    """
    Extract user ID from Cognito authorizer claims.

    Args:
        event: Lambda event

    Returns:
        User ID (sub claim), or None for anonymous requests
    """
    request_context = event.get('requestContext') or {}
    authorizer = request_context.get('authorizer') or {}
    claims = authorizer.get('claims') or {}
    return claims.get('sub')


def get_query_params(event: Dict[str, Any]) -> Dict[str, str]:
    """Return the query string parameters, empty when none were sent."""
    return event.get('queryStringParameters') or {}


def get_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse the JSON request body.

    Raises:
        ReceiptTrackerException: If the body is not a JSON object
    """
    try:
        body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        raise ReceiptTrackerException("Request body must be valid JSON", status_code=400)

    if not isinstance(body, dict):
        raise ReceiptTrackerException("Request body must be a JSON object", status_code=400)

    return body


def current_time_millis() -> int:
    """Milliseconds since epoch, read once per request."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
