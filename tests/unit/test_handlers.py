"""Unit tests for the Lambda handlers."""

import json
import pytest
from decimal import Decimal
from unittest.mock import Mock, patch
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from search import handler as search_handler
from analytics import handler as analytics_handler
from receipts import handler as receipts_handler
from receipts.models import AnalysisResults, Receipt
from shared.exceptions import InvalidPriceError, NotFoundError

SEARCH_PARAMS = {
    'timeZoneId': 'America/Chicago',
    'category': 'Breakfast',
    'dateRange': 'June 1, 2020 - June 30, 2020',
    'store': "McDonald's",
    'minPrice': '21.30',
    'maxPrice': '87.60'
}


def make_event(method, path, user_id='user123', query=None, body=None, path_params=None):
    """Build an API Gateway proxy event."""
    event = {
        'httpMethod': method,
        'path': path,
        'queryStringParameters': query,
        'pathParameters': path_params,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {}
    }
    if user_id:
        event['requestContext'] = {'authorizer': {'claims': {'sub': user_id}}}
    return event


def parse_body(response):
    """Decode a handler response body."""
    return json.loads(response['body'])


class TestSearchHandler:
    """Test cases for the search handler."""

    @pytest.fixture
    def search_service(self):
        """Patch the search service."""
        service = Mock()
        with patch.object(search_handler, 'get_search_service', return_value=service):
            yield service

    def test_search(self, search_service):
        """Test a valid search returns the matching receipts."""
        search_service.search.return_value = [
            Receipt(user_id='user123', receipt_id='r1', store="mcdonald's", price=Decimal('25.00'))
        ]

        response = search_handler.lambda_handler(
            make_event('GET', '/receipts/search', query=SEARCH_PARAMS), None
        )

        assert response['statusCode'] == 200
        body = parse_body(response)
        assert body['data']['count'] == 1
        assert body['data']['receipts'][0]['price'] == 25.0

        user_id, criteria = search_service.search.call_args[0]
        assert user_id == 'user123'
        assert criteria.store == "mcdonald's"
        assert criteria.start_timestamp == 1590987600000

    def test_search_invalid_date_range(self, search_service):
        """Test a bad date range is reported with its error kind."""
        response = search_handler.lambda_handler(
            make_event('GET', '/receipts/search', query={**SEARCH_PARAMS, 'dateRange': ''}), None
        )

        assert response['statusCode'] == 400
        assert parse_body(response)['error']['code'] == 'DATE_RANGE_PARSE_ERROR'
        search_service.search.assert_not_called()

    def test_search_file_path_timezone_falls_back_to_utc(self, search_service):
        """Test a timezone that names a file is treated as unknown."""
        search_service.search.return_value = []

        response = search_handler.lambda_handler(
            make_event('GET', '/receipts/search', query={**SEARCH_PARAMS, 'timeZoneId': '/etc/passwd'}), None
        )

        assert response['statusCode'] == 200
        _, criteria = search_service.search.call_args[0]
        assert criteria.timezone == 'UTC'
        assert criteria.start_timestamp == 1590969600000

    def test_search_infinite_price(self, search_service):
        """Test a price bound that overflows is reported as a format error."""
        response = search_handler.lambda_handler(
            make_event('GET', '/receipts/search', query={**SEARCH_PARAMS, 'maxPrice': '1e400'}), None
        )

        assert response['statusCode'] == 400
        assert parse_body(response)['error']['code'] == 'INVALID_PRICE_FORMAT'
        search_service.search.assert_not_called()

    def test_search_missing_price(self, search_service):
        """Test a missing price bound is reported as a missing field."""
        params = {k: v for k, v in SEARCH_PARAMS.items() if k != 'maxPrice'}

        response = search_handler.lambda_handler(make_event('GET', '/receipts/search', query=params), None)

        assert response['statusCode'] == 400
        assert parse_body(response)['error']['code'] == 'NULL_FIELD'

    def test_search_requires_login(self, search_service):
        """Test anonymous searches are rejected."""
        response = search_handler.lambda_handler(
            make_event('GET', '/receipts/search', user_id=None, query=SEARCH_PARAMS), None
        )

        assert response['statusCode'] == 401

    def test_unknown_route(self, search_service):
        """Test unknown routes."""
        response = search_handler.lambda_handler(make_event('POST', '/receipts/search'), None)

        assert response['statusCode'] == 404


class TestAnalyticsHandler:
    """Test cases for the analytics handler."""

    @pytest.fixture
    def repository(self):
        """Patch the receipt repository."""
        repository = Mock()
        with patch.object(analytics_handler, 'get_repository', return_value=repository):
            yield repository

    def test_analytics(self, repository):
        """Test store and category totals are returned."""
        repository.list_for_user.return_value = [
            Receipt(user_id='user123', receipt_id='r1', store='walmart',
                    price=Decimal('25.00'), categories=['groceries']),
            Receipt(user_id='user123', receipt_id='r2', store='WALMART',
                    price=Decimal('1.12'), categories=['groceries']),
            Receipt(user_id='user123', receipt_id='r3', store=None, price=Decimal('9.99')),
        ]

        response = analytics_handler.lambda_handler(make_event('GET', '/analytics'), None)

        assert response['statusCode'] == 200
        data = parse_body(response)['data']
        assert data['store_analytics'] == {'Walmart': 26.12}
        assert data['category_analytics'] == {'groceries': 26.12}
        repository.list_for_user.assert_called_once_with('user123')

    def test_analytics_requires_login(self, repository):
        """Test anonymous requests are rejected."""
        response = analytics_handler.lambda_handler(make_event('GET', '/analytics', user_id=None), None)

        assert response['statusCode'] == 401
        repository.list_for_user.assert_not_called()


class TestReceiptsHandler:
    """Test cases for the receipts handler."""

    @pytest.fixture
    def receipt_service(self):
        """Patch the receipt service."""
        service = Mock()
        with patch.object(receipts_handler, 'get_receipt_service', return_value=service):
            yield service

    def test_create(self, receipt_service):
        """Test creating a receipt."""
        receipt_service.create_receipt.return_value = Receipt(
            user_id='user123', receipt_id='r1', store='walmart', price=Decimal('26.12')
        )
        body = {'categories': ['groceries'], 'store': 'Walmart', 'price': '26.12', 'date': '1593388800000'}

        response = receipts_handler.lambda_handler(make_event('POST', '/receipts', body=body), None)

        assert response['statusCode'] == 201
        assert receipt_service.create_receipt.call_args[1]['form'] == body

    def test_update_not_found(self, receipt_service):
        """Test editing a missing receipt."""
        receipt_service.update_receipt.side_effect = NotFoundError("Receipt not found")

        response = receipts_handler.lambda_handler(
            make_event('PUT', '/receipts/r1', body={'store': 'x'}, path_params={'id': 'r1'}), None
        )

        assert response['statusCode'] == 404
        assert parse_body(response)['error']['code'] == 'NOT_FOUND'

    def test_update_invalid_price(self):
        """Test an invalid price in the edit form is reported with its error kind."""
        service = Mock()
        service.update_receipt.side_effect = InvalidPriceError("Price must be positive.")
        with patch.object(receipts_handler, 'get_receipt_service', return_value=service):
            response = receipts_handler.lambda_handler(
                make_event('PUT', '/receipts/r1', body={'price': '-1'}, path_params={'id': 'r1'}), None
            )

        assert response['statusCode'] == 400
        assert parse_body(response)['error'] == {'message': "Price must be positive.", 'code': 'INVALID_PRICE'}

    def test_update_requires_id(self, receipt_service):
        """Test editing without a receipt ID."""
        response = receipts_handler.lambda_handler(make_event('PUT', '/receipts/', body={}), None)

        assert response['statusCode'] == 400

    def test_delete(self, receipt_service):
        """Test deleting a receipt."""
        response = receipts_handler.lambda_handler(
            make_event('DELETE', '/receipts/r1', path_params={'id': 'r1'}), None
        )

        assert response['statusCode'] == 200
        receipt_service.delete_receipt.assert_called_once_with('user123', 'r1')

    def test_analysis(self, receipt_service):
        """Test analysis passes OCR output to the service."""
        receipt_service.analyze.return_value = AnalysisResults(
            raw_text='TOTAL 5.00', price=Decimal('5.00')
        )
        body = {'raw_text': 'TOTAL 5.00', 'categories': ['/Shopping'], 'logo': 'Contoso', 'logo_score': 0.8}

        response = receipts_handler.lambda_handler(make_event('POST', '/receipts/analysis', body=body), None)

        assert response['statusCode'] == 200
        assert parse_body(response)['data']['price'] == 5.0
        kwargs = receipt_service.analyze.call_args[1]
        assert kwargs['category_paths'] == ['/Shopping']
        assert kwargs['logo_score'] == 0.8

    def test_invalid_json_body(self, receipt_service):
        """Test a body that is not JSON."""
        event = make_event('POST', '/receipts')
        event['body'] = '{not json'

        response = receipts_handler.lambda_handler(event, None)

        assert response['statusCode'] == 400
        receipt_service.create_receipt.assert_not_called()
