"""Unit tests for the receipt repository."""

import pytest
from decimal import Decimal
from unittest.mock import Mock
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from receipts.repository import ReceiptRepository
from receipts.models import Receipt, ReceiptUpdate
from search.criteria import build_query_criteria
from shared.exceptions import NotFoundError


class TestReceiptRepository:
    """Test cases for ReceiptRepository."""

    @pytest.fixture
    def repository(self):
        """Create repository with a mocked table."""
        return ReceiptRepository(table=Mock())

    @pytest.fixture
    def sample_item(self):
        """Sample receipt item as returned by the table wrapper."""
        return {
            'user_id': 'user123',
            'receipt_id': 'r1',
            'timestamp': 1593388800000,
            'price': 26.12,
            'store': 'walmart',
            'categories': ['groceries'],
            'raw_text': 'Walmart'
        }

    def test_get_receipt(self, repository, sample_item):
        """Test getting a receipt converts the item."""
        repository.receipts_table.get_item.return_value = sample_item

        receipt = repository.get('user123', 'r1')

        assert receipt.price == Decimal('26.12')
        repository.receipts_table.get_item.assert_called_once_with({
            'user_id': 'user123',
            'receipt_id': 'r1'
        })

    def test_get_receipt_not_found(self, repository):
        """Test getting a non-existent receipt."""
        repository.receipts_table.get_item.return_value = None

        with pytest.raises(NotFoundError, match="Receipt not found"):
            repository.get('user123', 'missing')

    def test_list_for_user(self, repository, sample_item):
        """Test listing all receipts of a user."""
        repository.receipts_table.query_all.return_value = [sample_item, {**sample_item, 'receipt_id': 'r2'}]

        receipts = repository.list_for_user('user123')

        assert [receipt.receipt_id for receipt in receipts] == ['r1', 'r2']

    def test_find_matching_passes_filter(self, repository, sample_item):
        """Test searching passes a filter expression to the table."""
        repository.receipts_table.query_all.return_value = [sample_item]
        criteria = build_query_criteria("UTC", "", "June 1, 2020 - June 30, 2020", "", "0", "100")

        receipts = repository.find_matching('user123', criteria)

        assert len(receipts) == 1
        kwargs = repository.receipts_table.query_all.call_args[1]
        assert kwargs['filter_expression'] is not None

    def test_filter_skips_empty_store_and_category(self):
        """Test empty store and category add no conditions."""
        criteria = build_query_criteria("UTC", "", "June 1, 2020 - June 30, 2020", "", "0", "100")

        expression = ReceiptRepository.build_filter(criteria)
        attribute_names = _attribute_names(expression)

        assert 'store' not in attribute_names
        assert 'categories' not in attribute_names
        assert {'timestamp', 'price'} <= attribute_names

    def test_filter_with_store_and_category(self):
        """Test store and category add conditions when set."""
        criteria = build_query_criteria(
            "UTC", "Lunch", "June 1, 2020 - June 30, 2020", "Walmart", "0", "100"
        )

        attribute_names = _attribute_names(ReceiptRepository.build_filter(criteria))

        assert {'store', 'categories'} <= attribute_names

    def test_save(self, repository):
        """Test saving a receipt writes its item."""
        receipt = Receipt(user_id='user123', receipt_id='r1', price=Decimal('5.00'), store='contoso')

        repository.save(receipt)

        item = repository.receipts_table.put_item.call_args[0][0]
        assert item['price'] == Decimal('5.00')
        assert 'raw_text' not in item

    def test_apply_update(self, repository, sample_item):
        """Test updating sets every editable field."""
        repository.receipts_table.get_item.return_value = sample_item
        repository.receipts_table.update_item.return_value = {**sample_item, 'store': 'contoso'}
        update = ReceiptUpdate(
            categories=['electronics'], store='contoso', price=Decimal('14.51'), timestamp=1593388800000
        )

        receipt = repository.apply_update('user123', 'r1', update)

        assert receipt.store == 'contoso'
        kwargs = repository.receipts_table.update_item.call_args[1]
        assert kwargs['update_expression'].startswith('SET ')
        assert set(kwargs['expression_names'].values()) == {'categories', 'store', 'price', 'timestamp'}
        assert kwargs['expression_values'][':price'] == Decimal('14.51')

    def test_apply_update_not_found(self, repository):
        """Test updating a non-existent receipt."""
        repository.receipts_table.get_item.return_value = None
        update = ReceiptUpdate(categories=[], store='', price=Decimal('1.00'), timestamp=0)

        with pytest.raises(NotFoundError):
            repository.apply_update('user123', 'missing', update)

        repository.receipts_table.update_item.assert_not_called()

    def test_delete(self, repository, sample_item):
        """Test deleting an existing receipt."""
        repository.receipts_table.get_item.return_value = sample_item

        repository.delete('user123', 'r1')

        repository.receipts_table.delete_item.assert_called_once_with({
            'user_id': 'user123',
            'receipt_id': 'r1'
        })


def _attribute_names(condition):
    """Collect the attribute names referenced by a boto3 condition."""
    names = set()
    for value in condition.get_expression()['values']:
        if hasattr(value, 'get_expression'):
            names |= _attribute_names(value)
        elif hasattr(value, 'name'):
            names.add(value.name)
    return names
