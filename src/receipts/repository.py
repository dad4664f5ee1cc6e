"""Receipt storage backed by the receipts DynamoDB table."""

import os
import logging
from decimal import Decimal
from typing import List, Optional

from boto3.dynamodb.conditions import Attr, Key

from shared.dynamodb import DynamoDBClient
from shared.exceptions import NotFoundError
from receipts.models import Receipt, ReceiptUpdate
from search.criteria import QueryCriteria

logger = logging.getLogger(__name__)


class ReceiptRepository:
    """Reads and writes receipt records for a single table."""

    def __init__(self, table: Optional[DynamoDBClient] = None):
        """Initialize repository, defaulting to the RECEIPTS_TABLE table."""
        self.receipts_table = table or DynamoDBClient(os.environ.get('RECEIPTS_TABLE'))

    def get(self, user_id: str, receipt_id: str) -> Receipt:
        """
        Get receipt by ID.

        Raises:
            NotFoundError: If receipt not found
        """
        item = self.receipts_table.get_item({
            'user_id': user_id,
            'receipt_id': receipt_id
        })

        if not item:
            raise NotFoundError("Receipt not found")

        return Receipt(**item)

    def list_for_user(self, user_id: str) -> List[Receipt]:
        """Return every receipt owned by the user."""
        items = self.receipts_table.query_all(Key('user_id').eq(user_id))
        return [Receipt(**item) for item in items]

    def find_matching(self, user_id: str, criteria: QueryCriteria) -> List[Receipt]:
        """
        Return the user's receipts that satisfy the search criteria.

        Args:
            user_id: User ID
            criteria: Validated search criteria

        Returns:
            Matching receipts
        """
        items = self.receipts_table.query_all(
            Key('user_id').eq(user_id),
            filter_expression=self.build_filter(criteria)
        )

        logger.info(f"Search matched {len(items)} receipts for user {user_id}")
        return [Receipt(**item) for item in items]

    @staticmethod
    def build_filter(criteria: QueryCriteria):
        """
        Translate criteria into a filter expression.

        Price bounds are two comparisons rather than BETWEEN so inverted bounds
        match nothing instead of being rejected by DynamoDB.
        """
        condition = (
            Attr('timestamp').gte(criteria.start_timestamp)
            & Attr('timestamp').lte(criteria.end_timestamp)
            & Attr('price').gte(Decimal(str(criteria.min_price)))
            & Attr('price').lte(Decimal(str(criteria.max_price)))
        )

        if criteria.store:
            condition = condition & Attr('store').eq(criteria.store)

        for category in criteria.category:
            condition = condition & Attr('categories').contains(category)

        return condition

    def save(self, receipt: Receipt) -> Receipt:
        """Store a new receipt record."""
        self.receipts_table.put_item(receipt.to_item())
        logger.info(f"Saved receipt {receipt.receipt_id}")
        return receipt

    def apply_update(self, user_id: str, receipt_id: str, update: ReceiptUpdate) -> Receipt:
        """
        Overwrite the editable fields of an existing receipt.

        Raises:
            NotFoundError: If receipt not found
        """
        # Verify receipt exists
        self.get(user_id, receipt_id)

        fields = update.model_dump()
        update_parts = []
        expr_values = {}
        expr_names = {}

        for key, value in fields.items():
            update_parts.append(f"#{key} = :{key}")
            expr_names[f'#{key}'] = key
            expr_values[f':{key}'] = value

        updated = self.receipts_table.update_item(
            key={'user_id': user_id, 'receipt_id': receipt_id},
            update_expression="SET " + ", ".join(update_parts),
            expression_values=expr_values,
            expression_names=expr_names
        )

        logger.info(f"Updated receipt {receipt_id}")
        return Receipt(**updated)

    def delete(self, user_id: str, receipt_id: str) -> None:
        """
        Delete receipt.

        Raises:
            NotFoundError: If receipt not found
        """
        self.get(user_id, receipt_id)

        self.receipts_table.delete_item({
            'user_id': user_id,
            'receipt_id': receipt_id
        })

        logger.info(f"Deleted receipt {receipt_id}")
