#!/usr/bin/env python3
"""
Seed data script for testing the receipt tracker application.
Creates sample receipts for one user so search and analytics have data.
"""

import boto3
import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import uuid
import random

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from receipts.models import Receipt
from shared.dynamodb import DynamoDBClient
from shared.formatting import sanitize_categories, sanitize_text

STORES = {
    'Walmart': ['Groceries', 'Household'],
    'Contoso': ['Electronics', 'Shopping'],
    "McDonald's": ['Fast Food', 'Breakfast', 'Lunch'],
    'Main Street Restaurant': ['Restaurant', 'Dinner'],
    'Target': ['Groceries', 'Shopping', 'Clothing'],
}


def get_table_name_from_stack(stack_name='receipt-tracker'):
    """Get the receipts table name from CloudFormation stack."""
    cf = boto3.client('cloudformation')

    try:
        response = cf.describe_stacks(StackName=stack_name)
        for output in response['Stacks'][0]['Outputs']:
            if 'Receipts' in output['OutputKey'] and 'Table' in output['OutputKey']:
                return output['OutputValue']
    except Exception as e:
        print(f"Error getting table name from stack: {e}")

    print("Using default table name...")
    return f'{stack_name}-receipts'


def build_receipts(user_id, num_receipts=50):
    """Build sample receipts spread over the last 60 days."""
    receipts = []
    now = datetime.now(timezone.utc)

    for _ in range(num_receipts):
        store = random.choice(list(STORES))
        categories = random.sample(STORES[store], k=random.randint(1, len(STORES[store])))
        transaction_time = now - timedelta(days=random.randint(0, 60), minutes=random.randint(0, 1440))

        receipts.append(Receipt(
            user_id=user_id,
            receipt_id=str(uuid.uuid4()),
            timestamp=int(transaction_time.timestamp() * 1000),
            price=Decimal(str(round(random.uniform(2.0, 150.0), 2))),
            store=sanitize_text(store),
            categories=sanitize_categories(categories),
            raw_text=f"{store}\nThank you for shopping with us\n"
        ))

    return receipts


def main():
    """Main function."""
    print("=" * 50)
    print("Receipt Tracker - Seed Data Script")
    print("=" * 50)

    stack_name = input("Enter stack name (default: receipt-tracker): ").strip()
    if not stack_name:
        stack_name = 'receipt-tracker'

    print("\nGetting table name from CloudFormation...")
    table_name = get_table_name_from_stack(stack_name)
    print(f"  receipts: {table_name}")

    user_id = input("\nEnter user ID (Cognito sub) to seed data for: ").strip()
    if not user_id:
        print("Error: User ID is required")
        sys.exit(1)

    num_receipts = input("Enter number of receipts to create (default: 50): ").strip()
    num_receipts = int(num_receipts) if num_receipts else 50

    receipts = build_receipts(user_id, num_receipts)

    print(f"\nCreating {len(receipts)} sample receipts...")
    DynamoDBClient(table_name).batch_write([receipt.to_item() for receipt in receipts])

    print("\n" + "=" * 50)
    print("Data seeding complete!")
    print("=" * 50)
    print(f"\nCreated {len(receipts)} receipts for user: {user_id}")


if __name__ == '__main__':
    main()
