"""Spending aggregation over a user's receipts."""

from decimal import Decimal
from typing import Dict, Iterable, Mapping

from pydantic import BaseModel

from receipts.models import Receipt
from shared.formatting import capitalize_words, sanitize_text


class SpendingAnalytics(BaseModel):
    """Spending totals grouped by store and by category."""

    store_analytics: Dict[str, Decimal]
    category_analytics: Dict[str, Decimal]


def _add(totals: Dict[str, Decimal], label: str, amount: Decimal) -> None:
    # First occurrence initializes the group, later ones add to it.
    if label in totals:
        totals[label] += amount
    else:
        totals[label] = amount


def aggregate_by_store(receipts: Iterable[Receipt]) -> Dict[str, Decimal]:
    """
    Sum receipt prices per store.

    Store names are grouped by their capitalized form, so "WALMART" and
    "walmart" land in the same "Walmart" group. Receipts without a store or
    without a price are left out.

    Args:
        receipts: Receipt records

    Returns:
        Mapping of display store name to total spent
    """
    totals: Dict[str, Decimal] = {}

    for receipt in receipts:
        if not receipt.store or receipt.price is None:
            continue

        label = capitalize_words(receipt.store)
        if label:
            _add(totals, label, receipt.price)

    return totals


def aggregate_by_category(receipts: Iterable[Receipt]) -> Dict[str, Decimal]:
    """
    Sum receipt prices per category.

    Each distinct category on a receipt is credited with the receipt's full
    price. Receipts without a price are left out, as are blank categories.

    Args:
        receipts: Receipt records

    Returns:
        Mapping of lowercase category to total spent
    """
    totals: Dict[str, Decimal] = {}

    for receipt in receipts:
        if receipt.price is None:
            continue

        labels = dict.fromkeys(sanitize_text(category) for category in receipt.categories)
        for label in labels:
            if label:
                _add(totals, label, receipt.price)

    return totals


def merge_totals(*partials: Mapping[str, Decimal]) -> Dict[str, Decimal]:
    """Combine totals computed over separate shards of the same receipts."""
    merged: Dict[str, Decimal] = {}

    for partial in partials:
        for label, amount in partial.items():
            _add(merged, label, amount)

    return merged


def compute_spending_analytics(receipts: Iterable[Receipt]) -> SpendingAnalytics:
    """Compute store and category breakdowns for the given receipts."""
    receipts = list(receipts)

    return SpendingAnalytics(
        store_analytics=aggregate_by_store(receipts),
        category_analytics=aggregate_by_category(receipts)
    )
