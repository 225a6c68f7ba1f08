"""
Keeps a QuoteRequest's quantity map in step with the rate table items.
"""
from dataclasses import replace

from .models import LineItem, QuoteRequest


def reconcile(request: QuoteRequest, items: list[LineItem]) -> QuoteRequest:
    """
    Sync request quantities to the current item ids.

    New ids get quantity 0, ids no longer in the rate table are dropped,
    and counts for ids present in both are kept as entered. Returns a new
    request; reconciling again with the same items changes nothing.
    """
    current_ids = {item.id for item in items}

    quantities = {
        item_id: qty
        for item_id, qty in (request.quantities or {}).items()
        if item_id in current_ids
    }
    for item in items:
        if item.id not in quantities:
            quantities[item.id] = 0

    return replace(request, quantities=quantities)
