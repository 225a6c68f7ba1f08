"""
Quote Session - owns one rate table and one customer request.

Every mutation reconciles quantities (when items change), recomputes the
breakdown and then persists the rate table (when it changes) before
returning, so `session.breakdown` is always current.
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..engine import rate_config, reconcile, QuotePricer
from ..engine.coerce import to_non_negative, to_quantity, to_flag, to_text
from ..engine.models import LineItem, RateConfig, QuoteRequest, QuoteBreakdown, TraceStep
from .config_store import ConfigStore
from . import quote_export

logger = logging.getLogger(__name__)

REQUEST_NUMBER_FIELDS = ('distance_km', 'floors', 'helpers')
REQUEST_FLAG_FIELDS = ('has_elevator', 'weekend')
CONFIG_NUMBER_FIELDS = tuple(attr for attr, _ in rate_config.NUMERIC_FIELDS.values())
CONFIG_TEXT_FIELDS = tuple(rate_config.TEXT_FIELDS.values())


class QuoteSession:
    """Single-user quoting session."""

    def __init__(self, store: ConfigStore, pricer: Optional[QuotePricer] = None):
        self.store = store
        self.pricer = pricer or QuotePricer()
        self.config: RateConfig = store.load()
        self.request: QuoteRequest = QuoteRequest.for_items(self.config.items)
        self.breakdown: QuoteBreakdown = self.pricer.price(self.config, self.request)

    def _recompute(self):
        self.breakdown = self.pricer.price(self.config, self.request)

    def _apply_config(self, new_cfg: RateConfig, items_changed: bool = True):
        """Price against new_cfg first; only a config that prices is kept and saved."""
        request = reconcile(self.request, new_cfg.items) if items_changed else self.request
        breakdown = self.pricer.price(new_cfg, request)
        self.config, self.request, self.breakdown = new_cfg, request, breakdown
        self.store.save(self.config)

    # ------------------------------------------------------------------
    # Customer inputs
    # ------------------------------------------------------------------
    def update_request(self, **changes) -> QuoteBreakdown:
        """
        Update job parameters (distance_km, floors, has_elevator, helpers,
        weekend) and/or `quantities`. Unknown fields raise AttributeError.
        """
        updates = {}
        for name, value in changes.items():
            if name in REQUEST_NUMBER_FIELDS:
                updates[name] = to_non_negative(value)
            elif name in REQUEST_FLAG_FIELDS:
                updates[name] = to_flag(value)
            elif name == 'quantities':
                quantities = dict(self.request.quantities)
                for item_id, qty in (value or {}).items():
                    if item_id in quantities:
                        quantities[item_id] = to_quantity(qty)
                updates['quantities'] = quantities
            else:
                raise AttributeError(f"QuoteRequest has no field '{name}'")

        self.request = replace(self.request, **updates)
        self._recompute()
        return self.breakdown

    def set_quantity(self, item_id: str, qty) -> QuoteBreakdown:
        """Set one item count. Ids not in the rate table are ignored."""
        return self.update_request(quantities={item_id: qty})

    def clear_request(self) -> QuoteBreakdown:
        """Start a fresh request for the current items."""
        self.request = QuoteRequest.for_items(self.config.items)
        self._recompute()
        return self.breakdown

    # ------------------------------------------------------------------
    # Operator edits
    # ------------------------------------------------------------------
    def update_config(self, **changes) -> QuoteBreakdown:
        """
        Update rates and/or business info. Use set_items for items.

        Any unknown field raises AttributeError before anything is applied.
        """
        updates = {}
        for name, value in changes.items():
            if name == 'items':
                raise AttributeError("Use set_items to change rate table items")
            if name in CONFIG_TEXT_FIELDS:
                updates[name] = to_text(value)
            elif name in CONFIG_NUMBER_FIELDS:
                updates[name] = to_non_negative(value)
            else:
                raise AttributeError(f"RateConfig has no field '{name}'")

        self._apply_config(replace(self.config, **updates), items_changed=False)
        return self.breakdown

    def set_items(self, items: list[LineItem]) -> QuoteBreakdown:
        """Replace the item list. Raises DuplicateItemError, leaving state unchanged."""
        self._apply_config(rate_config.set_items(replace(self.config), items))
        return self.breakdown

    def add_item(self, label: str = 'New item', unit_price: int = 0, unit_label: str = 'pc') -> LineItem:
        item = rate_config.new_item(self.config.items, label, unit_price, unit_label)
        self.set_items(self.config.items + [item])
        return item

    def remove_item(self, item_id: str) -> QuoteBreakdown:
        return self.set_items([item for item in self.config.items if item.id != item_id])

    def replace_config(self, new_cfg: RateConfig) -> QuoteBreakdown:
        self._apply_config(rate_config.replace(self.config, new_cfg))
        return self.breakdown

    def import_config(self, text: str) -> QuoteBreakdown:
        """
        Replace the rate table with pasted JSON text.

        Raises ConfigImportError on bad input; the current rate table is
        left untouched in that case.
        """
        new_cfg = rate_config.import_text(text)
        logger.info("Imported rate table with %d items", len(new_cfg.items))
        return self.replace_config(new_cfg)

    def export_config(self) -> str:
        return rate_config.export_text(self.config)

    def reset_config(self) -> QuoteBreakdown:
        """Restore the built-in rate table."""
        return self.replace_config(rate_config.default_config())

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------
    def trace(self) -> list[TraceStep]:
        _, steps = self.pricer.price_with_trace(self.config, self.request)
        return steps

    def quote_text(self, now: Optional[datetime] = None) -> str:
        return quote_export.build_quote_text(self.config, self.request, self.breakdown, now=now)

    def quote_pdf(self, now: Optional[datetime] = None) -> bytes:
        return quote_export.generate_quote_pdf(self.config, self.request, self.breakdown, now=now)
