"""Engine subpackage - rate table, reconciliation and pricing logic."""
from .pricing_engine import QuotePricer, price
from .config_sync import reconcile
from .models import LineItem, RateConfig, QuoteRequest, QuoteBreakdown, TraceStep
from .rate_config import ConfigImportError, DuplicateItemError

__all__ = [
    'QuotePricer', 'price', 'reconcile',
    'LineItem', 'RateConfig', 'QuoteRequest', 'QuoteBreakdown', 'TraceStep',
    'ConfigImportError', 'DuplicateItemError',
]
