"""Shared API state - the single quoting session behind every endpoint."""
from typing import Optional

from ..config.settings import get_settings
from ..services.config_store import ConfigStore, KeyValueStore
from ..services.quote_session import QuoteSession

_session: Optional[QuoteSession] = None


def create_session() -> QuoteSession:
    settings = get_settings()
    store = ConfigStore(KeyValueStore(settings.store_path), key=settings.storage_key)
    return QuoteSession(store)


def get_session() -> QuoteSession:
    """FastAPI dependency returning the process-wide session."""
    global _session
    if _session is None:
        _session = create_session()
    return _session
