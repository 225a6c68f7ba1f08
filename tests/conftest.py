import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from haul_quote.engine import LineItem, RateConfig, QuoteRequest
from haul_quote.services.config_store import ConfigStore, KeyValueStore
from haul_quote.services.quote_session import QuoteSession


@pytest.fixture
def cfg():
    """Rate table used by the end-to-end pricing scenarios."""
    return RateConfig(
        base_fee=120000,
        base_distance_km=10,
        extra_per_km=1000,
        no_elevator_per_floor=5000,
        weekend_rate=0.2,
        helper_fee=50000,
        items=[LineItem(id="fridge", label="Refrigerator", unit_price=20000, unit_label="unit")],
    )


@pytest.fixture
def request_a():
    return QuoteRequest(distance_km=8, floors=1, has_elevator=True, helpers=0, weekend=False,
                        quantities={"fridge": 1})


@pytest.fixture
def request_b():
    return QuoteRequest(distance_km=20, floors=3, has_elevator=False, helpers=1, weekend=True,
                        quantities={"fridge": 2})


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.json"


@pytest.fixture
def config_store(store_path):
    return ConfigStore(KeyValueStore(store_path), key="haul_cfg_v1")


@pytest.fixture
def session(config_store):
    return QuoteSession(config_store)
