import json

import pytest

from haul_quote.engine import rate_config, ConfigImportError, DuplicateItemError, LineItem
from haul_quote.engine.coerce import MAX_INPUT
from haul_quote.services.config_store import ConfigStore, KeyValueStore
from haul_quote.services.quote_session import QuoteSession


def test_new_session_uses_defaults_and_zero_quantities(session):
    assert session.config == rate_config.default_config()
    assert session.request.quantities == {item.id: 0 for item in session.config.items}
    assert session.breakdown.total == 120000


def test_request_changes_recompute_immediately(session):
    session.update_request(distance_km=20, floors=3, has_elevator=False, helpers=1, weekend=True)
    session.set_quantity("fridge", 2)

    assert session.breakdown.items_subtotal == 40000
    assert session.breakdown.total == 282000


def test_request_inputs_are_clamped(session):
    session.update_request(distance_km="-3", helpers="lots", floors=-2, has_elevator="no")
    assert session.request.distance_km == 0
    assert session.request.helpers == 0
    assert session.request.floors == 0
    assert session.request.has_elevator is False
    assert session.breakdown.total == 120000


def test_unknown_request_field_raises(session):
    with pytest.raises(AttributeError):
        session.update_request(stairs=3)


def test_quantity_for_unknown_item_is_ignored(session):
    session.set_quantity("piano", 1)
    assert "piano" not in session.request.quantities


def test_config_edit_persists_and_reprices(session, store_path):
    session.update_config(base_fee=100000, biz_name="Clean Move")
    assert session.breakdown.total == 100000

    stored = json.loads(json.loads(store_path.read_text(encoding="utf-8"))["haul_cfg_v1"])
    assert stored["baseFee"] == 100000
    assert stored["bizName"] == "Clean Move"


def test_saved_config_is_loaded_by_next_session(session, config_store):
    session.update_config(helper_fee=70000)
    again = QuoteSession(config_store)
    assert again.config.helper_fee == 70000


def test_item_edits_reconcile_quantities(session):
    session.set_quantity("fridge", 2)
    session.set_quantity("desk", 1)

    items = [i for i in session.config.items if i.id != "desk"] + [LineItem(id="sofa", label="Sofa", unit_price=25000)]
    session.set_items(items)

    assert session.request.quantities["fridge"] == 2
    assert session.request.quantities["sofa"] == 0
    assert "desk" not in session.request.quantities
    assert set(session.request.quantities) == set(session.config.item_ids())


def test_add_and_remove_item(session):
    item = session.add_item("Sofa", 25000, "pc")
    assert session.request.quantities[item.id] == 0
    session.set_quantity(item.id, 1)
    assert session.breakdown.items_subtotal == 25000

    session.remove_item(item.id)
    assert item.id not in session.request.quantities
    assert session.breakdown.items_subtotal == 0


def test_duplicate_item_ids_leave_session_unchanged(session):
    before = list(session.config.items)
    with pytest.raises(DuplicateItemError):
        session.set_items([LineItem(id="a", label="A"), LineItem(id="a", label="B")])
    assert session.config.items == before


def test_invalid_import_leaves_config_unchanged(session):
    session.update_config(base_fee=111000)
    session.set_quantity("washer", 3)
    before_config = rate_config.to_dict(session.config)
    before_total = session.breakdown.total

    with pytest.raises(ConfigImportError):
        session.import_config("{ this is not json")

    assert rate_config.to_dict(session.config) == before_config
    assert session.breakdown.total == before_total
    assert session.request.quantities["washer"] == 3


def test_import_replaces_config_and_keeps_surviving_quantities(session):
    session.set_quantity("fridge", 2)
    session.set_quantity("desk", 4)

    session.import_config(json.dumps({
        "baseFee": 50000,
        "items": [{"id": "fridge", "label": "Fridge", "unitPrice": 10000}],
    }))

    assert session.config.base_fee == 50000
    assert session.request.quantities == {"fridge": 2}
    assert session.breakdown.total == 70000


def test_export_then_import_round_trip(session):
    session.update_config(weekend_rate=0.35)
    text = session.export_config()
    session.reset_config()
    assert session.config.weekend_rate == 0.2

    session.import_config(text)
    assert session.config.weekend_rate == 0.35


def test_reset_restores_defaults(session):
    session.update_config(base_fee=1)
    session.reset_config()
    assert session.config == rate_config.default_config()


def test_failed_persistence_does_not_break_session(session, monkeypatch):
    def fail(key, value):
        raise OSError("disk full")

    monkeypatch.setattr(session.store.store, "set_item", fail)
    session.update_config(base_fee=90000)

    assert session.config.base_fee == 90000
    assert session.breakdown.total == 90000


def test_unreadable_store_falls_back_to_defaults(tmp_path):
    broken = tmp_path / "store.json"
    broken.write_text("{ corrupt", encoding="utf-8")
    session = QuoteSession(ConfigStore(KeyValueStore(broken)))
    assert session.config == rate_config.default_config()


def test_store_in_directory_path_fails_quietly(tmp_path):
    store = ConfigStore(KeyValueStore(tmp_path))
    assert store.load() == rate_config.default_config()
    assert store.save(rate_config.default_config()) is False


def test_clear_request(session):
    session.update_request(distance_km=50, quantities={"fridge": 3})
    session.clear_request()
    assert session.request.distance_km == 8
    assert all(qty == 0 for qty in session.request.quantities.values())


def test_unknown_config_field_applies_nothing(session, store_path):
    with pytest.raises(AttributeError):
        session.update_config(base_fee=1, bogus=2)

    assert session.config.base_fee == 120000
    assert session.breakdown.total == 120000
    assert not store_path.exists()


def test_config_that_fails_to_price_is_not_saved(session, config_store, monkeypatch):
    session.update_config(base_fee=90000)

    def fail(cfg, req):
        raise RuntimeError("pricing failed")

    monkeypatch.setattr(session.pricer, "price", fail)
    with pytest.raises(RuntimeError):
        session.replace_config(rate_config.from_dict({"baseFee": 1}))

    assert session.config.base_fee == 90000
    assert session.breakdown.total == 90000
    assert config_store.load().base_fee == 90000


def test_import_of_oversized_rates_still_prices(session):
    session.update_request(weekend=True)
    session.import_config('{"baseFee": 1e308, "weekendRateMultiplierAdd": 1e308, "helperFee": 1e400}')

    assert session.config.helper_fee == 0
    assert isinstance(session.breakdown.total, int)
    assert session.breakdown.total > 0


def test_persisted_oversized_rates_load_into_new_session(config_store):
    config_store.store.set_item("haul_cfg_v1", json.dumps({
        "baseFee": 10 ** 400,
        "extraPerKm": 1e308,
        "items": [{"id": "x", "label": "Chair", "unitPrice": 5000}],
    }))

    session = QuoteSession(config_store)
    session.update_request(distance_km=9)

    assert session.config.base_fee == 0
    assert session.breakdown.distance_surcharge == 9 * MAX_INPUT
    assert session.breakdown.total == 9 * MAX_INPUT


def test_corrupt_store_file_is_rewritten_on_save(store_path):
    store_path.write_text("{ corrupt", encoding="utf-8")
    store = KeyValueStore(store_path)

    store.set_item("greeting", "hello")

    assert store.get_item("greeting") == "hello"
    assert json.loads(store_path.read_text(encoding="utf-8")) == {"greeting": "hello"}


def test_corrupt_store_file_does_not_block_config_save(store_path):
    store_path.write_text("[1, 2, 3]", encoding="utf-8")
    config_store = ConfigStore(KeyValueStore(store_path))

    assert config_store.save(rate_config.from_dict({"baseFee": 75000})) is True
    assert config_store.load().base_fee == 75000
