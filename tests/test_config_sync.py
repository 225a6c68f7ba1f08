from haul_quote.engine import LineItem, QuoteRequest, reconcile


def _items(*ids):
    return [LineItem(id=i, label=i.title(), unit_price=1000) for i in ids]


def test_new_items_start_at_zero():
    req = QuoteRequest(quantities={"fridge": 2})
    result = reconcile(req, _items("fridge", "washer"))
    assert result.quantities == {"fridge": 2, "washer": 0}


def test_removed_items_are_dropped():
    req = QuoteRequest(quantities={"fridge": 2, "washer": 1})
    result = reconcile(req, _items("washer"))
    assert result.quantities == {"washer": 1}


def test_keys_match_item_ids_exactly():
    req = QuoteRequest(quantities={"old": 5, "desk": 3})
    items = _items("desk", "bed_s", "small")
    result = reconcile(req, items)
    assert set(result.quantities) == {item.id for item in items}


def test_quantities_survive_unrelated_edits():
    req = reconcile(QuoteRequest(quantities={"fridge": 3, "desk": 1}), _items("fridge", "desk"))
    edited = _items("fridge", "desk", "wardrobe")
    edited[0].unit_price = 99999

    result = reconcile(req, edited)
    assert result.quantities["fridge"] == 3
    assert result.quantities["desk"] == 1


def test_reconcile_is_idempotent():
    items = _items("fridge", "washer", "drum")
    req = QuoteRequest(quantities={"fridge": 1, "gone": 4})
    once = reconcile(req, items)
    twice = reconcile(once, items)
    assert twice == once


def test_other_request_fields_untouched():
    req = QuoteRequest(distance_km=20, floors=3, has_elevator=False, helpers=2, weekend=True)
    result = reconcile(req, _items("fridge"))
    assert (result.distance_km, result.floors, result.has_elevator, result.helpers, result.weekend) == \
        (20, 3, False, 2, True)


def test_original_request_not_mutated():
    req = QuoteRequest(quantities={"gone": 1})
    reconcile(req, _items("fridge"))
    assert req.quantities == {"gone": 1}


def test_empty_item_list_clears_quantities():
    req = QuoteRequest(quantities={"fridge": 1})
    assert reconcile(req, []).quantities == {}


def test_missing_quantity_map_is_rebuilt():
    req = QuoteRequest(quantities=None)
    assert reconcile(req, [LineItem(id="a", label="A")]).quantities == {"a": 0}
