"""
Rate table defaults, (de)serialization and import/export.

The persisted and exported form is a JSON object with camelCase keys:

    {"bizName": "", "baseFee": 120000, "baseDistanceKm": 10, ...,
     "items": [{"id": "fridge", "label": "...", "unitPrice": 20000, "unitLabel": "unit"}]}

Older exports used `noElevPerFloor`, `weekendRate` and item `price`; those
keys are still read.
"""
import json
import logging
import secrets
from typing import Optional

from .coerce import to_non_negative, to_text
from .models import LineItem, RateConfig

logger = logging.getLogger(__name__)


# JSON key → (RateConfig attribute, legacy JSON keys)
NUMERIC_FIELDS = {
    'baseFee': ('base_fee', ()),
    'baseDistanceKm': ('base_distance_km', ()),
    'extraPerKm': ('extra_per_km', ()),
    'noElevatorPerFloor': ('no_elevator_per_floor', ('noElevPerFloor',)),
    'weekendRateMultiplierAdd': ('weekend_rate', ('weekendRate',)),
    'helperFee': ('helper_fee', ()),
}

TEXT_FIELDS = {
    'bizName': 'biz_name',
    'bizPhone': 'biz_phone',
    'bizEmail': 'biz_email',
}

DEFAULT_UNIT_LABEL = 'pc'


class ConfigImportError(ValueError):
    """Pasted or uploaded rate table text could not be used."""


class DuplicateItemError(ValueError):
    """Two rate table items share an id."""


def default_config() -> RateConfig:
    """Built-in rate table with sample household items."""
    return RateConfig(
        base_fee=120000,
        base_distance_km=10,
        extra_per_km=1000,
        no_elevator_per_floor=5000,
        weekend_rate=0.2,
        helper_fee=50000,
        items=[
            LineItem(id='fridge', label='Refrigerator (medium/large)', unit_price=20000, unit_label='unit'),
            LineItem(id='washer', label='Washing machine', unit_price=15000, unit_label='unit'),
            LineItem(id='drum', label='Drum washing machine', unit_price=20000, unit_label='unit'),
            LineItem(id='bed_s', label='Bed (single/double)', unit_price=10000, unit_label='set'),
            LineItem(id='bed_l', label='Bed (large)', unit_price=20000, unit_label='set'),
            LineItem(id='wardrobe', label='Wardrobe (2-3 sections)', unit_price=30000, unit_label='pc'),
            LineItem(id='desk', label='Desk/bookcase', unit_price=10000, unit_label='pc'),
            LineItem(id='small', label='Small furniture', unit_price=5000, unit_label='pc'),
        ],
    )


def item_from_dict(data: dict) -> LineItem:
    """Create a LineItem from its JSON form, coercing the price."""
    price = data.get('unitPrice', data.get('price'))
    return LineItem(
        id=to_text(data.get('id')),
        label=to_text(data.get('label')),
        unit_price=int(to_non_negative(price)),
        unit_label=to_text(data.get('unitLabel')) or DEFAULT_UNIT_LABEL,
    )


def item_to_dict(item: LineItem) -> dict:
    return {
        'id': item.id,
        'label': item.label,
        'unitPrice': item.unit_price,
        'unitLabel': item.unit_label,
    }


def check_unique_ids(items: list[LineItem]):
    """Raise DuplicateItemError if any item id repeats."""
    seen = set()
    for item in items:
        if item.id in seen:
            raise DuplicateItemError(f"Item with ID '{item.id}' appears more than once")
        seen.add(item.id)


def from_dict(data: dict) -> RateConfig:
    """
    Build a RateConfig from its JSON form.

    Missing or non-numeric rates become 0 and negative rates clamp to 0.
    Raises ValueError if `data` is not an object, if an item entry is not an
    object, or if item ids repeat.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Rate table must be a JSON object, got {type(data).__name__}")

    cfg = RateConfig()
    for key, (attr, legacy_keys) in NUMERIC_FIELDS.items():
        raw = data.get(key)
        for legacy in legacy_keys:
            if raw is None:
                raw = data.get(legacy)
        setattr(cfg, attr, to_non_negative(raw))

    for key, attr in TEXT_FIELDS.items():
        setattr(cfg, attr, to_text(data.get(key)))

    raw_items = data.get('items') or []
    if not isinstance(raw_items, list):
        raise ValueError("Rate table 'items' must be a list")
    items = []
    for entry in raw_items:
        if not isinstance(entry, dict):
            raise ValueError("Each rate table item must be a JSON object")
        items.append(item_from_dict(entry))
    check_unique_ids(items)
    cfg.items = items

    return cfg


def to_dict(cfg: RateConfig) -> dict:
    """JSON form of a RateConfig."""
    data = {key: getattr(cfg, attr) for key, attr in TEXT_FIELDS.items()}
    for key, (attr, _) in NUMERIC_FIELDS.items():
        data[key] = getattr(cfg, attr)
    data['items'] = [item_to_dict(item) for item in cfg.items]
    return data


def dumps(cfg: RateConfig) -> str:
    """Compact JSON used for persistence."""
    return json.dumps(to_dict(cfg), ensure_ascii=False)


def load(persisted: Optional[str]) -> RateConfig:
    """
    Restore a persisted rate table.

    Falls back to the built-in defaults when nothing is stored or the stored
    record cannot be read. Never raises.
    """
    if not persisted:
        return default_config()
    try:
        return from_dict(json.loads(persisted))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        logger.warning("Ignoring unreadable stored rate table, using defaults: %s", e)
        return default_config()


def export_text(cfg: RateConfig) -> str:
    """Pretty-printed JSON for copy/paste between installations."""
    return json.dumps(to_dict(cfg), ensure_ascii=False, indent=2)


def import_text(text: str) -> RateConfig:
    """
    Parse a pasted rate table.

    Raises ConfigImportError when the text is empty, is not valid JSON,
    or does not describe a usable rate table.
    """
    if not text or not text.strip():
        raise ConfigImportError("No rate table text provided")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigImportError(f"JSON parse failed: {e.msg} (line {e.lineno}, column {e.colno})") from e
    try:
        return from_dict(data)
    except ValueError as e:
        raise ConfigImportError(str(e)) from e


def replace(cfg: RateConfig, new_cfg: RateConfig) -> RateConfig:
    """Wholesale substitution used by import and reset; nothing is merged."""
    return new_cfg


def set_items(cfg: RateConfig, new_items: list[LineItem]) -> RateConfig:
    """Replace the item list in place. Raises DuplicateItemError on repeated ids."""
    new_items = list(new_items)
    check_unique_ids(new_items)
    cfg.items = new_items
    return cfg


def new_item_id(existing_items: list[LineItem]) -> str:
    """Generate a random `itm_xxxxxx` id not used by any existing item."""
    existing_ids = {item.id for item in existing_items}
    candidate = f"itm_{secrets.token_hex(3)}"
    while candidate in existing_ids:
        candidate = f"itm_{secrets.token_hex(3)}"
    return candidate


def new_item(existing_items: list[LineItem], label: str = 'New item',
             unit_price: int = 0, unit_label: str = DEFAULT_UNIT_LABEL) -> LineItem:
    """Create an item with a fresh id for the operator item editor."""
    return LineItem(
        id=new_item_id(existing_items),
        label=label,
        unit_price=int(to_non_negative(unit_price)),
        unit_label=unit_label or DEFAULT_UNIT_LABEL,
    )
