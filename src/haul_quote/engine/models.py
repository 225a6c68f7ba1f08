"""
Data models for the quote engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Union

Number = Union[int, float]


@dataclass
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LineItem:
    """One priced, countable item in the rate table."""
    id: str
    label: str
    unit_price: int = 0
    unit_label: str = "pc"


@dataclass
class RateConfig:
    """Operator-maintained pricing schedule."""
    base_fee: Number = 0
    base_distance_km: Number = 0
    extra_per_km: Number = 0
    no_elevator_per_floor: Number = 0
    weekend_rate: Number = 0  # added to 1 to get the weekend/night multiplier
    helper_fee: Number = 0
    items: list[LineItem] = field(default_factory=list)

    # Business info shown on exported quotes
    biz_name: str = ""
    biz_phone: str = ""
    biz_email: str = ""

    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def get_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass
class QuoteRequest:
    """One customer's job parameters and item quantities."""
    distance_km: Number = 8
    floors: Number = 1
    has_elevator: bool = True
    helpers: Number = 0
    weekend: bool = False
    quantities: dict[str, int] = field(default_factory=dict)  # item id → count

    @classmethod
    def for_items(cls, items: list[LineItem], **kwargs) -> 'QuoteRequest':
        """Create a request with a zero quantity for every item."""
        return cls(quantities={item.id: 0 for item in items}, **kwargs)

    def quantity(self, item_id: str) -> int:
        return self.quantities.get(item_id, 0)


@dataclass(frozen=True)
class QuoteBreakdown:
    """Computed, itemized price for a QuoteRequest against a RateConfig."""
    base_fee: Number
    items_subtotal: Number
    distance_surcharge: Number
    floor_surcharge: Number
    helper_surcharge: Number
    subtotal: Number
    weekend_multiplier: Number
    total: int

    def to_dict(self) -> dict:
        return asdict(self)
