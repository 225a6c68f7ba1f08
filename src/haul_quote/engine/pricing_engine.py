"""
Quote Pricer - deterministic price computation with traceability.

Pricing order (fixed):
1. Items subtotal: quantity × unit price over the rate table items
2. Distance surcharge: km beyond the included distance × rate per km
3. Floor surcharge: floors × per-floor rate, only without an elevator
4. Helper surcharge: helpers × helper fee
5. Subtotal: base fee + all of the above
6. Weekend/night multiplier: 1 + weekend rate when applicable
7. Total: subtotal × multiplier, rounded half-up to a whole currency unit
"""
from .coerce import to_non_negative, to_quantity, to_flag, round_currency
from .models import RateConfig, QuoteRequest, QuoteBreakdown, TraceStep


class QuotePricer:
    """
    Prices a QuoteRequest against a RateConfig.

    Holds no state between calls; every input is coerced and clamped to a
    non-negative number before it is used, so any input shape prices.
    """

    def price(self, cfg: RateConfig, req: QuoteRequest) -> QuoteBreakdown:
        """Compute the breakdown for a request."""
        breakdown, _ = self.price_with_trace(cfg, req)
        return breakdown

    def price_with_trace(self, cfg: RateConfig, req: QuoteRequest) -> tuple[QuoteBreakdown, list[TraceStep]]:
        """
        Compute the breakdown with a trace of each pricing step.

        Returns (breakdown, trace_steps).
        """
        trace = []

        base_fee = to_non_negative(cfg.base_fee)
        base_distance_km = to_non_negative(cfg.base_distance_km)
        extra_per_km = to_non_negative(cfg.extra_per_km)
        no_elevator_per_floor = to_non_negative(cfg.no_elevator_per_floor)
        weekend_rate = to_non_negative(cfg.weekend_rate)
        helper_fee = to_non_negative(cfg.helper_fee)

        distance_km = to_non_negative(req.distance_km)
        floors = to_non_negative(req.floors)
        helpers = to_non_negative(req.helpers)
        has_elevator = to_flag(req.has_elevator)
        weekend = to_flag(req.weekend)
        quantities = req.quantities or {}

        trace.append(TraceStep("Base Fee", "Fixed service fee", f"{base_fee:,}"))

        items_subtotal = 0
        for item in cfg.items:
            qty = to_quantity(quantities.get(item.id, 0))
            if qty == 0:
                continue
            extended = qty * to_non_negative(item.unit_price)
            items_subtotal += extended
            trace.append(TraceStep("Item", f"{item.label}: {qty} × {to_non_negative(item.unit_price):,}", f"{extended:,}"))

        distance_surcharge = max(0, distance_km - base_distance_km) * extra_per_km
        if distance_surcharge:
            trace.append(TraceStep(
                "Distance",
                f"{distance_km} km, {base_distance_km} km included, {extra_per_km:,} per extra km",
                f"{distance_surcharge:,}",
            ))
        else:
            trace.append(TraceStep("Distance", f"{distance_km} km within included {base_distance_km} km"))

        if has_elevator:
            floor_surcharge = 0
            trace.append(TraceStep("Floors", "Elevator available, no floor surcharge"))
        else:
            floor_surcharge = floors * no_elevator_per_floor
            trace.append(TraceStep("Floors", f"{floors} floors × {no_elevator_per_floor:,} without elevator", f"{floor_surcharge:,}"))

        helper_surcharge = helpers * helper_fee
        if helper_surcharge:
            trace.append(TraceStep("Helpers", f"{helpers} × {helper_fee:,}", f"{helper_surcharge:,}"))

        subtotal = base_fee + items_subtotal + distance_surcharge + floor_surcharge + helper_surcharge
        trace.append(TraceStep("Subtotal", "Base fee + items + surcharges", f"{subtotal:,}"))

        weekend_multiplier = (1 + weekend_rate) if weekend else 1
        if weekend:
            trace.append(TraceStep("Weekend/Night", "Rate multiplier applied", f"× {weekend_multiplier:.2f}"))

        total = round_currency(subtotal * weekend_multiplier)
        trace.append(TraceStep("Total", "Rounded to whole currency unit", f"{total:,}"))

        breakdown = QuoteBreakdown(
            base_fee=base_fee,
            items_subtotal=items_subtotal,
            distance_surcharge=distance_surcharge,
            floor_surcharge=floor_surcharge,
            helper_surcharge=helper_surcharge,
            subtotal=subtotal,
            weekend_multiplier=weekend_multiplier,
            total=total,
        )
        return breakdown, trace


_default_pricer = QuotePricer()


def price(cfg: RateConfig, req: QuoteRequest) -> QuoteBreakdown:
    """Price a request with the shared pricer."""
    return _default_pricer.price(cfg, req)
