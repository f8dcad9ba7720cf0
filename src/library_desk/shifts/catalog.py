"""Static shift catalog: time windows, prices and bundle pricing."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from ..core.enums import ShiftId
from ..core.exceptions import ValidationError
from .model import PricingPlan, Shift

SHIFTS: tuple[Shift, ...] = (
    Shift(shift_id=ShiftId.MORNING, name="Morning", start_hour=5, end_hour=11, price=299),
    Shift(shift_id=ShiftId.NOON, name="Noon", start_hour=11, end_hour=16, price=349),
    Shift(shift_id=ShiftId.EVENING, name="Evening", start_hour=16, end_hour=21, price=299),
    Shift(shift_id=ShiftId.NIGHT, name="Night", start_hour=21, end_hour=5, price=299),
)

PRICING_PLANS: tuple[PricingPlan, ...] = (
    PricingPlan(frozenset({ShiftId.MORNING}), 299),
    PricingPlan(frozenset({ShiftId.NOON}), 349, popular=True),
    PricingPlan(frozenset({ShiftId.EVENING}), 299),
    PricingPlan(frozenset({ShiftId.NIGHT}), 299),
    PricingPlan(frozenset({ShiftId.MORNING, ShiftId.NOON}), 549),
    PricingPlan(frozenset({ShiftId.NOON, ShiftId.EVENING}), 549),
    PricingPlan(frozenset({ShiftId.MORNING, ShiftId.NOON, ShiftId.EVENING}), 749),
    PricingPlan(frozenset(ShiftId), 999),
)


def parse_shift(value) -> ShiftId:
    if isinstance(value, ShiftId):
        return value
    try:
        return ShiftId(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown shift: {value!r}")


def _fmt_hour(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display:02d}:00 {suffix}"


class ShiftCatalog:
    """Pure lookups over the fixed shift table. No mutable state."""

    def __init__(self, shifts: Sequence[Shift] = SHIFTS, plans: Sequence[PricingPlan] = PRICING_PLANS):
        self._shifts = {s.shift_id: s for s in shifts}
        self._plans = tuple(plans)

    def list_all(self) -> list[Shift]:
        return list(self._shifts.values())

    def get(self, shift) -> Shift:
        return self._shifts[parse_shift(shift)]

    def time_range_of(self, shift) -> str:
        s = self.get(shift)
        return f"{_fmt_hour(s.start_hour)} - {_fmt_hour(s.end_hour)}"

    def price_of(self, shift) -> int:
        return self.get(shift).price

    def is_now_within(self, shift, now: datetime) -> bool:
        s = self.get(shift)
        hour = now.hour
        if s.wraps_midnight:
            return hour >= s.start_hour or hour < s.end_hour
        return s.start_hour <= hour < s.end_hour

    def shift_has_ended(self, shift, now: datetime) -> bool:
        """Absence threshold for `now`.

        Night is "ended" whenever we are outside the overnight window
        (5 <= hour < 21); it is not a date-aware end of the previous night.
        """

        s = self.get(shift)
        hour = now.hour
        if s.wraps_midnight:
            return s.end_hour <= hour < s.start_hour
        return hour >= s.end_hour

    def fee_for(self, shifts: Iterable) -> int:
        wanted = frozenset(parse_shift(s) for s in shifts)
        if not wanted:
            raise ValidationError("Please select at least one shift")
        for plan in self._plans:
            if plan.shifts == wanted:
                return plan.price
        return sum(self._shifts[s].price for s in wanted)

    def pricing_plans(self) -> list[PricingPlan]:
        return list(self._plans)

    def to_dict(self, shift) -> dict:
        s = self.get(shift)
        return {
            "id": s.shift_id.value,
            "name": s.name,
            "time_range": self.time_range_of(s.shift_id),
            "price": s.price,
        }
