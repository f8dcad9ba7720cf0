from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ShiftId


@dataclass(frozen=True)
class Shift:
    """Domain entity: one of the four daily library shifts.

    The window is [start_hour, end_hour); when end_hour <= start_hour the
    window wraps past midnight.
    """

    shift_id: ShiftId
    name: str
    start_hour: int
    end_hour: int
    price: int

    @property
    def wraps_midnight(self) -> bool:
        return self.end_hour <= self.start_hour


@dataclass(frozen=True)
class PricingPlan:
    shifts: frozenset
    price: int
    popular: bool = False
