"""
Catering price calculation.

Every invoice amount comes from here: a per-attendee catering rate by menu,
a service charge on the catering amount, and GST on the subtotal. All amounts
are rounded to 2 decimals.
"""

from dataclasses import dataclass, field

from ...config import (
    GST_RATE_PERCENT,
    NON_VEG_RATE_PER_ATTENDEE,
    SERVICE_CHARGE_PERCENT,
    VEG_RATE_PER_ATTENDEE,
)
from ...constants import MenuType


@dataclass(frozen=True)
class LineItem:
    description: str
    amount: float

    def to_dict(self) -> dict:
        return {"description": self.description, "amount": self.amount}


@dataclass(frozen=True)
class PriceBreakdown:
    line_items: list = field(default_factory=list)
    subtotal: float = 0.0
    gst_rate: float = GST_RATE_PERCENT
    gst_amount: float = 0.0
    total_amount: float = 0.0

    @property
    def catering(self) -> float:
        return self.line_items[0].amount if self.line_items else 0.0

    @property
    def service_charge(self) -> float:
        return self.line_items[1].amount if len(self.line_items) > 1 else 0.0


def _round(amount: float) -> float:
    return round(float(amount), 2)


def rate_per_attendee(menu_type: str) -> int:
    if MenuType(menu_type) == MenuType.VEG:
        return VEG_RATE_PER_ATTENDEE
    return NON_VEG_RATE_PER_ATTENDEE


def menu_label(menu_type: str) -> str:
    return "Veg" if MenuType(menu_type) == MenuType.VEG else "Non-Veg"


def calculate_price(attendees: int, menu_type: str) -> PriceBreakdown:
    """
    Price an event.

    Example:
        >>> calculate_price(50, "veg").total_amount
        77880.0
    """
    if attendees < 0:
        raise ValueError("Attendees cannot be negative")

    catering = _round(attendees * rate_per_attendee(menu_type))
    service_charge = _round(catering * SERVICE_CHARGE_PERCENT / 100)
    line_items = [
        LineItem(f"Catering ({menu_label(menu_type)} menu)", catering),
        LineItem(f"Service charge ({SERVICE_CHARGE_PERCENT}%)", service_charge),
    ]

    subtotal = _round(sum(item.amount for item in line_items))
    gst_amount = _round(subtotal * GST_RATE_PERCENT / 100)
    return PriceBreakdown(
        line_items=line_items,
        subtotal=subtotal,
        gst_rate=GST_RATE_PERCENT,
        gst_amount=gst_amount,
        total_amount=_round(subtotal + gst_amount),
    )
