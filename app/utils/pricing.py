from datetime import datetime

from app.models.enums import PricingKey

DEFAULT_PRICE = 1000.0

# First half of the day runs 06:00-18:00, the second half wraps midnight
FIRST_HALF_START = 6
SECOND_HALF_START = 18


def is_weekend(slot_start: datetime) -> bool:
    return slot_start.weekday() in (5, 6)  # Saturday-Sunday


def is_first_half(slot_start: datetime) -> bool:
    return FIRST_HALF_START <= slot_start.hour < SECOND_HALF_START


def pricing_key_for(slot_start: datetime) -> PricingKey:
    if is_weekend(slot_start):
        if is_first_half(slot_start):
            return PricingKey.WEEKEND_FIRST_HALF
        return PricingKey.WEEKEND_SECOND_HALF

    if is_first_half(slot_start):
        return PricingKey.WEEKDAY_FIRST_HALF
    return PricingKey.WEEKDAY_SECOND_HALF


def calculate_slot_price(pricing, slot_start: datetime) -> float:
    """Price of the one-hour slot starting at ``slot_start``.

    ``pricing`` is the ground's pricing table. A missing table or key
    falls back to DEFAULT_PRICE.
    """
    price = (pricing or {}).get(pricing_key_for(slot_start).value)
    if not price:
        return DEFAULT_PRICE
    return float(price)
