from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"


class GroundName(str, Enum):
    G1 = "G1"
    G2 = "G2"
    MEGA_GROUND = "Mega_Ground"


class PricingKey(str, Enum):
    WEEKDAY_FIRST_HALF = "Weekday_first_half"
    WEEKDAY_SECOND_HALF = "Weekday_second_half"
    WEEKEND_FIRST_HALF = "Weekend_first_half"
    WEEKEND_SECOND_HALF = "Weekend_second_half"
