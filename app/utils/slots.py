from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.enums import GroundName, PaymentStatus
from app.models.ground import Ground
from app.utils.pricing import calculate_slot_price

# Statuses that hold a slot
BLOCKING_STATUSES = (PaymentStatus.PAID, PaymentStatus.PROCESSING)

# Mega_Ground covers both G1 and G2
GROUND_RELATIONS = {
    GroundName.MEGA_GROUND.value: [GroundName.G1.value, GroundName.G2.value],
    GroundName.G1.value: [GroundName.MEGA_GROUND.value],
    GroundName.G2.value: [GroundName.MEGA_GROUND.value],
}


# ---------------------------------------------------------------------
# GROUND RELATIONS
# ---------------------------------------------------------------------
def related_ground_names(ground_name: str) -> list[str]:
    return list(GROUND_RELATIONS.get(ground_name, []))


def relevant_ground_ids(db: Session, ground: Ground) -> list[int]:
    """Ids of ``ground`` and every ground it blocks or is blocked by."""
    names = [ground.name, *related_ground_names(ground.name)]

    rows = db.query(Ground.id).filter(Ground.name.in_(names)).all()
    ids = {row.id for row in rows}
    ids.add(ground.id)

    return sorted(ids)


# ---------------------------------------------------------------------
# DOUBLE BOOKING CHECK
# ---------------------------------------------------------------------
def occupied_hours(booking: Booking) -> set[int]:
    start_hour = booking.start_time.hour
    duration = booking.duration or 1
    return {(start_hour + i) % 24 for i in range(duration)}


def day_bounds(day: date) -> tuple[datetime, datetime]:
    day_start = datetime.combine(day, time.min)
    return day_start, day_start + timedelta(days=1)


def blocking_bookings(db: Session, day: date, ground_ids: list[int]) -> list[Booking]:
    """Paid or processing bookings starting on ``day`` on any of ``ground_ids``.

    Only the start time is windowed, so a multi-hour booking that started
    the previous evening and runs past midnight is not returned.
    """
    day_start, day_end = day_bounds(day)

    return db.query(Booking).filter(
        Booking.ground_id.in_(ground_ids),
        Booking.start_time >= day_start,
        Booking.start_time < day_end,
        Booking.payment_status.in_(BLOCKING_STATUSES),
    ).all()


def is_slot_booked(db: Session, start_hour: int, day: date, ground_ids: list[int]) -> bool:
    bookings = blocking_bookings(db, day, ground_ids)
    return any(start_hour in occupied_hours(b) for b in bookings)


# ---------------------------------------------------------------------
# DAY AVAILABILITY
# ---------------------------------------------------------------------
def day_availability(db: Session, ground: Ground, day: date) -> list[dict]:
    ground_ids = relevant_ground_ids(db, ground)

    booked = set()
    for b in blocking_bookings(db, day, ground_ids):
        booked |= occupied_hours(b)

    day_start, _ = day_bounds(day)

    slots = []
    for hour in range(24):
        slot_start = day_start + timedelta(hours=hour)
        slots.append({
            "startHour": hour,
            "startTime": slot_start.isoformat(),
            "endTime": (slot_start + timedelta(hours=1)).isoformat(),
            "price": calculate_slot_price(ground.pricing, slot_start),
            "isBooked": hour in booked,
        })

    return slots
