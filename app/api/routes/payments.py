import os
from datetime import datetime, time, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_now, get_payment_gateway
from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    SecurityError,
    UpstreamError,
    ValidationError,
)
from app.core.logging_config import get_logger
from app.core.redis import invalidate_availability
from app.models.booking import Booking
from app.models.ground import Ground
from app.schemas.booking import CreateOrderRequest, PaymentFailureRequest, VerifyPaymentRequest
from app.utils.booking_state import ensure_cancellable, mark_failed, mark_processing, open_booking
from app.utils.payment_verification import save_booking, verify_payment
from app.utils.pricing import calculate_slot_price
from app.utils.razorpay_client import GatewayError, RazorpayGateway
from app.utils.slots import is_slot_booked, relevant_ground_ids

router = APIRouter(prefix="/api/payments", tags=["Payments"])
logger = get_logger()

CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")

# Slots must start at least this far in the future
BOOKING_LEAD_TIME = timedelta(minutes=30)

ORDER_FAILED_REASON = "Could not create Razorpay order"


# ---------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------
def parse_start_hour(value) -> int:
    try:
        hour = int(value)
    except (TypeError, ValueError):
        raise ValidationError("startHour must be between 0 and 23")

    if hour < 0 or hour > 23:
        raise ValidationError("startHour must be between 0 and 23")

    return hour


def parse_date(value: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def release_slot(db: Session, booking: Booking):
    """Drop cached availability for every ground the booking's slot touches."""
    ground = booking.ground
    if ground is None:
        return
    invalidate_availability(relevant_ground_ids(db, ground), booking.start_time.date())


def booking_summary(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "name": booking.name,
        "phone": booking.phone,
        "email": booking.email,
        "groundId": booking.ground_id,
        "groundName": booking.ground.name if booking.ground else None,
        "startTime": booking.start_time,
        "endTime": booking.end_time,
        "duration": booking.duration,
        "totalAmount": booking.total_amount,
        "paymentStatus": booking.payment_status.value,
        "paymentAttempts": booking.payment_attempts,
        "paymentMethod": booking.payment_method,
        "paymentCompletedAt": booking.payment_completed_at,
        "paymentFailureReason": booking.payment_failure_reason,
    }


def payment_state(booking: Booking) -> dict:
    """Status-only view, safe to hand out without customer details."""
    return {
        "id": booking.id,
        "groundName": booking.ground.name if booking.ground else None,
        "startTime": booking.start_time,
        "endTime": booking.end_time,
        "paymentStatus": booking.payment_status.value,
        "paymentAttempts": booking.payment_attempts,
        "paymentFailureReason": booking.payment_failure_reason,
    }


# =====================================================================
# CREATE ORDER
# =====================================================================
@router.post("/create-order", status_code=201)
def create_order(
    data: CreateOrderRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    now: datetime = Depends(get_now),
):
    # ---- INPUT VALIDATION ----
    if (
        not data.name
        or not data.phone
        or not data.email
        or data.ground_id is None
        or not data.date
        or data.start_hour is None
        or data.start_hour == ""
    ):
        raise ValidationError(
            "All fields are required: name, phone, email, groundId, date, startHour"
        )

    start_hour = parse_start_hour(data.start_hour)

    ground = db.query(Ground).filter(Ground.id == data.ground_id).first()
    if not ground:
        raise NotFoundError("Ground not found")

    # ---- DATE & TIME VALIDATION ----
    day = parse_date(data.date)
    start_time = datetime.combine(day, time(hour=start_hour))

    if start_time < now + BOOKING_LEAD_TIME:
        raise ValidationError(
            "Slots must be booked at least 30 minutes before they start"
        )

    # ---- DOUBLE BOOKING CHECK ----
    ground_ids = relevant_ground_ids(db, ground)

    if is_slot_booked(db, start_hour, day, ground_ids):
        raise ConflictError(
            "This slot is already booked or conflicts with related grounds"
        )

    # ---- PRICE ----
    total_amount = calculate_slot_price(ground.pricing, start_time)

    booking = open_booking(
        name=data.name,
        phone=data.phone,
        email=data.email,
        ground_id=ground.id,
        start_time=start_time,
        total_amount=total_amount,
    )
    db.add(booking)
    save_booking(db, booking, "Booking could not be created")

    logger.bind(log_type="booking").info(
        f"Booking Created | Booking={booking.id} | Ground={ground.name} | Start={start_time.isoformat()} | Amount={total_amount}"
    )

    # ---- RAZORPAY ORDER ----
    try:
        order = gateway.create_order(
            amount=int(round(total_amount * 100)),
            currency=CURRENCY,
            receipt=f"booking_{booking.id}",
            notes={
                "bookingId": booking.id,
                "groundName": ground.name,
                "startTime": start_time.isoformat(),
                "customerEmail": data.email,
            },
        )
    except GatewayError as e:
        logger.bind(log_type="payment").error(f"Order creation failed | Booking={booking.id} | {e}")
        mark_failed(booking, ORDER_FAILED_REASON)
        save_booking(db, booking)
        raise UpstreamError("Could not create payment order", status_code=500)

    mark_processing(booking, order["id"])
    save_booking(db, booking, "Payment order was created but the booking could not be updated")
    invalidate_availability(ground_ids, day)

    return {
        "success": True,
        "booking": {
            "id": booking.id,
            "name": booking.name,
            "phone": booking.phone,
            "email": booking.email,
            "groundId": booking.ground_id,
            "groundName": ground.name,
            "date": day.isoformat(),
            "startHour": start_hour,
            "startTime": booking.start_time,
            "endTime": booking.end_time,
            "duration": booking.duration,
            "totalAmount": booking.total_amount,
            "paymentStatus": booking.payment_status.value,
        },
        "order": {
            "id": order["id"],
            "amount": order["amount"],
            "currency": order["currency"],
        },
        "razorpayKeyId": gateway.key_id,
    }


# =====================================================================
# VERIFY PAYMENT
# =====================================================================
@router.post("/verify")
def verify(
    data: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    now: datetime = Depends(get_now),
):
    try:
        booking = verify_payment(
            db,
            gateway,
            order_id=data.razorpay_order_id,
            payment_id=data.razorpay_payment_id,
            signature=data.razorpay_signature,
            booking_id=data.booking_id,
            now=now,
        )
    except (SecurityError, UpstreamError):
        # The booking may have just moved to failed and freed its slot
        failed = db.query(Booking).filter(Booking.id == data.booking_id).first()
        if failed:
            release_slot(db, failed)
        raise

    return {
        "success": True,
        "message": "Payment verified successfully",
        "booking": booking_summary(booking),
    }


# =====================================================================
# PAYMENT FAILURE
# =====================================================================
@router.post("/failure")
def payment_failure(data: PaymentFailureRequest, db: Session = Depends(get_db)):
    if not data.booking_id:
        raise ValidationError("Booking ID is required")

    booking = get_booking_or_404(db, data.booking_id)

    reason = None
    if data.error:
        reason = data.error.description or data.error.reason

    mark_failed(booking, reason)
    save_booking(db, booking, "Payment failure could not be recorded")
    release_slot(db, booking)

    logger.bind(log_type="payment").info(
        f"Payment failure reported | Booking={booking.id} | Reason={booking.payment_failure_reason}"
    )

    return {"success": True, "message": "Payment failure recorded"}


# =====================================================================
# BOOKING STATUS
# =====================================================================
@router.get("/booking/{booking_id}")
def booking_status(booking_id: int, db: Session = Depends(get_db)):
    booking = get_booking_or_404(db, booking_id)
    return {"success": True, "booking": payment_state(booking)}


# =====================================================================
# CANCEL BOOKING
# =====================================================================
@router.delete("/cancel/{booking_id}")
def cancel_booking(booking_id: int, db: Session = Depends(get_db)):
    booking = get_booking_or_404(db, booking_id)

    ensure_cancellable(booking)

    ground = booking.ground
    day = booking.start_time.date()
    ground_ids = relevant_ground_ids(db, ground) if ground else []

    db.delete(booking)
    db.commit()
    invalidate_availability(ground_ids, day)

    logger.bind(log_type="booking").info(f"Booking Cancelled | Booking={booking_id}")

    return {"success": True, "message": "Booking cancelled successfully"}
