from datetime import datetime, timedelta

from app.core.exceptions import IllegalStateError
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import PaymentStatus

logger = get_logger()

DEFAULT_FAILURE_REASON = "Payment failed by user"

# Allowed payment status moves. A failed booking stays failed on further
# failures; a retry inside the same gateway order can still be verified.
TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PROCESSING, PaymentStatus.FAILED},
    PaymentStatus.PROCESSING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: set(),
}

CANCELLABLE = {PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.FAILED}


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in TRANSITIONS[PaymentStatus(current)]


def transition(booking: Booking, target: PaymentStatus):
    current = PaymentStatus(booking.payment_status)

    if not can_transition(current, target):
        raise IllegalStateError(
            f"Booking {booking.id} cannot move from {current.value} to {target.value}"
        )

    booking.payment_status = target
    logger.bind(log_type="payment").info(
        f"Booking {booking.id} | {current.value} -> {target.value}"
    )


# ---------------------------------------------------------------------
# TRANSITIONS
# ---------------------------------------------------------------------
def open_booking(name, phone, email, ground_id, start_time: datetime, total_amount: float) -> Booking:
    """New one-hour booking in ``pending`` with no attempts recorded."""
    return Booking(
        name=name,
        phone=phone,
        email=email,
        ground_id=ground_id,
        start_time=start_time,
        end_time=start_time + timedelta(hours=1),
        duration=1,
        total_amount=total_amount,
        payment_status=PaymentStatus.PENDING,
        payment_attempts=0,
    )


def mark_processing(booking: Booking, order_id: str):
    transition(booking, PaymentStatus.PROCESSING)
    booking.razorpay_order_id = order_id


def mark_failed(booking: Booking, reason: str | None, payment_id=None, signature=None):
    transition(booking, PaymentStatus.FAILED)

    booking.payment_attempts = (booking.payment_attempts or 0) + 1
    booking.payment_failure_reason = reason or DEFAULT_FAILURE_REASON

    if payment_id:
        booking.razorpay_payment_id = payment_id
    if signature:
        booking.razorpay_signature = signature


def mark_paid(booking: Booking, payment_id: str, signature: str, method: str | None, completed_at: datetime):
    transition(booking, PaymentStatus.PAID)

    booking.payment_attempts = (booking.payment_attempts or 0) + 1
    booking.razorpay_payment_id = payment_id
    booking.razorpay_signature = signature
    booking.payment_method = method
    booking.payment_completed_at = completed_at
    booking.payment_failure_reason = None


def ensure_cancellable(booking: Booking):
    if PaymentStatus(booking.payment_status) not in CANCELLABLE:
        raise IllegalStateError("Cannot cancel paid booking. Please request refund.")
