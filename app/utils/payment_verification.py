from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    IllegalStateError,
    InternalError,
    NotFoundError,
    SecurityError,
    UpstreamError,
    ValidationError,
)
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import PaymentStatus
from app.utils.booking_state import mark_failed, mark_paid
from app.utils.razorpay_client import GatewayError, RazorpayGateway

logger = get_logger()

SUCCESS_STATUSES = ("captured", "authorized")

INVALID_SIGNATURE_REASON = "Invalid payment signature"
LOOKUP_FAILED_REASON = "Could not fetch payment details from Razorpay"
SAVE_FAILED_MESSAGE = "Payment result could not be saved. Please verify the payment again."


# ---------------------------------------------------------------------
# PERSISTENCE
# ---------------------------------------------------------------------
def save_booking(db: Session, booking: Booking, error_message: str = SAVE_FAILED_MESSAGE):
    """Commit the booking's pending changes.

    A failed commit is rolled back and reported as InternalError so the
    caller re-verifies instead of assuming the new status was stored.
    """
    try:
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError:
        db.rollback()
        logger.bind(log_type="payment").exception(f"Could not save booking {booking.id}")
        raise InternalError(error_message)


# ---------------------------------------------------------------------
# VERIFY PAYMENT
# ---------------------------------------------------------------------
def verify_payment(
    db: Session,
    gateway: RazorpayGateway,
    order_id: str | None,
    payment_id: str | None,
    signature: str | None,
    booking_id: int | None,
    now: datetime,
) -> Booking:
    """Confirm a checkout result and move the booking to paid or failed.

    The signature check runs before anything else is revealed or changed;
    Razorpay is only asked for the payment status once the signature is
    known to be genuine.
    """
    if not order_id or not payment_id or not signature or not booking_id:
        raise ValidationError("Missing payment verification details")

    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")

    plog = logger.bind(log_type="payment")
    status = PaymentStatus(booking.payment_status)

    # ---- SIGNATURE ----
    if not gateway.verify_signature(order_id, payment_id, signature):
        plog.warning(f"Invalid signature | Booking={booking.id} | Order={order_id}")
        # Settled or never-ordered bookings are left untouched
        if status in (PaymentStatus.PROCESSING, PaymentStatus.FAILED):
            mark_failed(booking, INVALID_SIGNATURE_REASON)
            save_booking(db, booking)
        raise SecurityError("Payment verification failed. Invalid signature.")

    if status == PaymentStatus.PENDING:
        raise IllegalStateError("No payment order has been created for this booking")

    if booking.razorpay_order_id and booking.razorpay_order_id != order_id:
        raise ValidationError("Order id does not belong to this booking")

    # Already settled by this payment, nothing to do
    if status == PaymentStatus.PAID:
        if booking.razorpay_payment_id != payment_id:
            raise ValidationError("Payment id does not match the recorded payment")
        plog.info(f"Booking {booking.id} already paid, skipping verification")
        return booking

    # ---- GATEWAY STATUS ----
    try:
        payment = gateway.fetch_payment(payment_id)
    except GatewayError as e:
        plog.error(f"Payment lookup failed | Booking={booking.id} | {e}")
        mark_failed(booking, LOOKUP_FAILED_REASON)
        save_booking(db, booking)
        raise UpstreamError("Could not verify payment with Razorpay", status_code=500)

    payment_status = payment.get("status")

    if payment_status not in SUCCESS_STATUSES:
        mark_failed(
            booking,
            f"Payment status: {payment_status}",
            payment_id=payment_id,
            signature=signature,
        )
        save_booking(db, booking)
        plog.warning(f"Payment not successful | Booking={booking.id} | Status={payment_status}")
        raise UpstreamError(
            f"Payment not successful. Status: {payment_status}", status_code=400
        )

    mark_paid(
        booking,
        payment_id=payment_id,
        signature=signature,
        method=payment.get("method"),
        completed_at=now,
    )
    save_booking(db, booking)

    plog.info(
        f"Payment verified | Booking={booking.id} | Payment={payment_id} | Method={booking.payment_method}"
    )
    return booking
