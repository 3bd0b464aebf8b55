from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import PaymentStatus


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    # Customer (free text, checkout has no accounts)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=False)

    ground_id = Column(Integer, ForeignKey("grounds.id"), nullable=False, index=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    # New bookings are always 1 hour, older rows may span several
    duration = Column(Integer, nullable=False, default=1)

    total_amount = Column(Float, nullable=False)

    # PAYMENT FIELDS
    payment_status = Column(
        Enum(
            PaymentStatus,
            name="paymentstatus",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_attempts = Column(Integer, nullable=False, default=0)

    razorpay_order_id = Column(String, nullable=True, index=True)
    razorpay_payment_id = Column(String, nullable=True)
    razorpay_signature = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    payment_completed_at = Column(DateTime, nullable=True)
    payment_failure_reason = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    ground = relationship("Ground", back_populates="bookings")
