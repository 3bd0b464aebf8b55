from datetime import datetime

from app.db.session import SessionLocal
from app.utils.razorpay_client import RazorpayGateway, get_gateway


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_now() -> datetime:
    """Current local time; overridden in tests to pin the clock."""
    return datetime.now()


def get_payment_gateway() -> RazorpayGateway:
    return get_gateway()
