import os
import tempfile
from datetime import datetime, timedelta
from unittest.mock import MagicMock

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="ground-logs-"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest
import razorpay
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_db, get_now, get_payment_gateway
from app.db.session import Base
from app.main import app
from app.models.booking import Booking
from app.models.enums import PaymentStatus
from app.models.ground import Ground
from app.utils.razorpay_client import RazorpayGateway

KEY_ID = "rzp_test_key"
KEY_SECRET = "test_secret"

# Friday 2024-06-14, 12:00
FIXED_NOW = datetime(2024, 6, 14, 12, 0)

SIMPLE_PRICING = {
    "Weekday_first_half": 800,
    "Weekday_second_half": 1000,
    "Weekend_first_half": 1100,
    "Weekend_second_half": 1300,
}

MEGA_PRICING = {
    "Weekday_first_half": 1500,
    "Weekday_second_half": 1800,
    "Weekend_first_half": 2000,
    "Weekend_second_half": 2400,
}


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def grounds(db_session):
    """G1, G2 and Mega_Ground keyed by name."""
    rows = {
        "G1": Ground(name="G1", pricing=dict(SIMPLE_PRICING)),
        "G2": Ground(name="G2", pricing=dict(SIMPLE_PRICING)),
        "Mega_Ground": Ground(name="Mega_Ground", pricing=dict(MEGA_PRICING)),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return rows


@pytest.fixture
def sdk_client():
    """Stand-in for razorpay.Client."""
    client = MagicMock()
    client.order.create.return_value = {
        "id": "order_1",
        "amount": 110000,
        "currency": "INR",
    }
    client.payment.fetch.return_value = {
        "id": "pay_1",
        "status": "captured",
        "method": "upi",
    }
    # Signature checks go through the real SDK utility
    client.utility = razorpay.Client(auth=(KEY_ID, KEY_SECRET)).utility
    return client


@pytest.fixture
def gateway(sdk_client):
    return RazorpayGateway(key_id=KEY_ID, key_secret=KEY_SECRET, timeout=5, client=sdk_client)


@pytest.fixture
def create_booking(db_session):
    """Booking factory (Factories as fixtures pattern)."""

    def _factory(
        ground: Ground,
        start_time: datetime,
        status: PaymentStatus = PaymentStatus.PROCESSING,
        duration: int = 1,
        order_id: str | None = "order_1",
        attempts: int = 0,
    ) -> Booking:
        booking = Booking(
            name="Asha",
            phone="9876543210",
            email="asha@example.com",
            ground_id=ground.id,
            start_time=start_time,
            end_time=start_time + timedelta(hours=duration),
            duration=duration,
            total_amount=1100.0,
            payment_status=status,
            payment_attempts=attempts,
            razorpay_order_id=order_id,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _factory


@pytest.fixture
def client(db_session, gateway):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_now] = lambda: FIXED_NOW

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class FakeRedis:
    """Dict-backed stand-in for the few redis commands the cache uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.deleted = []

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, *keys):
        self.deleted.extend(keys)
        for key in keys:
            self.store.pop(key, None)
            self.ttls.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr("app.core.redis.get_redis_client", lambda: fake)
    return fake
