import hashlib
import hmac
import json
from datetime import date, datetime

from requests.exceptions import ConnectTimeout

from app.core.redis import AVAILABILITY_CACHE_TTL, availability_key

KEY_SECRET = "test_secret"
SATURDAY = date(2024, 6, 15)


def order_payload(ground, start_hour=7):
    return {
        "name": "Asha",
        "phone": "9876543210",
        "email": "asha@example.com",
        "groundId": ground.id,
        "date": SATURDAY.isoformat(),
        "startHour": start_hour,
    }


def verify_payload(booking_id, signature=None):
    expected = hmac.new(KEY_SECRET.encode(), b"order_1|pay_1", hashlib.sha256).hexdigest()
    return {
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": signature or expected,
        "bookingId": booking_id,
    }


def keys_for(*grounds):
    return {availability_key(g.id, SATURDAY) for g in grounds}


# =====================================================================
# READ PATH
# =====================================================================
class TestAvailabilityCache:
    def test_first_read_is_stored(self, client, grounds, fake_redis):
        ground = grounds["G1"]

        response = client.get(f"/api/grounds/{ground.id}/availability", params={"date": "2024-06-15"})

        key = availability_key(ground.id, SATURDAY)
        assert json.loads(fake_redis.store[key]) == response.json()
        assert fake_redis.ttls[key] == AVAILABILITY_CACHE_TTL

    def test_second_read_is_served_from_cache(self, client, grounds, create_booking, fake_redis):
        ground = grounds["G1"]
        url = f"/api/grounds/{ground.id}/availability"
        client.get(url, params={"date": "2024-06-15"})

        # Written straight to the database, so nothing invalidates the entry
        create_booking(ground, datetime(2024, 6, 15, 7))
        response = client.get(url, params={"date": "2024-06-15"})

        assert response.json()["slots"][7]["isBooked"] is False

    def test_unreachable_redis_falls_back_to_database(self, client, grounds, create_booking, monkeypatch):
        monkeypatch.setattr("app.core.redis.get_redis_client", lambda: None)
        create_booking(grounds["G1"], datetime(2024, 6, 15, 7))

        response = client.get(
            f"/api/grounds/{grounds['G1'].id}/availability", params={"date": "2024-06-15"}
        )

        assert response.status_code == 200
        assert response.json()["slots"][7]["isBooked"] is True


# =====================================================================
# WRITE PATHS
# =====================================================================
class TestInvalidation:
    def test_create_order(self, client, grounds, fake_redis):
        response = client.post("/api/payments/create-order", json=order_payload(grounds["G1"]))

        assert response.status_code == 201
        assert set(fake_redis.deleted) == keys_for(grounds["G1"], grounds["Mega_Ground"])

    def test_create_order_on_mega_ground(self, client, grounds, fake_redis):
        client.post("/api/payments/create-order", json=order_payload(grounds["Mega_Ground"]))

        assert set(fake_redis.deleted) == keys_for(*grounds.values())

    def test_booked_slot_shows_up_after_create_order(self, client, grounds, fake_redis):
        url = f"/api/grounds/{grounds['G2'].id}/availability"
        client.get(url, params={"date": "2024-06-15"})

        client.post("/api/payments/create-order", json=order_payload(grounds["Mega_Ground"]))
        response = client.get(url, params={"date": "2024-06-15"})

        assert response.json()["slots"][7]["isBooked"] is True

    def test_failure_report(self, client, grounds, create_booking, fake_redis):
        booking = create_booking(grounds["G2"], datetime(2024, 6, 15, 7))

        client.post("/api/payments/failure", json={"bookingId": booking.id})

        assert set(fake_redis.deleted) == keys_for(grounds["G2"], grounds["Mega_Ground"])

    def test_cancel(self, client, grounds, create_booking, fake_redis):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))

        client.delete(f"/api/payments/cancel/{booking.id}")

        assert set(fake_redis.deleted) == keys_for(grounds["G1"], grounds["Mega_Ground"])

    def test_verify_with_failed_gateway_status(self, client, grounds, create_booking, sdk_client, fake_redis):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))
        sdk_client.payment.fetch.return_value = {"status": "failed", "method": "card"}

        response = client.post("/api/payments/verify", json=verify_payload(booking.id))

        assert response.status_code == 400
        assert set(fake_redis.deleted) == keys_for(grounds["G1"], grounds["Mega_Ground"])

    def test_verify_with_invalid_signature(self, client, grounds, create_booking, fake_redis):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))

        client.post("/api/payments/verify", json=verify_payload(booking.id, signature="forged"))

        assert set(fake_redis.deleted) == keys_for(grounds["G1"], grounds["Mega_Ground"])

    def test_verify_with_lookup_timeout(self, client, grounds, create_booking, sdk_client, fake_redis):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))
        sdk_client.payment.fetch.side_effect = ConnectTimeout("timed out")

        response = client.post("/api/payments/verify", json=verify_payload(booking.id))

        assert response.status_code == 500
        assert set(fake_redis.deleted) == keys_for(grounds["G1"], grounds["Mega_Ground"])

    def test_freed_slot_shows_up_after_failed_verify(
        self, client, grounds, create_booking, sdk_client, fake_redis
    ):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))
        url = f"/api/grounds/{grounds['G1'].id}/availability"
        assert client.get(url, params={"date": "2024-06-15"}).json()["slots"][7]["isBooked"] is True

        sdk_client.payment.fetch.return_value = {"status": "failed", "method": "card"}
        client.post("/api/payments/verify", json=verify_payload(booking.id))

        assert client.get(url, params={"date": "2024-06-15"}).json()["slots"][7]["isBooked"] is False

    def test_successful_verify_keeps_cache(self, client, grounds, create_booking, fake_redis):
        booking = create_booking(grounds["G1"], datetime(2024, 6, 15, 7))

        client.post("/api/payments/verify", json=verify_payload(booking.id))

        assert fake_redis.deleted == []