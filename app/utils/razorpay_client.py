import os
from functools import lru_cache

import razorpay
import requests
from razorpay.errors import (
    BadRequestError,
    GatewayError as RazorpayGatewayError,
    ServerError,
    SignatureVerificationError,
)
from dotenv import load_dotenv

load_dotenv()

DEFAULT_TIMEOUT = 10


class GatewayError(Exception):
    """Razorpay could not be reached or rejected the request."""


class RazorpayGateway:
    """Thin wrapper over the Razorpay SDK exposing only what checkout needs."""

    def __init__(self, key_id: str, key_secret: str, timeout: float = DEFAULT_TIMEOUT, client=None):
        self.key_id = key_id
        self.key_secret = key_secret
        self.timeout = timeout
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict | None = None) -> dict:
        """Create an order for ``amount`` in minor units (paise)."""
        try:
            return self.client.order.create(
                data={
                    "amount": amount,
                    "currency": currency,
                    "receipt": receipt,
                    "notes": notes or {},
                },
                timeout=self.timeout,
            )
        except (BadRequestError, RazorpayGatewayError, ServerError, requests.RequestException) as e:
            raise GatewayError(f"Order creation failed: {e}") from e

    def fetch_payment(self, payment_id: str) -> dict:
        try:
            return self.client.payment.fetch(payment_id, timeout=self.timeout)
        except (BadRequestError, RazorpayGatewayError, ServerError, requests.RequestException) as e:
            raise GatewayError(f"Payment lookup failed: {e}") from e

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """True when Razorpay signed this order/payment pair with our key secret."""
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except (SignatureVerificationError, TypeError):
            # TypeError: non-ASCII signature text
            return False
        return True


@lru_cache
def get_gateway() -> RazorpayGateway:
    """Process-wide gateway built from RAZORPAY_* settings."""
    return RazorpayGateway(
        key_id=os.getenv("RAZORPAY_KEY_ID", ""),
        key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
        timeout=float(os.getenv("RAZORPAY_TIMEOUT", DEFAULT_TIMEOUT)),
    )
