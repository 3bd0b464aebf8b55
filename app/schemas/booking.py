from pydantic import BaseModel, Field
from typing import Optional, Union


class CreateOrderRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    ground_id: Optional[int] = Field(default=None, alias="groundId")
    date: Optional[str] = None
    start_hour: Optional[Union[int, str]] = Field(default=None, alias="startHour")

    model_config = {"populate_by_name": True}


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    booking_id: Optional[int] = Field(default=None, alias="bookingId")

    model_config = {"populate_by_name": True}


class GatewayFailure(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    reason: Optional[str] = None
    source: Optional[str] = None
    step: Optional[str] = None


class PaymentFailureRequest(BaseModel):
    booking_id: Optional[int] = Field(default=None, alias="bookingId")
    error: Optional[GatewayFailure] = None

    model_config = {"populate_by_name": True}
