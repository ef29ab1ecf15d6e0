from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderInput(BaseModel):
	package_id: int


class Prefill(BaseModel):
	name: str
	email: str
	contact: str


class CreateOrderResponse(BaseModel):
	order_id: str
	amount: int
	currency: str
	key_id: str
	payment_id: int
	package_name: str
	prefill: Prefill
	mock: bool = False


class VerifyInput(BaseModel):
	razorpay_order_id: str = Field(min_length=1)
	razorpay_payment_id: str = Field(min_length=1)
	razorpay_signature: str = Field(min_length=1)
	payment_id: int


class VerifyResponse(BaseModel):
	success: bool = True
	message: str
	package_name: str
	payment_id: str | None = None


class DevConfirmInput(BaseModel):
	payment_id: int


class DevConfirmResponse(BaseModel):
	success: bool = True
	message: str
	package_name: str | None = None


class PaymentOut(BaseModel):
	id: int
	package_id: int
	package_name: str
	amount: int
	currency: str
	status: str
	razorpay_order_id: str | None = None
	razorpay_payment_id: str | None = None
	error_code: str | None = None
	error_message: str | None = None
	is_mock: bool
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(BaseModel):
	payments: list[PaymentOut]


class WebhookAck(BaseModel):
	received: bool = True
