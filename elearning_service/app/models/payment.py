from __future__ import annotations

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from common import utcnow

from ..database import Base


class PaymentStatusEnum(str, PyEnum):
	CREATED = "created"
	PAID = "paid"
	FAILED = "failed"
	REFUNDED = "refunded"


ALLOWED_TRANSITIONS: dict[PaymentStatusEnum, frozenset[PaymentStatusEnum]] = {
	PaymentStatusEnum.CREATED: frozenset({PaymentStatusEnum.PAID, PaymentStatusEnum.FAILED}),
	# a capture can still arrive through the webhook after a failed attempt
	PaymentStatusEnum.FAILED: frozenset({PaymentStatusEnum.PAID}),
	PaymentStatusEnum.PAID: frozenset({PaymentStatusEnum.REFUNDED}),
	PaymentStatusEnum.REFUNDED: frozenset(),
}


class Payment(Base):
	__tablename__ = "payments"

	id: Mapped[int] = mapped_column(Integer, primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	package_id: Mapped[int] = mapped_column(Integer, nullable=False)
	package_name: Mapped[str] = mapped_column(String(32), nullable=False)
	amount: Mapped[int] = mapped_column(Integer, nullable=False)
	currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
	status: Mapped[str] = mapped_column(String(16), nullable=False, default=PaymentStatusEnum.CREATED.value, index=True)
	razorpay_order_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
	razorpay_payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
	razorpay_signature: Mapped[str | None] = mapped_column(String(256), nullable=True)
	error_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
	error_message: Mapped[str | None] = mapped_column(String(512), nullable=True)
	is_mock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
	webhook_events: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
	)
