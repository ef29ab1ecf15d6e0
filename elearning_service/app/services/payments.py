from __future__ import annotations

import json
import time
from logging import getLogger
from typing import Any, Sequence

from fastapi import BackgroundTasks, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..catalogue import CURRENCY, get_package
from ..config import Settings, get_settings
from ..database import get_db
from ..mailer import Mailer, get_mailer
from ..models import ALLOWED_TRANSITIONS, Enrollment, Payment, PaymentStatusEnum, User
from ..schemas import (
	CreateOrderResponse,
	DevConfirmResponse,
	Prefill,
	VerifyInput,
	VerifyResponse,
	WebhookAck,
)
from .razorpay import (
	RazorpayClient,
	RazorpayError,
	get_razorpay_client,
	verify_payment_signature,
	verify_webhook_signature,
)

logger = getLogger(__name__)

MOCK_KEY_ID = "rzp_dev_mock"
SIGNATURE_MISMATCH = "Signature mismatch"


class PaymentServiceError(Exception):
	def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
		super().__init__(message)
		self.message = message
		self.status_code = status_code


def _now_ms() -> int:
	return int(time.time() * 1000)


def _transition(payment: Payment, target: PaymentStatusEnum) -> None:
	current = PaymentStatusEnum(payment.status)
	if target not in ALLOWED_TRANSITIONS[current]:
		raise PaymentServiceError(
			f"Payment cannot move from {current.value} to {target.value}.",
			status.HTTP_409_CONFLICT,
		)
	payment.status = target.value


def _clip(value: Any, limit: int) -> str | None:
	if value is None:
		return None
	return str(value)[:limit]


def _record_event(payment: Payment, event: str) -> None:
	# reassign so the JSON column is flagged dirty
	payment.webhook_events = [*(payment.webhook_events or []), event]


class PaymentService:
	"""Order creation, verification and enrollment bookkeeping for package purchases."""

	def __init__(
		self,
		db: AsyncSession,
		settings: Settings,
		mailer: Mailer,
		*,
		gateway: RazorpayClient | None = None,
		background_tasks: BackgroundTasks | None = None,
	):
		self.db = db
		self.settings = settings
		self.mailer = mailer
		self.gateway = gateway
		self.background_tasks = background_tasks

	async def is_enrolled(self, user_id: int, package_id: int) -> bool:
		stmt = select(Enrollment.id).where(Enrollment.user_id == user_id, Enrollment.package_id == package_id)
		return await self.db.scalar(stmt) is not None

	async def _get_owned_payment(self, user: User, payment_id: int) -> Payment:
		payment = await self.db.get(Payment, payment_id)
		if not payment or payment.user_id != user.id:
			raise PaymentServiceError("Payment record not found.", status.HTTP_404_NOT_FOUND)
		return payment

	async def create_order(self, user: User, package_id: int) -> CreateOrderResponse:
		package = get_package(package_id)
		if package is None:
			raise PaymentServiceError("Invalid package selected.")

		if await self.is_enrolled(user.id, package.id):
			raise PaymentServiceError("You are already enrolled in this package.", status.HTTP_409_CONFLICT)

		use_mock = self.gateway is None
		if use_mock and not self.settings.dev_payments_enabled:
			logger.error("Order requested but Razorpay keys are not configured")
			raise PaymentServiceError(
				"Payment gateway is not configured. Please try again later.",
				status.HTTP_503_SERVICE_UNAVAILABLE,
			)

		payment = Payment(
			user_id=user.id,
			package_id=package.id,
			package_name=package.name,
			amount=package.amount_paise,
			currency=CURRENCY,
			status=PaymentStatusEnum.CREATED.value,
			is_mock=use_mock,
		)
		self.db.add(payment)
		await self.db.commit()
		await self.db.refresh(payment)

		if use_mock:
			payment.razorpay_order_id = f"order_mock_{payment.id}"
			key_id = MOCK_KEY_ID
		else:
			receipt = f"sb_{user.id}_{package.id}_{_now_ms()}"
			try:
				order = await self.gateway.create_order(
					amount=package.amount_paise,
					currency=CURRENCY,
					receipt=receipt,
					notes={"user_id": str(user.id), "package_id": str(package.id), "payment_id": str(payment.id)},
				)
			except RazorpayError as exc:
				logger.error("Razorpay order creation failed payment=%s: %s", payment.id, exc.message)
				_transition(payment, PaymentStatusEnum.FAILED)
				payment.error_code = "ORDER_CREATION_FAILED"
				payment.error_message = exc.message[:512]
				await self.db.commit()
				raise PaymentServiceError(
					"Could not create payment order. Please try again.",
					status.HTTP_502_BAD_GATEWAY,
				) from exc
			payment.razorpay_order_id = order["id"]
			key_id = self.settings.razorpay_key_id

		await self.db.commit()
		logger.info(
			"Order created payment=%s user=%s package=%s mock=%s",
			payment.id, user.id, package.name, use_mock,
		)

		return CreateOrderResponse(
			order_id=payment.razorpay_order_id,
			amount=payment.amount,
			currency=payment.currency,
			key_id=key_id,
			payment_id=payment.id,
			package_name=payment.package_name,
			prefill=Prefill(name=user.name, email=user.email, contact=user.phone or ""),
			mock=use_mock,
		)

	async def verify(self, user: User, data: VerifyInput) -> VerifyResponse:
		payment = await self._get_owned_payment(user, data.payment_id)

		if payment.razorpay_order_id and payment.razorpay_order_id != data.razorpay_order_id:
			raise PaymentServiceError("Order ID does not match this payment.")

		key_secret = self.settings.razorpay_key_secret
		if not key_secret:
			raise PaymentServiceError(
				"Payment gateway is not configured. Please try again later.",
				status.HTTP_503_SERVICE_UNAVAILABLE,
			)

		if not verify_payment_signature(
			data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature, key_secret
		):
			logger.warning("Signature mismatch payment=%s user=%s", payment.id, user.id)
			if payment.status == PaymentStatusEnum.CREATED.value:
				_transition(payment, PaymentStatusEnum.FAILED)
				payment.error_message = SIGNATURE_MISMATCH
				await self.db.commit()
			raise PaymentServiceError("Payment verification failed. Signature mismatch.")

		if payment.status == PaymentStatusEnum.PAID.value:
			return VerifyResponse(
				message="Payment already verified.",
				package_name=payment.package_name,
				payment_id=payment.razorpay_payment_id,
			)

		_transition(payment, PaymentStatusEnum.PAID)
		payment.razorpay_order_id = data.razorpay_order_id
		payment.razorpay_payment_id = data.razorpay_payment_id
		payment.razorpay_signature = data.razorpay_signature
		payment.error_code = None
		payment.error_message = None
		await self.db.commit()
		logger.info("Payment verified payment=%s user=%s", payment.id, user.id)

		await self.enroll_user_for_payment(payment)
		return VerifyResponse(
			message="Payment verified. Enrollment confirmed!",
			package_name=payment.package_name,
			payment_id=payment.razorpay_payment_id,
		)

	async def dev_confirm(self, user: User, payment_id: int) -> DevConfirmResponse:
		if not self.settings.dev_payments_enabled:
			raise PaymentServiceError("Not found.", status.HTTP_404_NOT_FOUND)

		payment = await self._get_owned_payment(user, payment_id)
		if not payment.is_mock:
			raise PaymentServiceError("Mock payment not found.", status.HTTP_404_NOT_FOUND)

		if payment.status == PaymentStatusEnum.PAID.value:
			return DevConfirmResponse(message="Already confirmed.", package_name=payment.package_name)

		_transition(payment, PaymentStatusEnum.PAID)
		payment.razorpay_payment_id = f"dev_{_now_ms()}"
		await self.db.commit()

		await self.enroll_user_for_payment(payment)
		return DevConfirmResponse(
			message="Dev payment confirmed. Enrollment complete.",
			package_name=payment.package_name,
		)

	async def list_for_user(self, user: User, limit: int = 20) -> Sequence[Payment]:
		stmt = (
			select(Payment)
			.where(Payment.user_id == user.id)
			.order_by(Payment.created_at.desc(), Payment.id.desc())
			.limit(limit)
		)
		result = await self.db.scalars(stmt)
		return result.all()

	async def handle_webhook(self, body: bytes, signature: str | None) -> WebhookAck:
		secret = self.settings.razorpay_webhook_secret
		if secret and not verify_webhook_signature(body, signature, secret):
			logger.warning("Rejected webhook with invalid signature")
			raise PaymentServiceError("Invalid webhook signature.")

		try:
			payload = json.loads(body)
		except ValueError as exc:
			raise PaymentServiceError("Malformed webhook payload.") from exc
		if not isinstance(payload, dict):
			raise PaymentServiceError("Malformed webhook payload.")

		event = payload.get("event")
		entities = payload.get("payload") or {}
		logger.info("Webhook received event=%s", event)

		if event == "payment.captured":
			await self._on_payment_captured(event, self._entity(entities, "payment"))
		elif event == "payment.failed":
			await self._on_payment_failed(event, self._entity(entities, "payment"))
		elif event == "refund.processed":
			await self._on_refund_processed(event, self._entity(entities, "refund"))

		return WebhookAck(received=True)

	@staticmethod
	def _entity(entities: Any, name: str) -> dict[str, Any]:
		if not isinstance(entities, dict):
			return {}
		wrapper = entities.get(name)
		entity = wrapper.get("entity") if isinstance(wrapper, dict) else None
		return entity if isinstance(entity, dict) else {}

	async def _find_payment(self, column, value: str | None) -> Payment | None:
		if not value:
			return None
		return await self.db.scalar(select(Payment).where(column == value))

	async def _on_payment_captured(self, event: str, entity: dict[str, Any]) -> None:
		payment = await self._find_payment(Payment.razorpay_order_id, entity.get("order_id"))
		if payment is None:
			return
		if PaymentStatusEnum.PAID not in ALLOWED_TRANSITIONS[PaymentStatusEnum(payment.status)]:
			return
		_transition(payment, PaymentStatusEnum.PAID)
		payment.razorpay_payment_id = entity.get("id") or payment.razorpay_payment_id
		payment.error_code = None
		payment.error_message = None
		_record_event(payment, event)
		await self.db.commit()
		logger.info("Webhook captured payment=%s", payment.id)
		await self.enroll_user_for_payment(payment)

	async def _on_payment_failed(self, event: str, entity: dict[str, Any]) -> None:
		payment = await self._find_payment(Payment.razorpay_order_id, entity.get("order_id"))
		if payment is None or payment.status != PaymentStatusEnum.CREATED.value:
			return
		_transition(payment, PaymentStatusEnum.FAILED)
		payment.error_code = _clip(entity.get("error_code"), 64)
		payment.error_message = _clip(entity.get("error_description"), 512)
		_record_event(payment, event)
		await self.db.commit()
		logger.info("Webhook marked payment=%s failed code=%s", payment.id, payment.error_code)

	async def _on_refund_processed(self, event: str, entity: dict[str, Any]) -> None:
		payment = await self._find_payment(Payment.razorpay_payment_id, entity.get("payment_id"))
		if payment is None or payment.status != PaymentStatusEnum.PAID.value:
			return
		_transition(payment, PaymentStatusEnum.REFUNDED)
		_record_event(payment, event)
		await self.db.commit()
		logger.info("Webhook refunded payment=%s", payment.id)

	async def enroll_user_for_payment(self, payment: Payment) -> bool:
		"""
		Enroll the payment's owner in its package.

		Returns True only when a new enrollment row was created; the enrollment
		email is scheduled in that case alone.
		"""
		if await self.is_enrolled(payment.user_id, payment.package_id):
			return False

		user = await self.db.get(User, payment.user_id)
		if user is None:
			logger.warning("Enrollment skipped, user %s missing for payment %s", payment.user_id, payment.id)
			return False

		self.db.add(
			Enrollment(
				user_id=payment.user_id,
				package_id=payment.package_id,
				package_name=payment.package_name,
				amount=payment.amount,
				payment_id=payment.razorpay_payment_id,
			)
		)
		try:
			await self.db.commit()
		except IntegrityError:
			# a concurrent request enrolled the user first
			await self.db.rollback()
			await self.db.refresh(payment)
			return False

		logger.info("User %s enrolled in %s (payment %s)", user.id, payment.package_name, payment.id)
		email_args = (user.name, user.email, payment.package_name, payment.amount, payment.razorpay_payment_id)
		if self.background_tasks is not None:
			self.background_tasks.add_task(self.mailer.send_enrollment_email, *email_args)
		else:
			await run_in_threadpool(self.mailer.send_enrollment_email, *email_args)
		return True


def get_payment_service(
	background_tasks: BackgroundTasks,
	db: AsyncSession = Depends(get_db),
	settings: Settings = Depends(get_settings),
	mailer: Mailer = Depends(get_mailer),
	gateway: RazorpayClient | None = Depends(get_razorpay_client),
) -> PaymentService:
	return PaymentService(db, settings, mailer, gateway=gateway, background_tasks=background_tasks)
