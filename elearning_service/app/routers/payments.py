from __future__ import annotations

from logging import getLogger

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from ..models import User
from ..rate_limits import payments_rate_limit
from ..schemas import (
	CreateOrderInput,
	CreateOrderResponse,
	DevConfirmInput,
	DevConfirmResponse,
	PaymentListResponse,
	PaymentOut,
	VerifyInput,
	VerifyResponse,
	WebhookAck,
)
from ..security import get_current_user
from ..services import PaymentService, PaymentServiceError, get_payment_service


logger = getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])

# the gateway calls the webhook, so it is not rate limited per client
limited = [Depends(payments_rate_limit)]


def _handle_error(exc: PaymentServiceError) -> HTTPException:
	return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("/create-order", response_model=CreateOrderResponse, dependencies=limited)
async def create_order(
	data: CreateOrderInput,
	current_user: User = Depends(get_current_user),
	service: PaymentService = Depends(get_payment_service),
) -> CreateOrderResponse:
	try:
		return await service.create_order(current_user, data.package_id)
	except PaymentServiceError as exc:
		raise _handle_error(exc) from exc


@router.post("/verify", response_model=VerifyResponse, dependencies=limited)
async def verify_payment(
	data: VerifyInput,
	current_user: User = Depends(get_current_user),
	service: PaymentService = Depends(get_payment_service),
) -> VerifyResponse:
	try:
		return await service.verify(current_user, data)
	except PaymentServiceError as exc:
		raise _handle_error(exc) from exc


@router.post("/dev-confirm", response_model=DevConfirmResponse, dependencies=limited)
async def dev_confirm(
	data: DevConfirmInput,
	current_user: User = Depends(get_current_user),
	service: PaymentService = Depends(get_payment_service),
) -> DevConfirmResponse:
	try:
		return await service.dev_confirm(current_user, data.payment_id)
	except PaymentServiceError as exc:
		raise _handle_error(exc) from exc


@router.get("/my-payments", response_model=PaymentListResponse, dependencies=limited)
async def my_payments(
	limit: int = Query(20, ge=1, le=100),
	current_user: User = Depends(get_current_user),
	service: PaymentService = Depends(get_payment_service),
) -> PaymentListResponse:
	payments = await service.list_for_user(current_user, limit=limit)
	return PaymentListResponse(payments=[PaymentOut.model_validate(p) for p in payments])


@router.post("/webhook", response_model=WebhookAck)
async def razorpay_webhook(
	request: Request,
	x_razorpay_signature: str | None = Header(default=None, alias="X-Razorpay-Signature"),
	service: PaymentService = Depends(get_payment_service),
) -> WebhookAck:
	body = await request.body()
	try:
		return await service.handle_webhook(body, x_razorpay_signature)
	except PaymentServiceError as exc:
		raise _handle_error(exc) from exc
	except Exception as exc:
		logger.exception("Webhook processing failed")
		raise HTTPException(
			status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
			detail="Webhook processing error.",
		) from exc
