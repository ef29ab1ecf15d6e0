from .payments import PaymentService, PaymentServiceError, get_payment_service
from .razorpay import (
	RazorpayClient,
	RazorpayError,
	compute_payment_signature,
	compute_webhook_signature,
	get_razorpay_client,
	verify_payment_signature,
	verify_webhook_signature,
)
from .users import build_user_out

__all__ = [
	"PaymentService",
	"PaymentServiceError",
	"get_payment_service",
	"RazorpayClient",
	"RazorpayError",
	"compute_payment_signature",
	"compute_webhook_signature",
	"get_razorpay_client",
	"verify_payment_signature",
	"verify_webhook_signature",
	"build_user_out",
]
