from .auth import (
	AuthResponse,
	EnrolledPackageOut,
	LoginInput,
	ProfileUpdateResponse,
	UserCreate,
	UserEnvelope,
	UserOut,
	UserUpdate,
)
from .course import (
	CourseCreate,
	CourseCreatedResponse,
	CourseEnvelope,
	CourseListResponse,
	CourseOut,
	CourseUpdate,
	MessageResponse,
)
from .payment import (
	CreateOrderInput,
	CreateOrderResponse,
	DevConfirmInput,
	DevConfirmResponse,
	PaymentListResponse,
	PaymentOut,
	Prefill,
	VerifyInput,
	VerifyResponse,
	WebhookAck,
)

__all__ = [
	"AuthResponse",
	"EnrolledPackageOut",
	"LoginInput",
	"ProfileUpdateResponse",
	"UserCreate",
	"UserEnvelope",
	"UserOut",
	"UserUpdate",
	"CourseCreate",
	"CourseCreatedResponse",
	"CourseEnvelope",
	"CourseListResponse",
	"CourseOut",
	"CourseUpdate",
	"MessageResponse",
	"CreateOrderInput",
	"CreateOrderResponse",
	"DevConfirmInput",
	"DevConfirmResponse",
	"PaymentListResponse",
	"PaymentOut",
	"Prefill",
	"VerifyInput",
	"VerifyResponse",
	"WebhookAck",
]
