from .user import User, UserRole
from .course import Course, CourseLevel
from .payment import ALLOWED_TRANSITIONS, Payment, PaymentStatusEnum
from .enrollment import Enrollment

__all__ = [
	"User",
	"UserRole",
	"Course",
	"CourseLevel",
	"Payment",
	"PaymentStatusEnum",
	"ALLOWED_TRANSITIONS",
	"Enrollment",
]
