from common import InMemoryRateLimiter, make_rate_limit_dependency

from .config import get_settings


limiter = InMemoryRateLimiter()

auth_rate_limit = make_rate_limit_dependency(
	limiter,
	"auth",
	get_settings,
	limit_attr="auth_rate_limit",
	window_attr="auth_rate_window_seconds",
	detail="Too many requests. Please try again later.",
)

payments_rate_limit = make_rate_limit_dependency(
	limiter,
	"payments",
	get_settings,
	limit_attr="payments_rate_limit",
	window_attr="payments_rate_window_seconds",
	detail="Too many payment requests. Please slow down.",
)
