from common import BaseServiceSettings, make_get_settings


class Settings(BaseServiceSettings):
	app_name: str = "E-learning Platform API"
	access_token_expire_minutes: int = 60 * 24 * 7
	allowed_origins: str = "http://localhost:3000,http://127.0.0.1:5500"

	# Rate limits (requests per window, per client address)
	auth_rate_limit: int = 20
	auth_rate_window_seconds: int = 15 * 60
	payments_rate_limit: int = 30
	payments_rate_window_seconds: int = 10 * 60

	# Razorpay
	razorpay_key_id: str | None = None
	razorpay_key_secret: str | None = None
	razorpay_webhook_secret: str | None = None
	razorpay_api_url: str = "https://api.razorpay.com/v1"
	razorpay_timeout_seconds: float = 15.0
	enable_dev_payments: bool = False

	# SMTP
	smtp_host: str = "smtp.gmail.com"
	smtp_port: int = 587
	smtp_user: str | None = None
	smtp_password: str | None = None
	smtp_use_ssl: bool = False
	smtp_use_tls: bool = True
	email_from: str = '"Skillbrzee" <support@skillbrzee.in>'
	app_url: str = "https://skillbrzee.in"
	support_email: str = "support@skillbrzee.in"

	create_tables_on_startup: bool = False
	run_migrations_on_startup: bool = False

	@property
	def cors_origins(self) -> list[str]:
		return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

	@property
	def razorpay_configured(self) -> bool:
		return bool(self.razorpay_key_id and self.razorpay_key_secret)

	@property
	def dev_payments_enabled(self) -> bool:
		return self.enable_dev_payments and not self.is_production


get_settings = make_get_settings(Settings)
