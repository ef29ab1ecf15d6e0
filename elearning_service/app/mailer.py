"""Transactional email over SMTP (welcome and enrollment confirmation)."""
from __future__ import annotations

import html
import smtplib
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from logging import getLogger

from fastapi import Depends

from .config import Settings, get_settings


logger = getLogger(__name__)


def format_inr(amount_paise: int) -> str:
	"""Format an amount in paise as rupees with Indian digit grouping, e.g. ``₹1,49,999``."""
	rupees, paise = divmod(abs(int(amount_paise)), 100)
	digits = str(rupees)
	head, tail = digits[:-3], digits[-3:]
	groups = []
	while len(head) > 2:
		groups.insert(0, head[-2:])
		head = head[:-2]
	if head:
		groups.insert(0, head)
	grouped = ",".join(groups + [tail])
	if paise:
		grouped += "." + f"{paise:02d}".rstrip("0")
	sign = "-" if amount_paise < 0 else ""
	return f"{sign}₹{grouped}"


class Mailer:
	def __init__(self, settings: Settings):
		self.settings = settings

	def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
		"""Send one message; returns False when skipped or failed, never raises on SMTP or message errors."""
		settings = self.settings
		if not settings.smtp_user:
			logger.info("Email skipped (SMTP not configured) to=%s subject=%s", to_email, subject)
			return False

		try:
			msg = MIMEMultipart("alternative")
			msg["Subject"] = subject
			msg["From"] = settings.email_from
			msg["To"] = to_email
			msg.attach(MIMEText(text_body, "plain", "utf-8"))
			msg.attach(MIMEText(html_body, "html", "utf-8"))

			if settings.smtp_use_ssl:
				server: smtplib.SMTP = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=30)
			else:
				server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30)
			with server:
				if settings.smtp_use_tls and not settings.smtp_use_ssl:
					server.starttls()
				server.login(settings.smtp_user, settings.smtp_password or "")
				server.send_message(msg)
		except (smtplib.SMTPException, MessageError, OSError) as exc:
			logger.error("Failed to send email to %s (%r): %s", to_email, subject, exc)
			return False

		logger.info("Email sent to %s: %s", to_email, subject)
		return True

	def _footer(self, lead: str) -> str:
		support = html.escape(self.settings.support_email)
		return (
			'<hr style="border-color:#1e293b;margin:28px 0;"/>'
			f'<p style="color:#64748b;font-size:.78rem;">{lead} '
			f'<a href="mailto:{support}" style="color:#f97316;">{support}</a></p>'
		)

	def send_welcome_email(self, name: str, email: str) -> bool:
		app_url = self.settings.app_url
		safe_name = html.escape(name)
		subject = f"Welcome to Skillbrzee, {name}!"
		html_body = (
			'<div style="font-family:sans-serif;max-width:560px;margin:auto;padding:32px;">'
			'<h1 style="color:#f97316;">Welcome to Skillbrzee!</h1>'
			f"<p>Hi <strong>{safe_name}</strong>,</p>"
			"<p>Your account has been successfully created. Start your digital journey today "
			"and unlock new skills!</p>"
			f'<a href="{html.escape(app_url)}" style="color:#f97316;font-weight:700;">Explore Courses</a>'
			f"{self._footer('If you did not create this account, please contact')}"
			"</div>"
		)
		text_body = f"Welcome to Skillbrzee, {name}! Your account is ready. Visit {app_url}"
		return self.send(email, subject, html_body, text_body)

	def send_enrollment_email(
		self,
		name: str,
		email: str,
		package_name: str,
		amount: int,
		payment_id: str | None = None,
	) -> bool:
		app_url = self.settings.app_url
		amount_formatted = format_inr(amount)
		safe_package = html.escape(package_name)
		payment_line = (
			f'<p style="margin:8px 0 0;">Payment ID: <strong>{html.escape(payment_id)}</strong></p>'
			if payment_id
			else ""
		)
		subject = f"Enrolled in {package_name} | Skillbrzee"
		html_body = (
			'<div style="font-family:sans-serif;max-width:560px;margin:auto;padding:32px;">'
			'<h1 style="color:#f97316;">Enrollment Confirmed!</h1>'
			f"<p>Hi <strong>{html.escape(name)}</strong>,</p>"
			f"<p>Your enrollment in <strong>{safe_package}</strong> has been confirmed. "
			"You now have <strong>lifetime access</strong> to all course materials.</p>"
			'<div style="border:1px solid #f97316;border-radius:10px;padding:16px 20px;margin:24px 0;">'
			f'<p style="margin:0;">Package: <strong>{safe_package}</strong></p>'
			f'<p style="margin:8px 0 0;">Amount Paid: <strong>{amount_formatted}</strong></p>'
			f"{payment_line}"
			"</div>"
			f'<a href="{html.escape(app_url)}" style="color:#f97316;font-weight:700;">Start Learning</a>'
			f"{self._footer('Need help? Contact us at')}"
			"</div>"
		)
		text_body = (
			f"Enrollment confirmed! You are now enrolled in {package_name} ({amount_formatted}). "
			f"Visit {app_url}"
		)
		return self.send(email, subject, html_body, text_body)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
	return Mailer(settings)
