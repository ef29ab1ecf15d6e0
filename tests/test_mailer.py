import smtplib

import pytest

from elearning_service.app import mailer as mailer_module
from elearning_service.app.config import get_settings
from elearning_service.app.mailer import Mailer, format_inr


class FakeSMTP:
    instances = []
    fail_on_login = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.credentials = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        if FakeSMTP.fail_on_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.credentials = (user, password)

    def send_message(self, msg):
        # serialize the way smtplib does before handing the bytes to the server
        msg.as_string()
        self.messages.append(msg)


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_on_login = False
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def make_mailer(**overrides):
    values = {"smtp_user": "mailer@example.com", "smtp_password": "app-pass", "smtp_host": "smtp.test", "smtp_port": 587}
    values.update(overrides)
    return Mailer(get_settings().model_copy(update=values))


def html_part(msg):
    return msg.get_payload()[1].get_payload(decode=True).decode("utf-8")


@pytest.mark.parametrize(
    ("paise", "expected"),
    [
        (0, "₹0"),
        (50000, "₹500"),
        (149900, "₹1,499"),
        (1499900, "₹14,999"),
        (14999900, "₹1,49,999"),
        (1000000000, "₹1,00,00,000"),
        (150, "₹1.5"),
        (123456, "₹1,234.56"),
    ],
)
def test_format_inr(paise, expected):
    assert format_inr(paise) == expected


def test_send_skipped_without_smtp_user(fake_smtp):
    mailer = make_mailer(smtp_user=None)
    assert mailer.send_welcome_email("Asha", "asha@example.com") is False
    assert fake_smtp.instances == []


def test_welcome_email_uses_starttls_and_escapes_name(fake_smtp):
    mailer = make_mailer()
    assert mailer.send_welcome_email("<b>Eve</b>", "eve@example.com") is True

    (server,) = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.test", 587)
    assert server.started_tls is True
    assert server.credentials == ("mailer@example.com", "app-pass")

    (msg,) = server.messages
    assert msg["Subject"] == "Welcome to Skillbrzee, <b>Eve</b>!"
    assert msg["To"] == "eve@example.com"
    body = html_part(msg)
    assert "&lt;b&gt;Eve&lt;/b&gt;" in body
    assert "<b>Eve</b>" not in body


def test_enrollment_email_formats_amount(fake_smtp):
    mailer = make_mailer(smtp_use_ssl=True, smtp_port=465)
    assert mailer.send_enrollment_email("Asha", "asha@example.com", "PREMIUM", 1499900, "pay_42") is True

    (server,) = fake_smtp.instances
    assert server.started_tls is False
    (msg,) = server.messages
    assert msg["Subject"] == "Enrolled in PREMIUM | Skillbrzee"
    body = html_part(msg)
    assert "₹14,999" in body
    assert "pay_42" in body


def test_smtp_errors_are_swallowed(fake_smtp):
    fake_smtp.fail_on_login = True
    assert make_mailer().send_enrollment_email("Asha", "asha@example.com", "GOLD", 549900) is False


def test_header_injection_in_name_is_logged_not_raised(fake_smtp, caplog):
    mailer = make_mailer()
    assert mailer.send_welcome_email("Asha\r\nBcc: victim@evil.test", "asha@example.com") is False
    assert all(server.messages == [] for server in fake_smtp.instances)
    assert "Failed to send email to asha@example.com" in caplog.text
