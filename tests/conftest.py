import os
import sqlite3
import tempfile
from pathlib import Path

import pytest

DB_PATH = Path(tempfile.gettempdir()) / f"elearning_test_{os.getpid()}.db"

# settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH}"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ENV"] = "test"
os.environ["CREATE_TABLES_ON_STARTUP"] = "true"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from elearning_service.app.config import get_settings  # noqa: E402
from elearning_service.app.mailer import get_mailer  # noqa: E402
from elearning_service.app.main import app  # noqa: E402
from elearning_service.app.rate_limits import limiter  # noqa: E402
from elearning_service.app.services import get_razorpay_client  # noqa: E402


KEY_ID = "rzp_test_key"
KEY_SECRET = "test_key_secret"
PASSWORD = "secret123"


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send_welcome_email(self, name, email):
        self.sent.append(("welcome", email, name))
        return True

    def send_enrollment_email(self, name, email, package_name, amount, payment_id=None):
        self.sent.append(("enrollment", email, package_name, amount, payment_id))
        return True

    def of_kind(self, kind):
        return [item for item in self.sent if item[0] == kind]


class FakeRazorpay:
    def __init__(self):
        self.orders = []
        self.error = None

    async def create_order(self, *, amount, currency, receipt, notes=None):
        if self.error is not None:
            raise self.error
        order = {
            "id": f"order_test_{len(self.orders) + 1}",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        self.orders.append(order)
        return order


@pytest.fixture(scope="session", autouse=True)
def remove_db_file():
    yield
    if DB_PATH.exists():
        DB_PATH.unlink()


@pytest.fixture()
def settings():
    return get_settings().model_copy(
        update={
            "razorpay_key_id": KEY_ID,
            "razorpay_key_secret": KEY_SECRET,
            "razorpay_webhook_secret": None,
            "enable_dev_payments": False,
        }
    )


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def gateway():
    return FakeRazorpay()


@pytest.fixture()
def client(settings, mailer, gateway):
    if DB_PATH.exists():
        DB_PATH.unlink()
    limiter.reset()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    # keys removed from settings means "gateway not configured"
    app.dependency_overrides[get_razorpay_client] = lambda: gateway if settings.razorpay_configured else None

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def run_sql(sql, params=()):
    conn = sqlite3.connect(DB_PATH)
    try:
        rows = conn.execute(sql, params).fetchall()
        conn.commit()
    finally:
        conn.close()
    return rows


def register(client, email="asha@example.com", name="Asha Rao", phone="9876543210", password=PASSWORD):
    res = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "phone": phone, "password": password},
    )
    assert res.status_code == 201, res.text
    return res.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user(client):
    body = register(client)
    return {"id": body["user"]["id"], "token": body["access_token"], "headers": auth_headers(body["access_token"])}


@pytest.fixture()
def admin(client):
    body = register(client, email="admin@example.com", name="Admin")
    run_sql("UPDATE users SET role = 'admin' WHERE id = ?", (body["user"]["id"],))
    return {"id": body["user"]["id"], "headers": auth_headers(body["access_token"])}
