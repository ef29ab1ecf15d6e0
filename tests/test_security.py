from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from common import create_access_token, decode_access_token, get_password_hash, verify_password
from common.database import resolve_async_url
from elearning_service.app.services import (
    compute_payment_signature,
    verify_payment_signature,
    verify_webhook_signature,
    compute_webhook_signature,
)

SECRET = "unit-test-secret"


def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_access_token_round_trip():
    token = create_access_token("42", SECRET, expires_delta=timedelta(minutes=5))
    assert decode_access_token(token, SECRET) == 42


def test_decode_rejects_wrong_type_and_bad_subject():
    refresh_like = jwt.encode({"sub": "42", "type": "refresh"}, SECRET, algorithm="HS256")
    bad_subject = jwt.encode({"sub": "abc", "type": "access"}, SECRET, algorithm="HS256")
    wrong_key = create_access_token("42", "another-secret", expires_delta=timedelta(minutes=5))
    for token in (refresh_like, bad_subject, wrong_key):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token, SECRET)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token. Please log in again."


def test_payment_signature_matches_gateway_scheme():
    # hex(HMAC-SHA256(secret, "order_id|payment_id"))
    signature = compute_payment_signature("order_ABC", "pay_XYZ", "key_secret")
    assert len(signature) == 64
    assert verify_payment_signature("order_ABC", "pay_XYZ", signature, "key_secret")
    assert not verify_payment_signature("order_ABC", "pay_OTHER", signature, "key_secret")
    assert not verify_payment_signature("order_ABC", "pay_XYZ", signature, "other_secret")


def test_webhook_signature():
    body = b'{"event":"payment.captured"}'
    signature = compute_webhook_signature(body, "whsec")
    assert verify_webhook_signature(body, signature, "whsec")
    assert not verify_webhook_signature(body + b" ", signature, "whsec")
    assert not verify_webhook_signature(body, None, "whsec")


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("postgresql+psycopg2://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("sqlite:///./app.db", "sqlite+aiosqlite:///./app.db"),
        ("sqlite+aiosqlite:///./app.db", "sqlite+aiosqlite:///./app.db"),
    ],
)
def test_resolve_async_url(url, expected):
    assert resolve_async_url(url, None) == expected


def test_resolve_async_url_rejects_unknown_backend():
    with pytest.raises(ValueError):
        resolve_async_url("mysql://u:p@db/app", None)


def test_health_endpoints(client):
    health = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert "time" in health.json()
    assert health.headers["X-Request-ID"] == "req-123"

    healthz = client.get("/healthz")
    assert healthz.status_code == 200
    assert healthz.json()["checks"]["database"] == "ok"

    assert client.get("/metrics").status_code == 200
