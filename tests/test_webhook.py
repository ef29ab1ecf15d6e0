import json

from elearning_service.app.services import PaymentService, compute_webhook_signature

from .conftest import run_sql
from .test_payments import create_order, verify

WEBHOOK_SECRET = "whsec_test"


def payment_event(event, order_id, payment_id="pay_hook_1", **extra):
    entity = {"id": payment_id, "order_id": order_id, **extra}
    return {"event": event, "payload": {"payment": {"entity": entity}}}


def refund_event(payment_id):
    return {"event": "refund.processed", "payload": {"refund": {"entity": {"id": "rfnd_1", "payment_id": payment_id}}}}


def post_webhook(client, payload, secret=WEBHOOK_SECRET, signature=None):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    headers = {"Content-Type": "application/json"}
    if signature is None and secret:
        signature = compute_webhook_signature(body, secret)
    if signature:
        headers["X-Razorpay-Signature"] = signature
    return client.post("/api/payments/webhook", content=body, headers=headers)


def payment_state(payment_id):
    status, events, error_code, error_message = run_sql(
        "SELECT status, webhook_events, error_code, error_message FROM payments WHERE id = ?", (payment_id,)
    )[0]
    return status, json.loads(events), error_code, error_message


def test_captured_marks_paid_and_enrolls(client, user, settings, mailer):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()

    res = post_webhook(client, payment_event("payment.captured", order["order_id"]))
    assert res.status_code == 200
    assert res.json() == {"received": True}

    status, events, _, _ = payment_state(order["payment_id"])
    assert status == "paid"
    assert events == ["payment.captured"]
    assert run_sql("SELECT razorpay_payment_id FROM payments")[0][0] == "pay_hook_1"
    assert run_sql("SELECT package_id, payment_id FROM enrollments") == [(2, "pay_hook_1")]
    assert len(mailer.of_kind("enrollment")) == 1

    # redelivery is a no-op
    post_webhook(client, payment_event("payment.captured", order["order_id"]))
    assert payment_state(order["payment_id"])[1] == ["payment.captured"]
    assert len(mailer.of_kind("enrollment")) == 1


def test_captured_after_verify_does_not_enroll_twice(client, user, settings, mailer):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()
    verify(client, user["headers"], order)

    post_webhook(client, payment_event("payment.captured", order["order_id"], payment_id="pay_test_1"))
    assert run_sql("SELECT COUNT(*) FROM enrollments")[0][0] == 1
    assert len(mailer.of_kind("enrollment")) == 1


def test_captured_recovers_failed_payment(client, user, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()
    verify(client, user["headers"], order, signature="f" * 64)
    assert payment_state(order["payment_id"])[0] == "failed"

    post_webhook(client, payment_event("payment.captured", order["order_id"]))
    status, _, _, error_message = payment_state(order["payment_id"])
    assert status == "paid"
    assert error_message is None
    assert run_sql("SELECT COUNT(*) FROM enrollments")[0][0] == 1


def test_failed_event_records_gateway_error(client, user, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()

    payload = payment_event(
        "payment.failed",
        order["order_id"],
        error_code="BAD_REQUEST_ERROR",
        error_description="Payment was declined by the bank",
    )
    assert post_webhook(client, payload).status_code == 200

    status, events, error_code, error_message = payment_state(order["payment_id"])
    assert status == "failed"
    assert events == ["payment.failed"]
    assert error_code == "BAD_REQUEST_ERROR"
    assert error_message == "Payment was declined by the bank"


def test_failed_event_ignored_for_paid_payment(client, user, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()
    verify(client, user["headers"], order)

    post_webhook(client, payment_event("payment.failed", order["order_id"]))
    status, events, _, _ = payment_state(order["payment_id"])
    assert status == "paid"
    assert events == []


def test_refund_keeps_enrollment(client, user, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()
    verify(client, user["headers"], order)

    assert post_webhook(client, refund_event("pay_test_1")).status_code == 200
    status, events, _, _ = payment_state(order["payment_id"])
    assert status == "refunded"
    assert events == ["refund.processed"]
    assert run_sql("SELECT COUNT(*) FROM enrollments")[0][0] == 1


def test_signature_required_when_secret_configured(client, user, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    order = create_order(client, user["headers"]).json()
    payload = payment_event("payment.captured", order["order_id"])

    missing = post_webhook(client, payload, secret=None)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Invalid webhook signature."

    forged = post_webhook(client, payload, signature=compute_webhook_signature(b"other body", WEBHOOK_SECRET))
    assert forged.status_code == 400
    assert payment_state(order["payment_id"])[0] == "created"


def test_unsigned_webhook_accepted_without_secret(client, user):
    order = create_order(client, user["headers"]).json()
    res = post_webhook(client, payment_event("payment.captured", order["order_id"]), secret=None)
    assert res.status_code == 200
    assert payment_state(order["payment_id"])[0] == "paid"


def test_malformed_body_rejected(client, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    assert post_webhook(client, b"{not json").status_code == 400
    assert post_webhook(client, b"[1, 2]").status_code == 400


def test_unknown_event_acknowledged(client, settings):
    settings.razorpay_webhook_secret = WEBHOOK_SECRET
    res = post_webhook(client, {"event": "order.paid", "payload": {}})
    assert res.status_code == 200
    assert res.json() == {"received": True}

    orphan = post_webhook(client, payment_event("payment.captured", "order_unknown"))
    assert orphan.status_code == 200


def test_failed_event_clips_oversized_gateway_error(client, user):
    order = create_order(client, user["headers"]).json()
    payload = payment_event("payment.failed", order["order_id"], error_code="E" * 200, error_description=404)
    assert post_webhook(client, payload, secret=None).status_code == 200

    status, _, error_code, error_message = payment_state(order["payment_id"])
    assert status == "failed"
    assert error_code == "E" * 64
    assert error_message == "404"


def test_processing_error_returns_500(client, user, monkeypatch):
    order = create_order(client, user["headers"]).json()

    async def broken_capture(self, event, entity):
        raise RuntimeError("database went away")

    monkeypatch.setattr(PaymentService, "_on_payment_captured", broken_capture)
    res = post_webhook(client, payment_event("payment.captured", order["order_id"]), secret=None)
    assert res.status_code == 500
    assert res.json() == {"detail": "Webhook processing error."}
    assert payment_state(order["payment_id"])[0] == "created"
