"""Razorpay REST client and signature helpers."""
from __future__ import annotations

import hashlib
import hmac
from logging import getLogger
from typing import Any

import httpx
from fastapi import Depends

from ..config import Settings, get_settings


logger = getLogger(__name__)


class RazorpayError(Exception):
	def __init__(self, message: str, status_code: int | None = None):
		super().__init__(message)
		self.message = message
		self.status_code = status_code


def _hmac_sha256_hex(secret: str, message: bytes) -> str:
	return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def compute_payment_signature(order_id: str, payment_id: str, key_secret: str) -> str:
	return _hmac_sha256_hex(key_secret, f"{order_id}|{payment_id}".encode("utf-8"))


def verify_payment_signature(order_id: str, payment_id: str, signature: str, key_secret: str) -> bool:
	expected = compute_payment_signature(order_id, payment_id, key_secret)
	return hmac.compare_digest(expected, signature)


def compute_webhook_signature(body: bytes, webhook_secret: str) -> str:
	return _hmac_sha256_hex(webhook_secret, body)


def verify_webhook_signature(body: bytes, signature: str | None, webhook_secret: str) -> bool:
	if not signature:
		return False
	return hmac.compare_digest(compute_webhook_signature(body, webhook_secret), signature)


class RazorpayClient:
	def __init__(self, key_id: str, key_secret: str, api_url: str, timeout: float = 15.0):
		self.key_id = key_id
		self.key_secret = key_secret
		self.api_url = api_url.rstrip("/")
		self.timeout = timeout

	async def create_order(
		self,
		*,
		amount: int,
		currency: str,
		receipt: str,
		notes: dict[str, str] | None = None,
	) -> dict[str, Any]:
		"""
		Create an order through ``POST /orders``.

		Args:
			amount: Amount in the smallest currency unit (paise)
			currency: ISO currency code
			receipt: Merchant receipt reference (max 40 chars)
			notes: Free-form key/value notes stored with the order

		Returns:
			The order entity returned by Razorpay (contains ``id``)

		Raises:
			RazorpayError: On transport errors, non-2xx responses or a response without an id
		"""
		payload = {
			"amount": amount,
			"currency": currency,
			"receipt": receipt,
			"payment_capture": 1,
			"notes": notes or {},
		}
		try:
			async with httpx.AsyncClient(timeout=self.timeout, auth=(self.key_id, self.key_secret)) as client:
				response = await client.post(f"{self.api_url}/orders", json=payload)
		except httpx.HTTPError as exc:
			raise RazorpayError(f"Razorpay request failed: {exc}") from exc

		if response.status_code >= 400:
			description = None
			try:
				description = (response.json().get("error") or {}).get("description")
			except (ValueError, AttributeError):
				pass
			raise RazorpayError(
				description or f"Razorpay returned HTTP {response.status_code}",
				status_code=response.status_code,
			)

		try:
			order = response.json()
		except ValueError as exc:
			raise RazorpayError("Razorpay returned a non-JSON response") from exc
		if not isinstance(order, dict) or not order.get("id"):
			raise RazorpayError("Razorpay response did not include an order id")

		logger.info("Razorpay order created id=%s receipt=%s", order["id"], receipt)
		return order


def get_razorpay_client(settings: Settings = Depends(get_settings)) -> RazorpayClient | None:
	if not settings.razorpay_configured:
		return None
	return RazorpayClient(
		settings.razorpay_key_id,
		settings.razorpay_key_secret,
		settings.razorpay_api_url,
		timeout=settings.razorpay_timeout_seconds,
	)
