"""In-memory rate limiting for lightweight endpoint protection."""
from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from typing import Callable

from fastapi import Depends, HTTPException, Request, status


class InMemoryRateLimiter:
	"""Sliding-window limiter keyed by an arbitrary string (scope + client address)."""

	def __init__(self, clock: Callable[[], float] = time.monotonic):
		self._hits: dict[str, deque[float]] = defaultdict(deque)
		self._lock = threading.Lock()
		self._clock = clock

	def allow(self, key: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
		"""Record a hit for ``key``; return (allowed, retry_after_seconds)."""
		now = self._clock()
		with self._lock:
			hits = self._hits[key]
			cutoff = now - window_seconds
			while hits and hits[0] <= cutoff:
				hits.popleft()
			if len(hits) >= max_requests:
				return False, max(1, int(window_seconds - (now - hits[0])))
			hits.append(now)
		return True, 0

	def reset(self) -> None:
		with self._lock:
			self._hits.clear()


def make_rate_limit_dependency(
	limiter: InMemoryRateLimiter,
	scope: str,
	get_settings: Callable,
	*,
	limit_attr: str,
	window_attr: str,
	detail: str = "Too many requests. Please try again later.",
) -> Callable:
	"""
	Build a FastAPI dependency enforcing a per-client limit read from settings.

	Args:
		limiter: Shared limiter instance
		scope: Key prefix so different route groups count separately
		get_settings: Settings factory (also the dependency that tests override)
		limit_attr: Settings attribute holding the max request count (<= 0 disables)
		window_attr: Settings attribute holding the window length in seconds
		detail: Error message returned with the 429 response
	"""
	def _enforce(request: Request, settings=Depends(get_settings)) -> None:
		max_requests = getattr(settings, limit_attr)
		if max_requests <= 0:
			return
		window = getattr(settings, window_attr)
		client = request.client.host if request.client else "unknown"
		allowed, retry_after = limiter.allow(f"{scope}:{client}", max_requests, window)
		if not allowed:
			raise HTTPException(
				status_code=status.HTTP_429_TOO_MANY_REQUESTS,
				detail=detail,
				headers={"Retry-After": str(retry_after)},
			)

	return _enforce
