"""Redis-backed rate limiting middleware."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.auth.dependencies import extract_client_identity
from app.config import get_settings

logger = structlog.get_logger("marketyield.ratelimit")


class RateLimitMiddleware(BaseHTTPMiddleware):
	"""Per-client quota on ``/api/`` routes backed by Redis atomic counters.

	Clients presenting a bearer token are counted per token, anonymous
	clients per address.  Counters live in one-minute buckets.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		if not request.url.path.startswith("/api/"):
			return await call_next(request)

		redis_client = getattr(request.app.state, "redis", None)
		if redis_client is None:
			return await call_next(request)

		settings = get_settings()
		identity = extract_client_identity(request)
		quota = (
			settings.rate_limit_authenticated_per_minute
			if identity.startswith("token:")
			else settings.rate_limit_anonymous_per_minute
		)

		minute_bucket = datetime.now(UTC).strftime("%Y%m%d%H%M")
		key = f"ratelimit:{identity}:{minute_bucket}"
		current = await redis_client.incr(key)
		if current == 1:
			await redis_client.expire(key, 65)

		if current > quota:
			logger.warning("rate_limited", identity=identity.split(":", 1)[0], quota=quota)
			return JSONResponse(
				status_code=429,
				content={
					"detail": {
						"error": "rate_limited",
						"message": "Too many requests, please try again later",
						"quota": quota,
					}
				},
			)

		return await call_next(request)
