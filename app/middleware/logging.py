"""structlog setup and per-request access logging with request ID propagation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import LogFormat, get_settings

REQUEST_ID_HEADER = "x-request-id"
QUIET_PATHS = frozenset({"/health", "/health/ready"})

_configured = False


def _renderer(log_format: LogFormat) -> Any:
	if log_format == LogFormat.console:
		return structlog.dev.ConsoleRenderer()
	return structlog.processors.JSONRenderer()


def configure_structured_logging() -> None:
	"""Route stdlib logging and structlog through one renderer, once per process."""
	global _configured
	if _configured:
		return

	settings = get_settings()
	level = logging.getLevelName(settings.log_level.upper())
	if not isinstance(level, int):
		level = logging.INFO

	logging.basicConfig(level=level, format="%(message)s")
	# uvicorn's own access log duplicates http_request lines
	logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

	structlog.configure(
		processors=[
			structlog.contextvars.merge_contextvars,
			structlog.processors.add_log_level,
			structlog.processors.TimeStamper(fmt="iso", utc=True),
			structlog.processors.format_exc_info,
			_renderer(settings.log_format),
		],
		wrapper_class=structlog.make_filtering_bound_logger(level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Bind a request ID to the log context and emit one timing line per request.

	An incoming ``x-request-id`` header is reused; otherwise a UUID4 is
	generated.  The ID is echoed back on the response either way.  Health
	probes are logged at debug level only.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id)
		log = structlog.get_logger("marketyield.request").bind(
			method=request.method,
			path=request.url.path,
		)

		started = time.perf_counter()
		try:
			response = await call_next(request)
		except Exception as exc:
			log.exception("http_request_failed", duration_ms=_elapsed_ms(started), error=str(exc))
			raise

		response.headers[REQUEST_ID_HEADER] = request_id
		emit = log.debug if request.url.path in QUIET_PATHS else log.info
		emit("http_request", status_code=response.status_code, duration_ms=_elapsed_ms(started))
		return response


def _elapsed_ms(started: float) -> float:
	return round((time.perf_counter() - started) * 1000.0, 2)
