"""
Access log for the bot's HTTP API
"""
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from servtec.utils.logger import get_logger

logger = get_logger(__name__)

# Liveness probes and gateway webhooks arrive constantly; only failures are logged
QUIET_PATHS = {"/api/v1/health", "/api/v1/health/", "/api/v1/webhooks/whatsapp"}


def _elapsed_ms(started: float) -> int:
    return int((time.time() - started) * 1000)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status and sets X-Process-Time (ms)"""

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.time()
        route = f"{request.method} {request.url.path}"
        quiet = request.url.path in QUIET_PATHS

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"{route} failed after {_elapsed_ms(started)}ms: {e}", exc_info=True)
            raise

        elapsed = _elapsed_ms(started)
        if not quiet or response.status_code >= 500:
            logger.info(f"{route} -> {response.status_code} ({elapsed}ms)")
        response.headers["X-Process-Time"] = str(elapsed)
        return response
