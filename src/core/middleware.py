"""
FastAPI middleware for request tracing and logging.

Every request gets a short request id bound into the structlog context, so
the extractor, store and ranker lines of one search can be correlated.
Search requests also carry the active extractor mode (llm or rules_only).
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import Settings, get_settings
from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

# Probe endpoints hit every few seconds; logged at debug only.
_PROBE_PATHS = frozenset({"/health", "/ready", "/live"})
_SEARCH_PREFIX = "/api/search"


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Bind request_id / method / path (plus ``extractor`` on search routes),
    log completion with timing, and echo X-Request-ID and X-Response-Time-Ms.
    """

    def __init__(self, app, settings: Optional[Settings] = None):
        super().__init__(app)
        self._extractor_mode = (settings or get_settings()).extractor_mode

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        path = request.url.path

        context = {"request_id": request_id, "method": request.method, "path": path}
        if path.startswith(_SEARCH_PREFIX):
            context["extractor"] = self._extractor_mode
        bind_context(**context)

        log = logger.debug if path in _PROBE_PATHS else logger.info
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise
        else:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log("Request completed", status_code=response.status_code, duration_ms=duration_ms)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time-Ms"] = str(duration_ms)
            return response
        finally:
            clear_context()
