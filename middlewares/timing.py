import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger("novabulletin.access")


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Request-ID / X-Latency-Ms headers and writes one access log line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Latency-Ms"] = str(latency_ms)

        entry = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": latency_ms,
        }
        if settings.REQUEST_LOG_JSON:
            logger.info(json.dumps(entry))
        else:
            logger.info("%(method)s %(path)s %(status)s %(latency_ms)sms [%(request_id)s]", entry)
        return response
