"""
Correlation ID Middleware

Tags each request with a correlation ID so every log line written while
handling a decision can be traced back to the request.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ...utils.logger import set_correlation_id, get_logger
from ...utils.idgen import generate_correlation_id

logger = get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's X-Correlation-Id or generates one, stores it in the
    logging context and echoes it on the response.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-Id") or generate_correlation_id()
        )
        set_correlation_id(correlation_id)

        response = await call_next(request)

        response.headers["X-Correlation-Id"] = correlation_id
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code}")
        return response
