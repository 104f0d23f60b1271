"""Request context middleware: request IDs, latency metrics, server error logging"""

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from store_ledger.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an ID and record how it went.

    An incoming X-Request-ID is reused so a presentation layer can correlate
    its own logs; otherwise a new one is generated. Latency is labelled with
    the route template (/v1/customers/{customer_id}/statement), not the raw
    path, to keep metric cardinality bounded.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)

        if response.status_code >= 500:
            logging.error(
                f"{request.method} {endpoint} failed with {response.status_code}",
                extra={"request_id": request_id, "duration_ms": round(duration * 1000, 2)},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
