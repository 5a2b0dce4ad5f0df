"""
Prometheus metrics middleware.

Collects HTTP request metrics (counter + histogram) and exposes domain
counters for issue intake, container risk recomputes and document analysis.
"""

import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# ── HTTP metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Domain metrics ───────────────────────────────────────────────────────────

security_issues_created_total = Counter(
    "security_issues_created_total",
    "Total security issues created",
    ["severity"],
)

container_risk_recomputes_total = Counter(
    "container_risk_recomputes_total",
    "Container risk score recomputations",
    ["policy", "outcome"],
)

document_analyses_total = Counter(
    "document_analyses_total",
    "Security review documents analysed",
    ["classification"],
)


def _normalize_path(path: str) -> str:
    """Collapse numeric path parameters to reduce cardinality.

    e.g. /api/containers/42/issues → /api/containers/{id}/issues
    """
    parts = path.strip("/").split("/")
    normalized = ["{id}" if part.isdigit() else part for part in parts]
    return "/" + "/".join(normalized)


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint itself to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = _normalize_path(request.url.path)

        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        http_requests_total.labels(
            method=method,
            path=path,
            status_code=response.status_code,
        ).inc()

        http_request_duration_seconds.labels(
            method=method,
            path=path,
        ).observe(duration)

        return response
