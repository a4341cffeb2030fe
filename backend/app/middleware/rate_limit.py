"""
DocTrack Backend — Rate Limiting Middleware
=============================================

What:  Per-client request limiter: at most N requests per rolling window.
How:   Keeps the request timestamps of each client address in memory,
       drops the ones older than the window, rejects when N remain.
Who:   Applied to every request except health checks and API docs.

Defaults: 100 requests per 15 minutes. Over-limit responses are
HTTP 429 with a fixed plain-text message.

Client address:
    With trust_proxy_hops > 0 the address is read from X-Forwarded-For,
    counting that many hops back from the right (1 = the address the
    nearest proxy saw). Without the header, the socket peer is used.

State is per process; several uvicorn workers each keep their own counts.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)


def client_address(request: Request, trust_proxy_hops: int = 0) -> str:
    """Best-effort client address, honoring X-Forwarded-For behind proxies."""
    if trust_proxy_hops > 0:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            hops = [h.strip() for h in forwarded.split(",") if h.strip()]
            if hops:
                return hops[-trust_proxy_hops] if len(hops) >= trust_proxy_hops else hops[0]
    return getattr(request.client, "host", "unknown") if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory rolling window limiter.

    Args:
        max_requests:     Requests allowed per window and client
        window_seconds:   Window length
        message:          Body of the 429 response
        trust_proxy_hops: Proxies in front of the service (see module doc)
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 900,
        message: str = "Too many requests, please try again later.",
        trust_proxy_hops: int = 0,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.trust_proxy_hops = trust_proxy_hops
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = client_address(request, self.trust_proxy_hops)
        now = time.time()
        window_start = now - self.window_seconds

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.max_requests:
            retry_after = int(recent[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                client_ip,
                len(recent),
                self.window_seconds,
            )
            return PlainTextResponse(
                self.message,
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)

        # Forget idle clients every 1000 requests
        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_clients(window_start)

        return await call_next(request)

    def _cleanup_inactive_clients(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive:
            del self._requests[ip]

        if inactive:
            logger.debug("Cleaned up %d inactive client entries", len(inactive))
