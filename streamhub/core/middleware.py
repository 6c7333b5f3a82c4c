import time
from collections import defaultdict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding one-minute window per client IP, kept in process memory.
    Write methods have their own, usually stricter, budget.
    A limit of 0 switches that budget off.
    """

    def __init__(self, app, limit_per_minute: int = 100, write_limit_per_minute: int = 30):
        super().__init__(app)
        self.limit = limit_per_minute
        self.write_limit = write_limit_per_minute
        # (ip, bucket) -> [timestamp1, timestamp2, ...]
        self.requests = defaultdict(list)

    def _window(self, key, now: float) -> list:
        self.requests[key] = [t for t in self.requests[key] if now - t < 60]
        return self.requests[key]

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        checks = [("all", self.limit)]
        if request.method in WRITE_METHODS:
            checks.append(("write", self.write_limit))

        for bucket, limit in checks:
            if limit <= 0:
                continue
            if len(self._window((client_ip, bucket), now)) >= limit:
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too many requests. Please try again later."}
                )

        for bucket, limit in checks:
            if limit > 0:
                self.requests[(client_ip, bucket)].append(now)

        return await call_next(request)
