from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from codearena.config import logger
from codearena.data.repositories.redis import get_redis_client

rate_limit_logger = logger.getChild("rate_limit")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware to restrict requests per client."""

    def __init__(self, app, limit: int = 100, window: int = 60):
        super().__init__(app)
        self.limit = limit  # Max requests per window
        self.window = window  # Window in seconds

    async def dispatch(self, request: Request, call_next):
        redis = await get_redis_client()
        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{client_ip}"

        current_count = await redis.incr_with_expiry(key, self.window)
        if current_count > self.limit:
            rate_limit_logger.warning(f"Rate limit exceeded for {client_ip}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded"}
            )

        return await call_next(request)
