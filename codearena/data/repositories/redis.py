from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from codearena.config import Config, logger
from codearena.errors import DatabaseException

redis_logger = logger.getChild("redis")


class RedisClient:
    """A singleton Redis client for the token blocklist and rate limiting."""

    _instance = None

    def __new__(cls, *args, **kwargs):
        if not cls._instance:
            cls._instance = super(RedisClient, cls).__new__(cls)
            cls._instance.redis = None
        return cls._instance

    def __init__(self):
        self.JTI_EXPIRY = max(Config.JWT_ACCESS_TOKEN_EXPIRY, Config.JWT_REFRESH_TOKEN_EXPIRY)

    async def connect(self) -> Redis:
        if self.redis is None:
            self.redis = Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=0,
                password=Config.REDIS_PASSWORD or None,
                decode_responses=True,
            )
        return self.redis

    async def close(self):
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def incr_with_expiry(self, name: str, window: int) -> int:
        """Increment a counter, starting its expiry window on first use."""
        redis = await self.connect()
        try:
            count = await redis.incr(name)
            if count == 1:
                await redis.expire(name, window)
            return count
        except RedisError as e:
            redis_logger.error(f"Redis INCR failed for {name}: {str(e)}")
            raise DatabaseException(detail=f"Redis operation failed: {str(e)}")

    async def add_jti_to_blocklist(self, jti: str, expiry: Optional[int] = None) -> None:
        redis = await self.connect()
        try:
            await redis.setex(
                name=f"jti:{jti}", time=expiry or self.JTI_EXPIRY, value="revoked"
            )
        except RedisError as e:
            redis_logger.error(f"Failed to blocklist token {jti}: {str(e)}")
            raise DatabaseException(detail=f"Redis operation failed: {str(e)}")

    async def token_in_blocklist(self, jti: str) -> bool:
        redis = await self.connect()
        try:
            return bool(await redis.exists(f"jti:{jti}"))
        except RedisError as e:
            redis_logger.error(f"Failed to check token {jti}: {str(e)}")
            raise DatabaseException(detail=f"Redis operation failed: {str(e)}")


redis_client = RedisClient()


async def get_redis_client() -> RedisClient:
    """Dependency returning the shared Redis client."""
    return redis_client
