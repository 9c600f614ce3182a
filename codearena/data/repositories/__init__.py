from .database import get_session, init_db
from .judge import JudgeClient, get_judge_client, get_language_id, normalize_language
from .redis import RedisClient, get_redis_client, redis_client
from .s3 import get_s3_client
from .user_repository import get_user_by_email, get_user_by_id, get_users_by_ids

__all__ = [
    "get_session",
    "init_db",
    "RedisClient",
    "redis_client",
    "get_redis_client",
    "get_s3_client",
    "JudgeClient",
    "get_judge_client",
    "get_language_id",
    "normalize_language",
    "get_user_by_id",
    "get_user_by_email",
    "get_users_by_ids",
]
