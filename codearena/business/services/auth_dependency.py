import uuid
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.auth_util import decode_token
from codearena.config import logger
from codearena.data.repositories import RedisClient, get_redis_client, get_session
from codearena.data.repositories.user_repository import get_user_by_id
from codearena.data.schemas import User, UserRole
from codearena.errors import AuthenticationException, AuthorizationException

auth_logger = logger.getChild("auth")


def _token_from_request(request: Request, cookie_name: str) -> Optional[str]:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


class TokenFromCookie:
    """
    Reads and validates a JWT from a cookie, falling back to a Bearer header.

    Rejects missing, undecodable, wrong-kind and blocklisted tokens.
    """

    def __init__(self, cookie_name: str = "access_token", refresh: bool = False):
        self.cookie_name = cookie_name
        self.refresh = refresh

    async def __call__(
        self,
        request: Request,
        redis: RedisClient = Depends(get_redis_client),
    ) -> dict:
        token = _token_from_request(request, self.cookie_name)
        if not token:
            raise AuthenticationException(detail="Token is not present")

        token_data = decode_token(token)
        if not token_data:
            raise AuthenticationException(detail="Invalid or expired token")

        if bool(token_data.get("is_refresh")) != self.refresh:
            kind = "refresh" if self.refresh else "access"
            raise AuthenticationException(detail=f"Please provide a valid {kind} token")

        if await redis.token_in_blocklist(token_data["jti"]):
            auth_logger.warning(f"Blocklisted token used: {token_data['jti']}")
            raise AuthenticationException(detail="Token has been revoked")

        return token_data


AccessTokenFromCookie = TokenFromCookie


class RefreshTokenFromCookie(TokenFromCookie):
    def __init__(self):
        super().__init__(cookie_name="refresh_token", refresh=True)


async def get_current_user(
    token_data: dict = Depends(AccessTokenFromCookie()),
    session: AsyncSession = Depends(get_session),
) -> User:
    try:
        user_id = uuid.UUID(token_data["user"]["id"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationException(detail="Could not validate user")

    user = await get_user_by_id(session, user_id)
    if not user:
        raise AuthenticationException(detail="User not found")
    return user


async def get_optional_user(
    request: Request,
    redis: RedisClient = Depends(get_redis_client),
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """The caller if a valid access token is present, otherwise None."""
    token = _token_from_request(request, "access_token")
    if not token:
        return None
    token_data = decode_token(token)
    if not token_data or token_data.get("is_refresh"):
        return None
    if await redis.token_in_blocklist(token_data["jti"]):
        return None
    try:
        user_id = uuid.UUID(token_data["user"]["id"])
    except (KeyError, TypeError, ValueError):
        return None
    return await get_user_by_id(session, user_id)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        auth_logger.warning(f"Non-admin user {user.id} attempted an admin action")
        raise AuthorizationException(detail="Admin access required")
    return user
