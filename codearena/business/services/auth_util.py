import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from codearena.config import Config

passwd_context = CryptContext(schemes=["bcrypt"])


def generate_password_hash(password: str) -> str:
    return passwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return passwd_context.verify(password, password_hash)


def create_access_token(user_data: dict, expiry: Optional[timedelta] = None) -> str:
    payload = {
        "user": user_data,
        "exp": datetime.now(timezone.utc)
        + (expiry or timedelta(seconds=Config.JWT_ACCESS_TOKEN_EXPIRY)),
        "jti": str(uuid.uuid4()),
        "is_refresh": False,
    }

    return encode_token(payload)


def create_refresh_token(user_data: dict, expiry: Optional[timedelta] = None) -> str:
    payload = {
        "user": user_data,
        "exp": datetime.now(timezone.utc)
        + (expiry or timedelta(seconds=Config.JWT_REFRESH_TOKEN_EXPIRY)),
        "jti": str(uuid.uuid4()),
        "is_refresh": True,
    }

    return encode_token(payload)


def encode_token(payload):
    return jwt.encode(
        payload=payload, key=Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[Any]:
    try:
        token_data = jwt.decode(
            jwt=token, key=Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM]
        )
        return token_data

    except jwt.PyJWTError as _:
        return None


def token_user_data(user) -> dict:
    """Claims carried under the `user` key of every token."""
    return {"id": str(user.id), "email_id": user.email_id, "role": user.role.value}


def seconds_until_expiry(token_data: dict) -> int:
    """Remaining token lifetime, used as the blocklist entry TTL."""
    remaining = int(token_data.get("exp", 0) - datetime.now(timezone.utc).timestamp())
    return max(remaining, 1)
