from typing import Optional, Tuple

from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import UUID4
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services.auth_util import (
    create_access_token,
    create_refresh_token,
    generate_password_hash,
    token_user_data,
)
from codearena.config import Config, logger
from codearena.data.repositories import get_session, user_repository
from codearena.data.repositories.s3 import upload_profile_pic
from codearena.data.schemas import User, UserCreateModel, UserRole, utcnow
from codearena.errors import BadRequestException, ConflictException

user_logger = logger.getChild("user_service")

PROFILE_PIC_TYPES = {"image/jpeg": "jpg", "image/png": "png"}


class UserService:
    @staticmethod
    async def get_user_by_id(user_id: UUID4, session: AsyncSession) -> Optional[User]:
        return await user_repository.get_user_by_id(session, user_id)

    @staticmethod
    async def get_user_by_email(email_id: str, session: AsyncSession) -> Optional[User]:
        return await user_repository.get_user_by_email(session, email_id)

    @staticmethod
    async def create_user(
        user_data: UserCreateModel,
        session: AsyncSession,
        role: UserRole = UserRole.USER,
    ) -> User:
        if await user_repository.get_user_by_email(session, user_data.email_id):
            user_logger.warning(f"Email already registered: {user_data.email_id}")
            raise ConflictException(detail="User with this email already exists")

        user_data_dict = user_data.model_dump(exclude={"password", "role"})
        new_user = User(
            **user_data_dict,
            password_hash=generate_password_hash(user_data.password),
            role=role,
        )
        return await user_repository.create_user(session, new_user)

    @staticmethod
    async def update_refresh_token(
        user: User, refresh_token: Optional[str], session: AsyncSession
    ) -> None:
        user.refresh_token = refresh_token
        await user_repository.save_user(session, user)

    @staticmethod
    async def update_profile_pic(
        user: User,
        content: bytes,
        content_type: Optional[str],
        session: AsyncSession,
        s3_client,
    ) -> User:
        extension = PROFILE_PIC_TYPES.get(content_type or "")
        if extension is None:
            raise BadRequestException(detail="Only JPEG and PNG images are allowed")
        if not content:
            raise BadRequestException(detail="No file uploaded")
        if len(content) > Config.PROFILE_PIC_MAX_SIZE:
            raise BadRequestException(detail="File size must be less than 5MB")

        object_key = f"profile_pics/{user.id}_{int(utcnow().timestamp())}.{extension}"
        user.profile_pic = await run_in_threadpool(
            upload_profile_pic, s3_client, object_key, content, content_type
        )
        user.updated_at = utcnow()
        user_logger.info(f"Profile picture updated for user {user.id}")
        return await user_repository.save_user(session, user)

    @staticmethod
    async def delete_user(user: User, session: AsyncSession) -> None:
        await user_repository.delete_user(session, user)


def generate_tokens_for_user(user: User) -> Tuple[str, str]:
    user_data = token_user_data(user)
    return create_access_token(user_data), create_refresh_token(user_data)


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService()
