import uuid

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from codearena.business.services import (
    AccessTokenFromCookie,
    RefreshTokenFromCookie,
    UserService,
    decode_token,
    generate_tokens_for_user,
    get_current_user,
    get_user_service,
    require_admin,
    seconds_until_expiry,
    verify_password,
)
from codearena.config import Config, logger
from codearena.data.repositories import RedisClient, get_redis_client, get_s3_client, get_session
from codearena.data.schemas import (
    AdminUserCreateModel,
    AuthResponse,
    ProfilePicResponse,
    User,
    UserCreateModel,
    UserLoginModel,
    UserResponseModel,
)
from codearena.errors import AuthenticationException

auth_logger = logger.getChild("auth")
auth_router = APIRouter(prefix="/user", tags=["user"])


@auth_router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a new user account, generates access and refresh tokens, and sets them as HTTP-only cookies.",
)
async def create_user(
    user_data: UserCreateModel,
    response: Response,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Registration attempt for email: {user_data.email_id}")
    new_user = await user_service.create_user(user_data, session)
    access_token, refresh_token = generate_tokens_for_user(new_user)
    await user_service.update_refresh_token(new_user, refresh_token, session)
    set_auth_cookies(response, access_token, refresh_token)
    auth_logger.info(f"User registered: {new_user.email_id} (ID: {new_user.id})")
    return AuthResponse(
        user=UserResponseModel.model_validate(new_user),
        message="Registered Successfully",
    )


@auth_router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in a user",
    description="Authenticates a user, generates access and refresh tokens, and sets them as HTTP-only cookies.",
)
async def login(
    login_data: UserLoginModel,
    response: Response,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Login attempt for email: {login_data.email_id}")
    user = await user_service.get_user_by_email(login_data.email_id, session)
    if not user or not verify_password(login_data.password, user.password_hash):
        auth_logger.warning(f"Invalid credentials for email: {login_data.email_id}")
        raise AuthenticationException(detail="Invalid credentials")

    access_token, refresh_token = generate_tokens_for_user(user)
    await user_service.update_refresh_token(user, refresh_token, session)
    set_auth_cookies(response, access_token, refresh_token)
    auth_logger.info(f"User logged in: {user.email_id} (ID: {user.id})")
    return AuthResponse(
        user=UserResponseModel.model_validate(user),
        message="Logged In Successfully",
    )


@auth_router.get(
    "/refresh",
    summary="Refresh JWT tokens",
    description="Refreshes access and refresh tokens using the refresh token cookie, adding the old token to a Redis blocklist.",
)
async def update_tokens(
    response: Response,
    token_details: dict = Depends(RefreshTokenFromCookie()),
    user_service: UserService = Depends(get_user_service),
    redis_client: RedisClient = Depends(get_redis_client),
    session: AsyncSession = Depends(get_session),
):
    user_id = token_details["user"]["id"]
    auth_logger.info(f"Token refresh attempt for user ID: {user_id}")
    user = await user_service.get_user_by_id(uuid.UUID(user_id), session)
    if not user:
        auth_logger.warning(f"User not found: ID {user_id}")
        raise AuthenticationException(detail="Invalid credentials")

    await redis_client.add_jti_to_blocklist(
        token_details["jti"], seconds_until_expiry(token_details)
    )
    access_token, refresh_token = generate_tokens_for_user(user)
    await user_service.update_refresh_token(user, refresh_token, session)
    set_auth_cookies(response, access_token, refresh_token)
    auth_logger.info(f"Tokens refreshed for user: {user.email_id} (ID: {user.id})")
    return {"message": "Tokens refreshed"}


@auth_router.get(
    "/check",
    response_model=AuthResponse,
    summary="Get current user",
    description="Returns the data of the currently authenticated user based on the access token.",
)
async def check_user(user: User = Depends(get_current_user)):
    return AuthResponse(user=UserResponseModel.model_validate(user), message="Valid User")


@auth_router.post(
    "/logout",
    summary="Log out a user",
    description="Adds access and refresh tokens to a Redis blocklist and deletes the cookies.",
)
async def revoke_token(
    request: Request,
    response: Response,
    access_token_details: dict = Depends(AccessTokenFromCookie()),
    user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
    redis_client: RedisClient = Depends(get_redis_client),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Logout attempt for user ID: {user.id}")
    await redis_client.add_jti_to_blocklist(
        access_token_details["jti"], seconds_until_expiry(access_token_details)
    )
    refresh_details = decode_token(request.cookies.get("refresh_token", ""))
    if refresh_details:
        await redis_client.add_jti_to_blocklist(
            refresh_details["jti"], seconds_until_expiry(refresh_details)
        )
    await user_service.update_refresh_token(user, None, session)
    clear_auth_cookies(response)
    auth_logger.info(f"User logged out: ID {user.id}")
    return {"message": "Logged out successfully"}


@auth_router.post(
    "/admin/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user as admin",
    description="Lets an admin create an account with any role. No cookies are set.",
)
async def admin_register(
    user_data: AdminUserCreateModel,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Admin {admin.id} registering {user_data.email_id} as {user_data.role.value}")
    new_user = await user_service.create_user(user_data, session, role=user_data.role)
    return AuthResponse(
        user=UserResponseModel.model_validate(new_user),
        message="Registered Successfully",
    )


@auth_router.delete(
    "/deleteProfile",
    summary="Delete the current user",
    description="Deletes the account with its submissions and revokes the current access token.",
)
async def delete_profile(
    response: Response,
    access_token_details: dict = Depends(AccessTokenFromCookie()),
    user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
    redis_client: RedisClient = Depends(get_redis_client),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Profile deletion for user ID: {user.id}")
    await user_service.delete_user(user, session)
    await redis_client.add_jti_to_blocklist(
        access_token_details["jti"], seconds_until_expiry(access_token_details)
    )
    clear_auth_cookies(response)
    return {"message": "Deleted Successfully"}


@auth_router.put(
    "/update-profile-pic",
    response_model=ProfilePicResponse,
    summary="Upload a profile picture",
    description="Stores a JPEG or PNG image of at most 5MB and saves its public URL on the user.",
)
async def update_profile_pic(
    profile_pic: UploadFile = File(...),
    user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
    s3_client=Depends(get_s3_client),
):
    content = await profile_pic.read()
    user = await user_service.update_profile_pic(
        user, content, profile_pic.content_type, session, s3_client
    )
    return ProfilePicResponse(
        success=True,
        image_url=user.profile_pic,
        user=UserResponseModel.model_validate(user),
    )


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    samesite = "none" if Config.COOKIE_SECURE else "lax"
    response.set_cookie(
        key="access_token",
        value=access_token,
        max_age=Config.JWT_ACCESS_TOKEN_EXPIRY,
        httponly=True,
        secure=Config.COOKIE_SECURE,
        samesite=samesite,
    )
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        max_age=Config.JWT_REFRESH_TOKEN_EXPIRY,
        httponly=True,
        secure=Config.COOKIE_SECURE,
        samesite=samesite,
    )


def clear_auth_cookies(response: Response) -> None:
    samesite = "none" if Config.COOKIE_SECURE else "lax"
    for key in ("access_token", "refresh_token"):
        response.delete_cookie(
            key=key, httponly=True, secure=Config.COOKIE_SECURE, samesite=samesite
        )
