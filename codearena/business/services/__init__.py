from .auth import UserService, generate_tokens_for_user, get_user_service
from .auth_dependency import (AccessTokenFromCookie, RefreshTokenFromCookie,
                              TokenFromCookie, get_current_user,
                              get_optional_user, require_admin)
from .auth_util import (create_access_token, create_refresh_token,
                        decode_token, generate_password_hash,
                        seconds_until_expiry, verify_password)
from .chat import ChatService, get_chat_model_factory
from .contest import ContestService
from .discussion import DiscussionService
from .problem import ProblemService
from .submission import SubmissionService
from .video import VideoService

__all__ = [
    "UserService",
    "generate_tokens_for_user",
    "get_user_service",
    "generate_password_hash",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "seconds_until_expiry",
    "TokenFromCookie",
    "AccessTokenFromCookie",
    "RefreshTokenFromCookie",
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "ChatService",
    "get_chat_model_factory",
    "ContestService",
    "DiscussionService",
    "ProblemService",
    "SubmissionService",
    "VideoService",
]
