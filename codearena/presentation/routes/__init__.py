from .auth import auth_router
from .chat import chat_router
from .contest import contest_router
from .discussion import discussion_router
from .problem import problem_router
from .profile import router as profile_router
from .standing import router as standing_router
from .submission import submission_router
from .video import video_router

__all__ = [
    "auth_router",
    "chat_router",
    "contest_router",
    "discussion_router",
    "problem_router",
    "profile_router",
    "standing_router",
    "submission_router",
    "video_router",
]
