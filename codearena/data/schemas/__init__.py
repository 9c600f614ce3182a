from .base import BaseModel, to_naive_utc, utcnow
from .enums import (
    ContestDifficulty,
    ContestStatus,
    Difficulty,
    LeaderboardFilter,
    ReactionKind,
    SubmissionStatus,
    TimeRange,
    UserRole,
)
from .user import SolvedProblem, User
from .auth import (
    AdminUserCreateModel,
    AuthResponse,
    ProfilePicResponse,
    UserBase,
    UserBaseResponse,
    UserCreateModel,
    UserLoginModel,
    UserResponseModel,
    UserSummary,
)
from .problem import (
    ContestProblemView,
    HiddenTestCase,
    Problem,
    ProblemAdminResponse,
    ProblemCreate,
    ProblemResponse,
    ProblemSummary,
    ProblemUpdate,
    ReferenceSolution,
    StartCode,
    VisibleTestCase,
)
from .submission import (
    CaseResult,
    ContestSubmitResponse,
    JudgeVerdict,
    RunResponse,
    Submission,
    SubmissionCreate,
    SubmissionPage,
    SubmissionResponse,
    SubmitResponse,
)
from .contest import (
    Contest,
    ContestCreate,
    ContestDetail,
    ContestDetailResponse,
    ContestLeaderboardResponse,
    ContestListItem,
    ContestMutationResponse,
    ContestPage,
    ContestParticipant,
    ContestProblem,
    ContestProblemAttempt,
    ContestProblemEntry,
    ContestProblemInput,
    ContestProblemResponse,
    ContestProblemsInfo,
    ContestProblemsResponse,
    ContestResponse,
    ContestStats,
    ContestStatsResponse,
    ContestUpdate,
    LeaderboardEntry,
    MyContestsResponse,
    ParticipantResponse,
    ParticipantsResponse,
    ProblemSolvedStat,
    RegistrationResponse,
    TimeRemaining,
    TopPerformer,
    UserContestStats,
)
from .discussion import (
    Discussion,
    DiscussionCreate,
    DiscussionReaction,
    DiscussionReply,
    DiscussionResponse,
    ReplyCreate,
    ReplyResponse,
)
from .video import (
    SolutionVideo,
    UploadSignature,
    VideoMetadataCreate,
    VideoSaveResponse,
    VideoSummary,
)
from .standing import StandingEntry, StandingResponse
from .profile import (
    ContributionCalendar,
    ContributionCalendarEntry,
    ProfileSummary,
    SubmissionHistory,
    TopicStatEntry,
    TopicStats,
)
from .chat import ChatMessage, ChatPart, ChatRequest, ChatResponse

__all__ = [
    "BaseModel",
    "utcnow",
    "to_naive_utc",
    "UserRole",
    "Difficulty",
    "ContestDifficulty",
    "ContestStatus",
    "SubmissionStatus",
    "ReactionKind",
    "TimeRange",
    "LeaderboardFilter",
    "User",
    "SolvedProblem",
    "UserBase",
    "UserCreateModel",
    "AdminUserCreateModel",
    "UserLoginModel",
    "UserBaseResponse",
    "UserResponseModel",
    "UserSummary",
    "AuthResponse",
    "ProfilePicResponse",
    "Problem",
    "ProblemCreate",
    "ProblemUpdate",
    "ProblemSummary",
    "ProblemResponse",
    "ProblemAdminResponse",
    "ContestProblemView",
    "VisibleTestCase",
    "HiddenTestCase",
    "StartCode",
    "ReferenceSolution",
    "Submission",
    "SubmissionCreate",
    "CaseResult",
    "JudgeVerdict",
    "RunResponse",
    "SubmitResponse",
    "ContestSubmitResponse",
    "SubmissionResponse",
    "SubmissionPage",
    "Contest",
    "ContestProblem",
    "ContestParticipant",
    "ContestProblemAttempt",
    "ContestCreate",
    "ContestUpdate",
    "ContestProblemInput",
    "ContestResponse",
    "ContestListItem",
    "ContestPage",
    "ContestDetail",
    "ContestDetailResponse",
    "ContestMutationResponse",
    "ContestProblemEntry",
    "ContestProblemsInfo",
    "ContestProblemsResponse",
    "ContestProblemResponse",
    "ContestLeaderboardResponse",
    "ContestStats",
    "ContestStatsResponse",
    "LeaderboardEntry",
    "MyContestsResponse",
    "ParticipantResponse",
    "ParticipantsResponse",
    "ProblemSolvedStat",
    "RegistrationResponse",
    "TimeRemaining",
    "TopPerformer",
    "UserContestStats",
    "Discussion",
    "DiscussionReply",
    "DiscussionReaction",
    "DiscussionCreate",
    "DiscussionResponse",
    "ReplyCreate",
    "ReplyResponse",
    "SolutionVideo",
    "UploadSignature",
    "VideoMetadataCreate",
    "VideoSaveResponse",
    "VideoSummary",
    "StandingEntry",
    "StandingResponse",
    "SubmissionHistory",
    "ContributionCalendar",
    "ContributionCalendarEntry",
    "TopicStatEntry",
    "TopicStats",
    "ProfileSummary",
    "ChatMessage",
    "ChatPart",
    "ChatRequest",
    "ChatResponse",
]
