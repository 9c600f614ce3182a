import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from codearena.data.schemas.base import BaseModel, UTCDateTime, utcnow
from codearena.data.schemas.enums import UserRole


class User(BaseModel, table=True):
    """Database model for a user."""

    __tablename__ = "users"

    first_name: str = Field(sa_column=Column(String(20), nullable=False))
    last_name: Optional[str] = Field(
        default=None, sa_column=Column(String(20), nullable=True)
    )
    email_id: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
        description="Login identifier, stored lower-cased.",
    )
    password_hash: str = Field(
        sa_column=Column(String(256), nullable=False),
        exclude=True,
        description="Hashed user password.",
    )
    role: UserRole = Field(default=UserRole.USER)
    profile_pic: Optional[str] = Field(
        default=None, sa_column=Column(String(500), nullable=True)
    )
    refresh_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        exclude=True,
        description="JWT refresh token for the user.",
    )


class SolvedProblem(SQLModel, table=True):
    """A problem the user has had at least one accepted submission for."""

    __tablename__ = "solved_problems"
    __table_args__ = (UniqueConstraint("user_id", "problem_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    problem_id: uuid.UUID = Field(foreign_key="problems.id", ondelete="CASCADE")
    solved_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
