import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from codearena.data.schemas.enums import UserRole


class UserBase(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=20, examples=["Ada"])
    last_name: Optional[str] = Field(None, max_length=20, examples=["Lovelace"])
    email_id: EmailStr = Field(..., examples=["ada@example.com"])

    @field_validator("email_id")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UserCreateModel(UserBase):
    password: str = Field(
        ...,
        min_length=8,
        max_length=64,
        examples=["Str0ngP@ss!"],
        description="Must contain at least 8 characters with mix of letters, numbers and symbols",
    )

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        checks = (
            any(c.islower() for c in value),
            any(c.isupper() for c in value),
            any(c.isdigit() for c in value),
        )
        if not all(checks):
            raise ValueError(
                "Password must contain upper-case, lower-case letters and digits"
            )
        return value


class AdminUserCreateModel(UserCreateModel):
    role: UserRole = UserRole.USER


class UserLoginModel(BaseModel):
    email_id: EmailStr = Field(..., examples=["ada@example.com"])
    password: str = Field(..., min_length=1, max_length=64)

    @field_validator("email_id")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UserBaseResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    email_id: str
    role: UserRole

    model_config = {"from_attributes": True}


class UserResponseModel(UserBaseResponse):
    last_name: Optional[str] = None
    profile_pic: Optional[str] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserResponseModel
    message: str


class UserSummary(BaseModel):
    """Public author/participant view of a user."""

    id: uuid.UUID
    first_name: str
    last_name: Optional[str] = None
    profile_pic: Optional[str] = None

    model_config = {"from_attributes": True}


class ProfilePicResponse(BaseModel):
    success: bool
    image_url: str
    user: UserResponseModel
