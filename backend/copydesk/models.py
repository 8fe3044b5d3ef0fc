import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import EmailStr
from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


# Shared properties
class UserBase(SQLModel):
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    is_active: bool = True
    full_name: str | None = Field(default=None, max_length=255)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)


class UserRegister(SQLModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)
    full_name: str | None = Field(default=None, max_length=255)


class UserUpdateMe(SQLModel):
    full_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = Field(default=None, max_length=255)


# Database model, database table inferred from class name
class User(UserBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    hashed_password: str
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    business_profiles: list["BusinessProfile"] = Relationship(
        back_populates="owner", cascade_delete=True
    )
    chats: list["Chat"] = Relationship(back_populates="owner", cascade_delete=True)


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: uuid.UUID
    created_at: datetime | None = None


# Generic message
class Message(SQLModel):
    message: str


# JSON payload containing access token
class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = None


# Business profiles

class BusinessProfileBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    industry: str | None = Field(default=None, max_length=255)
    target_audience: str | None = Field(default=None)
    unique_value_proposition: str | None = Field(default=None)
    pain_points: str | None = Field(default=None)
    brand_voice: str | None = Field(default=None)


class BusinessProfileCreate(BusinessProfileBase):
    is_default: bool = False


class BusinessProfileUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    industry: str | None = Field(default=None, max_length=255)
    target_audience: str | None = None
    unique_value_proposition: str | None = None
    pain_points: str | None = None
    brand_voice: str | None = None
    is_default: bool | None = None


class BusinessProfile(BusinessProfileBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    is_default: bool = Field(default=False, index=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    owner_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True
    )
    owner: User | None = Relationship(back_populates="business_profiles")


class BusinessProfilePublic(BusinessProfileBase):
    id: uuid.UUID
    owner_id: uuid.UUID
    is_default: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Chats

class ChatBase(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    framework: str = Field(default="aida", max_length=100)
    business_profile_id: uuid.UUID | None = Field(default=None)


class ChatCreate(ChatBase):
    pass


class ChatUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    framework: str | None = Field(default=None, max_length=100)
    business_profile_id: uuid.UUID | None = None
    archived: bool | None = None


class Chat(ChatBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    business_profile_id: uuid.UUID | None = Field(
        default=None, foreign_key="businessprofile.id", ondelete="SET NULL"
    )
    archived: bool = Field(default=False)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    owner_id: uuid.UUID = Field(
        foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True
    )
    owner: User | None = Relationship(back_populates="chats")
    business_profile: BusinessProfile | None = Relationship()
    messages: list["ChatMessage"] = Relationship(back_populates="chat", cascade_delete=True)


class ChatPublic(ChatBase):
    id: uuid.UUID
    owner_id: uuid.UUID
    archived: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChatsPublic(SQLModel):
    data: list[ChatPublic]
    count: int


# Chat messages

class ChatMessageBase(SQLModel):
    role: str = Field(max_length=20)  # user, assistant
    content: str


class ChatMessageCreate(SQLModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class ChatMessage(ChatMessageBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        index=True,
    )
    chat_id: uuid.UUID = Field(
        foreign_key="chat.id", nullable=False, ondelete="CASCADE", index=True
    )
    chat: Chat | None = Relationship(back_populates="messages")


class ChatMessagePublic(ChatMessageBase):
    id: uuid.UUID
    chat_id: uuid.UUID
    created_at: datetime | None = None


class ChatWithMessages(ChatPublic):
    business_profile: BusinessProfilePublic | None = None
    messages: list[ChatMessagePublic]
