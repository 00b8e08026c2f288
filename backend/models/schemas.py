from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from repositories.db_models import (
    BookingStatus,
    FileVisibility,
    GroupMemberRole,
    GroupType,
    ReportAction,
    ReportStatus,
    ReportTargetType,
    UserRole,
    VoteType,
)


# Auth Schemas
class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    email: Optional[str] = None


# User Schemas
class UserSummary(BaseModel):
    """Public projection of a user embedded in other resources."""

    id: int
    first_name: str
    last_name: str
    profile_image_url: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class User(UserSummary):
    email: EmailStr
    grade: Optional[str] = None
    interests: List[str] = []
    bio: Optional[str] = None
    verified: bool
    blocked: bool
    created_at: datetime


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    role: UserRole = UserRole.STUDENT
    teacher_code: Optional[str] = None
    grade: Optional[str] = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def no_self_service_admin(cls, v: UserRole) -> UserRole:
        if v == UserRole.ADMIN:
            raise ValueError("role must be 'student' or 'teacher'")
        return v


class AuthResponse(Token):
    user: User


class UserProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    grade: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = Field(None, max_length=2000)
    interests: Optional[List[str]] = None
    profile_image_url: Optional[str] = None


class UserRoleUpdate(BaseModel):
    role: UserRole


# Event Schemas
class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    subject: Optional[str] = Field(None, max_length=100)
    start_time: datetime
    end_time: datetime
    location_url: Optional[str] = None
    image_url: Optional[str] = None
    max_participants: Optional[int] = Field(
        None, ge=1, description="Capacity; null means unlimited"
    )


class EventCreate(EventBase):
    pass


class PostToEvent(BaseModel):
    """Fields supplied when turning a post into an event.

    The post content becomes the description unless one is given.
    """

    title: str = Field(..., min_length=1, max_length=255)
    subject: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    start_time: datetime
    end_time: datetime
    location_url: Optional[str] = None
    image_url: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=1)


class Event(EventBase):
    id: int
    host_id: int
    host: UserSummary
    participant_count: int = 0
    is_full: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventParticipant(BaseModel):
    event_id: int
    user_id: int
    status: BookingStatus
    booked_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingResult(BaseModel):
    success: bool = True
    participant_count: int


class CancelBookingResult(BaseModel):
    success: bool = True


# Post Schemas
class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    media: List[str] = []


class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    pinned: Optional[bool] = None


class Post(BaseModel):
    id: int
    author_id: int
    group_id: Optional[int] = None
    content: str
    media: List[str] = []
    pinned: bool
    created_at: datetime
    updated_at: datetime
    author: UserSummary
    comment_count: int = 0
    reaction_count: int = 0
    user_has_reacted: bool = False

    model_config = ConfigDict(from_attributes=True)


class ReactionToggleResult(BaseModel):
    reacted: bool
    reaction_count: int


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class Comment(BaseModel):
    id: int
    post_id: int
    author_id: int
    content: str
    created_at: datetime
    author: UserSummary

    model_config = ConfigDict(from_attributes=True)


# Group Schemas
class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    type: GroupType
    grade: Optional[str] = Field(None, max_length=50)
    cover_image_url: Optional[str] = None


class Group(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    type: GroupType
    grade: Optional[str] = None
    cover_image_url: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    member_count: int = 0
    post_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class GroupMember(BaseModel):
    user: UserSummary
    role: GroupMemberRole
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    id: int
    group_id: int
    sender_id: int
    content: str
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_at: datetime
    sender: UserSummary

    model_config = ConfigDict(from_attributes=True)


# Q&A Schemas
class QuestionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=5000)


class AnswerCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class QaVoteCreate(BaseModel):
    vote_type: VoteType


class QaVoteResult(BaseModel):
    """Score after a vote, and the caller's vote (None once withdrawn)."""

    score: int
    user_vote: Optional[VoteType] = None


class Answer(BaseModel):
    id: int
    question_id: int
    author_id: int
    content: str
    created_at: datetime
    author: UserSummary
    score: int = 0
    user_vote: Optional[VoteType] = None

    model_config = ConfigDict(from_attributes=True)


class Question(BaseModel):
    id: int
    group_id: int
    author_id: int
    title: str
    content: str
    created_at: datetime
    author: UserSummary
    score: int = 0
    user_vote: Optional[VoteType] = None
    answers: List[Answer] = []

    model_config = ConfigDict(from_attributes=True)


# Library Schemas
class LibraryFile(BaseModel):
    id: int
    uploader_id: int
    file_name: str
    file_url: str
    file_type: str
    file_size: int
    subject: Optional[str] = None
    description: Optional[str] = None
    visibility: FileVisibility
    group_id: Optional[int] = None
    download_count: int
    approved: bool
    created_at: datetime
    uploader: UserSummary

    model_config = ConfigDict(from_attributes=True)


# Badge and Recognition Schemas
class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    icon_url: Optional[str] = None
    color: Optional[str] = Field(None, max_length=50)


class Badge(BadgeCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserBadge(BaseModel):
    id: int
    user_id: int
    badge: Badge
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecognitionCreate(BaseModel):
    recipient_id: int
    content: str = Field(..., min_length=1, max_length=2000)
    image_url: Optional[str] = None


class Recognition(BaseModel):
    id: int
    created_by: int
    recipient_id: int
    content: str
    image_url: Optional[str] = None
    created_at: datetime
    author: UserSummary
    recipient: UserSummary

    model_config = ConfigDict(from_attributes=True)


# Moderation Schemas
class ReportCreate(BaseModel):
    target_type: ReportTargetType
    target_id: int
    reason: str = Field(..., min_length=1, max_length=2000)


class Report(BaseModel):
    id: int
    reporter_id: int
    target_type: ReportTargetType
    target_id: int
    reason: str
    status: ReportStatus
    reviewed_by: Optional[int] = None
    review_notes: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None
    reporter: UserSummary

    model_config = ConfigDict(from_attributes=True)


class ReportResolve(BaseModel):
    action: ReportAction
    notes: Optional[str] = Field(None, max_length=2000)


# Notification Schemas
class Notification(BaseModel):
    id: int
    type: str
    title: str
    message: str
    related_id: Optional[int] = None
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnreadCount(BaseModel):
    count: int


class NotificationPreferences(BaseModel):
    email_new_post: bool = True
    email_new_answer: bool = True
    email_new_comment: bool = True
    email_new_message: bool = True
    push_enabled: bool = False
    push_new_post: bool = False
    push_new_answer: bool = False
    push_new_message: bool = False

    model_config = ConfigDict(from_attributes=True)


class NotificationPreferencesUpdate(BaseModel):
    email_new_post: Optional[bool] = None
    email_new_answer: Optional[bool] = None
    email_new_comment: Optional[bool] = None
    email_new_message: Optional[bool] = None
    push_enabled: Optional[bool] = None
    push_new_post: Optional[bool] = None
    push_new_answer: Optional[bool] = None
    push_new_message: Optional[bool] = None


# Stats Schemas
class AdminStats(BaseModel):
    total_users: int
    pending_verifications: int
    total_posts: int
    pending_reports: int
    pending_files: int


class PublicStats(BaseModel):
    total_users: int
    total_posts: int
    total_groups: int
    total_events: int
