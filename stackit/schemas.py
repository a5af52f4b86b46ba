from datetime import datetime
from typing import Any, List, Optional

from fastapi_users import schemas
from pydantic import BaseModel, EmailStr, Field


# =========================
# USER SCHEMAS
# =========================
class UserRead(schemas.BaseUser[int]):
    username: str
    reputation: int = 0
    created_at: Optional[datetime] = None


class UserCreate(schemas.BaseUserCreate):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^\w+$")


class UserUpdate(schemas.BaseUserUpdate):
    pass


class UserSummary(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


class UserProfileRead(BaseModel):
    id: int
    username: str
    reputation: int
    created_at: datetime
    question_count: int
    answer_count: int


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^\w+$")
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email_or_username: str
    password: str


class AuthTokenRead(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


# =========================
# QUESTION SCHEMAS
# =========================
class QuestionCreate(BaseModel):
    title: str = Field(..., max_length=300)
    description: str
    tags: List[str] = []


class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class QuestionRead(BaseModel):
    id: int
    title: str
    description: str
    tags: List[str] = []
    user: UserSummary
    answer_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# =========================
# ANSWER SCHEMAS
# =========================
class AnswerCreate(BaseModel):
    content: str


class AnswerUpdate(BaseModel):
    content: str


class AnswerRead(BaseModel):
    id: int
    content: str
    question_id: int
    user: UserSummary
    score: int
    is_accepted: bool
    upvoters: List[int] = []
    downvoters: List[int] = []
    user_vote: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class QuestionDetail(QuestionRead):
    answers: List[AnswerRead] = []


class VoteRequest(BaseModel):
    # "up"/"down" or 1/-1, passed through raw and parsed by the vote ledger
    vote_type: Any = None


# =========================
# COMMENT SCHEMAS
# =========================
class CommentCreate(BaseModel):
    content: str
    answer_id: int
    question_id: int


class CommentUpdate(BaseModel):
    content: str


class CommentRead(BaseModel):
    id: int
    content: str
    answer_id: int
    question_id: int
    user: UserSummary
    score: int
    user_vote: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CommentVoteRead(BaseModel):
    votes: int
    user_vote: Optional[str] = None


# =========================
# NOTIFICATION SCHEMAS
# =========================
class NotificationRead(BaseModel):
    id: int
    type: str
    content: str
    link: str
    read: bool
    question_id: Optional[int] = None
    question_title: Optional[str] = None
    answer_id: Optional[int] = None
    sender: UserSummary
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCount(BaseModel):
    count: int


# =========================
# TAG / VOTE HISTORY SCHEMAS
# =========================
class TagRead(BaseModel):
    name: str
    count: int
    last_used: Optional[datetime] = None


class VoteHistoryEntry(BaseModel):
    target: str  # "answer" | "comment"
    target_id: int
    vote_type: str
    created_at: datetime


class MessageRead(BaseModel):
    message: str
