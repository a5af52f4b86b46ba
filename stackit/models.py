from datetime import datetime, timezone
import enum

from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime,
    UniqueConstraint, Index,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy import select
from sqlalchemy.orm import column_property, relationship

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VoteDirection(str, enum.Enum):
    up = "up"
    down = "down"


class NotificationType(str, enum.Enum):
    answer = "answer"
    comment = "comment"
    mention = "mention"
    vote = "vote"
    accept = "accept"


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(64), unique=True, index=True, nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    reputation = Column(Integer, default=0, nullable=False)  # kept for display, nothing updates it
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


# ---------------------------
# VOTE LEDGER ROWS
# ---------------------------
# One row per (entity, voter). The primary key keeps a voter in at most one
# of the up/down sets; the row doubles as the voter's history entry.
class AnswerVote(Base):
    __tablename__ = "answer_vote"

    answer_id = Column(Integer, ForeignKey("answer.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True, index=True)
    direction = Column(SAEnum(VoteDirection), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class CommentVote(Base):
    __tablename__ = "comment_vote"

    comment_id = Column(Integer, ForeignKey("comment.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True, index=True)
    direction = Column(SAEnum(VoteDirection), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class VotableMixin:
    """Up/down voter sets derived from the loaded ``votes`` collection."""

    @property
    def upvoters(self) -> set[int]:
        return {v.user_id for v in self.votes if v.direction == VoteDirection.up}

    @property
    def downvoters(self) -> set[int]:
        return {v.user_id for v in self.votes if v.direction == VoteDirection.down}

    def tally(self) -> int:
        return len(self.upvoters) - len(self.downvoters)

    def vote_of(self, user_id: int | None) -> VoteDirection | None:
        if user_id is None:
            return None
        for v in self.votes:
            if v.user_id == user_id:
                return v.direction
        return None


# ---------------------------
# QUESTIONS
# ---------------------------
TAG_MAX_LENGTH = 50


class QuestionTag(Base):
    __tablename__ = "question_tag"

    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("question.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(TAG_MAX_LENGTH), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("question_id", "name", name="uq_question_tag_name"),)


class Question(Base):
    __tablename__ = "question"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", lazy="joined")
    tag_links = relationship(
        "QuestionTag",
        order_by="QuestionTag.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [t.name for t in self.tag_links]


# ---------------------------
# ANSWERS
# ---------------------------
class Answer(VotableMixin, Base):
    __tablename__ = "answer"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("question.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, default=0, nullable=False)
    is_accepted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", lazy="joined")
    votes = relationship(
        "AnswerVote",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


# ---------------------------
# COMMENTS
# ---------------------------
COMMENT_MAX_LENGTH = 500


class Comment(VotableMixin, Base):
    __tablename__ = "comment"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(String(COMMENT_MAX_LENGTH), nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    answer_id = Column(Integer, ForeignKey("answer.id", ondelete="CASCADE"), nullable=False, index=True)
    # denormalised so a question page can fetch its comments directly
    question_id = Column(Integer, ForeignKey("question.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", lazy="joined")
    votes = relationship(
        "CommentVote",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


# ---------------------------
# NOTIFICATIONS
# ---------------------------
class Notification(Base):
    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    type = Column(SAEnum(NotificationType), nullable=False)
    question_id = Column(Integer, ForeignKey("question.id", ondelete="SET NULL"), nullable=True)
    answer_id = Column(Integer, ForeignKey("answer.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    link = Column(String(512), nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id], lazy="joined")
    # NULL once the question is deleted
    question_title = column_property(
        select(Question.title).where(Question.id == question_id).correlate_except(Question).scalar_subquery(),
        expire_on_flush=False,
    )

    __table_args__ = (
        Index("ix_notification_recipient_read_created", "recipient_id", "read", "created_at"),
    )
