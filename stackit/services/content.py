# services/content.py
"""Question, answer and comment bookkeeping shared by the routers."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.errors import ForbiddenError, NotFoundError, ValidationError
from stackit.models import (
    COMMENT_MAX_LENGTH,
    Answer,
    AnswerVote,
    Comment,
    CommentVote,
    Notification,
    Question,
    QuestionTag,
    User,
    utcnow,
)
from stackit.settings.config import settings
from stackit.utils import clean_text, normalize_tag, normalize_tags

logger = logging.getLogger(__name__)


# ---------------------------
# Lookups
# ---------------------------
async def get_question_or_404(db: AsyncSession, question_id: int) -> Question:
    question = await db.get(Question, question_id)
    if question is None:
        raise NotFoundError("Question not found")
    return question


async def get_answer_or_404(db: AsyncSession, answer_id: int) -> Answer:
    answer = await db.get(Answer, answer_id)
    if answer is None:
        raise NotFoundError("Answer not found")
    return answer


async def get_comment_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def ensure_owner(entity, user_id: int, message: str = "Not authorized") -> None:
    if entity.user_id != user_id:
        raise ForbiddenError(message)


def _answer_count_col():
    return (
        select(func.count(Answer.id))
        .where(Answer.question_id == Question.id)
        .correlate(Question)
        .scalar_subquery()
        .label("answer_count")
    )


async def list_questions(
    db: AsyncSession,
    *,
    tag: Optional[str] = None,
    search: Optional[str] = None,
) -> list[tuple[Question, int]]:
    stmt = select(Question, _answer_count_col()).order_by(Question.created_at.desc(), Question.id.desc())
    if tag:
        wanted = normalize_tag(tag)
        if not wanted:
            return []
        stmt = stmt.where(
            Question.id.in_(select(QuestionTag.question_id).where(QuestionTag.name == wanted))
        )
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Question.title.ilike(like), Question.description.ilike(like)))
    rows = await db.execute(stmt)
    return [(q, count or 0) for q, count in rows.all()]


async def answer_count(db: AsyncSession, question_id: int) -> int:
    return await db.scalar(select(func.count(Answer.id)).where(Answer.question_id == question_id)) or 0


async def answers_for_question(db: AsyncSession, question_id: int) -> list[Answer]:
    rows = await db.execute(
        select(Answer)
        .where(Answer.question_id == question_id)
        .order_by(Answer.score.desc(), Answer.created_at.asc(), Answer.id.asc())
    )
    return list(rows.scalars().all())


async def comments_for_answer(db: AsyncSession, answer_id: int) -> list[Comment]:
    rows = await db.execute(
        select(Comment).where(Comment.answer_id == answer_id).order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return list(rows.scalars().all())


# ---------------------------
# Questions
# ---------------------------
def _set_tags(question: Question, raw: Iterable[str]) -> None:
    names = normalize_tags(raw)
    if len(names) > settings.MAX_TAGS_PER_QUESTION:
        raise ValidationError(f"A question can have at most {settings.MAX_TAGS_PER_QUESTION} tags")
    # reuse rows by name so re-ordering never deletes and re-inserts the same tag
    existing = {t.name: t for t in question.tag_links}
    links = []
    for position, name in enumerate(names):
        link = existing.get(name) or QuestionTag(name=name)
        link.position = position
        links.append(link)
    question.tag_links = links


def _require_text(value: Optional[str], field: str) -> str:
    text = clean_text(value)
    if not text:
        raise ValidationError(f"{field} is required")
    return text


async def create_question(
    db: AsyncSession, user: User, title: str, description: str, tags: Iterable[str]
) -> Question:
    question = Question(
        title=_require_text(title, "Title"),
        description=_require_text(description, "Description"),
        user=user,
        tag_links=[],
    )
    _set_tags(question, tags)
    db.add(question)
    await db.flush()
    return question


async def update_question(
    db: AsyncSession,
    question: Question,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> Question:
    if title is not None:
        question.title = _require_text(title, "Title")
    if description is not None:
        question.description = _require_text(description, "Description")
    if tags is not None:
        _set_tags(question, tags)
    question.updated_at = utcnow()
    await db.flush()
    return question


async def delete_question(db: AsyncSession, question: Question) -> None:
    """Delete a question together with its answers, comments and votes.

    Notifications keep their text but lose the references to deleted content.
    """
    qid = question.id
    answer_ids = select(Answer.id).where(Answer.question_id == qid)
    comment_ids = select(Comment.id).where(Comment.question_id == qid)

    await db.execute(
        update(Notification)
        .where(or_(Notification.question_id == qid, Notification.answer_id.in_(answer_ids)))
        .values(question_id=None, answer_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.execute(delete(CommentVote).where(CommentVote.comment_id.in_(comment_ids)))
    await db.execute(delete(Comment).where(Comment.question_id == qid))
    await db.execute(delete(AnswerVote).where(AnswerVote.answer_id.in_(answer_ids)))
    await db.execute(delete(Answer).where(Answer.question_id == qid))
    await db.execute(delete(QuestionTag).where(QuestionTag.question_id == qid))
    await db.execute(delete(Question).where(Question.id == qid))
    db.expunge(question)
    logger.info("delete: question %s removed with its answers and comments", qid)


# ---------------------------
# Answers
# ---------------------------
async def create_answer(db: AsyncSession, question: Question, user: User, content: str) -> Answer:
    answer = Answer(
        content=_require_text(content, "Content"),
        question_id=question.id,
        user=user,
        score=0,
        is_accepted=False,
        votes=[],
    )
    db.add(answer)
    await db.flush()
    return answer


async def update_answer(db: AsyncSession, answer: Answer, content: str) -> Answer:
    answer.content = _require_text(content, "Content")
    answer.updated_at = utcnow()
    await db.flush()
    return answer


async def delete_answer(db: AsyncSession, answer: Answer) -> None:
    aid = answer.id
    comment_ids = select(Comment.id).where(Comment.answer_id == aid)
    await db.execute(
        update(Notification)
        .where(Notification.answer_id == aid)
        .values(answer_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.execute(delete(CommentVote).where(CommentVote.comment_id.in_(comment_ids)))
    await db.execute(delete(Comment).where(Comment.answer_id == aid))
    await db.execute(delete(AnswerVote).where(AnswerVote.answer_id == aid))
    await db.execute(delete(Answer).where(Answer.id == aid))
    db.expunge(answer)
    logger.info("delete: answer %s removed", aid)


# ---------------------------
# Comments
# ---------------------------
def validate_comment(content: Optional[str]) -> str:
    text = clean_text(content)
    if not text:
        raise ValidationError("Content is required")
    if len(text) > COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters")
    return text


async def create_comment(
    db: AsyncSession, user: User, content: str, answer_id: int, question_id: int
) -> tuple[Comment, Answer]:
    text = validate_comment(content)
    answer = await get_answer_or_404(db, answer_id)
    if answer.question_id != question_id:
        raise ValidationError("Answer does not belong to that question")
    comment = Comment(
        content=text,
        user=user,
        answer_id=answer.id,
        question_id=answer.question_id,
        score=0,
        votes=[],
    )
    db.add(comment)
    await db.flush()
    return comment, answer


async def update_comment(db: AsyncSession, comment: Comment, content: str) -> Comment:
    comment.content = validate_comment(content)
    comment.updated_at = utcnow()
    await db.flush()
    return comment


async def delete_comment(db: AsyncSession, comment: Comment) -> None:
    await db.delete(comment)
    await db.flush()


# ---------------------------
# Tags & profiles
# ---------------------------
async def tag_stats(db: AsyncSession) -> list[tuple[str, int, object]]:
    rows = await db.execute(
        select(QuestionTag.name, func.count(QuestionTag.id), func.max(Question.created_at))
        .join(Question, Question.id == QuestionTag.question_id)
        .group_by(QuestionTag.name)
        .order_by(func.count(QuestionTag.id).desc(), QuestionTag.name.asc())
    )
    return [tuple(r) for r in rows.all()]


async def user_counts(db: AsyncSession, user_id: int) -> tuple[int, int]:
    questions = await db.scalar(select(func.count(Question.id)).where(Question.user_id == user_id))
    answers = await db.scalar(select(func.count(Answer.id)).where(Answer.user_id == user_id))
    return questions or 0, answers or 0
