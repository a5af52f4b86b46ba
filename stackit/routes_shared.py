"""Converters from ORM rows to the API's response models."""
from typing import Optional

from .models import Answer, Comment, Question
from .schemas import AnswerRead, CommentRead, QuestionRead, UserSummary
from .services.votes import user_vote


def question_out(question: Question, answer_count: int = 0) -> QuestionRead:
    return QuestionRead(
        id=question.id,
        title=question.title,
        description=question.description,
        tags=question.tags,
        user=UserSummary.model_validate(question.user),
        answer_count=answer_count,
        created_at=question.created_at,
        updated_at=question.updated_at,
    )


def answer_out(answer: Answer, viewer_id: Optional[int] = None) -> AnswerRead:
    return AnswerRead(
        id=answer.id,
        content=answer.content,
        question_id=answer.question_id,
        user=UserSummary.model_validate(answer.user),
        score=answer.score,
        is_accepted=answer.is_accepted,
        upvoters=sorted(answer.upvoters),
        downvoters=sorted(answer.downvoters),
        user_vote=user_vote(answer, viewer_id),
        created_at=answer.created_at,
        updated_at=answer.updated_at,
    )


def comment_out(comment: Comment, viewer_id: Optional[int] = None) -> CommentRead:
    return CommentRead(
        id=comment.id,
        content=comment.content,
        answer_id=comment.answer_id,
        question_id=comment.question_id,
        user=UserSummary.model_validate(comment.user),
        score=comment.score,
        user_vote=user_vote(comment, viewer_id),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


__all__ = ["question_out", "answer_out", "comment_out"]
