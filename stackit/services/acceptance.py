from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.errors import ForbiddenError, NotFoundError
from stackit.models import Answer, Question

logger = logging.getLogger(__name__)


async def accept_answer(db: AsyncSession, answer_id: int, requester_id: int) -> tuple[Answer, Question]:
    """Mark ``answer_id`` as the accepted answer of its question.

    Only the question owner may accept. The question row is locked, then a
    single UPDATE clears every sibling and sets the target, so concurrent
    accepts still leave at most one accepted answer. The caller commits.
    """
    answer = await db.get(Answer, answer_id)
    if answer is None:
        raise NotFoundError("Answer not found")

    question = (
        await db.execute(select(Question).where(Question.id == answer.question_id).with_for_update(of=Question))
    ).scalars().first()
    if question is None:
        raise NotFoundError("Question not found")
    if question.user_id != requester_id:
        raise ForbiddenError("Only question owner can accept answers")

    await db.execute(
        update(Answer)
        .where(Answer.question_id == question.id)
        .values(is_accepted=(Answer.id == answer.id))
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    await db.refresh(answer, attribute_names=["is_accepted", "updated_at"])
    logger.info("accept: user %s accepted answer %s on question %s", requester_id, answer.id, question.id)
    return answer, question


__all__ = ["accept_answer"]
