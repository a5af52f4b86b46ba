from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.background import spawn
from stackit.database import get_db
from stackit.routes_shared import answer_out
from stackit.schemas import AnswerCreate, AnswerRead, AnswerUpdate, MessageRead, VoteRequest
from stackit.services import content
from stackit.services.acceptance import accept_answer
from stackit.services.mentions import notify_mentions
from stackit.services.notifications import notify_answer_accepted, notify_new_answer
from stackit.services.votes import apply_vote
from stackit.utils import get_current_user, require_authenticated_user

router = APIRouter(prefix="/api/answers", tags=["answers"])


@router.get("/question/{question_id}", response_model=List[AnswerRead])
async def list_answers(
    question_id: int,
    user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    answers = await content.answers_for_question(db, question_id)
    viewer_id = user.id if user else None
    return [answer_out(a, viewer_id) for a in answers]


@router.post("/{question_id}", response_model=AnswerRead, status_code=status.HTTP_201_CREATED)
async def create_answer(
    question_id: int,
    body: AnswerCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    question = await content.get_question_or_404(db, question_id)
    answer = await content.create_answer(db, question, user, body.content)
    await db.commit()

    if question.user_id != user.id:
        spawn(
            notify_new_answer(question.user_id, user.id, question.id, answer.id, question.title),
            name="notify_new_answer",
        )
    spawn(notify_mentions(answer.content, user.id, question.id, answer.id), name="mentions_answer")
    return answer_out(answer, user.id)


@router.put("/{answer_id}", response_model=AnswerRead)
async def update_answer(
    answer_id: int,
    body: AnswerUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    answer = await content.get_answer_or_404(db, answer_id)
    content.ensure_owner(answer, user.id)
    await content.update_answer(db, answer, body.content)
    await db.commit()
    spawn(notify_mentions(answer.content, user.id, answer.question_id, answer.id), name="mentions_answer_edit")
    return answer_out(answer, user.id)


@router.delete("/{answer_id}", response_model=MessageRead)
async def delete_answer(
    answer_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    answer = await content.get_answer_or_404(db, answer_id)
    content.ensure_owner(answer, user.id)
    await content.delete_answer(db, answer)
    await db.commit()
    return MessageRead(message="Answer deleted")


@router.post("/{answer_id}/vote", response_model=AnswerRead)
async def vote_answer(
    answer_id: int,
    body: VoteRequest,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    answer = await content.get_answer_or_404(db, answer_id)
    answer = await apply_vote(db, answer, user.id, body.vote_type)
    await db.commit()
    return answer_out(answer, user.id)


@router.post("/{answer_id}/accept", response_model=AnswerRead)
async def accept(
    answer_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    answer, question = await accept_answer(db, answer_id, user.id)
    await db.commit()
    if answer.user_id != user.id:
        spawn(
            notify_answer_accepted(answer.user_id, user.id, question.id, answer.id, question.title),
            name="notify_answer_accepted",
        )
    return answer_out(answer, user.id)


__all__ = ["router"]
