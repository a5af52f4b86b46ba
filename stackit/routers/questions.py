from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.background import spawn
from stackit.database import get_db
from stackit.routes_shared import answer_out, question_out
from stackit.schemas import MessageRead, QuestionCreate, QuestionDetail, QuestionRead, QuestionUpdate
from stackit.services import content
from stackit.services.mentions import notify_mentions
from stackit.utils import get_current_user, require_authenticated_user

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("", response_model=List[QuestionRead])
async def list_questions(
    tag: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search in title and description"),
    db: AsyncSession = Depends(get_db),
):
    rows = await content.list_questions(db, tag=tag, search=q)
    return [question_out(question, count) for question, count in rows]


@router.get("/{question_id}", response_model=QuestionDetail)
async def get_question(
    question_id: int,
    user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    question = await content.get_question_or_404(db, question_id)
    answers = await content.answers_for_question(db, question.id)
    viewer_id = user.id if user else None
    return QuestionDetail(
        **question_out(question, len(answers)).model_dump(),
        answers=[answer_out(a, viewer_id) for a in answers],
    )


@router.post("", response_model=QuestionRead, status_code=status.HTTP_201_CREATED)
async def create_question(
    body: QuestionCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    question = await content.create_question(db, user, body.title, body.description, body.tags)
    await db.commit()
    spawn(notify_mentions(question.description, user.id, question.id), name="mentions_question")
    return question_out(question, 0)


@router.put("/{question_id}", response_model=QuestionRead)
async def update_question(
    question_id: int,
    body: QuestionUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    question = await content.get_question_or_404(db, question_id)
    content.ensure_owner(question, user.id)
    await content.update_question(
        db, question, title=body.title, description=body.description, tags=body.tags
    )
    await db.commit()
    if body.description is not None:
        spawn(notify_mentions(question.description, user.id, question.id), name="mentions_question_edit")
    return question_out(question, await content.answer_count(db, question.id))


@router.delete("/{question_id}", response_model=MessageRead)
async def delete_question(
    question_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    question = await content.get_question_or_404(db, question_id)
    content.ensure_owner(question, user.id)
    await content.delete_question(db, question)
    await db.commit()
    return MessageRead(message="Question deleted")


__all__ = ["router"]
