from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db
from stackit.routes_shared import question_out
from stackit.schemas import QuestionRead, TagRead
from stackit.services import content

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagRead])
async def list_tags(db: AsyncSession = Depends(get_db)):
    return [TagRead(name=name, count=count, last_used=last_used) for name, count, last_used in await content.tag_stats(db)]


@router.get("/{tag}/questions", response_model=List[QuestionRead])
async def questions_for_tag(tag: str, db: AsyncSession = Depends(get_db)):
    rows = await content.list_questions(db, tag=tag)
    return [question_out(question, count) for question, count in rows]


__all__ = ["router"]
