from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db
from stackit.errors import NotFoundError
from stackit.models import AnswerVote, CommentVote, User
from stackit.schemas import UserProfileRead, VoteHistoryEntry
from stackit.services import content
from stackit.utils import require_authenticated_user

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me/votes", response_model=List[VoteHistoryEntry])
async def my_votes(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    answer_votes = (await db.execute(select(AnswerVote).where(AnswerVote.user_id == user.id))).scalars().all()
    comment_votes = (await db.execute(select(CommentVote).where(CommentVote.user_id == user.id))).scalars().all()

    entries = [
        VoteHistoryEntry(target="answer", target_id=v.answer_id, vote_type=v.direction.value, created_at=v.created_at)
        for v in answer_votes
    ] + [
        VoteHistoryEntry(target="comment", target_id=v.comment_id, vote_type=v.direction.value, created_at=v.created_at)
        for v in comment_votes
    ]
    entries.sort(key=lambda e: e.created_at, reverse=True)
    return entries


@router.get("/{user_id}", response_model=UserProfileRead)
async def user_profile(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    question_count, answer_count = await content.user_counts(db, user.id)
    return UserProfileRead(
        id=user.id,
        username=user.username,
        reputation=user.reputation,
        created_at=user.created_at,
        question_count=question_count,
        answer_count=answer_count,
    )


__all__ = ["router"]
