from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.background import spawn
from stackit.database import get_db
from stackit.routes_shared import comment_out
from stackit.schemas import CommentCreate, CommentRead, CommentUpdate, CommentVoteRead, MessageRead, VoteRequest
from stackit.services import content
from stackit.services.mentions import notify_mentions
from stackit.services.notifications import notify_new_comment
from stackit.services.votes import apply_vote, user_vote
from stackit.utils import get_current_user, require_authenticated_user

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("/answer/{answer_id}", response_model=List[CommentRead])
async def list_comments(
    answer_id: int,
    user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comments = await content.comments_for_answer(db, answer_id)
    viewer_id = user.id if user else None
    return [comment_out(c, viewer_id) for c in comments]


@router.post("", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def create_comment(
    body: CommentCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    comment, answer = await content.create_comment(db, user, body.content, body.answer_id, body.question_id)
    await db.commit()

    if answer.user_id != user.id:
        spawn(
            notify_new_comment(answer.user_id, user.id, user.username, comment.question_id, answer.id),
            name="notify_new_comment",
        )
    spawn(notify_mentions(comment.content, user.id, comment.question_id, answer.id), name="mentions_comment")
    return comment_out(comment, user.id)


@router.put("/{comment_id}", response_model=CommentRead)
async def update_comment(
    comment_id: int,
    body: CommentUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await content.get_comment_or_404(db, comment_id)
    content.ensure_owner(comment, user.id, "Not authorized to edit this comment")
    await content.update_comment(db, comment, body.content)
    await db.commit()
    return comment_out(comment, user.id)


@router.delete("/{comment_id}", response_model=MessageRead)
async def delete_comment(
    comment_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await content.get_comment_or_404(db, comment_id)
    content.ensure_owner(comment, user.id, "Not authorized to delete this comment")
    await content.delete_comment(db, comment)
    await db.commit()
    return MessageRead(message="Comment deleted successfully")


@router.post("/{comment_id}/vote", response_model=CommentVoteRead)
async def vote_comment(
    comment_id: int,
    body: VoteRequest,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await content.get_comment_or_404(db, comment_id)
    comment = await apply_vote(db, comment, user.id, body.vote_type)
    await db.commit()
    return CommentVoteRead(votes=comment.score, user_vote=user_vote(comment, user.id))


__all__ = ["router"]
