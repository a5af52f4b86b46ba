"""Vote ledger for answers and comments.

Each votable entity keeps one vote row per voter, so a voter is in at most
one of the up/down sets. The stored ``score`` is rewritten from the sets on
every change and is never adjusted on its own.
"""
from __future__ import annotations

import logging
from typing import Any, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.errors import InvalidDirectionError, SelfVoteError
from stackit.models import Answer, AnswerVote, Comment, CommentVote, VoteDirection, utcnow

logger = logging.getLogger(__name__)

Votable = Union[Answer, Comment]

_VOTE_ROWS = {
    Answer: AnswerVote,
    Comment: CommentVote,
}

_DIRECTIONS = {
    "up": VoteDirection.up,
    "down": VoteDirection.down,
    1: VoteDirection.up,
    -1: VoteDirection.down,
}


def parse_direction(raw: Any) -> VoteDirection:
    """Map ``"up"``/``"down"`` or ``1``/``-1`` onto :class:`VoteDirection`."""
    if isinstance(raw, VoteDirection):
        return raw
    # bool is an int subclass; True must not count as an upvote
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise InvalidDirectionError("Invalid vote type. Must be 'up' or 'down'")
    key = raw.strip().lower() if isinstance(raw, str) else raw
    try:
        return _DIRECTIONS[key]
    except KeyError:
        raise InvalidDirectionError("Invalid vote type. Must be 'up' or 'down'") from None


async def _lock(db: AsyncSession, entity: Votable) -> Votable:
    model = type(entity)
    stmt = (
        select(model)
        .where(model.id == entity.id)
        .with_for_update(of=model)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalars().one()


async def apply_vote(db: AsyncSession, entity: Votable, voter_id: int, direction: Any) -> Votable:
    """Record ``voter_id``'s vote on ``entity`` and rewrite its score.

    Repeating the current vote changes nothing. Switching direction replaces
    the voter's row, which moves the score by two. Voting on your own content
    raises :class:`SelfVoteError`. The caller commits.
    """
    direction = parse_direction(direction)
    kind = type(entity).__name__.lower()
    if entity.user_id == voter_id:
        raise SelfVoteError(f"Cannot vote on your own {kind}")

    entity = await _lock(db, entity)
    current = next((v for v in entity.votes if v.user_id == voter_id), None)
    if current is not None and current.direction == direction:
        return entity

    if current is None:
        entity.votes.append(_VOTE_ROWS[type(entity)](user_id=voter_id, direction=direction))
    else:
        current.direction = direction
        current.created_at = utcnow()

    entity.score = entity.tally()
    await db.flush()
    logger.debug("vote: user %s voted %s on %s %s (score=%s)", voter_id, direction.value, kind, entity.id, entity.score)
    return entity


def user_vote(entity: Votable, user_id: int | None) -> str | None:
    direction = entity.vote_of(user_id)
    return direction.value if direction else None


__all__ = ["apply_vote", "parse_direction", "user_vote"]
