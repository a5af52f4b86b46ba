"""@mention scanning.

``extract_mentions`` is a pure generator over the text; ``notify_mentions``
resolves the names against stored usernames and dispatches one ``mention``
notification per user found.
"""
from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

from sqlalchemy import select

from stackit.database import async_session_maker
from stackit.models import User
from stackit.services.notifications import notify_mention

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(r"@(\w+)")


def extract_mentions(text: Optional[str]) -> Iterator[str]:
    for match in MENTION_RE.finditer(text or ""):
        yield match.group(1)


async def _resolve_usernames(names: list[str]) -> dict[str, int]:
    if not names:
        return {}
    async with async_session_maker() as session:
        rows = await session.execute(select(User.username, User.id).where(User.username.in_(names)))
        return {username: uid for username, uid in rows.all()}


async def notify_mentions(
    text: Optional[str],
    sender_id: int,
    question_id: int,
    answer_id: Optional[int] = None,
) -> int:
    """Notify every user mentioned in ``text``; returns how many were notified."""
    names = list(dict.fromkeys(extract_mentions(text)))
    if not names:
        return 0

    try:
        resolved = await _resolve_usernames(names)
    except Exception:  # noqa: BLE001
        logger.exception("notify_mentions: failed to resolve %d usernames", len(names))
        return 0

    sent = 0
    for name in names:
        user_id = resolved.get(name)
        if user_id is None:
            logger.debug("notify_mentions: no user named %r", name)
            continue
        if await notify_mention(user_id, sender_id, question_id, answer_id, text or ""):
            sent += 1
    return sent


__all__ = ["extract_mentions", "notify_mentions", "MENTION_RE"]
