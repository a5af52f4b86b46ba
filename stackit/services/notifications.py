"""Notification helpers for question, answer and comment events.

Dispatch is best effort. Every helper opens its own session, so it runs after
the triggering request has committed, and it never raises: failures are
logged and reported as ``None``.
"""

from __future__ import annotations

import logging
from typing import Optional

from stackit.database import async_session_maker
from stackit.models import Notification, NotificationType

logger = logging.getLogger(__name__)


def question_link(question_id: int) -> str:
    return f"/question/{question_id}"


def _trim(value: str, *, limit: int) -> str:
    return (value or "")[:limit]


async def create_notification(
    recipient_id: int,
    sender_id: int,
    type: NotificationType | str,
    content: str,
    link: str,
    question_id: Optional[int] = None,
    answer_id: Optional[int] = None,
) -> Notification | None:
    """Store one unread notification, unless it would be self-addressed."""
    if recipient_id == sender_id:
        logger.debug("create_notification: skipping self-notification for user %s", sender_id)
        return None

    try:
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=NotificationType(type),
            content=content,
            link=link,
            question_id=question_id,
            answer_id=answer_id,
            read=False,
        )
        async with async_session_maker() as session:
            session.add(notification)
            await session.commit()
        return notification
    except Exception:  # noqa: BLE001
        logger.exception(
            "create_notification: failed to notify user %s (type=%s)", recipient_id, type
        )
        return None


async def notify_new_answer(
    question_owner_id: int,
    answer_author_id: int,
    question_id: int,
    answer_id: int,
    question_title: str,
) -> Notification | None:
    return await create_notification(
        question_owner_id,
        answer_author_id,
        NotificationType.answer,
        f'answered your question "{question_title}"',
        question_link(question_id),
        question_id,
        answer_id,
    )


async def notify_answer_accepted(
    answer_author_id: int,
    question_owner_id: int,
    question_id: int,
    answer_id: int,
    question_title: str,
) -> Notification | None:
    return await create_notification(
        answer_author_id,
        question_owner_id,
        NotificationType.accept,
        f'accepted your answer on "{question_title}"',
        question_link(question_id),
        question_id,
        answer_id,
    )


async def notify_new_comment(
    answer_author_id: int,
    commenter_id: int,
    commenter_name: str,
    question_id: int,
    answer_id: int,
) -> Notification | None:
    return await create_notification(
        answer_author_id,
        commenter_id,
        NotificationType.comment,
        f"{commenter_name} commented on your answer",
        question_link(question_id),
        question_id,
        answer_id,
    )


async def notify_mention(
    mentioned_user_id: int,
    sender_id: int,
    question_id: int,
    answer_id: Optional[int],
    text: str,
) -> Notification | None:
    return await create_notification(
        mentioned_user_id,
        sender_id,
        NotificationType.mention,
        f"mentioned you: {_trim(text, limit=100)}...",
        question_link(question_id),
        question_id,
        answer_id,
    )


__all__ = [
    "create_notification",
    "notify_new_answer",
    "notify_answer_accepted",
    "notify_new_comment",
    "notify_mention",
    "question_link",
]
