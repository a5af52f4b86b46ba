from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db
from stackit.errors import NotFoundError
from stackit.models import Notification
from stackit.schemas import MessageRead, NotificationRead, UnreadCount
from stackit.settings.config import settings
from stackit.utils import require_authenticated_user

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


async def _own_notification(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
    notification = (
        await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.recipient_id == user_id,
            )
        )
    ).scalars().first()
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


@router.get("", response_model=List[NotificationRead])
async def list_notifications(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await db.execute(
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(settings.NOTIFICATIONS_PAGE_SIZE)
    )
    return [NotificationRead.model_validate(n) for n in rows.scalars().all()]


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    count = await db.scalar(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user.id,
            Notification.read.is_(False),
        )
    )
    return UnreadCount(count=count or 0)


@router.patch("/mark-all-read", response_model=MessageRead)
async def mark_all_read(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    await db.execute(
        update(Notification)
        .where(Notification.recipient_id == user.id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return MessageRead(message="All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
    notification_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await _own_notification(db, notification_id, user.id)
    notification.read = True
    await db.commit()
    return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", response_model=MessageRead)
async def delete_notification(
    notification_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await _own_notification(db, notification_id, user.id)
    await db.delete(notification)
    await db.commit()
    logger.info("notification %s deleted by user %s", notification_id, user.id)
    return MessageRead(message="Notification deleted")


__all__ = ["router"]
