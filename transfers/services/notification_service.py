"""
In-app notification store.

Interest events only ever append rows through create_notification. The read
side (inbox paging, unread badge, read receipts) backs the notification
center.
"""

from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, select, update
from transfers.database.models import Notification
from transfers.utils.constants import DEFAULT_NOTIFICATION_PAGE_SIZE
from transfers.utils.datetime_utils import utcnow, isoformat_or_none
import json
import logging

logger = logging.getLogger(__name__)


def _notification_to_dict(notification: Notification) -> Dict:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": json.loads(notification.data) if notification.data else None,
        "is_read": notification.is_read,
        "read_at": isoformat_or_none(notification.read_at),
        "link_url": notification.link_url,
        "action_text": notification.action_text,
        "created_at": isoformat_or_none(notification.created_at),
    }


async def create_notification(
    session: AsyncSession,
    user_id: int,
    type: str,
    title: str,
    message: str,
    data: Optional[Dict] = None,
    link_url: Optional[str] = None,
    action_text: Optional[str] = None,
) -> Dict:
    """
    Append one notification to a user's inbox.

    Args:
        session: Database session
        user_id: Addressee (users.id, never a profile or party id)
        type: Category tag, e.g. NotificationType.AGENT_INTEREST.value
        title: Short heading
        message: Body text
        data: Metadata dict, stored as JSON text
        link_url: Deep link opened from the notification
        action_text: Label for the deep link

    Returns:
        Dict with the stored notification

    Raises:
        ValueError: If user_id, type, title or message is empty
    """
    for field, value in (("user_id", user_id), ("type", type), ("title", title), ("message", message)):
        if not value:
            raise ValueError(f"{field} is required")

    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=json.dumps(data) if data is not None else None,
        link_url=link_url,
        action_text=action_text,
        is_read=False,
    )
    session.add(notification)
    await session.flush()
    await session.refresh(notification)

    logger.debug(f"Created {type} notification {notification.id} for user {user_id}")
    return _notification_to_dict(notification)


def _inbox_filter(user_id: int, unread_only: bool = False, type: Optional[str] = None):
    clauses = [Notification.user_id == user_id]
    if unread_only:
        clauses.append(Notification.is_read == False)  # noqa: E712
    if type:
        clauses.append(Notification.type == type)
    return and_(*clauses)


async def get_user_notifications(
    session: AsyncSession,
    user_id: int,
    limit: int = DEFAULT_NOTIFICATION_PAGE_SIZE,
    offset: int = 0,
    unread_only: bool = False,
    type: Optional[str] = None,
) -> Dict:
    """
    Page through a user's inbox, newest first.

    Returns:
        Dict with ``notifications`` (one page), ``total_count`` (all rows
        matching the filters) and ``has_more``
    """
    inbox = _inbox_filter(user_id, unread_only, type)

    total_count = (
        await session.execute(select(func.count(Notification.id)).where(inbox))
    ).scalar_one()

    # id breaks ties between rows created within the same clock tick
    page = await session.execute(
        select(Notification)
        .where(inbox)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
    )
    notifications = [_notification_to_dict(n) for n in page.scalars()]

    return {
        "notifications": notifications,
        "total_count": total_count,
        "has_more": offset + len(notifications) < total_count,
    }


async def get_unread_count(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Notification.id)).where(_inbox_filter(user_id, unread_only=True))
    )
    return result.scalar_one()


async def mark_as_read(session: AsyncSession, notification_id: int, user_id: int) -> Dict:
    """
    Mark one of the user's notifications as read.

    Reading an already-read notification keeps its original read_at.

    Raises:
        ValueError: If the notification does not exist or belongs to someone else
    """
    notification = (
        await session.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
    ).scalar_one_or_none()
    if notification is None:
        raise ValueError("Notification not found or access denied")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        await session.flush()
        await session.refresh(notification)

    return _notification_to_dict(notification)


async def mark_all_as_read(session: AsyncSession, user_id: int) -> int:
    """Mark every unread notification of the user as read; returns how many changed."""
    result = await session.execute(
        update(Notification)
        .where(_inbox_filter(user_id, unread_only=True))
        .values(is_read=True, read_at=utcnow())
        .returning(Notification.id)
    )
    marked = len(result.scalars().all())
    if marked:
        logger.debug(f"Marked {marked} notifications read for user {user_id}")
    return marked
