"""
Notification dispatch for agent-interest lifecycle events.

Called by the interest data-access layer right after a write, inside the same
transaction, with the before- and after-images of the row. Routing follows a
fixed transition table:

    create                      -> team
    update to negotiating       -> agent
    update to requested         -> agent
    update to rejected          -> agent
    update to withdrawn         -> team
    delete                      -> team

Notification delivery is best-effort: every failure is logged and contained
in a SAVEPOINT so the interest mutation itself always stands.
"""

from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from transfers.database.models import InterestStatus
from transfers.models.identifiers import UserId
from transfers.models.schemas import InterestEvent, InterestSnapshot, Recipient
from transfers.services import notification_service
from transfers.services.interest_notifications import build_interest_notification
from transfers.services.recipient_resolver import (
    ResolutionError,
    SelfAddressError,
    resolve_interest_parties,
)
import logging

logger = logging.getLogger(__name__)


_UPDATE_ROUTES: Dict[InterestStatus, Recipient] = {
    InterestStatus.NEGOTIATING: Recipient.AGENT,
    InterestStatus.REQUESTED: Recipient.AGENT,
    InterestStatus.REJECTED: Recipient.AGENT,
    InterestStatus.WITHDRAWN: Recipient.TEAM,
}


def select_recipient(
    event: InterestEvent,
    old_status: Optional[InterestStatus],
    new_status: Optional[InterestStatus],
) -> Optional[Recipient]:
    """
    Pick the single side to notify for an event, or None when nothing is sent.

    An update that leaves the status unchanged is a no-op, as is an update to
    a status with no route (for example back to interested).
    """
    if event == InterestEvent.CREATE:
        return Recipient.TEAM
    if event == InterestEvent.DELETE:
        return Recipient.TEAM
    if old_status == new_status:
        return None
    return _UPDATE_ROUTES.get(new_status)


def _check_images(
    event: InterestEvent,
    before: Optional[InterestSnapshot],
    after: Optional[InterestSnapshot],
) -> InterestSnapshot:
    """Validate the row images for an event and return the one to route on."""
    if event == InterestEvent.CREATE:
        if before is not None or after is None:
            raise ValueError("create events carry an after-image only")
        return after
    if event == InterestEvent.DELETE:
        if before is None or after is not None:
            raise ValueError("delete events carry a before-image only")
        return before
    if before is None or after is None:
        raise ValueError("update events carry both before- and after-images")
    if before.id != after.id:
        raise ValueError("before- and after-images describe different interests")
    return after


async def dispatch_interest_event(
    session: AsyncSession,
    event: InterestEvent,
    before: Optional[InterestSnapshot],
    after: Optional[InterestSnapshot],
    actor_user_id: Optional[UserId],
) -> Optional[Dict]:
    """
    Create the notification for one interest lifecycle event.

    Args:
        session: Session holding the transaction that applied the mutation
        event: create, update or delete
        before: Row image before the write (None on create)
        after: Row image after the write (None on delete)
        actor_user_id: User who performed the mutation; never addressed

    Returns:
        The created notification dict, or None when the event is a no-op or
        delivery failed (failures are logged, never raised)

    Raises:
        ValueError: If the images do not match the event (caller bug)
    """
    event = InterestEvent(event)
    record = _check_images(event, before, after)

    old_status = before.status if before else None
    new_status = after.status if after else None

    recipient = select_recipient(event, old_status, new_status)
    if recipient is None:
        logger.debug(
            f"No notification for interest {record.id} "
            f"({event.value}: {old_status} -> {new_status})"
        )
        return None

    try:
        async with session.begin_nested():
            parties = await resolve_interest_parties(session, record.pitch_id, record.agent_id)
            draft = build_interest_notification(event, new_status, parties, recipient, record.id)

            if actor_user_id is not None and draft.user_id == actor_user_id:
                raise SelfAddressError(
                    f"User {actor_user_id} caused the {event.value} event and would be notified"
                )

            notification = await notification_service.create_notification(
                session, **draft.model_dump()
            )
    except ResolutionError as e:
        logger.warning(
            f"Dropping {event.value} notification for interest {record.id} "
            f"(ResolutionError): {e}"
        )
        return None
    except SelfAddressError as e:
        logger.error(
            f"Data integrity violation, dropping {event.value} notification for interest "
            f"{record.id} (SelfAddressError): {e}"
        )
        return None
    except Exception as e:
        logger.error(
            f"Failed to create {event.value} notification for interest {record.id}: {e}",
            exc_info=True,
        )
        return None

    logger.info(
        f"Notified {recipient.value} user {notification['user_id']} of "
        f"{event.value} on interest {record.id}"
    )
    return notification
