"""
Interest service for agent interest in transfer pitches.

Applies interest mutations (express, status change, withdraw, delete) and
hands the before/after images of each write to the notification dispatcher
within the same transaction. Functions flush but never commit; the caller's
session scope decides the outcome of the whole unit of work.
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from transfers.database.models import (
    AgentInterest,
    InterestStatus,
    PitchStatus,
    TransferPitch,
    TERMINAL_INTEREST_STATUSES,
)
from transfers.models.identifiers import UserId, PartyId
from transfers.models.schemas import InterestEvent, InterestSnapshot
from transfers.services import interest_dispatcher
from transfers.services.recipient_resolver import (
    ResolutionError,
    resolve_agent_user_id,
    resolve_team_user_id,
)
from transfers.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)

TEAM_TRANSITIONS = frozenset(
    {InterestStatus.REQUESTED, InterestStatus.NEGOTIATING, InterestStatus.REJECTED}
)
AGENT_TRANSITIONS = frozenset({InterestStatus.WITHDRAWN})


def _format_interest(interest: AgentInterest) -> Dict:
    return {
        "id": interest.id,
        "pitch_id": interest.pitch_id,
        "agent_id": interest.agent_id,
        "status": interest.status,
        "message": interest.message,
        "created_at": isoformat_or_none(interest.created_at),
        "updated_at": isoformat_or_none(interest.updated_at),
    }


async def _get_interest_row(session: AsyncSession, interest_id: int) -> Optional[AgentInterest]:
    result = await session.execute(
        select(AgentInterest).where(AgentInterest.id == interest_id)
    )
    return result.scalar_one_or_none()


async def _get_pitch_team_id(session: AsyncSession, pitch_id: int) -> Optional[PartyId]:
    result = await session.execute(
        select(TransferPitch.team_id).where(TransferPitch.id == pitch_id)
    )
    team_id = result.scalar_one_or_none()
    return PartyId(team_id) if team_id is not None else None


async def _is_agent_user(session: AsyncSession, agent_id: PartyId, user_id: UserId) -> bool:
    try:
        return await resolve_agent_user_id(session, agent_id) == user_id
    except ResolutionError:
        return False


async def _is_team_user(session: AsyncSession, pitch_id: int, user_id: UserId) -> bool:
    team_id = await _get_pitch_team_id(session, pitch_id)
    if team_id is None:
        return False
    try:
        return await resolve_team_user_id(session, team_id) == user_id
    except ResolutionError:
        return False


async def get_interest(session: AsyncSession, interest_id: int) -> Optional[Dict]:
    """Get a single interest record, or None if it does not exist."""
    interest = await _get_interest_row(session, interest_id)
    return _format_interest(interest) if interest else None


async def list_interests_for_pitch(session: AsyncSession, pitch_id: int) -> List[Dict]:
    """List all interest records on a pitch, newest first."""
    result = await session.execute(
        select(AgentInterest)
        .where(AgentInterest.pitch_id == pitch_id)
        .order_by(AgentInterest.created_at.desc(), AgentInterest.id.desc())
    )
    return [_format_interest(i) for i in result.scalars().all()]


async def list_interests_for_agent(session: AsyncSession, agent_id: PartyId) -> List[Dict]:
    """List all interest records an agent has expressed, newest first."""
    result = await session.execute(
        select(AgentInterest)
        .where(AgentInterest.agent_id == agent_id)
        .order_by(AgentInterest.created_at.desc(), AgentInterest.id.desc())
    )
    return [_format_interest(i) for i in result.scalars().all()]


async def express_interest(
    session: AsyncSession,
    pitch_id: int,
    agent_id: PartyId,
    actor_user_id: UserId,
    message: Optional[str] = None,
) -> Dict:
    """
    Record an agent's interest in a transfer pitch and notify the team.

    Args:
        session: Database session
        pitch_id: Transfer pitch the agent is interested in
        agent_id: Agent expressing interest
        actor_user_id: User performing the action (must be the agent's user)
        message: Optional note for the team

    Returns:
        Dict with the created interest record

    Raises:
        ValueError: If the pitch is missing or closed, the actor does not act
            for the agent, or the agent already expressed interest in the pitch
    """
    result = await session.execute(
        select(TransferPitch).where(TransferPitch.id == pitch_id)
    )
    pitch = result.scalar_one_or_none()
    if not pitch:
        raise ValueError("Transfer pitch not found")
    if pitch.status != PitchStatus.ACTIVE.value:
        raise ValueError("Transfer pitch is not accepting interest")

    if not await _is_agent_user(session, agent_id, actor_user_id):
        raise ValueError("Not authorized to express interest for this agent")

    existing = await session.execute(
        select(AgentInterest.id).where(
            and_(AgentInterest.pitch_id == pitch_id, AgentInterest.agent_id == agent_id)
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ValueError("Interest already expressed for this pitch")

    interest = AgentInterest(
        pitch_id=pitch_id,
        agent_id=agent_id,
        status=InterestStatus.INTERESTED.value,
        message=message,
    )
    session.add(interest)
    await session.flush()
    await session.refresh(interest)
    logger.info(f"Agent {agent_id} expressed interest {interest.id} in pitch {pitch_id}")

    await interest_dispatcher.dispatch_interest_event(
        session,
        InterestEvent.CREATE,
        before=None,
        after=InterestSnapshot.from_orm_row(interest),
        actor_user_id=actor_user_id,
    )

    return _format_interest(interest)


async def update_interest_status(
    session: AsyncSession,
    interest_id: int,
    new_status,
    actor_user_id: UserId,
) -> Dict:
    """
    Move an interest record to a new status and notify the other side.

    The team moves interest to requested, negotiating or rejected; the agent
    moves it to withdrawn. Saving the current status again is allowed and
    produces no notification.

    Args:
        session: Database session
        interest_id: Interest record to update
        new_status: Target status (InterestStatus or its string value)
        actor_user_id: User performing the action

    Returns:
        Dict with the updated interest record

    Raises:
        ValueError: If the interest is missing, the status is unknown or not a
            valid target, the interest is already closed, or the actor is not
            the party allowed to make this transition
    """
    try:
        new_status = InterestStatus(new_status)
    except ValueError:
        raise ValueError(f"Invalid interest status: {new_status}")

    interest = await _get_interest_row(session, interest_id)
    if not interest:
        raise ValueError("Interest not found")

    old_status = InterestStatus(interest.status)

    if new_status in TEAM_TRANSITIONS:
        if not await _is_team_user(session, interest.pitch_id, actor_user_id):
            raise ValueError("Not authorized to update this interest")
    elif new_status in AGENT_TRANSITIONS:
        if not await _is_agent_user(session, interest.agent_id, actor_user_id):
            raise ValueError("Not authorized to withdraw this interest")
    elif new_status != old_status:
        raise ValueError(f"Cannot move interest to {new_status.value}")
    elif not (
        await _is_agent_user(session, interest.agent_id, actor_user_id)
        or await _is_team_user(session, interest.pitch_id, actor_user_id)
    ):
        raise ValueError("Not authorized to update this interest")

    if new_status != old_status and old_status in TERMINAL_INTEREST_STATUSES:
        raise ValueError(f"Interest is already {old_status.value}")

    before = InterestSnapshot.from_orm_row(interest)

    interest.status = new_status.value
    interest.updated_at = utcnow()
    await session.flush()
    await session.refresh(interest)

    await interest_dispatcher.dispatch_interest_event(
        session,
        InterestEvent.UPDATE,
        before=before,
        after=InterestSnapshot.from_orm_row(interest),
        actor_user_id=actor_user_id,
    )

    return _format_interest(interest)


async def withdraw_interest(
    session: AsyncSession, interest_id: int, actor_user_id: UserId
) -> Dict:
    """Withdraw an agent's interest (status -> withdrawn). The team is notified."""
    return await update_interest_status(
        session, interest_id, InterestStatus.WITHDRAWN, actor_user_id
    )


async def delete_interest(
    session: AsyncSession, interest_id: int, actor_user_id: UserId
) -> None:
    """
    Remove an interest record entirely. The team is notified of the cancellation.

    Only the agent who owns the record may delete it; the team closes
    interest by rejecting it instead.

    Raises:
        ValueError: If the interest is missing or the actor is not its agent
    """
    interest = await _get_interest_row(session, interest_id)
    if not interest:
        raise ValueError("Interest not found")
    if not await _is_agent_user(session, interest.agent_id, actor_user_id):
        raise ValueError("Not authorized to delete this interest")

    before = InterestSnapshot.from_orm_row(interest)

    await session.delete(interest)
    await session.flush()
    logger.info(f"Agent {before.agent_id} deleted interest {interest_id}")

    await interest_dispatcher.dispatch_interest_event(
        session,
        InterestEvent.DELETE,
        before=before,
        after=None,
        actor_user_id=actor_user_id,
    )
