"""
Recipient resolution for agent-interest notifications.

Maps a team or an agent (a party) to the auth user who should be addressed,
by way of the party's profile. The profile row id and the party row id are
never valid addressees; only profiles.user_id is.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from transfers.database.models import Agent, Player, Profile, Team, TransferPitch
from transfers.models.identifiers import UserId, PartyId
from transfers.models.schemas import InterestParties


class NotificationRoutingError(Exception):
    """Base class for failures to address an interest notification."""


class ResolutionError(NotificationRoutingError):
    """A party could not be mapped to a user id (broken join, deleted account)."""


class SelfAddressError(NotificationRoutingError):
    """The notification would be delivered to the user who caused it."""


async def _resolve_team(session: AsyncSession, pitch_id: int):
    result = await session.execute(
        select(
            TransferPitch.id.label("pitch_id"),
            Team.id.label("team_id"),
            Team.team_name,
            Team.profile_id,
            Profile.user_id,
            Player.full_name.label("player_name"),
        )
        .select_from(TransferPitch)
        .outerjoin(Team, TransferPitch.team_id == Team.id)
        .outerjoin(Profile, Team.profile_id == Profile.id)
        .outerjoin(Player, TransferPitch.player_id == Player.id)
        .where(TransferPitch.id == pitch_id)
    )
    row = result.one_or_none()

    if row is None:
        raise ResolutionError(f"Transfer pitch {pitch_id} not found")
    if row.team_id is None:
        raise ResolutionError(f"Transfer pitch {pitch_id} has no team")
    if row.user_id is None:
        # Covers a missing profile_id, a dangling profile_id and a profile without a user
        raise ResolutionError(
            f"Team {row.team_id} (profile {row.profile_id}) has no user account"
        )
    return row


async def _resolve_agent(session: AsyncSession, agent_id: PartyId):
    result = await session.execute(
        select(
            Agent.id.label("agent_id"),
            Agent.profile_id,
            Profile.user_id,
            Profile.full_name.label("agent_name"),
        )
        .select_from(Agent)
        .outerjoin(Profile, Agent.profile_id == Profile.id)
        .where(Agent.id == agent_id)
    )
    row = result.one_or_none()

    if row is None:
        raise ResolutionError(f"Agent {agent_id} not found")
    if row.user_id is None:
        raise ResolutionError(
            f"Agent {agent_id} (profile {row.profile_id}) has no user account"
        )
    return row


async def resolve_team_user_id(session: AsyncSession, team_id: PartyId) -> UserId:
    """
    Resolve the user id behind a team.

    Raises:
        ResolutionError: If the team, its profile or the profile's user is missing
    """
    result = await session.execute(
        select(Team.id, Profile.user_id)
        .select_from(Team)
        .outerjoin(Profile, Team.profile_id == Profile.id)
        .where(Team.id == team_id)
    )
    row = result.one_or_none()
    if row is None:
        raise ResolutionError(f"Team {team_id} not found")
    if row.user_id is None:
        raise ResolutionError(f"Team {team_id} has no user account")
    return UserId(row.user_id)


async def resolve_agent_user_id(session: AsyncSession, agent_id: PartyId) -> UserId:
    """
    Resolve the user id behind an agent.

    Raises:
        ResolutionError: If the agent, its profile or the profile's user is missing
    """
    row = await _resolve_agent(session, agent_id)
    return UserId(row.user_id)


async def resolve_interest_parties(
    session: AsyncSession,
    pitch_id: int,
    agent_id: PartyId,
) -> InterestParties:
    """
    Resolve both addressees of an interest record.

    The team side comes from pitch -> team -> profile, the agent side from
    agent -> profile. Display names are looked up alongside and may be None.
    Read-only.

    Args:
        session: Database session
        pitch_id: Transfer pitch the interest targets
        agent_id: Agent that expressed the interest

    Returns:
        InterestParties with distinct team_user_id and agent_user_id

    Raises:
        ResolutionError: If either side cannot be mapped to a user id
        SelfAddressError: If both sides map to the same user id
    """
    team_row = await _resolve_team(session, pitch_id)
    agent_row = await _resolve_agent(session, agent_id)

    if team_row.user_id == agent_row.user_id:
        raise SelfAddressError(
            f"Team {team_row.team_id} and agent {agent_id} both resolve to user "
            f"{team_row.user_id}"
        )

    return InterestParties(
        pitch_id=team_row.pitch_id,
        team_id=PartyId(team_row.team_id),
        agent_id=PartyId(agent_row.agent_id),
        team_user_id=UserId(team_row.user_id),
        agent_user_id=UserId(agent_row.user_id),
        team_name=team_row.team_name,
        agent_name=agent_row.agent_name,
        player_name=team_row.player_name,
    )
