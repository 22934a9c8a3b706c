"""
Content for agent-interest notifications.

Turns a routed lifecycle event into a NotificationDraft. Missing display
names fall back to generic placeholders; composition never fails on them.
"""

from typing import Optional
from transfers.database.models import InterestStatus, NotificationType
from transfers.models.schemas import (
    InterestEvent,
    InterestParties,
    NotificationDraft,
    Recipient,
)
from transfers.utils.constants import (
    AGENT_COMMUNICATION_URL,
    DEFAULT_AGENT_NAME,
    DEFAULT_OWN_PLAYER_NAME,
    DEFAULT_PLAYER_NAME,
    DEFAULT_TEAM_NAME,
    TEAM_COMMUNICATION_URL,
    VIEW_COMMUNICATION_ACTION,
)


def _content(event: InterestEvent, new_status: Optional[InterestStatus], parties: InterestParties):
    """Return (title, message, action) for an event."""
    agent_name = parties.agent_name or DEFAULT_AGENT_NAME
    team_name = parties.team_name or DEFAULT_TEAM_NAME

    if event == InterestEvent.CREATE:
        player_name = parties.player_name or DEFAULT_OWN_PLAYER_NAME
        return (
            "New Agent Interest",
            f"{agent_name} has expressed interest in {player_name}",
            "expressed_interest",
        )

    if event == InterestEvent.DELETE:
        player_name = parties.player_name or DEFAULT_OWN_PLAYER_NAME
        return (
            "Interest Cancelled",
            f"{agent_name} has cancelled their interest in {player_name}",
            "cancelled_interest",
        )

    if new_status == InterestStatus.WITHDRAWN:
        player_name = parties.player_name or DEFAULT_OWN_PLAYER_NAME
        return (
            "Interest Withdrawn",
            f"{agent_name} has withdrawn their interest in {player_name}",
            "withdrawn_interest",
        )

    player_name = parties.player_name or DEFAULT_PLAYER_NAME
    if new_status == InterestStatus.REJECTED:
        return (
            "Interest Rejected",
            f"Your interest in {player_name} has been rejected by {team_name}",
            "rejected_interest",
        )
    if new_status == InterestStatus.NEGOTIATING:
        return (
            "Negotiations Started",
            f"{team_name} is ready to start negotiations for {player_name}",
            "status_updated",
        )
    if new_status == InterestStatus.REQUESTED:
        return (
            "More Information Requested",
            f"{team_name} has requested more information about {player_name}",
            "status_updated",
        )

    return (
        "Interest Status Update",
        f"Status updated for {player_name}",
        "status_updated",
    )


def build_interest_notification(
    event: InterestEvent,
    new_status: Optional[InterestStatus],
    parties: InterestParties,
    recipient: Recipient,
    interest_id: int,
) -> NotificationDraft:
    """
    Compose the notification for a routed interest event.

    Args:
        event: Lifecycle event that fired
        new_status: Status after the event (None for deletes)
        parties: Resolved addressees and display names
        recipient: Side chosen by the transition table
        interest_id: ID of the interest row (kept in metadata after deletes too)

    Returns:
        NotificationDraft addressed to the recipient's user id
    """
    title, message, action = _content(event, new_status, parties)

    if recipient == Recipient.TEAM:
        user_id = parties.team_user_id
        link_url = TEAM_COMMUNICATION_URL
    else:
        user_id = parties.agent_user_id
        link_url = AGENT_COMMUNICATION_URL

    data = {
        "interest_id": interest_id,
        "pitch_id": parties.pitch_id,
        "player_name": parties.player_name,
        "team_name": parties.team_name,
        "agent_name": parties.agent_name,
        "action": action,
    }
    if event == InterestEvent.UPDATE and new_status is not None:
        data["new_status"] = new_status.value

    return NotificationDraft(
        user_id=user_id,
        type=NotificationType.AGENT_INTEREST.value,
        title=title,
        message=message,
        data=data,
        link_url=link_url,
        action_text=VIEW_COMMUNICATION_ACTION,
    )
