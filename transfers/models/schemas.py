"""
Pydantic models for interest row images and notification payloads.
"""

import enum
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

from transfers.database.models import InterestStatus
from transfers.models.identifiers import UserId, PartyId


class InterestEvent(str, enum.Enum):
    """Lifecycle event on an agent_interest row."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Recipient(str, enum.Enum):
    """Which side of an interest record a notification addresses."""

    TEAM = "team"
    AGENT = "agent"


class InterestSnapshot(BaseModel):
    """Before- or after-image of an agent_interest row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    pitch_id: int
    agent_id: PartyId
    status: InterestStatus
    message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm_row(cls, row) -> "InterestSnapshot":
        """Capture the current column values of an AgentInterest row."""
        return cls.model_validate(row)


class InterestParties(BaseModel):
    """Resolved addressees and display context for one interest record."""

    model_config = ConfigDict(frozen=True)

    pitch_id: int
    team_id: PartyId
    agent_id: PartyId
    team_user_id: UserId
    agent_user_id: UserId
    team_name: Optional[str] = None
    agent_name: Optional[str] = None
    player_name: Optional[str] = None


class NotificationDraft(BaseModel):
    """A fully composed notification, ready to be appended."""

    user_id: UserId
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    link_url: Optional[str] = None
    action_text: Optional[str] = None
