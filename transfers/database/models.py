"""
SQLAlchemy ORM models for the transfer marketplace.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transfers.database.db import Base


class UserType(str, enum.Enum):
    """Kind of party a profile belongs to."""

    TEAM = "team"
    AGENT = "agent"


class PitchStatus(str, enum.Enum):
    """Transfer pitch status enum (team-controlled)."""

    ACTIVE = "active"
    CLOSED = "closed"


class InterestStatus(str, enum.Enum):
    """Agent interest status enum."""

    INTERESTED = "interested"
    REQUESTED = "requested"
    NEGOTIATING = "negotiating"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_INTEREST_STATUSES = frozenset({InterestStatus.REJECTED, InterestStatus.WITHDRAWN})


class NotificationType(str, enum.Enum):
    """Notification type enum."""

    AGENT_INTEREST = "agent_interest"


class User(Base):
    """Authentication account. users.id is the only addressable identity."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Profile(Base):
    """Human account record shared by teams and agents."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    full_name = Column(String(255), nullable=True)
    user_type = Column(String(20), nullable=False)  # UserType enum value
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="profiles")


class Team(Base):
    """A club. Owns transfer pitches."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    team_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_teams_profile_id", "profile_id"),)


class Agent(Base):
    """A player representative. Display name comes from the profile."""

    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    agency_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_agents_profile_id", "profile_id"),)


class Player(Base):
    """Player being pitched for transfer."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=True)
    position = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TransferPitch(Base):
    """A team's offer to transfer one of its players."""

    __tablename__ = "transfer_pitches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), default=PitchStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    team = relationship("Team", backref="pitches")
    player = relationship("Player")

    __table_args__ = (
        Index("idx_transfer_pitches_team_id", "team_id"),
        Index("idx_transfer_pitches_status", "status"),
    )


class AgentInterest(Base):
    """An agent's interest in a transfer pitch."""

    __tablename__ = "agent_interest"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pitch_id = Column(Integer, ForeignKey("transfer_pitches.id", ondelete="CASCADE"), nullable=False)
    agent_id = Column(Integer, ForeignKey("agents.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default=InterestStatus.INTERESTED.value, nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("pitch_id", "agent_id", name="uq_agent_interest_pitch_agent"),
        Index("idx_agent_interest_pitch_id", "pitch_id"),
        Index("idx_agent_interest_agent_id", "agent_id"),
        Index("idx_agent_interest_status", "status"),
    )


class Notification(Base):
    """User notifications for in-app messaging."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String, nullable=False)  # NotificationType enum value
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(
        Text, nullable=True
    )  # JSON string for client-side context (pitch_id, player_name, action, etc.)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    link_url = Column(String(500), nullable=True)  # Navigation target
    action_text = Column(String(100), nullable=True)  # Label for the navigation action
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", backref="notifications")

    __table_args__ = (
        Index("idx_notifications_user_unread", "user_id", "is_read", "created_at"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
        Index("idx_notifications_type", "type"),
    )
