"""
Shared pytest configuration for transfers tests.

Runs against an in-memory SQLite database by default. Set TEST_DATABASE_URL
to run against PostgreSQL instead.

SAFETY: a PostgreSQL URL is REFUSED unless the database name contains the
substring "test", because every test drops and recreates all tables.
"""

import os
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from transfers.database.db import Base
from transfers.database.models import (
    Agent,
    PitchStatus,
    Player,
    Profile,
    Team,
    TransferPitch,
    User,
    UserType,
)


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if a server database URL does not point to a
    database whose name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
    if url.startswith("sqlite"):
        return url

    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Fix: set TEST_DATABASE_URL to a test database, e.g.:\n"
            f"    export TEST_DATABASE_URL=postgresql+asyncpg://.../{db_name}_test\n"
            f"{'=' * 70}"
        )
    return url


# Validated at import time so pytest fails immediately with a clear message
TEST_DATABASE_URL = _resolve_test_database_url()


def _configure_sqlite(engine):
    """Make SAVEPOINT work on aiosqlite and enforce foreign keys.

    The driver's implicit BEGIN handling breaks nested transactions, so the
    engine emits BEGIN itself.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with a fresh schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,  # one shared connection keeps the in-memory DB alive
            connect_args={"check_same_thread": False},
        )
        _configure_sqlite(engine)
    else:
        # NullPool avoids connection reuse across event loops
        engine = create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=NullPool,
            pool_pre_ping=True,
        )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # Point db.AsyncSessionLocal at the test engine so get_db_session() uses it
    from transfers.database import db

    original_async_session_local = db.AsyncSessionLocal
    db.AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    yield engine

    db.AsyncSessionLocal = original_async_session_local

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session; uncommitted work is rolled back."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def create_user(db_session, email):
    """Helper: create an auth user, return user_id."""
    user = User(email=email)
    db_session.add(user)
    await db_session.flush()
    return user.id


async def create_profile(db_session, user_id, full_name, user_type):
    """Helper: create a profile for a user, return profile_id."""
    profile = Profile(user_id=user_id, full_name=full_name, user_type=user_type.value)
    db_session.add(profile)
    await db_session.flush()
    return profile.id


async def create_team(db_session, email, team_name, full_name="Club Secretary"):
    """Helper: create user + profile + team, return (user_id, profile_id, team_id)."""
    user_id = await create_user(db_session, email)
    profile_id = await create_profile(db_session, user_id, full_name, UserType.TEAM)
    team = Team(profile_id=profile_id, team_name=team_name)
    db_session.add(team)
    await db_session.flush()
    return user_id, profile_id, team.id


async def create_agent(db_session, email, full_name):
    """Helper: create user + profile + agent, return (user_id, profile_id, agent_id)."""
    user_id = await create_user(db_session, email)
    profile_id = await create_profile(db_session, user_id, full_name, UserType.AGENT)
    agent = Agent(profile_id=profile_id, agency_name=f"{full_name} Sports")
    db_session.add(agent)
    await db_session.flush()
    return user_id, profile_id, agent.id


async def create_pitch(db_session, team_id, player_name, status=PitchStatus.ACTIVE):
    """Helper: create a player and a pitch for them, return pitch_id."""
    player = Player(full_name=player_name, position="Forward")
    db_session.add(player)
    await db_session.flush()
    pitch = TransferPitch(team_id=team_id, player_id=player.id, status=status.value)
    db_session.add(pitch)
    await db_session.flush()
    return pitch.id


@pytest_asyncio.fixture
async def market(db_session):
    """A team with a pitched player and two agents.

    Filler users are created first so that user ids, profile ids and party
    ids never coincide; routing to the wrong id space then shows up as a
    wrong addressee.
    """
    for i in range(3):
        await create_user(db_session, f"filler{i}@example.com")

    team_user, team_profile, team_id = await create_team(
        db_session, "secretary@harbourfc.example", "Harbour FC"
    )
    agent_user, agent_profile, agent_id = await create_agent(
        db_session, "ada@agency.example", "Ada Okafor"
    )
    other_user, other_profile, other_agent_id = await create_agent(
        db_session, "ben@agency.example", "Ben Larsen"
    )
    pitch_id = await create_pitch(db_session, team_id, "Marco Silva")

    return {
        "team_user": team_user,
        "team_profile": team_profile,
        "team_id": team_id,
        "agent_user": agent_user,
        "agent_profile": agent_profile,
        "agent_id": agent_id,
        "other_agent_user": other_user,
        "other_agent_id": other_agent_id,
        "pitch_id": pitch_id,
    }
