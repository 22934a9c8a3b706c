"""
Tests for the unit-of-work session: an interest change and the notification
it triggers are committed or rolled back together.
"""

import pytest
from sqlalchemy import func, inspect, select
from transfers.database.db import get_db_session, init_database
from transfers.database.models import AgentInterest, Notification
from transfers.services import interest_service


async def _count(db_session, model):
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_clean_exit_commits_interest_and_notification(db_session, market):
    await db_session.commit()

    async for session in get_db_session():
        await interest_service.express_interest(
            session, market["pitch_id"], market["agent_id"], market["agent_user"]
        )

    assert await _count(db_session, AgentInterest) == 1
    assert await _count(db_session, Notification) == 1


@pytest.mark.asyncio
async def test_error_rolls_back_interest_and_notification(db_session, market):
    """A failure later in the same unit of work discards both rows."""
    await db_session.commit()

    sessions = get_db_session()
    session = await sessions.__anext__()
    await interest_service.express_interest(
        session, market["pitch_id"], market["agent_id"], market["agent_user"]
    )

    with pytest.raises(RuntimeError, match="request aborted"):
        await sessions.athrow(RuntimeError("request aborted"))

    assert await _count(db_session, AgentInterest) == 0
    assert await _count(db_session, Notification) == 0


@pytest.mark.asyncio
async def test_init_database_is_idempotent(test_engine):
    """Tables already exist; creating them again is a no-op."""
    await init_database(bind=test_engine)
    await init_database(bind=test_engine)

    async with test_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {"agent_interest", "notifications", "transfer_pitches"} <= set(tables)
