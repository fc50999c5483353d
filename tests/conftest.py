"""Shared fixtures: in-memory database, fake executors, capability tables."""
import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from agent_tools.tools.permissions import CapabilityTable
from agent_tools.tools.registry import ToolCategory

TENANT = "tenant-1"


@pytest.fixture
async def db():
    """Fresh in-memory database patched in for every executor."""
    from agent_tools.database import Base
    from agent_tools import models  # noqa: register tables

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    with patch("agent_tools.database.async_session_factory", factory):
        yield factory

    await engine.dispose()


@pytest.fixture
def table():
    return CapabilityTable.from_mapping({
        "planner": ["calendar", "crm"],
        "finance": ["subscription", "ledger"],
        "helper": ["calendar", "crm", "knowledge", "memory"],
    })


def make_executor(text, calls=None):
    async def executor(context_id, query, agent_id=None):
        if calls is not None:
            calls.append((context_id, query, agent_id))
        return text
    return executor


def failing_executor(exc):
    async def executor(context_id, query, agent_id=None):
        await asyncio.sleep(0)
        raise exc
    return executor


@pytest.fixture
def calls():
    return []


@pytest.fixture
def fake_executors(calls):
    """Every category answers with '<category> ok' and records its call."""
    return {c: make_executor(f"{c.value} ok", calls) for c in ToolCategory}
