import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.instrumentation import install_query_counter
from app.services import article_service


@pytest.mark.asyncio
async def test_query_counter_counts_statements(db_session: AsyncSession, query_counter):
    await article_service.get_articles(db_session)
    await article_service.get_articles_by_user_id(db_session, 1)
    assert query_counter.count == 2


@pytest.mark.asyncio
async def test_query_counter_reset(db_session: AsyncSession, query_counter):
    await article_service.get_articles(db_session)
    query_counter.reset()
    assert query_counter.count == 0


@pytest.mark.asyncio
async def test_slow_queries_are_logged(caplog):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    counter = install_query_counter(engine, slow_query_ms=0)
    try:
        with caplog.at_level(logging.WARNING, logger="app.instrumentation"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert counter.count == 1
    assert any("Slow query" in r.message and "SELECT 1" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_fast_queries_are_not_logged(caplog):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    install_query_counter(engine, slow_query_ms=60_000)
    try:
        with caplog.at_level(logging.WARNING, logger="app.instrumentation"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert not [r for r in caplog.records if r.name == "app.instrumentation"]
