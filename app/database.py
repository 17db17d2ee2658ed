from contextlib import asynccontextmanager
from typing import AsyncIterator

from pydantic import BaseModel
from sqlalchemy import event, inspect, or_, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.instrumentation import install_query_counter


def enable_sqlite_foreign_keys(engine) -> None:
    """
    Turn on ``PRAGMA foreign_keys`` for every new SQLite connection so the
    ``articles.user_id`` reference is enforced the same way PostgreSQL does.

    No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

enable_sqlite_foreign_keys(engine)

# Statement counter / slow query log on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession] = async_session,
) -> AsyncIterator[AsyncSession]:
    """
    Yield a session that commits when the block exits cleanly and rolls
    back (re-raising) otherwise.

    Service functions flush but never commit; whoever opens the scope owns
    the transaction boundary.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def apply_partial_update(
    db: AsyncSession,
    model: type[Base],
    changes: BaseModel,
    id_value: int,
    id_column: str | None = None,
    *,
    skip_unchanged: bool = True,
) -> int:
    """
    Apply the fields explicitly set on *changes* to the row of *model*
    whose *id_column* (the primary key by default) equals *id_value*.

    Only fields the caller actually supplied are written
    (``model_dump(exclude_unset=True)``); the schema class of *changes*
    therefore defines the full set of columns this path can touch.

    With *skip_unchanged* the statement also requires at least one value
    to differ from what is stored, so the returned row count means "rows
    whose data changed" on every backend.

    Returns the changed-row count reported by the store.  An empty change
    set issues no statement and returns 0.
    """
    values = changes.model_dump(exclude_unset=True)
    if not values:
        return 0

    if id_column is None:
        key = inspect(model).primary_key[0]
    else:
        key = getattr(model, id_column)

    stmt = update(model).where(key == id_value).values(**values)
    if skip_unchanged:
        stmt = stmt.where(
            or_(*(getattr(model, name).is_distinct_from(value) for name, value in values.items()))
        )

    result = await db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount
