"""
Test infrastructure for the article data-access layer.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- Foreign keys are switched on for the test engine exactly as for the
  production engine, so an unknown ``user_id`` fails at the store.
- All tables are created fresh before each test and dropped after, giving
  each test a clean isolated state without needing transactions or truncation.
- ``query_counter`` counts every statement the test engine executes, which
  lets tests assert that rejected input never reaches the database.
"""
import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.database import Base, enable_sqlite_foreign_keys
from app.instrumentation import QueryCounter, install_query_counter
from app.models import Article, User

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

enable_sqlite_foreign_keys(engine_test)

# Statement counter on the test engine.
test_query_counter = install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Helpers (exposed to tests through the fixtures below)
# ---------------------------------------------------------------------------

async def _create_user(
    db: AsyncSession,
    username: str = "writer",
    avatar: str | None = "https://avatars.example.com/writer.png",
) -> User:
    user = User(username=username, user_avatar_url=avatar)
    db.add(user)
    await db.flush()
    return user


async def _count_articles(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Article))).scalar_one()


def _article_payload(user_id: int, **overrides) -> dict:
    payload = {
        "article_title": "Night Markets of Taipei",
        "article_subtitle": "Where to eat after dark",
        "article_image_url": "https://images.example.com/taipei.jpg",
        "article_date": "2024-05-01T09:30:00+00:00",
        "article_text": "Shilin is the largest, but Raohe is the one to visit.",
        "article_genre": "Travel",
        "user_id": user_id,
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession.  Service functions only flush, so everything
    a test writes stays visible within this session.
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def author(db_session: AsyncSession) -> User:
    return await _create_user(db_session)


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Return a coroutine function that inserts another user."""
    async def _make(username: str, avatar: str | None = None) -> User:
        return await _create_user(db_session, username, avatar)
    return _make


@pytest.fixture
def count_articles(db_session: AsyncSession):
    """Return a coroutine function that counts the rows in ``articles``."""
    async def _count() -> int:
        return await _count_articles(db_session)
    return _count


@pytest.fixture
def article_payload():
    """Return a builder for a valid create payload owned by the given user."""
    return _article_payload


@pytest.fixture
def query_counter() -> QueryCounter:
    test_query_counter.reset()
    return test_query_counter


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """The test engine's session factory, for code that opens its own sessions."""
    return async_session_test
