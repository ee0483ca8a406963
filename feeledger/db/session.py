from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from feeledger.core.config import settings


def _engine_options(database_url: str) -> dict:
    options = {"echo": False, "future": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        # pool_pre_ping: drop connections the server closed while idle.
        # pool_recycle: seconds before a pooled connection is replaced.
        options.update(pool_pre_ping=True, pool_recycle=300)
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Objects stay readable after commit; ledger reads that need fresh rows use populate_existing.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request. Each ledger operation commits or rolls back its own transaction."""
    async with AsyncSessionLocal() as session:
        yield session
