from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from booking.app.core.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (used for local runs and tests) does not take pool sizing arguments.
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a scoped AsyncSession for request handling."""
    async with SessionLocal() as session:
        yield session
