import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./booking-test.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from decimal import Decimal

import pytest
import pytest_asyncio
from fakeredis import aioredis as fake_aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from booking.app.core import redis_client as redis_module
from booking.app.db.models import Base, DiningTable, MenuItem
from booking.app.db.session import get_session
from booking.app.main import app


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'booking.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def redis():
    client = fake_aioredis.FakeRedis(decode_responses=True)
    await client.flushall()
    redis_module.redis_client = client
    try:
        yield client
    finally:
        redis_module.redis_client = None
        await client.aclose()


@pytest.fixture
def make_table(session_factory):
    async def _make(capacity: int = 4, location: str = "Main hall") -> DiningTable:
        async with session_factory() as session:
            table = DiningTable(capacity=capacity, location=location)
            session.add(table)
            await session.commit()
            return table

    return _make


@pytest.fixture
def make_menu_item(session_factory):
    async def _make(name: str, price: str, availability: bool = True) -> MenuItem:
        async with session_factory() as session:
            item = MenuItem(name=name, price=Decimal(price), availability=availability)
            session.add(item)
            await session.commit()
            return item

    return _make


@pytest_asyncio.fixture
async def client(session_factory, redis):
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.clear()
