import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["RATE_LIMIT_WRITES_PER_MINUTE"] = "0"
os.environ["SUBSCRIPTION_SWEEP_INTERVAL_SECONDS"] = "0"

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from streamhub.core.db import Base, get_db
from streamhub.main import app
from streamhub.modules.catalog import schemas as catalog_schemas
from streamhub.modules.catalog import service as catalog_service
from streamhub.modules.catalog.models import ContentStatus, ContentType
from streamhub.modules.plans import schemas as plan_schemas
from streamhub.modules.plans import service as plans_service
from streamhub.modules.subscriptions import schemas as subscription_schemas
from streamhub.modules.subscriptions import service as subscriptions_service
from streamhub.modules.users import schemas as user_schemas
from streamhub.modules.users import service as users_service


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_content(db):
    async def _make(title: str, **fields):
        fields.setdefault("content_type", ContentType.MOVIE)
        fields.setdefault("status", ContentStatus.ACTIVE)
        return await catalog_service.create_content(db, catalog_schemas.ContentCreate(title=title, **fields))
    return _make


@pytest.fixture
def make_user(db):
    async def _make(username: str = "viewer", **fields):
        fields.setdefault("email", f"{username}@streamhub.io")
        fields.setdefault("password", "s3cret-pass")
        return await users_service.create_user(db, user_schemas.UserCreate(username=username, **fields))
    return _make


@pytest.fixture
def make_plan(db):
    async def _make(plan_name: str = "Premium", price: str = "9.99", duration_days: int = 30, **fields):
        return await plans_service.create_plan(db, plan_schemas.PlanCreate(
            plan_name=plan_name, price=Decimal(price), duration_days=duration_days, **fields
        ))
    return _make


@pytest.fixture
def make_subscription(db):
    async def _make(user, plan, start_date: date = date(2026, 1, 1), today: date = date(2026, 1, 1)):
        return await subscriptions_service.create_subscription(
            db,
            subscription_schemas.SubscriptionCreate(user_id=user.id, plan_id=plan.id, start_date=start_date),
            today=today,
        )
    return _make
