import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.adapter.services.sql_audit_sink import SqlAuditSink
from campus_identity.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from campus_identity.app.services.password_policy import PasswordHasher
from campus_identity.depends import (
    get_audit_sink,
    get_clock,
    get_notification_gateway,
    get_password_hasher,
    get_unit_of_work,
)
from tests.fixtures.fakes import FrozenClock, RecordingNotificationGateway


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def gateway():
    return RecordingNotificationGateway()


@pytest_asyncio.fixture
async def client(session_factory, clock, gateway):
    from campus_identity.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notification_gateway] = lambda: gateway
    app.dependency_overrides[get_audit_sink] = lambda: SqlAuditSink(session_factory, clock)
    app.dependency_overrides[get_password_hasher] = lambda: PasswordHasher(rounds=4)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
