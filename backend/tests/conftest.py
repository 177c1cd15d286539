import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from building_registry.auth.jwt import CurrentUser, Role, create_access_token
from building_registry.database import Base, get_db
from building_registry.main import app
from building_registry.models import (
    City,
    CitySubdivision,
    Community,
    District,
    Provider,
    Region,
    Street,
)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db):
    """Two regions down to city level, one subdivision, two streets, two providers."""
    db.add_all([
        Region(code="14", name="Mazowieckie"),
        Region(code="12", name="Małopolskie"),
    ])
    await db.flush()
    db.add_all([
        District(code="1465", name="Warszawa", region_code="14"),
        District(code="1261", name="Kraków", region_code="12"),
    ])
    await db.flush()
    db.add_all([
        Community(code="1465011", name="Warszawa", district_code="1465"),
        Community(code="1261011", name="Kraków", district_code="1261"),
    ])
    await db.flush()
    db.add_all([
        City(code="0918123", name="Warszawa", community_code="1465011"),
        City(code="0950463", name="Kraków", community_code="1261011"),
    ])
    await db.flush()
    db.add_all([
        CitySubdivision(code="0918130", name="Mokotów", city_code="0918123"),
        Street(code="10843", name="ul. Marszałkowska"),
        Street(code="05432", name="ul. Floriańska"),
        Provider(id=1, name="Orange Polska", technology="FTTH", bandwidth=1000),
        Provider(id=2, name="Netia", technology="HFC", bandwidth=600),
    ])
    await db.commit()
    return db


@pytest.fixture
def writer() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=Role.WRITE)


@pytest.fixture
def admin() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=Role.ADMIN)


@pytest.fixture
def building_payload():
    """Factory for a valid Warsaw building; keyword overrides replace fields."""
    def _payload(**overrides):
        payload = {
            "region_code": "14",
            "district_code": "1465",
            "community_code": "1465011",
            "city_code": "0918123",
            "building_number": "42A",
            "post_code": "00-001",
            "longitude": 21.0122,
            "latitude": 52.2297,
            "provider_id": 1,
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def auth_headers():
    def _headers(role: Role = Role.READ, user_id: uuid.UUID | None = None) -> dict:
        token = create_access_token(str(user_id or uuid.uuid4()), role.value)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest_asyncio.fixture
async def client(seeded):
    async def _override_get_db():
        yield seeded

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)
