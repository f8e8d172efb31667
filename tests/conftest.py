"""
Pytest Configuration and Fixtures

Provides fixtures for:
- Database sessions (async, in-memory SQLite)
- HTTP client bound to the app with the database overridden
- Test data factories and bearer-token helpers
"""
# JWT_SECRET_KEY must exist before importing app: the settings validator requires it when DEBUG=False
import os
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-testing-only-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import patch

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import create_access_token, hash_password
from app.core.config import settings
from app.db.database import Base, get_db
from app.db.models.brand import Brand
from app.db.models.fuel_price import FuelPrice
from app.db.models.service import Service
from app.db.models.station import Station
from app.db.models.transaction import Transaction, TransactionStatus, PaymentStatus
from app.db.models.user import User, UserRole
from app.main import app


# Test database URL (SQLite in memory for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # SQLite leaves foreign keys off unless asked, PostgreSQL always enforces them
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests"""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
async def test_client(session_maker, db_session: AsyncSession):
    """Create test client with database override.

    Each request gets its own session, as with get_db in production, so a
    rollback inside a request never expires the fixtures held by db_session.
    """
    from httpx import AsyncClient, ASGITransport

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# JWT secret
# ============================================================================

_TEST_JWT_SECRET = "test-jwt-secret-key-for-testing-only-do-not-use-in-production"


@pytest.fixture(autouse=True)
def set_jwt_secret():
    """Pin the JWT settings for every test"""
    with patch.object(settings, "JWT_SECRET_KEY", _TEST_JWT_SECRET), \
         patch.object(settings, "JWT_ALGORITHM", "HS256"), \
         patch.object(settings, "JWT_ACCESS_TOKEN_EXPIRE_DAYS", 30):
        yield


def auth_headers(user: User) -> dict[str, str]:
    """Authorization header carrying a valid token for ``user``"""
    token = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# Test Data Factories
# ============================================================================

_email_counter = 0


def _next_email() -> str:
    global _email_counter
    _email_counter += 1
    return f"user{_email_counter}@example.com"


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Factory for creating test users"""
    async def _create_user(
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        full_name: str | None = "Test User",
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            email=(email or _next_email()).lower(),
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def brand_factory(db_session: AsyncSession):
    """Factory for creating test brands"""
    async def _create_brand(name: str = "Pertamina", logo_url: str | None = None) -> Brand:
        brand = Brand(name=name, logo_url=logo_url)
        db_session.add(brand)
        await db_session.commit()
        await db_session.refresh(brand)
        return brand

    return _create_brand


@pytest.fixture
def service_factory(db_session: AsyncSession):
    """Factory for creating test services (station amenities)"""
    async def _create_service(name: str = "Toilet", icon_url: str | None = None) -> Service:
        service = Service(name=name, icon_url=icon_url)
        db_session.add(service)
        await db_session.commit()
        await db_session.refresh(service)
        return service

    return _create_service


@pytest.fixture
def station_factory(db_session: AsyncSession):
    """Factory for creating test stations"""
    async def _create_station(
        name: str = "SPBU 34.123.01",
        address: str | None = "Jl. Sudirman No. 1, Jakarta",
        brand_id=None,
        fuel_prices: dict[str, str] | None = None,
    ) -> Station:
        station = Station(
            name=name,
            address=address,
            latitude=-6.2,
            longitude=106.8,
            brand_id=brand_id,
            pump_count=4,
            queue_count=0,
        )
        db_session.add(station)
        await db_session.flush()
        for fuel_type, price in (fuel_prices or {}).items():
            db_session.add(FuelPrice(spbu_id=station.id, fuel_type=fuel_type, price=Decimal(price)))
        await db_session.commit()
        await db_session.refresh(station)
        return station

    return _create_station


@pytest.fixture
def transaction_factory(db_session: AsyncSession):
    """Factory for inserting transactions directly, in any state"""
    async def _create_transaction(
        user_id,
        spbu_id,
        fuel_type: str = "Pertalite",
        quantity: str = "10",
        price_per_liter: str = "10000.00",
        status: TransactionStatus = TransactionStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
    ) -> Transaction:
        transaction = Transaction(
            user_id=user_id,
            spbu_id=spbu_id,
            fuel_type=fuel_type,
            quantity=Decimal(quantity),
            price_per_liter=Decimal(price_per_liter),
            total_price=Decimal(quantity) * Decimal(price_per_liter),
            status=status,
            payment_method="cash",
            payment_status=payment_status,
        )
        db_session.add(transaction)
        await db_session.commit()
        await db_session.refresh(transaction)
        return transaction

    return _create_transaction


# ============================================================================
# Sample Test Data
# ============================================================================

@pytest.fixture
async def sample_user(user_factory) -> User:
    return await user_factory(email="budi@example.com", full_name="Budi Santoso")


@pytest.fixture
async def other_user(user_factory) -> User:
    return await user_factory(email="siti@example.com", full_name="Siti Aminah")


@pytest.fixture
async def admin_user(user_factory) -> User:
    return await user_factory(email="admin@example.com", full_name="Admin", role=UserRole.ADMIN)


@pytest.fixture
async def sample_station(station_factory) -> Station:
    """Station selling Pertalite at 10000.00 and Pertamax at 12950.50"""
    return await station_factory(fuel_prices={"Pertalite": "10000.00", "Pertamax": "12950.50"})
