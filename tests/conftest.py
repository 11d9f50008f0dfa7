"""
Storefront - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set testing environment
TEST_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{TEST_DIR}/test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['UPLOAD_DIR'] = os.path.join(TEST_DIR, 'uploads')
os.environ['RATE_LIMIT_ENABLED'] = 'false'

from storefront.main import app
from storefront.core.config import settings
from storefront.core.database import Base, enable_sqlite_foreign_keys, get_db
from storefront.core.security import create_access_token, get_password_hash
from storefront.models.role import Role
from storefront.models.user import User

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
test_engine = create_async_engine(os.environ['DATABASE_URL'], echo=False, poolclass=NullPool)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def roles(db_session: AsyncSession) -> dict:
    """Default and admin roles, as seeded at startup"""
    customer = Role(name=settings.DEFAULT_ROLE_NAME, description='Default role')
    admin = Role(name=settings.ADMIN_ROLE_NAME, description='Administrator')
    db_session.add_all([customer, admin])
    await db_session.commit()
    return {'customer': customer, 'admin': admin}


async def _make_user(db_session: AsyncSession, role: Role, password: str) -> User:
    user = User(
        email=fake.unique.email().lower(),
        hashed_password=get_password_hash(password),
        full_name=fake.name(),
        role_id=role.id,
        is_active=True,
    )
    user.role = role
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession, roles: dict) -> User:
    """Create a customer"""
    return await _make_user(db_session, roles['customer'], TEST_PASSWORD)


@pytest.fixture
async def admin_user(db_session: AsyncSession, roles: dict) -> User:
    """Create an admin"""
    return await _make_user(db_session, roles['admin'], 'adminpassword123')


def _headers_for(user: User) -> dict:
    token = create_access_token({'sub': user.id, 'email': user.email, 'role': user.role_name})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return _headers_for(test_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return _headers_for(admin_user)
