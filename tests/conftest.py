"""
Complaint Desk - Test Configuration and Fixtures
"""
import os
import uuid
from typing import AsyncGenerator, Optional

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_complaint_desk.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['SECURE_COOKIES'] = 'false'

from complaint_desk.main import app  # noqa: E402
from complaint_desk.config import settings  # noqa: E402
from complaint_desk.database import Base, get_db, enable_sqlite_foreign_keys  # noqa: E402
from complaint_desk.core.security import get_password_hash, session_issuer  # noqa: E402
from complaint_desk.models import (  # noqa: E402
    Branch, LineOfBusiness, ComplaintStatus, ComplaintType,
    User, Role, Complaint,
)
from complaint_desk.schemas.auth import SessionClaims  # noqa: E402

fake = Faker()

TEST_PASSWORD = 'testpassword123'


@pytest.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh SQLite database and session for each test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep attachment files inside the test's temp directory"""
    path = tmp_path / 'public'
    monkeypatch.setattr(settings, 'UPLOAD_DIR', str(path))
    return path


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
def login_as(client: AsyncClient):
    """Put a session cookie for a user on the client"""
    def _login_as(user: User) -> None:
        claims = SessionClaims(id=user.id, email=user.email, name=user.name, role=user.role)
        client.cookies.set(settings.SESSION_COOKIE_NAME, session_issuer.issue(claims))

    return _login_as


@pytest.fixture
async def lookups(db_session: AsyncSession) -> dict:
    """Status, type, branch and line of business rows"""
    rows = {
        'status': ComplaintStatus(name='Open'),
        'status_closed': ComplaintStatus(name='Closed'),
        'type': ComplaintType(name='Claims'),
        'branch': Branch(name='Head Office'),
        'line_of_business': LineOfBusiness(name='Motor'),
    }
    db_session.add_all(rows.values())
    await db_session.commit()
    return rows


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for users with a known password"""
    async def _make_user(role: Role = Role.USER, is_active: bool = True) -> User:
        user = User(
            email=fake.unique.email(),
            password_hash=get_password_hash(TEST_PASSWORD),
            name=fake.name(),
            role=role.value,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(role=Role.ADMIN)


@pytest.fixture
async def test_user(make_user) -> User:
    return await make_user()


@pytest.fixture
def make_complaint(db_session: AsyncSession, lookups: dict):
    """Factory for complaints created by one user and optionally assigned to another"""
    async def _make_complaint(created_by: User, assigned_to: Optional[User] = None) -> Complaint:
        complaint = Complaint(
            complaint_number=f"CMP-TEST-{uuid.uuid4().hex[:6]}",
            customer_name=fake.name(),
            customer_id=fake.bothify('CUST-####'),
            policy_number=fake.bothify('POL-########'),
            description=fake.sentence(),
            status_id=lookups['status'].id,
            type_id=lookups['type'].id,
            branch_id=lookups['branch'].id,
            line_of_business_id=lookups['line_of_business'].id,
            created_by_id=created_by.id,
            assigned_to_id=assigned_to.id if assigned_to else None,
        )
        db_session.add(complaint)
        await db_session.commit()
        return complaint

    return _make_complaint


@pytest.fixture
def complaint_payload(lookups: dict):
    """Complete, valid body for complaint create/update"""
    def _complaint_payload(**overrides) -> dict:
        payload = {
            'customerName': fake.name(),
            'customerId': fake.bothify('CUST-####'),
            'policyNumber': fake.bothify('POL-########'),
            'policyType': 'Comprehensive',
            'description': fake.sentence(),
            'channel': 'EMAIL',
            'typeId': str(lookups['type'].id),
            'statusId': str(lookups['status'].id),
            'branchId': str(lookups['branch'].id),
            'lineOfBusinessId': str(lookups['line_of_business'].id),
        }
        payload.update(overrides)
        return payload

    return _complaint_payload


@pytest.fixture
def user_password() -> str:
    """Plain password of every user built by make_user"""
    return TEST_PASSWORD
