"""
Every protected endpoint rejects a request without a session before
touching the database.
"""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport

from complaint_desk.main import app
from complaint_desk.database import get_db


SOME_ID = str(uuid.uuid4())

PROTECTED_ENDPOINTS = [
    ('GET', '/api/v1/auth/session'),
    ('GET', '/api/v1/complaints'),
    ('POST', '/api/v1/complaints'),
    ('GET', f'/api/v1/complaints/{SOME_ID}'),
    ('PUT', f'/api/v1/complaints/{SOME_ID}'),
    ('GET', f'/api/v1/complaints/{SOME_ID}/actions'),
    ('POST', f'/api/v1/complaints/{SOME_ID}/attachments'),
    ('DELETE', f'/api/v1/attachments/{SOME_ID}'),
    ('GET', '/api/v1/notifications'),
    ('PUT', '/api/v1/notifications/read-all'),
    ('GET', f'/api/v1/notifications/{SOME_ID}'),
    ('PUT', f'/api/v1/notifications/{SOME_ID}'),
    ('DELETE', f'/api/v1/notifications/{SOME_ID}'),
]


class UnreachableSession:
    """Stands in for the database session and fails on any use."""

    def __getattr__(self, name):
        raise AssertionError(f'database accessed without a session: {name}')


@pytest.fixture
async def anonymous_client():
    async def override_get_db():
        yield UnreachableSession()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.mark.asyncio
@pytest.mark.parametrize('method,url', PROTECTED_ENDPOINTS)
async def test_requires_session(anonymous_client: AsyncClient, method, url):
    response = await anonymous_client.request(method, url)

    assert response.status_code == 401
    assert response.json() == {'error': 'Unauthorized'}


@pytest.mark.asyncio
@pytest.mark.parametrize('method,url', PROTECTED_ENDPOINTS)
async def test_garbage_cookie_is_unauthorized(anonymous_client: AsyncClient, method, url):
    anonymous_client.cookies.set('session-token', 'not-a-jwt')

    response = await anonymous_client.request(method, url)

    assert response.status_code == 401
