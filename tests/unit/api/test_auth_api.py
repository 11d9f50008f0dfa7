"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from storefront.core.rate_limiter import limiter

fake = Faker()


class TestUserRegistration:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient, roles):
        user_data = {
            'email': fake.email(),
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['message'] == 'User registered successfully'
        assert body['data']['email'] == user_data['email'].lower()
        assert 'hashed_password' not in body['data']

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, test_user):
        user_data = {
            'email': test_user.email,
            'password': 'securePassword123!',
            'full_name': fake.name(),
        }

        response = await client.post('/api/v1/auth/register', json=user_data)

        assert response.status_code == 409
        assert response.json() == {
            'success': False,
            'message': 'Email already exists',
            'error': 'DUPLICATE_EMAIL',
        }

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/register', json={})

        assert response.status_code == 400
        body = response.json()
        assert body['success'] is False
        assert body['message'] == 'Validation failed'
        assert [error['field'] for error in body['errors']] == ['email', 'password', 'full_name']

    @pytest.mark.asyncio
    async def test_register_malformed_json(self, client: AsyncClient):
        response = await client.post(
            '/api/v1/auth/register',
            content=b'{"email": ',
            headers={'Content-Type': 'application/json'},
        )

        assert response.status_code == 400
        assert response.json()['errors'][0]['message'] == 'Request body must be valid JSON'


class TestUserLogin:
    """Test user login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'testpassword123',
        })

        assert response.status_code == 200
        data = response.json()['data']
        assert data['token_type'] == 'bearer'
        assert data['user']['id'] == test_user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': test_user.email,
            'password': 'wrongpassword',
        })

        assert response.status_code == 401
        assert response.json()['error'] == 'INVALID_CREDENTIALS'


class TestTokenRefresh:

    async def _login(self, client, user):
        response = await client.post('/api/v1/auth/login', json={
            'email': user.email,
            'password': 'testpassword123',
        })
        return response.json()['data']

    @pytest.mark.asyncio
    async def test_refresh_then_use_new_token(self, client: AsyncClient, test_user):
        tokens = await self._login(client, test_user)

        refreshed = await client.post('/api/v1/auth/refresh', json={'refresh_token': tokens['refresh_token']})
        access = refreshed.json()['data']['access_token']
        profile = await client.get('/api/v1/auth/profile', headers={'Authorization': f'Bearer {access}'})

        assert refreshed.status_code == 200
        assert profile.json()['data']['id'] == test_user.id

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_a_bearer_token(self, client: AsyncClient, test_user):
        tokens = await self._login(client, test_user)

        response = await client.get(
            '/api/v1/auth/profile', headers={'Authorization': f"Bearer {tokens['refresh_token']}"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_requires_token(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/refresh', json={})

        assert response.status_code == 400
        assert response.json()['errors'][0]['field'] == 'refresh_token'

    @pytest.mark.asyncio
    async def test_logout_revokes_refresh_token(self, client: AsyncClient, test_user):
        tokens = await self._login(client, test_user)
        headers = {'Authorization': f"Bearer {tokens['access_token']}"}

        logout = await client.post(
            '/api/v1/auth/logout', json={'refresh_token': tokens['refresh_token']}, headers=headers
        )
        refreshed = await client.post('/api/v1/auth/refresh', json={'refresh_token': tokens['refresh_token']})

        assert logout.status_code == 200
        assert refreshed.status_code == 401
        assert refreshed.json()['error'] == 'INVALID_TOKEN'

    @pytest.mark.asyncio
    async def test_logout_requires_authentication(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/logout', json={})

        assert response.status_code == 401


class TestRateLimits:

    @pytest.fixture
    def rate_limits_on(self):
        limiter.reset()
        limiter.enabled = True
        try:
            yield limiter
        finally:
            limiter.enabled = False
            limiter.reset()

    @pytest.mark.asyncio
    async def test_forgot_password_limited(self, client: AsyncClient, roles, rate_limits_on):
        statuses = []
        for _ in range(4):
            response = await client.post('/api/v1/auth/forgot-password', json={'email': 'someone@example.com'})
            statuses.append(response.status_code)

        assert statuses == [200, 200, 200, 429]
        assert response.json() == {
            'success': False,
            'message': 'Too many requests, please try again later',
            'error': 'RATE_LIMITED',
        }

    @pytest.mark.asyncio
    async def test_failed_logins_count_towards_limit(self, client: AsyncClient, test_user, rate_limits_on):
        email = test_user.email
        for _ in range(10):
            await client.post('/api/v1/auth/login', json={'email': email, 'password': 'wrong-guess'})

        response = await client.post('/api/v1/auth/login', json={
            'email': email,
            'password': 'testpassword123',
        })

        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_limits_off_by_configuration(self, client: AsyncClient, roles):
        for _ in range(5):
            response = await client.post('/api/v1/auth/forgot-password', json={'email': 'someone@example.com'})

        assert response.status_code == 200


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get('/api/v1/auth/profile', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['data']['email'] == test_user.email

    @pytest.mark.asyncio
    async def test_profile_requires_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/profile')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/profile', headers={'Authorization': 'Bearer garbage'})

        assert response.status_code == 401
        assert response.json()['error'] == 'INVALID_TOKEN'

    @pytest.mark.asyncio
    async def test_change_password_confirmation(self, client: AsyncClient, auth_headers):
        response = await client.put('/api/v1/auth/change-password', headers=auth_headers, json={
            'current_password': 'testpassword123',
            'new_password': 'brandnew1',
            'confirm_password': 'brandnew2',
        })

        assert response.status_code == 400
        assert response.json()['errors'][0]['field'] == 'confirm_password'


class TestApplication:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
        assert 'X-Request-ID' in response.headers

    @pytest.mark.asyncio
    async def test_openapi_documents_validation_errors(self, client: AsyncClient):
        response = await client.get('/openapi.json')

        schemas = response.json()['components']['schemas']
        assert 'ValidationErrorResponse' in schemas
        assert 'EnvelopeResponse' in schemas
