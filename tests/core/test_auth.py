import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.jwt import create_refresh_token, decode_token
from campus_events.core.auth.models import UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.exceptions import AuthenticationError, DuplicateError


class TestAuthService:
    """Tests for AuthService."""

    async def test_create_user(self, db_session: AsyncSession):
        """Test creating a new user."""
        auth_service = AuthService(db_session)

        user = await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ADMIN,
            department="Registrar",
        )

        assert user.id is not None
        assert user.email == "test@campus.edu"
        assert user.full_name == "Test User"
        assert user.department == "Registrar"
        assert user.role == "admin"
        assert user.is_active is True
        assert user.password_hash != "Password123"  # Password should be hashed

    async def test_create_user_duplicate_email(self, db_session: AsyncSession):
        """Test that duplicate email raises error."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ADMIN,
        )

        with pytest.raises(DuplicateError) as exc_info:
            await auth_service.create_user(
                email="test@campus.edu",
                password="AnotherPass123",
                full_name="Another User",
                role=UserRole.STUDENT,
            )

        assert "already exists" in str(exc_info.value)

    async def test_authenticate_success(self, db_session: AsyncSession):
        """Test successful authentication."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ORGANIZER,
        )

        user, access_token, refresh_token = await auth_service.authenticate(
            email="test@campus.edu",
            password="Password123",
        )

        assert user.email == "test@campus.edu"
        assert user.last_login_at is not None
        payload = decode_token(access_token, token_type="access")
        assert payload["sub"] == str(user.id)
        assert payload["role"] == "organizer"
        assert refresh_token is not None

    async def test_authenticate_wrong_password(self, db_session: AsyncSession):
        """Test authentication with wrong password."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ADMIN,
        )

        with pytest.raises(AuthenticationError):
            await auth_service.authenticate(
                email="test@campus.edu",
                password="WrongPassword",
            )

    async def test_authenticate_without_password(self, db_session: AsyncSession):
        """Accounts created without a password cannot log in."""
        auth_service = AuthService(db_session)

        await auth_service.create_user(
            email="guest@campus.edu",
            password=None,
            full_name="Guest Speaker",
            role=UserRole.STUDENT,
        )

        with pytest.raises(AuthenticationError):
            await auth_service.authenticate(email="guest@campus.edu", password="Password123")

    async def test_authenticate_inactive_user(self, db_session: AsyncSession):
        """Test authentication with inactive user."""
        auth_service = AuthService(db_session)

        user = await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ADMIN,
        )
        user.is_active = False
        await db_session.flush()

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.authenticate(
                email="test@campus.edu",
                password="Password123",
            )

        assert "deactivated" in str(exc_info.value)

    async def test_refresh_tokens(self, db_session: AsyncSession):
        auth_service = AuthService(db_session)
        user = await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.STUDENT,
        )

        access_token, refresh_token = await auth_service.refresh_tokens(
            create_refresh_token(user.id)
        )

        assert decode_token(access_token, token_type="access")["sub"] == str(user.id)
        assert decode_token(refresh_token, token_type="refresh")["sub"] == str(user.id)

    async def test_refresh_rejects_access_token(self, db_session: AsyncSession):
        auth_service = AuthService(db_session)
        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.STUDENT,
        )
        _, access_token, _ = await auth_service.authenticate("test@campus.edu", "Password123")

        with pytest.raises(AuthenticationError):
            await auth_service.refresh_tokens(access_token)


class TestAuthEndpoints:
    """Tests for auth API endpoints."""

    async def test_login_success(self, client: AsyncClient, db_session: AsyncSession):
        """Test login endpoint."""
        auth_service = AuthService(db_session)
        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.ADMIN,
        )
        await db_session.commit()

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "test@campus.edu", "password": "Password123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "access_token" in data["data"]
        assert "refresh_token" in data["data"]
        assert data["data"]["user"]["email"] == "test@campus.edu"
        assert data["data"]["user"]["role"] == "admin"

    async def test_login_wrong_credentials(self, client: AsyncClient):
        """Test login with wrong credentials."""
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "wrong@campus.edu", "password": "WrongPass"},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_get_me_unauthorized(self, client: AsyncClient):
        """Test /me endpoint without token."""
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_get_me_authorized(self, client: AsyncClient, db_session: AsyncSession):
        """Test /me endpoint with valid token."""
        auth_service = AuthService(db_session)
        await auth_service.create_user(
            email="test@campus.edu",
            password="Password123",
            full_name="Test User",
            role=UserRole.STUDENT,
        )
        await db_session.commit()

        login_response = await client.post(
            "/api/v1/auth/login",
            json={"email": "test@campus.edu", "password": "Password123"},
        )
        access_token = login_response.json()["data"]["access_token"]

        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data"]["email"] == "test@campus.edu"
        assert data["data"]["role"] == "student"

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
