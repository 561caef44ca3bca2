"""
Tests for the session manager
"""

import json
from unittest.mock import Mock

import httpx
import pytest

from infrastructure.external.errors import NetworkError, ServerError, UnauthorizedError, ValidationError
from services.auth_service.auth_backend import AuthBackend, RestAuthBackend
from services.auth_service.credential_store import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    CookieCredentialStore,
    InMemoryCredentialStore,
    SessionStateCredentialStore,
)
from services.auth_service.exceptions import (
    AuthError,
    InvalidCredentialsError,
    NoRefreshTokenError,
    NotAuthenticatedError,
    RefreshFailedError,
)
from services.auth_service.models import LoginCredentials, LoginResult, User, UserRole
from services.auth_service.session_manager import SessionManager
from tests.conftest import FakeCookieManager, MockSessionState, json_response, make_token, user_payload


ADMIN_TOKEN = make_token(role="ADMIN")
REFRESH_TOKEN = make_token(exp_offset=86400, type="refresh")


def backend_handler(request: httpx.Request) -> httpx.Response:
    """A well-behaved auth backend"""
    path = request.url.path
    if path.endswith("/auth/login"):
        body = json.loads(request.content)
        if body == {"email": "admin@example.com", "password": "password123"}:
            return json_response(200, {
                "success": True,
                "data": {"user": user_payload(), "token": ADMIN_TOKEN, "refreshToken": REFRESH_TOKEN},
            })
        return json_response(401, {"success": False, "message": "Invalid credentials"})
    if path.endswith("/auth/logout"):
        return json_response(200, {"success": True})
    if path.endswith("/auth/refresh"):
        return json_response(200, {"success": True, "data": {"token": "new-access-token"}})
    if path.endswith("/auth/me"):
        return json_response(200, {"success": True, "data": user_payload(fullName="Renamed Admin")})
    return json_response(404, {"success": False, "message": "Not found"})


@pytest.fixture
def stores():
    return InMemoryCredentialStore(), InMemoryCredentialStore()


@pytest.fixture
def manager(make_api_client, stores):
    durable, session = stores
    api = make_api_client(backend_handler)
    manager = SessionManager(RestAuthBackend(api), durable, session)
    api.set_token_provider(manager.get_token)
    return manager


def admin_login(manager, remember=True):
    return manager.login(LoginCredentials("admin@example.com", "password123", remember=remember))


class TestLogin:
    """Test login and credential persistence"""

    def test_admin_login_with_remember(self, manager, stores):
        """Admin login with remember: role ADMIN, token held, authenticated"""
        durable, session = stores

        result = admin_login(manager, remember=True)

        assert result.user.role == UserRole.ADMIN
        assert manager.token
        assert manager.is_authenticated
        assert durable.get(AUTH_TOKEN_KEY) == ADMIN_TOKEN
        assert durable.get(REFRESH_TOKEN_KEY) == REFRESH_TOKEN
        assert session.get(AUTH_TOKEN_KEY) is None

    def test_login_without_remember_uses_session_store(self, manager, stores):
        durable, session = stores

        admin_login(manager, remember=False)

        assert session.get(AUTH_TOKEN_KEY) == ADMIN_TOKEN
        assert session.get(REFRESH_TOKEN_KEY) == REFRESH_TOKEN
        assert durable.get(AUTH_TOKEN_KEY) is None
        assert durable.get(REFRESH_TOKEN_KEY) is None

    def test_user_always_written_to_durable_store(self, manager, stores):
        durable, session = stores

        admin_login(manager, remember=False)

        stored = json.loads(durable.get(USER_KEY))
        assert stored["email"] == "admin@example.com"
        assert stored["role"] == "ADMIN"
        assert session.get(USER_KEY) is None

    def test_relogin_does_not_leave_old_tokens(self, manager, stores):
        durable, session = stores
        admin_login(manager, remember=True)

        admin_login(manager, remember=False)

        assert durable.get(AUTH_TOKEN_KEY) is None
        assert session.get(AUTH_TOKEN_KEY) == ADMIN_TOKEN

    def test_failed_relogin_discards_stored_session(self, manager, stores):
        durable, session = stores
        admin_login(manager, remember=True)

        with pytest.raises(InvalidCredentialsError):
            manager.login(LoginCredentials("admin@example.com", "wrong"))

        assert durable.is_empty() and session.is_empty()
        assert not manager.restore()

    def test_rejected_credentials(self, manager, stores):
        """A 401 becomes InvalidCredentialsError with the server message"""
        durable, session = stores

        with pytest.raises(InvalidCredentialsError) as exc_info:
            manager.login(LoginCredentials("admin@example.com", "wrong"))

        assert exc_info.value.message == "Invalid credentials"
        assert not manager.is_authenticated
        assert durable.is_empty() and session.is_empty()

    def test_remember_is_not_sent_to_backend(self, make_api_client, stores):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return backend_handler(request)

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), *stores)
        admin_login(manager, remember=True)

        assert seen == [{"email": "admin@example.com", "password": "password123"}]


class TestLoginErrorMapping:
    """Test how backend failures surface from login"""

    def make_manager(self, error):
        backend = Mock(spec=AuthBackend)
        backend.login.side_effect = error
        return SessionManager(backend, InMemoryCredentialStore(), InMemoryCredentialStore())

    def test_network_error_passes_through(self):
        manager = self.make_manager(NetworkError("Network error. Please check your connection and try again."))
        with pytest.raises(NetworkError):
            manager.login(LoginCredentials("a@b.c", "x"))

    def test_unreachable_backend_discards_stored_session(self):
        manager = self.make_manager(NetworkError("down"))
        manager.durable_store.set(AUTH_TOKEN_KEY, ADMIN_TOKEN)
        manager.durable_store.set(USER_KEY, json.dumps(user_payload()))

        with pytest.raises(NetworkError):
            manager.login(LoginCredentials("a@b.c", "x"))

        assert manager.durable_store.is_empty()
        assert not manager.restore()

    def test_server_error_passes_through(self):
        manager = self.make_manager(ServerError("Internal server error", 500))
        with pytest.raises(ServerError):
            manager.login(LoginCredentials("a@b.c", "x"))

    def test_validation_error_without_message_uses_default(self):
        manager = self.make_manager(ValidationError("Invalid request", 400))
        with pytest.raises(InvalidCredentialsError) as exc_info:
            manager.login(LoginCredentials("a@b.c", "x"))
        assert exc_info.value.message == "Invalid email or password. Please try again."

    def test_malformed_response(self):
        manager = self.make_manager(ValueError("Invalid login response from server"))
        with pytest.raises(AuthError) as exc_info:
            manager.login(LoginCredentials("a@b.c", "x"))
        assert not isinstance(exc_info.value, InvalidCredentialsError)
        assert not manager.is_authenticated

    def test_missing_token_in_response(self, make_api_client, stores):
        def handler(request):
            return json_response(200, {"success": True, "data": {"user": user_payload()}})

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), *stores)
        with pytest.raises(AuthError, match="Invalid login response"):
            admin_login(manager)


class TestLogout:
    """Test logout clears everything"""

    @pytest.mark.parametrize("remember", [True, False])
    def test_logout_clears_both_stores(self, manager, stores, remember):
        durable, session = stores
        admin_login(manager, remember=remember)

        manager.logout()

        assert durable.is_empty()
        assert session.is_empty()
        assert manager.user is None
        assert manager.token is None
        assert not manager.is_authenticated

    def test_logout_clears_even_when_server_fails(self, stores):
        durable, session = stores
        backend = Mock(spec=AuthBackend)
        backend.login.return_value = LoginResult(User.from_dict(user_payload()), ADMIN_TOKEN, REFRESH_TOKEN)
        backend.logout.side_effect = NetworkError("down")
        manager = SessionManager(backend, durable, session)
        admin_login(manager)

        manager.logout()

        backend.logout.assert_called_once()
        assert durable.is_empty() and session.is_empty()
        assert not manager.is_authenticated

    def test_logout_without_session_skips_server(self, stores):
        backend = Mock(spec=AuthBackend)
        manager = SessionManager(backend, *stores)

        manager.logout()

        backend.logout.assert_not_called()


class TestRefreshToken:
    """Test access token refresh"""

    def test_nothing_stored(self, manager):
        """refresh_token() with empty storage fails and leaves no session"""
        with pytest.raises(NoRefreshTokenError):
            manager.refresh_token()
        assert not manager.is_authenticated

    def test_refresh_writes_to_store_holding_old_token(self, manager, stores):
        durable, session = stores
        admin_login(manager, remember=False)

        new_token = manager.refresh_token()

        assert new_token == "new-access-token"
        assert manager.token == "new-access-token"
        assert session.get(AUTH_TOKEN_KEY) == "new-access-token"
        assert durable.get(AUTH_TOKEN_KEY) is None

    def test_refresh_prefers_durable(self, manager, stores):
        durable, session = stores
        admin_login(manager, remember=True)

        manager.refresh_token()

        assert durable.get(AUTH_TOKEN_KEY) == "new-access-token"

    def test_rejected_refresh_clears_session(self, make_api_client, stores):
        durable, session = stores

        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                return json_response(401, {"success": False, "message": "Refresh token expired"})
            return backend_handler(request)

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), durable, session)
        admin_login(manager)

        with pytest.raises(RefreshFailedError):
            manager.refresh_token()

        assert not manager.is_authenticated
        assert durable.is_empty() and session.is_empty()


class TestCurrentUser:
    """Test current-user retrieval"""

    def test_requires_token(self, manager):
        with pytest.raises(NotAuthenticatedError):
            manager.get_current_user()

    def test_replaces_user_wholesale(self, manager, stores):
        durable, _ = stores
        admin_login(manager)
        before = manager.user

        user = manager.get_current_user()

        assert user.full_name == "Renamed Admin"
        assert manager.user is user
        assert before.full_name == "Admin User"
        assert json.loads(durable.get(USER_KEY))["fullName"] == "Renamed Admin"

    def test_sends_bearer_token(self, make_api_client, stores):
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            return backend_handler(request)

        api = make_api_client(handler)
        manager = SessionManager(RestAuthBackend(api), *stores)
        api.set_token_provider(manager.get_token)
        admin_login(manager)

        manager.get_current_user()

        assert seen[0] is None
        assert seen[-1] == f"Bearer {ADMIN_TOKEN}"


class TestRestore:
    """Test restoring a persisted session"""

    def test_restore_complete_session(self, manager, stores):
        durable, session = stores
        admin_login(manager, remember=True)
        restored = SessionManager(manager.backend, durable, session)

        assert restored.restore() is True
        assert restored.is_authenticated
        assert restored.user.email == "admin@example.com"
        assert restored.token == ADMIN_TOKEN

    def test_restore_empty(self, manager):
        assert manager.restore() is False
        assert not manager.is_authenticated

    def test_restore_corrupt_user_clears_storage(self, manager, stores):
        durable, session = stores
        durable.set(AUTH_TOKEN_KEY, ADMIN_TOKEN)
        durable.set(USER_KEY, "{not json")

        assert manager.restore() is False
        assert durable.is_empty()

    def test_restore_token_without_user_clears_storage(self, manager, stores):
        _, session = stores
        session.set(AUTH_TOKEN_KEY, ADMIN_TOKEN)

        assert manager.restore() is False
        assert session.is_empty()


class TestTokenHelpers:
    """Test expiry helpers"""

    def test_is_token_expired_without_session(self, manager):
        assert manager.is_token_expired() is True

    def test_is_token_expired_after_login(self, manager):
        admin_login(manager)
        assert manager.is_token_expired() is False

    def test_get_token_payload(self, manager):
        assert manager.get_token_payload() is None

        admin_login(manager)

        assert manager.get_token_payload()["sub"] == "1"

    def test_ensure_valid_token_refreshes_expired(self, manager):
        admin_login(manager)
        manager.session.token = make_token(exp_offset=-10)

        assert manager.ensure_valid_token() == "new-access-token"

    def test_ensure_valid_token_requires_session(self, manager):
        with pytest.raises(NotAuthenticatedError):
            manager.ensure_valid_token()


class TestRoleHelpers:
    """Test role helpers on the current user"""

    def test_admin_helpers(self, manager):
        admin_login(manager)

        assert manager.is_admin()
        assert manager.is_manager()
        assert not manager.is_stylist()
        assert manager.has_any_role(["ADMIN", "MANAGER"])

    def test_no_user(self, manager):
        assert not manager.is_admin()
        assert not manager.has_role(UserRole.CUSTOMER)


class TestAccountOperations:
    """Test password, email and profile endpoints"""

    def test_update_profile_replaces_user(self, make_api_client, stores):
        payloads = []

        def handler(request):
            if request.url.path.endswith("/auth/profile"):
                assert request.method == "PATCH"
                payloads.append(json.loads(request.content))
                return json_response(200, {"success": True, "data": user_payload(phone="+6200")})
            return backend_handler(request)

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), *stores)
        admin_login(manager)

        user = manager.update_profile(phone="+6200")

        assert payloads == [{"phone": "+6200"}]
        assert user.phone == "+6200"
        assert manager.user.phone == "+6200"

    def test_change_password_requires_login(self, manager):
        with pytest.raises(NotAuthenticatedError):
            manager.change_password("old", "new")

    def test_forgot_password_is_public(self, make_api_client, stores):
        seen = []

        def handler(request):
            seen.append((request.url.path, request.headers.get("Authorization")))
            return json_response(200, {"success": True, "data": None})

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), *stores)
        manager.forgot_password("admin@example.com")

        assert seen == [("/api/auth/forgot-password", None)]

    def test_backend_errors_propagate(self, make_api_client, stores):
        def handler(request):
            if request.url.path.endswith("/auth/change-password"):
                return json_response(401, {"success": False, "message": "Current password is wrong"})
            return backend_handler(request)

        manager = SessionManager(RestAuthBackend(make_api_client(handler)), *stores)
        admin_login(manager)

        with pytest.raises(UnauthorizedError, match="Current password is wrong"):
            manager.change_password("bad", "new")


class TestPerBrowserStorage:
    """Test that a remembered session stays in the browser that created it"""

    def open_browser(self, make_api_client, jar):
        """A fresh Streamlit session for the browser owning cookie `jar`"""
        durable = CookieCredentialStore(cookies=dict(jar), cookie_manager=FakeCookieManager(jar))
        session = SessionStateCredentialStore(MockSessionState())
        return SessionManager(RestAuthBackend(make_api_client(backend_handler)), durable, session)

    def test_remembered_login_not_restored_in_another_browser(self, make_api_client):
        browser_a, browser_b = {}, {}
        admin_login(self.open_browser(make_api_client, browser_a), remember=True)

        other = self.open_browser(make_api_client, browser_b)

        assert not other.restore()
        assert other.user is None

    def test_remembered_login_restored_in_same_browser(self, make_api_client):
        browser_a = {}
        admin_login(self.open_browser(make_api_client, browser_a), remember=True)

        reopened = self.open_browser(make_api_client, browser_a)

        assert reopened.restore()
        assert reopened.token == ADMIN_TOKEN
        assert reopened.user.email == "admin@example.com"

    def test_other_browser_login_leaves_remembered_session_alone(self, make_api_client):
        browser_a, browser_b = {}, {}
        admin_login(self.open_browser(make_api_client, browser_a), remember=True)
        remembered = dict(browser_a)

        admin_login(self.open_browser(make_api_client, browser_b), remember=False)

        assert browser_a == remembered
        assert "barber_admin_authToken" not in browser_b
        assert self.open_browser(make_api_client, browser_a).restore()
