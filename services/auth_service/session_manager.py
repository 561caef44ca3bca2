"""
Session manager - the single authority over login, logout, token refresh and
the current user. Nothing else writes to the credential stores.
"""

import json
import threading
from typing import Any, Dict, Optional, Tuple

from infrastructure.external.errors import (
    ApiError,
    ForbiddenError,
    NetworkError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)
from services.auth_service import permissions
from services.auth_service.auth_backend import AuthBackend
from services.auth_service.credential_store import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    CredentialStore,
)
from services.auth_service.exceptions import (
    AuthError,
    InvalidCredentialsError,
    NoRefreshTokenError,
    NotAuthenticatedError,
    RefreshFailedError,
)
from services.auth_service.models import LoginCredentials, LoginResult, Session, User
from services.auth_service.token_utils import decode_token_payload, is_token_expired
from utils.logging_config import get_logger, log_auth_event


class SessionManager:
    """
    Owns the in-memory session and its persisted copy.

    Tokens go to the durable store when the user asked to be remembered and
    to the session store otherwise; the user record always goes to the
    durable store. A login attempt discards whatever was stored before it,
    whether or not it succeeds. Logout clears both locations and returns to
    the primary backend. State-changing calls are serialized, so a login can
    never interleave with a logout.
    """

    def __init__(self, backend: AuthBackend, durable_store: CredentialStore,
                 session_store: CredentialStore):
        self.backend = backend
        self.primary_backend = backend
        self.durable_store = durable_store
        self.session_store = session_store
        self.session = Session()
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def get_token(self) -> Optional[str]:
        """Token provider for the API client"""
        return self.session.token

    def use_backend(self, backend: AuthBackend):
        """Swap the remote side of authentication (demo mode) until logout or reset_backend"""
        with self._lock:
            self.logger.info(f"Switching auth backend: {self.backend.name} -> {backend.name}")
            self.backend = backend

    def reset_backend(self):
        """Return to the backend this manager was built with"""
        with self._lock:
            if self.backend is not self.primary_backend:
                self.logger.info(f"Switching auth backend: {self.backend.name} -> {self.primary_backend.name}")
                self.backend = self.primary_backend

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def _token_store(self) -> Optional[CredentialStore]:
        """The store currently holding the access token, durable first"""
        for store in (self.durable_store, self.session_store):
            if store.get(AUTH_TOKEN_KEY):
                return store
        return None

    def _find_refresh_token(self) -> Tuple[Optional[str], Optional[CredentialStore]]:
        for store in (self.durable_store, self.session_store):
            value = store.get(REFRESH_TOKEN_KEY)
            if value:
                return value, store
        return None, None

    def _persist_user(self, user: User):
        self.durable_store.set(USER_KEY, json.dumps(user.to_dict()))

    def _clear_all(self):
        self.session.clear()
        for store in (self.durable_store, self.session_store):
            store.clear()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def restore(self) -> bool:
        """
        Load a previously persisted session

        Returns:
            True if both token and user were found and parsed. A corrupt or
            half-present record clears storage and returns False.
        """
        with self._lock:
            token_store = self._token_store()
            token = token_store.get(AUTH_TOKEN_KEY) if token_store else None
            user_json = self.durable_store.get(USER_KEY)

            if not token and not user_json:
                self.session.clear()
                return False

            if not token or not user_json:
                self.logger.info("Discarding incomplete stored session")
                self._clear_all()
                return False

            try:
                user = User.from_dict(json.loads(user_json))
            except (ValueError, TypeError) as e:
                self.logger.warning(f"Error parsing stored user data: {e}")
                self._clear_all()
                return False

            self.session = Session(
                user=user,
                token=token,
                refresh_token=token_store.get(REFRESH_TOKEN_KEY),
            )
            log_auth_event(self.logger, "session_restored", email=user.email,
                           role=user.role.value if user.role else None, store=token_store.name)
            return True

    def login(self, credentials: LoginCredentials) -> LoginResult:
        """
        Authenticate and persist the session

        Raises:
            InvalidCredentialsError: The backend rejected the pair
            NetworkError: The request could not complete
            ServerError: The backend failed while handling the request
            AuthError: The backend answered with an unusable payload
        """
        with self._lock:
            # Tokens from an earlier login must not outlive this attempt
            self._clear_all()

            try:
                result = self.backend.login(credentials)
            except InvalidCredentialsError:
                log_auth_event(self.logger, "login_rejected", email=credentials.email)
                raise
            except (NetworkError, ServerError) as e:
                self.logger.warning(f"Login request failed for {credentials.email}: {e}")
                raise
            except (UnauthorizedError, ForbiddenError, ValidationError) as e:
                log_auth_event(self.logger, "login_rejected", email=credentials.email,
                               status_code=e.status_code)
                server_message = e.payload.get("message")
                if server_message:
                    raise InvalidCredentialsError(server_message) from e
                raise InvalidCredentialsError() from e
            except ApiError as e:
                log_auth_event(self.logger, "login_rejected", email=credentials.email,
                               status_code=e.status_code)
                raise InvalidCredentialsError(e.message) from e
            except ValueError as e:
                self.logger.error(f"Invalid login response from server: {e}")
                raise AuthError("Invalid login response from server") from e

            target = self.durable_store if credentials.remember else self.session_store
            target.set(AUTH_TOKEN_KEY, result.token)
            if result.refresh_token:
                target.set(REFRESH_TOKEN_KEY, result.refresh_token)
            self._persist_user(result.user)

            self.session = Session(
                user=result.user,
                token=result.token,
                refresh_token=result.refresh_token,
            )

            log_auth_event(self.logger, "login", email=result.user.email,
                           role=result.user.role.value if result.user.role else None,
                           store=target.name)
            return result

    def logout(self):
        """Invalidate server-side if possible, then clear everything locally. Never raises."""
        with self._lock:
            email = self.session.user.email if self.session.user else None
            try:
                if self.session.token:
                    self.backend.logout()
            except Exception as e:
                self.logger.warning(f"Error during logout: {e}")
            finally:
                self._clear_all()
                self.reset_backend()
            log_auth_event(self.logger, "logout", email=email)

    def refresh_token(self) -> str:
        """
        Exchange the stored refresh token for a new access token

        The new token is written to the store the old one came from. Any
        failure ends the session.

        Raises:
            NoRefreshTokenError: Neither store holds a refresh token
            RefreshFailedError: The exchange was rejected or could not complete
        """
        with self._lock:
            refresh, refresh_store = self._find_refresh_token()
            if not refresh:
                self._clear_all()
                log_auth_event(self.logger, "refresh_failed", reason="no_refresh_token")
                raise NoRefreshTokenError()

            try:
                new_token = self.backend.refresh(refresh)
            except (ApiError, ValueError) as e:
                self._clear_all()
                log_auth_event(self.logger, "refresh_failed", reason=e.__class__.__name__)
                raise RefreshFailedError(str(e) or "Token refresh failed") from e

            target = self._token_store() or refresh_store
            target.set(AUTH_TOKEN_KEY, new_token)
            self.session.token = new_token
            self.session.refresh_token = refresh

            if self.session.user is None:
                self._restore_user_only()

            self.logger.debug(f"Access token refreshed in {target.name} store")
            return new_token

    def _restore_user_only(self):
        user_json = self.durable_store.get(USER_KEY)
        if not user_json:
            return
        try:
            self.session.user = User.from_dict(json.loads(user_json))
        except (ValueError, TypeError):
            self.durable_store.remove(USER_KEY)

    def get_current_user(self) -> User:
        """
        Fetch the latest user record and replace the cached copy wholesale

        Raises:
            NotAuthenticatedError: No token is held
            ApiError: Whatever the backend call raised
        """
        with self._lock:
            if not self.session.token:
                raise NotAuthenticatedError()

            user = self.backend.me()
            self.session.user = user
            self._persist_user(user)
            return user

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def is_token_expired(self, token: Optional[str] = None) -> bool:
        """
        Client-side expiry hint; the signature is NOT verified.

        Missing or malformed tokens count as expired.
        """
        return is_token_expired(token if token is not None else self.session.token)

    def get_token_payload(self) -> Optional[Dict[str, Any]]:
        return decode_token_payload(self.session.token)

    def ensure_valid_token(self) -> str:
        """Return a token that is not known to be expired, refreshing if needed"""
        with self._lock:
            if not self.session.token:
                raise NotAuthenticatedError("No token available")
            if self.is_token_expired():
                return self.refresh_token()
            return self.session.token

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------

    def change_password(self, current_password: str, new_password: str):
        if not self.session.token:
            raise NotAuthenticatedError()
        self.backend.change_password(current_password, new_password)
        log_auth_event(self.logger, "password_changed",
                       email=self.session.user.email if self.session.user else None)

    def forgot_password(self, email: str):
        self.backend.forgot_password(email)
        log_auth_event(self.logger, "password_reset_requested", email=email)

    def reset_password(self, token: str, new_password: str):
        self.backend.reset_password(token, new_password)

    def verify_email(self, token: str):
        with self._lock:
            self.backend.verify_email(token)
            if self.session.user is not None:
                user = self.session.user.with_changes(email_verified=True)
                self.session.user = user
                self._persist_user(user)

    def resend_verification_email(self):
        if not self.session.token:
            raise NotAuthenticatedError()
        self.backend.resend_verification_email()

    def update_profile(self, full_name: Optional[str] = None, phone: Optional[str] = None,
                       avatar: Optional[str] = None) -> User:
        with self._lock:
            if not self.session.token:
                raise NotAuthenticatedError()
            changes = {
                key: value for key, value in
                (("fullName", full_name), ("phone", phone), ("avatar", avatar))
                if value is not None
            }
            user = self.backend.update_profile(changes)
            self.session.user = user
            self._persist_user(user)
            return user

    # ------------------------------------------------------------------
    # Role helpers
    # ------------------------------------------------------------------

    def _current_role(self):
        return self.session.user.role if self.session.user else None

    def has_role(self, role) -> bool:
        return permissions.has_role(self._current_role(), role)

    def has_any_role(self, roles) -> bool:
        return permissions.has_any_role(self._current_role(), roles)

    def is_admin(self) -> bool:
        return permissions.is_admin(self._current_role())

    def is_manager(self) -> bool:
        """ADMIN counts as a manager here"""
        return permissions.is_admin_or_manager(self._current_role())

    def is_stylist(self) -> bool:
        return permissions.is_stylist(self._current_role())

    def is_customer(self) -> bool:
        return permissions.is_customer(self._current_role())
