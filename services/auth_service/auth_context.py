"""
Auth context - reactive authentication state for the Streamlit app.

Wraps the session manager in a small state machine:

    INITIALIZING -> AUTHENTICATED | UNAUTHENTICATED

ERROR is transient and always resolves to one of the other two. One context
exists per browser session; `get_auth_context()` keeps it in
`st.session_state` rather than in a module global.
"""

import threading
from enum import Enum
from typing import Callable, List, Optional

from infrastructure.external.errors import is_authorization_error
from services.auth_service.models import AuthState, LoginCredentials, LoginResult, User
from services.auth_service.session_manager import SessionManager
from utils.logging_config import get_logger


AUTH_CONTEXT_KEY = "barber_admin_auth_context"


class AuthStatus(str, Enum):
    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


AuthListener = Callable[[AuthState], None]


class AuthContext:
    """State container the pages read from and subscribe to"""

    def __init__(self, session_manager: SessionManager, api_client=None):
        self.session_manager = session_manager
        # Authenticated client shared by the resource services of this session
        self.api_client = api_client
        self.logger = get_logger(__name__)
        self.status = AuthStatus.INITIALIZING
        self.error: Optional[str] = None
        self.is_loading = False
        self._initialized = False
        self._listeners: List[AuthListener] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Snapshot & listeners
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self.session_manager.user

    @property
    def token(self) -> Optional[str]:
        return self.session_manager.token

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED and self.session_manager.is_authenticated

    def state(self) -> AuthState:
        return AuthState(
            status=self.status.value,
            user=self.user,
            token=self.token,
            is_authenticated=self.is_authenticated,
            is_loading=self.is_loading,
            error=self.error,
        )

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh AuthState on every change

        Returns:
            A callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snapshot = self.state()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(f"Auth listener failed: {e}")

    def _set(self, status: Optional[AuthStatus] = None, error: Optional[str] = None,
             is_loading: Optional[bool] = None):
        if status is not None:
            self.status = status
        self.error = error
        if is_loading is not None:
            self.is_loading = is_loading
        self._notify()

    def _settle(self) -> AuthStatus:
        """Resolve to whichever stable status the session supports"""
        if self.session_manager.is_authenticated:
            return AuthStatus.AUTHENTICATED
        return AuthStatus.UNAUTHENTICATED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def initialize(self) -> AuthState:
        """
        Bootstrap from storage. Runs once; later calls return the current state.

        A restored session is trusted immediately and then confirmed with the
        backend. A 401 on confirmation logs out; any other failure keeps the
        cached user.
        """
        with self._lock:
            if self._initialized:
                return self.state()
            self._initialized = True
            self._set(AuthStatus.INITIALIZING, is_loading=True)

            if not self.session_manager.restore():
                self._set(AuthStatus.UNAUTHENTICATED, is_loading=False)
                return self.state()

            self._set(AuthStatus.AUTHENTICATED)
            try:
                self.session_manager.get_current_user()
            except Exception as e:
                if is_authorization_error(e):
                    self.logger.info("Stored session was rejected by the backend")
                    self.session_manager.logout()
                    self._set(AuthStatus.UNAUTHENTICATED, is_loading=False)
                    return self.state()
                self.logger.warning(f"Could not refresh user, keeping cached profile: {e}")

            self._set(self._settle(), is_loading=False)
            return self.state()

    def login(self, credentials: LoginCredentials) -> LoginResult:
        """
        Log in; on failure the message is kept in `error` and the exception re-raised
        """
        with self._lock:
            self._initialized = True
            self._set(is_loading=True)
            try:
                result = self.session_manager.login(credentials)
            except Exception as e:
                self._set(AuthStatus.ERROR, error=str(e) or "Login failed", is_loading=False)
                self.status = self._settle()
                self._notify()
                raise
            self._set(AuthStatus.AUTHENTICATED, is_loading=False)
            return result

    def logout(self):
        """Always ends UNAUTHENTICATED"""
        with self._lock:
            self._set(is_loading=True)
            try:
                self.session_manager.logout()
            finally:
                self._set(AuthStatus.UNAUTHENTICATED, is_loading=False)

    def refresh_user(self) -> User:
        """
        Re-fetch the current user; an authorization failure logs out
        """
        with self._lock:
            self._set(is_loading=True)
            try:
                user = self.session_manager.get_current_user()
            except Exception as e:
                message = str(e) or "Failed to refresh user"
                if is_authorization_error(e):
                    self.session_manager.logout()
                    self._set(AuthStatus.UNAUTHENTICATED, error=message, is_loading=False)
                else:
                    self.error = message
                    self.is_loading = False
                    self._notify()
                raise
            self._set(AuthStatus.AUTHENTICATED, is_loading=False)
            return user

    def clear_error(self):
        with self._lock:
            if self.error is not None:
                self._set()

    # ------------------------------------------------------------------
    # Page guards
    # ------------------------------------------------------------------

    def require_auth(self) -> bool:
        """True when a protected page may render"""
        return self.is_authenticated

    def require_guest(self) -> bool:
        """True when a guest-only page (login) may render"""
        return self.status != AuthStatus.INITIALIZING and not self.is_authenticated


def create_auth_context(session_state=None) -> AuthContext:
    """Wire a context from configuration: REST backend, browser cookie and session stores"""
    from config.app_config import get_config
    from infrastructure.external.api_client import create_api_client
    from services.auth_service.auth_backend import RestAuthBackend
    from services.auth_service.credential_store import (
        CookieCredentialStore,
        SessionStateCredentialStore,
    )

    config = get_config()
    api_client = create_api_client()
    manager = SessionManager(
        backend=RestAuthBackend(api_client),
        durable_store=CookieCredentialStore(
            prefix=config.auth.cookie_prefix,
            max_age_days=config.auth.remember_me_days,
        ),
        session_store=SessionStateCredentialStore(session_state),
    )
    api_client.set_token_provider(manager.get_token)
    return AuthContext(manager, api_client)


def get_auth_context() -> AuthContext:
    """The AuthContext of the current browser session, created and initialized on first use"""
    import streamlit as st

    if AUTH_CONTEXT_KEY not in st.session_state:
        st.session_state[AUTH_CONTEXT_KEY] = create_auth_context()

    context = st.session_state[AUTH_CONTEXT_KEY]
    context.initialize()
    return context
