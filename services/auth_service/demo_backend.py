"""
Demo mode - an offline stand-in for the auth endpoints.

Used only when the real backend is unreachable and demo mode is enabled in
configuration. The real backend is always tried first.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt

from infrastructure.external.errors import NetworkError
from services.auth_service.auth_backend import AuthBackend
from services.auth_service.exceptions import InvalidCredentialsError, NotAuthenticatedError
from services.auth_service.models import LoginCredentials, LoginResult, User, UserRole
from services.auth_service.token_utils import decode_token_payload
from utils.logging_config import get_logger


DEMO_ACCOUNTS = {
    "admin@example.com": "password123",
    "admin@rusdibarber.com": "Admin123!",
    "manager@example.com": "manager123",
    "stylist@example.com": "stylist123",
}

DEMO_INVALID_MESSAGE = "Invalid credentials. For demo mode, use: admin@example.com / password123"

# Demo tokens are never verified by anyone; the key only makes them well-formed JWTs
_DEMO_SIGNING_KEY = "barber-admin-demo-mode-local-signing-key"


def demo_role_for(email: str) -> UserRole:
    if "manager" in email:
        return UserRole.MANAGER
    if "stylist" in email:
        return UserRole.STYLIST
    return UserRole.ADMIN


class DemoAuthBackend(AuthBackend):
    """Accepts the fixed demo accounts and issues short-lived local JWTs"""

    name = "demo"

    def __init__(self, token_lifetime_minutes: int = 60, clock=time.time):
        self.token_lifetime_seconds = token_lifetime_minutes * 60
        self.clock = clock
        self.logger = get_logger(__name__)
        self._current_user: Optional[User] = None

    def _build_user(self, email: str) -> User:
        role = demo_role_for(email)
        now = datetime.now(timezone.utc).isoformat()
        return User(
            id="1",
            email=email,
            username="demo_user",
            full_name=f"Demo {role.value.capitalize()}",
            role=role,
            phone="+62812345678",
            is_active=True,
            email_verified=True,
            created_at=now,
            updated_at=now,
        )

    def _issue(self, user: User, token_type: str, lifetime: int) -> str:
        issued_at = int(self.clock())
        claims: Dict[str, Any] = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value if user.role else None,
            "type": token_type,
            "iat": issued_at,
            "exp": issued_at + lifetime,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, _DEMO_SIGNING_KEY, algorithm="HS256")

    def login(self, credentials: LoginCredentials) -> LoginResult:
        expected = DEMO_ACCOUNTS.get(credentials.email)
        if expected is None or expected != credentials.password:
            raise InvalidCredentialsError(DEMO_INVALID_MESSAGE)

        user = self._build_user(credentials.email)
        self._current_user = user
        self.logger.info(f"Demo login for {user.email} as {user.role.value}")
        return LoginResult(
            user=user,
            token=self._issue(user, "access", self.token_lifetime_seconds),
            refresh_token=self._issue(user, "refresh", self.token_lifetime_seconds * 24),
        )

    def logout(self):
        self._current_user = None

    def refresh(self, refresh_token: str) -> str:
        payload = decode_token_payload(refresh_token)
        if not payload or payload.get("type") != "refresh" or not payload.get("email"):
            raise ValueError("Invalid demo refresh token")
        if payload.get("exp", 0) < self.clock():
            raise ValueError("Demo refresh token expired")

        user = self._current_user
        if user is None or user.email != payload["email"]:
            user = self._build_user(payload["email"])
            self._current_user = user
        return self._issue(user, "access", self.token_lifetime_seconds)

    def me(self) -> User:
        if self._current_user is None:
            raise NotAuthenticatedError()
        return self._current_user


def login_with_demo_fallback(context, credentials: LoginCredentials,
                             demo_backend: Optional[AuthBackend] = None,
                             enabled: bool = False) -> LoginResult:
    """
    Log in through the real backend, switching to demo mode only if it is unreachable

    Args:
        context: AuthContext (or anything with `login` and `session_manager`)
        credentials: Login form payload
        demo_backend: Backend to switch to; a DemoAuthBackend by default
        enabled: Demo mode flag from configuration

    The real backend is always tried first, even when an earlier login in this
    browser session ended up in demo mode. A failed demo attempt leaves the
    real backend in place.

    Raises:
        Whatever the real login raised when demo mode does not apply. Rejected
        credentials from a reachable backend are never retried against demo.
    """
    logger = get_logger(__name__)
    manager = context.session_manager
    manager.reset_backend()
    try:
        return context.login(credentials)
    except NetworkError:
        if not enabled:
            raise
        logger.warning("Backend unreachable, falling back to demo mode")

    manager.use_backend(demo_backend or DemoAuthBackend())
    try:
        return context.login(credentials)
    except Exception:
        manager.reset_backend()
        raise
