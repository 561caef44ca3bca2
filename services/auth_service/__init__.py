"""
Auth service - session management, auth state and role permissions.
"""

from .models import User, UserRole, LoginCredentials, LoginResult, Session, AuthState
from .exceptions import (
    AuthError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    NoRefreshTokenError,
    RefreshFailedError
)
from .permissions import Permissions
from .credential_store import (
    CredentialStore,
    InMemoryCredentialStore,
    SessionStateCredentialStore,
    CookieCredentialStore
)
from .auth_backend import AuthBackend, RestAuthBackend
from .session_manager import SessionManager
from .auth_context import AuthContext, AuthStatus, create_auth_context, get_auth_context
from .demo_backend import DemoAuthBackend, login_with_demo_fallback

__all__ = [
    'User',
    'UserRole',
    'LoginCredentials',
    'LoginResult',
    'Session',
    'AuthState',
    'AuthError',
    'InvalidCredentialsError',
    'NotAuthenticatedError',
    'NoRefreshTokenError',
    'RefreshFailedError',
    'Permissions',
    'CredentialStore',
    'InMemoryCredentialStore',
    'SessionStateCredentialStore',
    'CookieCredentialStore',
    'AuthBackend',
    'RestAuthBackend',
    'SessionManager',
    'AuthContext',
    'AuthStatus',
    'create_auth_context',
    'get_auth_context',
    'DemoAuthBackend',
    'login_with_demo_fallback'
]
