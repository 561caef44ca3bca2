"""
Auth backends: where the session manager sends credentials.

`RestAuthBackend` talks to the real API. Demo mode plugs in its own backend
(see `demo_backend.py`) through the same interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from infrastructure.external.api_client import ApiClient
from services.auth_service.models import LoginCredentials, LoginResult, User


class AuthBackend(ABC):
    """Remote side of authentication"""

    name: str = "backend"

    @abstractmethod
    def login(self, credentials: LoginCredentials) -> LoginResult:
        """Exchange credentials for a user and tokens"""

    @abstractmethod
    def logout(self):
        """Invalidate the current token server-side"""

    @abstractmethod
    def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token"""

    @abstractmethod
    def me(self) -> User:
        """Fetch the user the current token belongs to"""

    def change_password(self, current_password: str, new_password: str):
        raise NotImplementedError

    def forgot_password(self, email: str):
        raise NotImplementedError

    def reset_password(self, token: str, new_password: str):
        raise NotImplementedError

    def verify_email(self, token: str):
        raise NotImplementedError

    def resend_verification_email(self):
        raise NotImplementedError

    def update_profile(self, changes: Dict[str, Any]) -> User:
        raise NotImplementedError


def parse_login_response(data: Any) -> Optional[LoginResult]:
    """
    Read `{user, token, refreshToken}` from a login response

    Returns None when user or token is missing.
    """
    if not isinstance(data, dict):
        return None
    user_data = data.get("user")
    token = data.get("token") or data.get("accessToken")
    if not user_data or not token:
        return None
    return LoginResult(
        user=User.from_dict(user_data),
        token=token,
        refresh_token=data.get("refreshToken"),
    )


class RestAuthBackend(AuthBackend):
    """Auth endpoints of the barbershop REST API"""

    name = "rest"

    def __init__(self, api_client: ApiClient):
        self.api = api_client

    def login(self, credentials: LoginCredentials) -> LoginResult:
        data = self.api.post("/auth/login", credentials.to_payload(), authenticated=False)
        result = parse_login_response(data)
        if result is None:
            raise ValueError("Invalid login response from server")
        return result

    def logout(self):
        self.api.post("/auth/logout")

    def refresh(self, refresh_token: str) -> str:
        data = self.api.post("/auth/refresh", {"refreshToken": refresh_token}, authenticated=False)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ValueError("Token refresh response did not contain a token")
        return token

    def me(self) -> User:
        data = self.api.get("/auth/me")
        # Some deployments wrap the record as {"user": {...}}
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        return User.from_dict(data)

    def change_password(self, current_password: str, new_password: str):
        self.api.post("/auth/change-password", {
            "currentPassword": current_password,
            "newPassword": new_password,
        })

    def forgot_password(self, email: str):
        self.api.post("/auth/forgot-password", {"email": email}, authenticated=False)

    def reset_password(self, token: str, new_password: str):
        self.api.post("/auth/reset-password", {"token": token, "newPassword": new_password},
                      authenticated=False)

    def verify_email(self, token: str):
        self.api.post("/auth/verify-email", {"token": token})

    def resend_verification_email(self):
        self.api.post("/auth/resend-verification")

    def update_profile(self, changes: Dict[str, Any]) -> User:
        return User.from_dict(self.api.patch("/auth/profile", changes))
