"""
User and session data models for the authentication service.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class UserRole(str, Enum):
    """Dashboard roles, most privileged first"""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STYLIST = "STYLIST"
    CUSTOMER = "CUSTOMER"

    @classmethod
    def parse(cls, value: Any) -> Optional['UserRole']:
        if value is None:
            return None
        if isinstance(value, UserRole):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class User:
    """User data model, replaced wholesale on refresh"""
    id: str
    email: str
    username: str
    full_name: str
    role: Optional[UserRole]
    phone: str = ""
    is_active: bool = True
    email_verified: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    avatar: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Build a User from the backend's camelCase JSON"""
        if not isinstance(data, dict):
            raise ValueError("User payload must be an object")
        if data.get("id") is None or not data.get("email"):
            raise ValueError("User payload is missing id or email")

        return cls(
            id=str(data["id"]),
            email=data["email"],
            username=data.get("username") or "",
            full_name=data.get("fullName") or data.get("full_name") or "",
            role=UserRole.parse(data.get("role")),
            phone=data.get("phone") or "",
            is_active=bool(data.get("isActive", data.get("is_active", True))),
            email_verified=bool(data.get("emailVerified", data.get("email_verified", False))),
            created_at=data.get("createdAt") or data.get("created_at"),
            updated_at=data.get("updatedAt") or data.get("updated_at"),
            avatar=data.get("avatar"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the backend's camelCase JSON"""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "fullName": self.full_name,
            "phone": self.phone,
            "role": self.role.value if self.role else None,
            "isActive": self.is_active,
            "emailVerified": self.email_verified,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "avatar": self.avatar,
        }

    def with_changes(self, **changes) -> 'User':
        return replace(self, **changes)


@dataclass(frozen=True)
class LoginCredentials:
    """Login form payload"""
    email: str
    password: str
    remember: bool = False

    def to_payload(self) -> Dict[str, str]:
        # `remember` only decides where tokens are stored; the backend never sees it
        return {"email": self.email, "password": self.password}


@dataclass(frozen=True)
class LoginResult:
    """Successful login response"""
    user: User
    token: str
    refresh_token: Optional[str] = None


@dataclass
class Session:
    """In-memory session: which user is logged in, with what credentials"""
    user: Optional[User] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.token)

    def clear(self):
        self.user = None
        self.token = None
        self.refresh_token = None


@dataclass(frozen=True)
class AuthState:
    """Snapshot handed to auth listeners and the UI"""
    status: str
    user: Optional[User] = None
    token: Optional[str] = field(default=None, repr=False)
    is_authenticated: bool = False
    is_loading: bool = False
    error: Optional[str] = None
