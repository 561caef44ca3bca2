"""
User service - staff and customer accounts managed by administrators.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from services.auth_service.models import User, UserRole
from services.resource_service.base import ResourceService


class UserService(ResourceService):
    """User accounts at `/users`; updates use PATCH"""

    update_method = "PATCH"

    def __init__(self, api_client):
        super().__init__(api_client, "/users", User.from_dict)

    def update_status(self, user_id: str, is_active: bool) -> User:
        user = self._build(self.api.patch(self._url(user_id, "status"), {"isActive": is_active}))
        self.logger.info(f"User {user_id}: {'activated' if is_active else 'deactivated'}")
        return user

    def toggle_block(self, user_id: str) -> User:
        return self._build(self.api.post(self._url(user_id, "toggle-block")))

    def change_password(self, user_id: str, new_password: str):
        """Set a new password on someone else's account"""
        if not new_password:
            raise ValueError("new_password must not be empty")
        self.api.post(self._url(user_id, "change-password"), {"newPassword": new_password})
        self.logger.info(f"Password changed for user {user_id}")

    def get_by_role(self, role: Union[UserRole, str]) -> List[User]:
        value = role.value if isinstance(role, UserRole) else UserRole(role.upper()).value
        return self._build_list(self.api.get(self._url("role", value)))

    def search(self, query: str, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        params: Dict[str, Any] = {"query": query}
        params.update(filters or {})
        return self._build_list(self.api.get(self._url("search"), params=params))

    def get_stats(self) -> Dict[str, Any]:
        """Totals, active users, new users this month, per-role counts and the signup trend"""
        return self.api.get(self._url("stats")) or {}

    def bulk_update(self, user_ids: Iterable[str], updates: Dict[str, Any]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        return self._build_list(self.api.patch(self._url("bulk-update"), {
            "userIds": ids,
            "updates": updates,
        }))

    def verify_email(self, user_id: str) -> User:
        return self._build(self.api.post(self._url(user_id, "verify-email")))

    def resend_verification(self, user_id: str):
        self.api.post(self._url(user_id, "resend-verification"))

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        return self.api.get(self._url(user_id, "profile"))

    def update_profile(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.patch(self._url(user_id, "profile"), changes)

    def get_activity_log(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.api.get(self._url(user_id, "activity"), params={"page": page, "limit": limit})

    def get_bookings(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.api.get(self._url(user_id, "bookings"), params={"page": page, "limit": limit})

    def export(self, export_format: str = "csv", filters: Optional[Dict[str, Any]] = None) -> bytes:
        params: Dict[str, Any] = {"format": export_format}
        params.update(filters or {})
        return self.api.get_bytes(self._url("export"), params=params)
