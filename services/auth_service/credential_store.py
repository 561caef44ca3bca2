"""
Credential persistence for the session manager.

Two locations are used side by side, both private to one browser:
- durable: cookies in the visitor's browser that survive restarts (the
  "remember me" location, and the home of the serialized user record);
- session-scoped: Streamlit's per-browser-session state, gone when the tab
  session ends.

Only the session manager writes to these stores.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, MutableMapping, Optional
from urllib.parse import unquote

from utils.logging_config import get_logger


AUTH_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"

CREDENTIAL_KEYS = (AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)


class CredentialStore(ABC):
    """Key-value location for auth tokens and the serialized user"""

    name: str = "store"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None"""

    @abstractmethod
    def set(self, key: str, value: str):
        """Store a string value"""

    @abstractmethod
    def remove(self, key: str):
        """Delete key if present"""

    def clear(self):
        """Remove every credential key"""
        for key in CREDENTIAL_KEYS:
            self.remove(key)

    def is_empty(self) -> bool:
        return all(self.get(key) is None for key in CREDENTIAL_KEYS)


class InMemoryCredentialStore(CredentialStore):
    """Ephemeral store living as long as the object does"""

    name = "memory"

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)


class SessionStateCredentialStore(CredentialStore):
    """
    Session-scoped store backed by Streamlit session state.

    Values live under one namespaced dict so clearing credentials never
    touches unrelated session keys.
    """

    name = "session"

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None,
                 namespace: str = "barber_admin_credentials"):
        if state is None:
            import streamlit as st
            state = st.session_state
        self._state = state
        self._namespace = namespace

    def _bucket(self, create: bool = False) -> Optional[Dict[str, str]]:
        if self._namespace not in self._state:
            if not create:
                return None
            self._state[self._namespace] = {}
        return self._state[self._namespace]

    def get(self, key: str) -> Optional[str]:
        bucket = self._bucket()
        return bucket.get(key) if bucket else None

    def set(self, key: str, value: str):
        self._bucket(create=True)[key] = value

    def remove(self, key: str):
        bucket = self._bucket()
        if bucket:
            bucket.pop(key, None)


class CookieCredentialStore(CredentialStore):
    """
    Durable store kept in the visitor's browser as cookies.

    Reads start from the cookies the browser sent when the session connected
    (`st.context.cookies`), overlaid with every write made since: a cookie set
    during the session only shows up in request headers on the next connection.
    Writes reach the browser through extra-streamlit-components' CookieManager.
    Each browser holds its own cookies, so one visitor's remembered login is
    never visible to another.
    """

    name = "durable"

    def __init__(self, cookies: Optional[Mapping[str, str]] = None, cookie_manager=None,
                 prefix: str = "barber_admin_", max_age_days: int = 30):
        self._cookies = dict(cookies) if cookies is not None else None
        self._cookie_manager = cookie_manager
        self.prefix = prefix
        self.max_age_days = max_age_days
        self.logger = get_logger(__name__)
        self._overlay: Dict[str, Optional[str]] = {}
        self._writes = 0
        self._lock = threading.RLock()

    def _request_cookies(self) -> Dict[str, str]:
        if self._cookies is None:
            import streamlit as st
            self._cookies = dict(st.context.cookies)
        return self._cookies

    def _manager(self):
        if self._cookie_manager is None:
            import extra_streamlit_components as stx
            self._cookie_manager = stx.CookieManager(key=f"{self.prefix}cookie_manager")
        return self._cookie_manager

    def _cookie_name(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _component_key(self, action: str, key: str) -> str:
        # Component keys must be unique within a script run
        self._writes += 1
        return f"{self._cookie_name(key)}_{action}_{self._writes}"

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key in self._overlay:
                return self._overlay[key]
            value = self._request_cookies().get(self._cookie_name(key))
            # The browser side percent-encodes cookie values
            return unquote(value) if value else None

    def set(self, key: str, value: str):
        with self._lock:
            self._manager().set(
                self._cookie_name(key),
                value,
                expires_at=datetime.now() + timedelta(days=self.max_age_days),
                key=self._component_key("set", key),
            )
            self._overlay[key] = value
            self.logger.debug(f"Wrote {self._cookie_name(key)} cookie")

    def remove(self, key: str):
        with self._lock:
            if self.get(key) is None:
                return
            self._manager().delete(self._cookie_name(key), key=self._component_key("delete", key))
            self._overlay[key] = None
            self.logger.debug(f"Deleted {self._cookie_name(key)} cookie")
