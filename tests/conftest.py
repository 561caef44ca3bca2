"""
Shared fixtures: fake Streamlit session state and cookies, JWT factory and a mocked backend.
"""

import json
import time

import httpx
import jwt
import pytest

from infrastructure.external.api_client import ApiClient
from infrastructure.resilience.retry_service import RetryService


TEST_SIGNING_KEY = "barber-admin-test-signing-key-0123456789"


class MockSessionState:
    """Mock Streamlit session state for testing"""

    def __init__(self):
        self.data = {}

    def __contains__(self, key):
        return key in self.data

    def __getitem__(self, key):
        return self.data[key]

    def __setitem__(self, key, value):
        self.data[key] = value

    def __delitem__(self, key):
        del self.data[key]

    def get(self, key, default=None):
        return self.data.get(key, default)

    def pop(self, key, default=None):
        return self.data.pop(key, default)


class FakeCookieManager:
    """Browser side of a CookieManager: a cookie jar plus the component keys used"""

    def __init__(self, jar=None):
        self.jar = {} if jar is None else jar
        self.keys = []

    def set(self, cookie, val, expires_at=None, key="set", **kwargs):
        self.keys.append(key)
        self.jar[cookie] = val
        self.expires_at = expires_at

    def delete(self, cookie, key="delete"):
        self.keys.append(key)
        self.jar.pop(cookie, None)


def make_token(exp_offset=3600, **claims):
    """Signed HS256 token expiring `exp_offset` seconds from now (None: no exp)"""
    payload = {"sub": "1", **claims}
    if exp_offset is not None:
        payload["exp"] = int(time.time()) + exp_offset
    return jwt.encode(payload, TEST_SIGNING_KEY, algorithm="HS256")


def user_payload(role="ADMIN", email="admin@example.com", **overrides):
    data = {
        "id": "u-1",
        "email": email,
        "username": "admin",
        "fullName": "Admin User",
        "phone": "+62812345678",
        "role": role,
        "isActive": True,
        "emailVerified": True,
        "createdAt": "2024-01-01T08:00:00Z",
        "updatedAt": "2024-01-01T08:00:00Z",
    }
    data.update(overrides)
    return data


def json_response(status_code, body):
    return httpx.Response(status_code, content=json.dumps(body).encode(),
                          headers={"Content-Type": "application/json"})


@pytest.fixture
def session_state():
    return MockSessionState()


@pytest.fixture
def no_sleep_retry_service():
    return RetryService(sleep=lambda seconds: None)


@pytest.fixture
def make_api_client(no_sleep_retry_service):
    """Build an ApiClient whose requests are answered by `handler(request)`"""
    clients = []

    def factory(handler, max_retries=0, token_provider=None):
        client = ApiClient(
            base_url="http://backend.test/api",
            timeout=1.0,
            token_provider=token_provider,
            max_retries=max_retries,
            retry_base_delay=0.0,
            transport=httpx.MockTransport(handler),
            retry_service=no_sleep_retry_service,
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
