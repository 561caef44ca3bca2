"""
HTTP client adapter for the barbershop REST backend.
Handles JSON envelopes, bearer tokens, retries and error normalization.
"""

import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from config.app_config import get_config
from infrastructure.external.errors import (
    ApiError,
    NetworkError,
    error_for_status,
    normalize_error_message,
)
from infrastructure.resilience.retry_service import RetryService, get_retry_service
from utils.logging_config import get_logger, log_api_call


NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
TIMEOUT_ERROR_MESSAGE = "The server took too long to respond. Please try again."

TokenProvider = Callable[[], Optional[str]]


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Turn a filter mapping into query parameters

    None and empty-string values are dropped, booleans become "true"/"false"
    and lists are passed through for httpx to repeat the key.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        elif isinstance(value, Enum):
            cleaned[key] = value.value
        else:
            cleaned[key] = value
    return cleaned


class ApiClient:
    """
    Thin synchronous JSON client over httpx.

    Responses use the `{success, data, message}` envelope; `request()` returns
    the unwrapped `data`, `request_envelope()` the whole body.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token_provider: Optional[TokenProvider] = None,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
        retry_service: Optional[RetryService] = None,
    ):
        self.logger = get_logger(__name__)
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._token_provider = token_provider
        self._retry_service = retry_service or get_retry_service()
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def set_token_provider(self, token_provider: Optional[TokenProvider]):
        """Install the callable that yields the current bearer token"""
        self._token_provider = token_provider

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if authenticated and self._token_provider is not None:
            token = self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, path: str, params: Optional[Dict[str, Any]],
              json: Any, authenticated: bool) -> httpx.Response:
        started = time.monotonic()
        try:
            response = self._client.request(
                method,
                path,
                params=clean_params(params),
                json=json,
                headers=self._headers(authenticated),
            )
        except httpx.TimeoutException as e:
            log_api_call(self.logger, method, path, None, time.monotonic() - started, error="timeout")
            raise NetworkError(TIMEOUT_ERROR_MESSAGE) from e
        except httpx.TransportError as e:
            log_api_call(self.logger, method, path, None, time.monotonic() - started,
                         error=e.__class__.__name__)
            raise NetworkError(NETWORK_ERROR_MESSAGE) from e

        log_api_call(self.logger, method, path, response.status_code, time.monotonic() - started)

        if response.is_error:
            raise error_for_status(response.status_code, self._parse_body(response))

        return response

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _check_envelope(self, body: Any, status_code: int) -> Any:
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiError(
                normalize_error_message(None, body, fallback="Request failed"),
                status_code,
                body,
            )
        return body

    def _execute(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json: Any = None, authenticated: bool = True) -> httpx.Response:
        def call():
            return self._send(method, path, params, json, authenticated)

        # Only idempotent reads are retried; a repeated POST could double-book
        if method == "GET" and self.max_retries > 0:
            return self._retry_service.retry_with_circuit_breaker(
                call,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=10.0,
            )
        return call()

    def request_envelope(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                         json: Any = None, authenticated: bool = True) -> Any:
        """Send a request and return the parsed body after the success check"""
        response = self._execute(method, path, params, json, authenticated)
        return self._check_envelope(self._parse_body(response), response.status_code)

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                json: Any = None, authenticated: bool = True) -> Any:
        """Send a request and return the envelope's `data` (or the bare body)"""
        body = self.request_envelope(method, path, params, json, authenticated)
        if isinstance(body, dict) and "success" in body:
            return body.get("data")
        return body

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, authenticated: bool = True) -> Any:
        return self.request("POST", path, json=json, authenticated=authenticated)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def get_bytes(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """Download a binary payload such as a CSV export"""
        return self._execute("GET", path, params=params).content

    def check_connection(self, path: str = "/health") -> bool:
        """
        Probe the backend

        Returns:
            bool: True if the backend answered at all
        """
        try:
            self._send("GET", path, None, None, authenticated=False)
            return True
        except NetworkError:
            return False
        except ApiError:
            # Any HTTP answer, even an error status, means the server is reachable
            return True

    def close(self):
        self._client.close()


def create_api_client(token_provider: Optional[TokenProvider] = None,
                      transport: Optional[httpx.BaseTransport] = None) -> ApiClient:
    """Build an ApiClient from the application configuration"""
    settings = get_config().get_client_settings()
    return ApiClient(token_provider=token_provider, transport=transport, **settings)
