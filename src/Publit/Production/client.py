"""
Production API Client & HTTPX Client Factory.

Maps the Publit production API onto request/response calls:
- APIClient.get/post/put/delete against ``{base}/production/v2.0/{endpoint}``
- Unauthenticated status check against ``{base}/v2.0/status_check``
- Descriptive ResponseError for every non-200 answer

Authentication is delegated to any ``httpx.Auth`` handed to the client (basic
auth when built from config). Request signing and token issuance live outside
this package.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Mapping, Optional, Protocol, Union

import httpx

from .config.models import HttpClientConfig, ProductionConfig
from .errors import ResponseError

logger = logging.getLogger(__name__)

API = "production"
API_VERSION = "v2.0"
RESOURCE_STATUSCHECK = "status_check"

Params = Mapping[str, Any]


class Endpointer(Protocol):
    """Anything that can name its endpoint path relative to the API root."""

    @property
    def endpoint(self) -> str: ...


EndpointLike = Union[str, Endpointer]


# ============================================================================
# Client Construction
# ============================================================================


def build_http_client(
    cfg: HttpClientConfig,
    *,
    auth: Optional[httpx.Auth] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """
    Build an HTTPX client from HTTP settings.

    Args:
        cfg: HTTP client settings
        auth: Optional auth flow attached to every request
        transport: Optional transport override (tests inject ``httpx.MockTransport``)

    Returns:
        Configured ``httpx.Client`` with logging event hooks attached
    """
    timeout = httpx.Timeout(
        connect=cfg.timeout_connect_s,
        read=cfg.timeout_read_s,
        write=cfg.timeout_write_s,
        pool=cfg.timeout_pool_s,
    )
    limits = httpx.Limits(
        max_connections=cfg.max_connections,
        max_keepalive_connections=cfg.max_connections,
    )

    client = httpx.Client(
        auth=auth,
        transport=transport,
        timeout=timeout,
        limits=limits,
        verify=cfg.verify_tls,
        headers={"User-Agent": cfg.user_agent, "Accept": "*/*"},
    )
    client.event_hooks["request"] = [_on_request]
    client.event_hooks["response"] = [_on_response]

    logger.debug(f"HTTPX client created: auth={auth is not None}")
    return client


def auth_from_config(config: ProductionConfig) -> Optional[httpx.Auth]:
    """Return basic auth from the configured credentials, if any."""
    user = config.auth.username
    password = config.auth.password
    if not user:
        return None
    return httpx.BasicAuth(user, password.get_secret_value() if password else "")


# ============================================================================
# Event Hooks
# ============================================================================


def _on_request(request: httpx.Request) -> None:
    request.extensions["t0_perf"] = time.perf_counter()


def _on_response(response: httpx.Response) -> None:
    req = response.request
    t0 = req.extensions.get("t0_perf", time.perf_counter())
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    # Presigned URLs carry their credential in the query string
    logger.debug(
        f"{req.method} {redact_url(req.url)} → {response.status_code} ({elapsed_ms:.1f} ms)"
    )


def redact_url(url: Union[str, httpx.URL]) -> str:
    """Return ``url`` without its query string."""
    return str(url).split("?", 1)[0]


# ============================================================================
# Errors
# ============================================================================


def make_response_error(response: httpx.Response) -> ResponseError:
    """
    Build the most informative error available from a failed response.

    JSON bodies carrying ``message``, ``error`` or ``errors`` provide the text;
    anything else gets a generic message with the status code.
    """
    content_type = response.headers.get("Content-Type", "")
    if content_type.startswith("application/json"):
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        message = _api_error_message(body)
        if message:
            return ResponseError(message, status_code=response.status_code)

    return ResponseError(
        f'Response not ok. No information given. Code: "{response.status_code}"',
        status_code=response.status_code,
    )


def _api_error_message(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    parts: list[str] = []
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            parts.append(value)
    errors = body.get("errors")
    if isinstance(errors, dict):
        for field, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                messages = ", ".join(str(m) for m in messages)
            parts.append(f"{field}: {messages}")
    elif isinstance(errors, (list, tuple)):
        parts.extend(str(e) for e in errors if e)
    return "; ".join(parts)


# ============================================================================
# API Client
# ============================================================================


class APIClient:
    """
    Client for the Publit production API.

    Attributes:
        base_url: API root without trailing slash
        http: Underlying HTTPX client (owned unless injected)
    """

    def __init__(
        self,
        base_url: str,
        *,
        http_client: Optional[httpx.Client] = None,
        auth: Optional[httpx.Auth] = None,
        config: Optional[ProductionConfig] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.config = config or ProductionConfig()
        self._owns_http = http_client is None
        self.http = http_client or build_http_client(self.config.http, auth=auth)

    @classmethod
    def from_config(cls, config: ProductionConfig) -> "APIClient":
        """Build a client (with basic auth when configured) from ``config``."""
        if not config.base_url:
            raise ValueError("base_url is not configured")
        return cls(config.base_url, auth=auth_from_config(config), config=config)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def compile_endpoint_url(self, endpoint: EndpointLike) -> str:
        path = endpoint if isinstance(endpoint, str) else endpoint.endpoint
        return f"{self.base_url}/{API}/{API_VERSION}/{path}"

    def compile_status_check_url(self) -> str:
        return f"{self.base_url}/{API_VERSION}/{RESOURCE_STATUSCHECK}"

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def status_check(self) -> bool:
        """Return True if the Publit service answers its status check with 200."""
        try:
            # No authentication is needed for the status check
            resp = self.http.get(self.compile_status_check_url(), auth=None)
        except httpx.HTTPError as e:
            logger.warning(f"Status check failed: {e}")
            return False
        return resp.status_code == httpx.codes.OK

    def get(self, endpoint: EndpointLike, params: Optional[Params] = None) -> Any:
        """GET ``endpoint`` and return the decoded JSON body."""
        return self._send("GET", endpoint, params=params)

    def post(self, endpoint: EndpointLike, payload: Any) -> Any:
        """POST ``payload`` as JSON and return the decoded JSON body."""
        return self._send("POST", endpoint, payload=payload)

    def put(self, endpoint: EndpointLike, payload: Any) -> Any:
        """PUT ``payload`` as JSON and return the decoded JSON body."""
        return self._send("PUT", endpoint, payload=payload)

    def delete(self, endpoint: EndpointLike) -> Any:
        """DELETE ``endpoint`` and return the decoded JSON body."""
        return self._send("DELETE", endpoint)

    def _send(
        self,
        method: str,
        endpoint: EndpointLike,
        *,
        params: Optional[Params] = None,
        payload: Any = None,
    ) -> Any:
        url = self.compile_endpoint_url(endpoint)
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if method in ("POST", "PUT"):
            kwargs["content"] = json.dumps(payload).encode("utf-8")
            kwargs["headers"] = {"Content-Type": "application/json"}

        resp = self.http.request(method, url, **kwargs)

        if resp.status_code != httpx.codes.OK:
            raise make_response_error(resp)

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResponseError(
                f"Could not decode response from {method} {redact_url(url)}: {e}",
                status_code=resp.status_code,
            ) from e
