"""Async HTTP transport for the media-library REST API.

Each request follows a fixed lifecycle:

1. Send the HTTP request with auth and user-agent headers.
2. On ``2xx`` -- return the parsed JSON response.
3. On ``4xx`` / ``5xx`` -- raise the matching typed error.
4. On network failure -- raise :class:`MediaNetworkError`.

There is exactly one attempt per request; failures are reported to the
caller as-is.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from mediaupload.config import MediaUploadConfig
from mediaupload.errors import (
    MediaAuthError,
    MediaNetworkError,
    MediaNotFoundError,
    MediaPermissionError,
    MediaRateLimitError,
    MediaResponseError,
    MediaServerError,
    MediaTooLargeError,
    MediaValidationError,
)
from mediaupload.observability import NoopMetricsHook, get_logger

log = get_logger("mediaupload.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`MediaUploadError` subclass matching an error status.

    WordPress error bodies look like
    ``{"code": "rest_upload_no_data", "message": "...", "data": {...}}``.
    """
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    server_message = body.get("message", response.text[:500])
    server_code = body.get("code", "")
    context: dict[str, Any] = {"status_code": status, "server_code": server_code}

    if status == 401:
        raise MediaAuthError(
            message=f"Authentication failed on {method} {path}: {server_message}",
            context=context,
        )
    if status == 403:
        raise MediaPermissionError(
            message=f"Permission denied on {method} {path}: {server_message}",
            context={**context, "operation": f"{method} {path}"},
        )
    if status == 404:
        raise MediaNotFoundError(
            message=f"Resource not found on {method} {path}: {server_message}",
            context={**context, "path": path},
        )
    if status == 413:
        raise MediaTooLargeError(
            message=f"Payload too large on {method} {path}: {server_message}",
            context=context,
        )
    if status == 429:
        raise MediaRateLimitError(
            message=f"Rate limited on {method} {path}: {server_message}",
            context={**context, "retry_after_seconds": _parse_retry_after(response)},
        )
    if status >= 500:
        raise MediaServerError(
            message=f"Server error {status} on {method} {path}: {server_message}",
            context=context,
        )

    # 400 and any other client error.
    raise MediaValidationError(
        message=f"Client error {status} on {method} {path}: {server_message}",
        context={**context, "body": body},
    )


def _dump_payload(
    method: str,
    url: str,
    payload: dict | None,
    response_status: int | None,
    response_body: Any | None,
    secrets: tuple[str, ...] = (),
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from mediaupload.utils.redact import redact

    dump: dict[str, Any] = {
        "method": method,
        "url": url,
    }
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, secrets)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: MediaUploadConfig,
    method: str,
    response: httpx.Response,
    request_kwargs: dict[str, Any],
) -> None:
    """Emit a redacted debug dump of request/response if enabled."""
    if not config.debug_dump_payload:
        return
    payload: dict[str, Any] = {}
    for key in ("json", "data", "files", "params"):
        if request_kwargs.get(key) is not None:
            payload[key] = request_kwargs[key]
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), payload or None,
        response.status_code, resp_body,
        secrets=(config.token, config.nonce),
    )


def _build_headers(config: MediaUploadConfig) -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "User-Agent": config.user_agent,
    }
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    if config.nonce:
        headers["X-WP-Nonce"] = config.nonce
    return headers


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncMediaTransport:
    """Asynchronous HTTP transport with auth, typed errors, and metrics.

    No ``Content-Type`` is forced on the client: httpx derives it from the
    body (multipart boundary for ``files=``, JSON for ``json=``).

    Parameters
    ----------
    config:
        A :class:`MediaUploadConfig` instance controlling transport behaviour.
    """

    def __init__(self, config: MediaUploadConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        proxy: httpx.URL | str | None = config.http_proxy
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=_build_headers(config),
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=proxy,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute one HTTP request against the REST API.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ...).
        path:
            API path relative to ``base_url`` (e.g. ``/wp/v2/media``).
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request`.  Use ``files=``
            and ``data=`` for multipart bodies, ``json=`` for JSON bodies.

        Returns
        -------
        dict
            Parsed JSON response body (``{}`` for empty responses).

        Raises
        ------
        MediaAuthError
            On 401 responses.
        MediaPermissionError
            On 403 responses.
        MediaNotFoundError
            On 404 responses.
        MediaTooLargeError
            On 413 responses.
        MediaRateLimitError
            On 429 responses.
        MediaServerError
            On 5xx responses.
        MediaValidationError
            On 400 and other 4xx responses.
        MediaNetworkError
            On transport-level failures.
        MediaResponseError
            When a 2xx body is not a JSON object.
        """
        t0 = time.monotonic()
        try:
            response = await self._client.request(method, path, **kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            self._metrics.increment(
                "mediaupload.requests_total",
                tags={"method": method, "path": path, "status": "error"},
            )
            log.warning(
                "Request network error",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "error": str(exc),
                    }
                },
            )
            raise MediaNetworkError(
                message=f"Network error on {method} {path}: {exc}",
                context={"url": path},
                cause=exc,
            ) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000

        tags = {"method": method, "path": path, "status": str(response.status_code)}
        self._metrics.increment("mediaupload.requests_total", tags=tags)
        self._metrics.timing("mediaupload.request_duration_ms", elapsed_ms, tags=tags)
        _emit_debug_dump(self._config, method, response, kwargs)

        if not 200 <= response.status_code < 300:
            _raise_for_status(response, method, path)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            result = response.json()
        except ValueError as exc:
            raise MediaResponseError(
                message=f"Response to {method} {path} is not valid JSON",
                context={"body": response.text[:500]},
                cause=exc,
            ) from exc
        if not isinstance(result, dict):
            raise MediaResponseError(
                message=f"Response to {method} {path} is not a JSON object",
                context={"body": result},
            )
        return result

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncMediaTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
