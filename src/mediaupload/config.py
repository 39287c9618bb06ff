"""Configuration for mediaupload.

:class:`MediaUploadConfig` is a dataclass capturing every tuneable knob of
the HTTP side of the package.  Instances are passed to
:class:`~mediaupload.client.MediaUploadClient` and
:class:`~mediaupload.api.transport.AsyncMediaTransport`.

Site-wide upload policy (maximum size, allowed MIME types) is *not* part
of the client configuration: it is read through the :class:`SiteSettings`
protocol so that callers can inject whatever the site publishes.
:class:`StaticSiteSettings` is the stock read-only implementation.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

DEFAULT_MEDIA_PATH = "/wp/v2/media"
"""Collection route of the WordPress REST media endpoint."""


# ---------------------------------------------------------------------------
# Site settings provider
# ---------------------------------------------------------------------------

@runtime_checkable
class SiteSettings(Protocol):
    """Read-only view of the site's upload policy."""

    @property
    def max_upload_size(self) -> int:
        """Maximum upload size in bytes; ``0`` means no limit."""
        ...

    @property
    def allowed_mime_types(self) -> Mapping[str, str] | None:
        """Extension to MIME type mapping, or ``None`` when unrestricted."""
        ...


@dataclass(frozen=True)
class StaticSiteSettings:
    """Immutable :class:`SiteSettings` implementation.

    Parameters
    ----------
    max_upload_size:
        Maximum upload size in bytes.  ``0`` disables the size check.
    allowed_mime_types:
        Mapping of file extension (``"jpg|jpeg|jpe"``) to exact MIME type.
        Only the values are consulted.  ``None`` disables the check; an
        empty mapping rejects every file.
    """

    max_upload_size: int = 0
    allowed_mime_types: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.max_upload_size < 0:
            raise ValueError(f"max_upload_size must be >= 0, got {self.max_upload_size}")
        if self.allowed_mime_types is not None:
            object.__setattr__(
                self,
                "allowed_mime_types",
                MappingProxyType(dict(self.allowed_mime_types)),
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StaticSiteSettings:
        """Build settings from the JSON object a site publishes.

        Recognised keys are ``maxUploadSize`` and ``allowedMimeTypes``;
        anything else is ignored.
        """
        allowed = data.get("allowedMimeTypes")
        return cls(
            max_upload_size=int(data.get("maxUploadSize") or 0),
            allowed_mime_types=dict(allowed) if allowed is not None else None,
        )


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------

@dataclass
class MediaUploadConfig:
    """Complete configuration for a mediaupload client.

    Parameters
    ----------
    base_url:
        REST API root, e.g. ``"https://example.com/wp-json"``.
    token:
        Optional bearer token sent as ``Authorization``.  Never logged.
    nonce:
        Optional REST nonce sent as ``X-WP-Nonce``.  Never logged.
    media_path:
        Path of the media collection relative to *base_url*.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    user_agent:
        Value of the ``User-Agent`` header.
    revoke_previews:
        Release a slot's preview URL once the slot is saved or failed.
        Off by default: preview URLs live until the registry is dropped.
    preview_origin:
        Origin embedded in generated ``blob:`` preview URLs.
    metrics:
        A :class:`~mediaupload.observability.MetricsHook` implementation.
    debug_dump_payload:
        Write the (redacted) request/response of every call to *stderr*.
    """

    base_url: str = "http://localhost/wp-json"

    token: str = ""

    nonce: str = ""

    media_path: str = DEFAULT_MEDIA_PATH

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    user_agent: str = "mediaupload/0.1"

    # ── Previews ────────────────────────────────────────────────────────
    revoke_previews: bool = False

    preview_origin: str = "mediaupload"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your credentials, or target localhost for testing."
            )
        if not self.media_path.startswith("/"):
            raise ValueError(f"media_path must start with '/', got {self.media_path!r}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        """Mask credentials to prevent accidental leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name in ("token", "nonce"):
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"{f.name}='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"MediaUploadConfig({', '.join(parts)})"
