"""mediaupload: async media-library uploads with optimistic placeholders.

Public re-exports
-----------------

* **Client:** :class:`MediaUploadClient`
* **Orchestration:** :class:`MediaUploader`, :class:`ImagePreloader`,
  :class:`PreviewRegistry`, :func:`save_media`
* **Configuration:** :class:`MediaUploadConfig`, :class:`SiteSettings`,
  :class:`StaticSiteSettings`
* **Errors:** Every :class:`MediaUploadError` subclass and :class:`ErrorCode`
* **Models:** :class:`CandidateFile`, :class:`MediaRecord`,
  :class:`PlaceholderMedia`, :class:`UploadError`, :class:`UploadErrorCode`

Usage::

    from mediaupload import CandidateFile, MediaUploadClient

    async with MediaUploadClient(base_url="https://example.com/wp-json") as client:
        client.upload("image", [CandidateFile.from_path("a.jpg")], on_file_change=print)
"""

from __future__ import annotations

# ── Client ──────────────────────────────────────────────────────────────
from mediaupload.client import MediaUploadClient

# ── Configuration ───────────────────────────────────────────────────────
from mediaupload.config import (
    DEFAULT_MEDIA_PATH,
    MediaUploadConfig,
    SiteSettings,
    StaticSiteSettings,
)

# ── Errors ──────────────────────────────────────────────────────────────
from mediaupload.errors import (
    ErrorCode,
    MediaAuthError,
    MediaNetworkError,
    MediaNotFoundError,
    MediaPermissionError,
    MediaRateLimitError,
    MediaResponseError,
    MediaServerError,
    MediaTooLargeError,
    MediaUploadError,
    MediaValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from mediaupload.models import (
    CandidateFile,
    MediaItem,
    MediaRecord,
    PlaceholderMedia,
    UploadError,
    UploadErrorCode,
)

# ── Pipeline ────────────────────────────────────────────────────────────
from mediaupload.upload import (
    ImagePreloader,
    MediaUploader,
    PreviewRegistry,
    SlotState,
    save_media,
)

__all__ = [
    # Client
    "MediaUploadClient",
    # Pipeline
    "MediaUploader",
    "ImagePreloader",
    "PreviewRegistry",
    "SlotState",
    "save_media",
    # Configuration
    "MediaUploadConfig",
    "SiteSettings",
    "StaticSiteSettings",
    "DEFAULT_MEDIA_PATH",
    # Errors
    "MediaUploadError",
    "ErrorCode",
    "MediaValidationError",
    "MediaAuthError",
    "MediaPermissionError",
    "MediaNotFoundError",
    "MediaTooLargeError",
    "MediaRateLimitError",
    "MediaServerError",
    "MediaNetworkError",
    "MediaResponseError",
    # Models
    "CandidateFile",
    "MediaItem",
    "MediaRecord",
    "PlaceholderMedia",
    "UploadError",
    "UploadErrorCode",
]
