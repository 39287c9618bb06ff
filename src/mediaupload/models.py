"""Public data models for the mediaupload package.

All types are plain dataclasses with no behaviour beyond what is needed
for structural equality, plus the :class:`UploadErrorCode` enum used by
the ``on_error`` callback.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class UploadErrorCode(str, Enum):
    """Codes delivered to ``on_error`` callbacks."""

    MIME_TYPE_NOT_ALLOWED_FOR_USER = "MIME_TYPE_NOT_ALLOWED_FOR_USER"
    """The exact MIME type is absent from the site's allow-list."""

    SIZE_ABOVE_LIMIT = "SIZE_ABOVE_LIMIT"
    """The file is larger than the maximum upload size."""

    GENERAL = "GENERAL"
    """The remote save failed for any reason."""


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CandidateFile:
    """A local file selected for upload.

    Attributes
    ----------
    type:
        MIME type string, e.g. ``"image/jpeg"``.
    size:
        Size in bytes as reported by the caller.
    name:
        File name.  May be empty, in which case a name is synthesised from
        the MIME type when the file is sent.
    data:
        In-memory content.  Takes precedence over *path*.
    path:
        Location of the content on disk.
    """

    type: str
    size: int = 0
    name: str = ""
    data: bytes | None = field(default=None, repr=False)
    path: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path, type: str | None = None) -> CandidateFile:
        """Build a candidate from a file on disk.

        The MIME type is guessed from the extension when *type* is not
        given; unknown extensions yield ``"application/octet-stream"``.
        """
        file_path = Path(path)
        mime = type or mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return cls(
            type=mime,
            size=file_path.stat().st_size,
            name=file_path.name,
            path=file_path,
        )

    def read_bytes(self) -> bytes:
        """Return the file content (empty when no source is attached)."""
        if self.data is not None:
            return self.data
        if self.path is not None:
            return self.path.read_bytes()
        return b""


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlaceholderMedia:
    """Optimistic stand-in shown while a file is being saved."""

    url: str
    """Temporary local preview URL."""


@dataclass(frozen=True)
class MediaRecord:
    """Normalised projection of a media object returned by the server."""

    id: int
    url: str
    link: str
    alt: str = ""
    caption: str = ""


MediaItem = Union[PlaceholderMedia, MediaRecord]
"""An entry of the list passed to ``on_file_change``."""


@dataclass(frozen=True)
class UploadError:
    """A per-file failure delivered via ``on_error``; never raised."""

    code: UploadErrorCode
    message: str
    file: CandidateFile
