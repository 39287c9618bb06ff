"""Temporary preview URLs for files that are still being uploaded.

:class:`PreviewRegistry` hands out opaque ``blob:`` URLs that stand for a
local file until the server's URL is known, and resolves them back to the
file for whoever renders the preview.
"""

from __future__ import annotations

import uuid

from mediaupload.models import CandidateFile


class PreviewRegistry:
    """In-memory registry of preview URLs.

    Parameters
    ----------
    origin:
        Origin embedded in generated URLs (``blob:<origin>/<uuid>``).
    """

    def __init__(self, origin: str = "mediaupload") -> None:
        self._origin = origin
        self._entries: dict[str, CandidateFile] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def create(self, file: CandidateFile) -> str:
        """Register *file* and return a new unique preview URL."""
        url = f"blob:{self._origin}/{uuid.uuid4()}"
        self._entries[url] = file
        return url

    def resolve(self, url: str) -> CandidateFile | None:
        """Return the file behind *url*, or ``None`` if unknown or revoked."""
        return self._entries.get(url)

    def revoke(self, url: str) -> None:
        """Forget *url*.  Revoking an unknown URL is a no-op."""
        self._entries.pop(url, None)

    def clear(self) -> None:
        """Revoke every outstanding URL."""
        self._entries.clear()
