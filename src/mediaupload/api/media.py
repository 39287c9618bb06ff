"""Media collection wrapper for the REST API.

Provides :class:`AsyncMediaAPI`, a thin async wrapper around the media
collection route (``/wp/v2/media`` by default).  Only creation is
exposed: a file plus optional form fields in one multipart ``POST``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mediaupload.config import DEFAULT_MEDIA_PATH

from .transport import AsyncMediaTransport


def _form_value(value: Any) -> str:
    """Spell *value* the way browser ``FormData`` does (``true``, ``null``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class AsyncMediaAPI:
    """Asynchronous wrapper for the media collection.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncMediaTransport` instance.
    path:
        Collection route relative to the transport's ``base_url``.
    """

    def __init__(
        self,
        transport: AsyncMediaTransport,
        path: str = DEFAULT_MEDIA_PATH,
    ) -> None:
        self._transport = transport
        self._path = path

    async def create(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        fields: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a media item from raw bytes.

        Parameters
        ----------
        filename:
            Name reported in the multipart ``file`` part.
        content:
            Raw file bytes.
        content_type:
            MIME type of the ``file`` part.
        fields:
            Extra form fields (``title``, ``post``, ``alt_text``, ...).
            Booleans and ``None`` are sent as ``true``/``false``/``null``;
            anything else as its ``str()`` form.

        Returns
        -------
        dict
            The created media object as returned by the server.
        """
        data = {key: _form_value(value) for key, value in (fields or {}).items()}
        return await self._transport.request(
            "POST",
            self._path,
            files={"file": (filename, content, content_type)},
            data=data,
        )
