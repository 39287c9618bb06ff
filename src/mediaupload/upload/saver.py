"""Save one file to the media library and normalise the response.

:func:`save_media` turns a :class:`CandidateFile` plus optional form
fields into a single create request, and :func:`normalize_media` maps the
server's media object onto a :class:`MediaRecord` so the rest of the
package never depends on the REST field names.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from mediaupload.errors import MediaResponseError
from mediaupload.models import CandidateFile, MediaRecord

MediaSaver = Callable[[CandidateFile, Mapping[str, Any]], Awaitable[MediaRecord]]
"""Signature of the coroutine function the uploader calls per file."""

_REQUIRED_KEYS = ("id", "link", "source_url")


def synthesize_filename(file: CandidateFile) -> str:
    """Return the name to send for *file*.

    Files without a name are sent as their MIME type with the first ``/``
    replaced by ``.`` (``image/jpeg`` -> ``image.jpeg``).
    """
    return file.name or file.type.replace("/", ".", 1)


def normalize_media(media: Mapping[str, Any]) -> MediaRecord:
    """Project a server media object onto a :class:`MediaRecord`.

    ``alt_text`` and ``caption.raw`` default to ``""``; ``id``, ``link``
    and ``source_url`` are required.

    Raises
    ------
    MediaResponseError
        If a required key is missing.
    """
    missing = [key for key in _REQUIRED_KEYS if key not in media]
    if missing:
        raise MediaResponseError(
            message=f"Media response is missing {', '.join(missing)}",
            context={"missing": missing},
        )

    caption = media.get("caption")
    raw_caption = caption.get("raw", "") if isinstance(caption, Mapping) else ""

    return MediaRecord(
        id=media["id"],
        url=media["source_url"],
        link=media["link"],
        alt=media.get("alt_text") or "",
        caption=raw_caption or "",
    )


async def save_media(
    media_api: Any,
    file: CandidateFile,
    additional_data: Mapping[str, Any] | None = None,
) -> MediaRecord:
    """Upload *file* and return the created media as a :class:`MediaRecord`.

    Parameters
    ----------
    media_api:
        An :class:`~mediaupload.api.media.AsyncMediaAPI` (or compatible).
    file:
        The file to upload.  Content is read off the event loop.
    additional_data:
        Extra form fields sent alongside the file, unmodified.

    Raises
    ------
    MediaUploadError
        Any transport or server failure, propagated unchanged.
    """
    loop = asyncio.get_running_loop()
    content = await loop.run_in_executor(None, file.read_bytes)

    response = await media_api.create(
        synthesize_filename(file),
        content,
        file.type,
        additional_data or {},
    )
    return normalize_media(response)
