"""Per-file validation gates run before a file is uploaded.

Three gates are applied in order:

1. :func:`is_allowed_type` -- the MIME type's top-level category must
   match the uploader's ``allowed_type``.  A mismatch means "not for this
   uploader" and is silent.
2. The site's allow-list of exact MIME types, when one exists.
3. The maximum upload size, when positive.

Gates 2 and 3 are combined in :func:`validate_candidate`, which returns
the :class:`UploadError` to report, or ``None`` when the file may proceed.
"""

from __future__ import annotations

from collections.abc import Mapping

from mediaupload.i18n import _
from mediaupload.models import CandidateFile, UploadError, UploadErrorCode


def is_allowed_type(mime_type: str, allowed_type: str) -> bool:
    """Return ``True`` if *mime_type* falls under *allowed_type*.

    The check is an exact prefix match on ``"<allowed_type>/"``:
    ``is_allowed_type("image/png", "image")`` is true,
    ``is_allowed_type("imagex/png", "image")`` is not.
    """
    return (mime_type or "").startswith(f"{allowed_type}/")


def is_allowed_for_user(
    mime_type: str,
    allowed_mime_types: Mapping[str, str] | None,
) -> bool:
    """Return ``True`` unless an allow-list exists and lacks *mime_type*.

    Only the mapping's values (exact MIME types) are consulted.
    """
    if allowed_mime_types is None:
        return True
    return mime_type in allowed_mime_types.values()


def validate_candidate(
    file: CandidateFile,
    allowed_mime_types: Mapping[str, str] | None,
    max_upload_file_size: int,
) -> UploadError | None:
    """Apply the permission and size gates to *file*.

    Parameters
    ----------
    file:
        The candidate, already known to match the uploader's type category.
    allowed_mime_types:
        Extension to MIME mapping from the site settings, or ``None``.
    max_upload_file_size:
        Limit in bytes; ``0`` (or any non-positive value) disables the check.

    Returns
    -------
    UploadError | None
        The first failing gate's error, or ``None``.
    """
    if not is_allowed_for_user(file.type, allowed_mime_types):
        return UploadError(
            code=UploadErrorCode.MIME_TYPE_NOT_ALLOWED_FOR_USER,
            message=_("Sorry, this file type is not permitted for security reasons."),
            file=file,
        )

    if max_upload_file_size > 0 and file.size > max_upload_file_size:
        return UploadError(
            code=UploadErrorCode.SIZE_ABOVE_LIMIT,
            message=_("%s exceeds the maximum upload size for this site.") % file.name,
            file=file,
        )

    return None
