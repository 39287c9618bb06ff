"""Message translation for user-facing upload errors.

Catalogs are looked up under the ``mediaupload`` gettext domain; without
an installed catalog the source strings are returned unchanged.
"""

from __future__ import annotations

import gettext
from pathlib import Path

DOMAIN = "mediaupload"

_translation: gettext.NullTranslations = gettext.translation(
    DOMAIN, localedir=Path(__file__).parent / "locale", fallback=True
)


def install(translation: gettext.NullTranslations) -> None:
    """Replace the active catalog, e.g. with ``gettext.translation(..., languages=["de"])``."""
    global _translation
    _translation = translation


def _(message: str) -> str:
    """Translate *message* with the active catalog."""
    return _translation.gettext(message)
