"""Upload pipeline: gating, placeholders, saving, and reconciliation.

Exports
-------
MediaUploader
    Orchestrates validation and concurrent saves for a list of files.
save_media / normalize_media
    Single-file create request and response normalisation.
ImagePreloader
    Background image loading.
PreviewRegistry
    Temporary preview URLs for in-flight files.
ResultSlot / ResultSlots / SlotState
    Per-file result lifecycle.
is_allowed_type / validate_candidate
    Validation gates.
"""

from .orchestrator import MediaUploader, SlotUpdate
from .preload import ImagePreloader
from .preview import PreviewRegistry
from .saver import MediaSaver, normalize_media, save_media, synthesize_filename
from .slots import ResultSlot, ResultSlots, SlotState
from .validate import is_allowed_for_user, is_allowed_type, validate_candidate

__all__ = [
    "ImagePreloader",
    "MediaSaver",
    "MediaUploader",
    "PreviewRegistry",
    "ResultSlot",
    "ResultSlots",
    "SlotState",
    "SlotUpdate",
    "is_allowed_for_user",
    "is_allowed_type",
    "normalize_media",
    "save_media",
    "synthesize_filename",
    "validate_candidate",
]
