"""mediaupload.api -- REST transport and endpoint wrappers.

* :mod:`.transport` -- HTTP transport with auth, typed errors, and metrics.
* :mod:`.media` -- Media collection wrapper.
"""

from __future__ import annotations

from .media import AsyncMediaAPI
from .transport import AsyncMediaTransport

__all__ = [
    "AsyncMediaAPI",
    "AsyncMediaTransport",
]
