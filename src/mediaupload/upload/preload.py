"""Background image preloading.

:class:`ImagePreloader` fetches an image URL so that a later render finds
it ready, and resolves with the same URL once the body has arrived.

A load that fails never completes: no exception is raised and the
awaiting coroutine stays suspended.  Callers that need a bound wrap the
call in :func:`asyncio.wait_for`.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from mediaupload.observability import NoopMetricsHook, get_logger

from .preview import PreviewRegistry

log = get_logger("mediaupload.preload")


class ImagePreloader:
    """Preload images over HTTP and remember which URLs are ready.

    Parameters
    ----------
    client:
        HTTP client to fetch with.  When omitted, one is created and closed
        by :meth:`close`.
    previews:
        Registry of local preview URLs; those resolve without a request.
    metrics:
        A :class:`~mediaupload.observability.MetricsHook`.
    timeout_seconds:
        Timeout for the owned client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        previews: PreviewRegistry | None = None,
        metrics: Any | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout_seconds),
        )
        self._previews = previews
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._loaded: set[str] = set()

    def is_loaded(self, url: str) -> bool:
        return url in self._loaded

    async def preload(self, url: str) -> str:
        """Load *url* and return it once loaded.

        Never returns if the load fails.
        """
        if url in self._loaded:
            return url

        if self._previews is not None and url in self._previews:
            self._loaded.add(url)
            return url

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._metrics.increment("mediaupload.preload_total", tags={"status": "failed"})
            log.warning(
                "Image preload failed",
                extra={"extra_fields": {"op": "preload", "url": url, "error": str(exc)}},
            )
            await asyncio.get_running_loop().create_future()

        self._metrics.increment("mediaupload.preload_total", tags={"status": "loaded"})
        self._loaded.add(url)
        return url

    async def close(self) -> None:
        """Close the HTTP client if this preloader created it."""
        if self._owns_client:
            await self._client.aclose()
