"""Asynchronous media upload client.

:class:`MediaUploadClient` wires the configuration, HTTP transport, media
API wrapper, preview registry and site settings together and exposes the
upload and preload operations.

Usage::

    import asyncio
    from mediaupload import CandidateFile, MediaUploadClient, StaticSiteSettings

    async def main():
        settings = StaticSiteSettings(max_upload_size=8 * 1024 * 1024)
        async with MediaUploadClient(
            base_url="https://example.com/wp-json",
            settings=settings,
            token="app-password-token",
        ) as client:
            client.upload(
                "image",
                [CandidateFile.from_path("photo.jpg")],
                on_file_change=print,
                on_error=print,
            )

    asyncio.run(main())
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from typing import Any

from mediaupload.api.media import AsyncMediaAPI
from mediaupload.api.transport import AsyncMediaTransport
from mediaupload.config import MediaUploadConfig, SiteSettings
from mediaupload.models import CandidateFile
from mediaupload.upload.orchestrator import ErrorCallback, FileChangeCallback, MediaUploader
from mediaupload.upload.preload import ImagePreloader
from mediaupload.upload.preview import PreviewRegistry
from mediaupload.upload.saver import save_media


class MediaUploadClient:
    """Asynchronous media-library upload client.

    Parameters
    ----------
    base_url:
        REST API root, e.g. ``"https://example.com/wp-json"``.
    settings:
        Site upload policy provider.  Defaults to no limits.
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`MediaUploadConfig`.
    """

    def __init__(
        self,
        base_url: str,
        settings: SiteSettings | None = None,
        **kwargs: Any,
    ) -> None:
        """Create client.  All kwargs are forwarded to MediaUploadConfig."""
        self._config = MediaUploadConfig(base_url=base_url, **kwargs)
        self._transport = AsyncMediaTransport(self._config)
        self._media = AsyncMediaAPI(self._transport, self._config.media_path)
        self._previews = PreviewRegistry(self._config.preview_origin)
        self._uploader = MediaUploader(
            partial(save_media, self._media),
            settings=settings,
            previews=self._previews,
            revoke_previews=self._config.revoke_previews,
            metrics=self._config.metrics,
        )
        self._preloader = ImagePreloader(
            previews=self._previews,
            metrics=self._config.metrics,
            timeout_seconds=self._config.timeout_seconds,
        )

    @property
    def config(self) -> MediaUploadConfig:
        return self._config

    @property
    def previews(self) -> PreviewRegistry:
        return self._previews

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def upload(
        self,
        allowed_type: str,
        files_list: Iterable[CandidateFile],
        on_file_change: FileChangeCallback,
        *,
        additional_data: Mapping[str, Any] | None = None,
        max_upload_file_size: int | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """Start uploading *files_list*; see :meth:`MediaUploader.upload`."""
        self._uploader.upload(
            allowed_type,
            files_list,
            on_file_change,
            additional_data=additional_data,
            max_upload_file_size=max_upload_file_size,
            on_error=on_error,
        )

    async def join(self) -> None:
        """Wait for every upload started so far to be reconciled."""
        await self._uploader.join()

    # ------------------------------------------------------------------
    # Preloading
    # ------------------------------------------------------------------

    async def preload_image(self, url: str) -> str:
        """Load *url* in the background; see :meth:`ImagePreloader.preload`."""
        return await self._preloader.preload(url)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Wait for in-flight uploads, then close the HTTP clients."""
        await self._uploader.join()
        await self._preloader.close()
        await self._transport.close()

    async def __aenter__(self) -> MediaUploadClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
