"""Upload orchestration: validate, show placeholders, save, reconcile.

:class:`MediaUploader` drives the per-file pipeline::

    type gate -> permission gate -> size gate -> placeholder -> async save

The synchronous part runs for every file, in input order, inside
:meth:`MediaUploader.upload`.  Each accepted file gets one save task.  Save
tasks never touch the result slots: they post a :class:`SlotUpdate` to a
queue, and a single reconcile task per ``upload`` call applies the updates
and notifies the caller.  ``on_file_change`` always receives the full
compacted list in input order, so callers replace their state with it
rather than patching.

Usage::

    uploader = MediaUploader(saver, settings=StaticSiteSettings(max_upload_size=2**20))
    uploader.upload("image", files, on_file_change=render, on_error=report)
    ...
    await uploader.join()
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from mediaupload.config import SiteSettings, StaticSiteSettings
from mediaupload.i18n import _
from mediaupload.models import (
    CandidateFile,
    MediaItem,
    MediaRecord,
    PlaceholderMedia,
    UploadError,
    UploadErrorCode,
)
from mediaupload.observability import NoopMetricsHook, get_logger

from .preview import PreviewRegistry
from .saver import MediaSaver
from .slots import ResultSlots
from .validate import is_allowed_type, validate_candidate

log = get_logger("mediaupload.upload")

FileChangeCallback = Callable[[list[MediaItem]], Any]
ErrorCallback = Callable[[UploadError], Any]


def _noop(error: UploadError) -> None:
    pass


@dataclass(frozen=True)
class SlotUpdate:
    """Outcome of one save, posted by a save task to the reconcile task."""

    index: int
    file: CandidateFile
    record: MediaRecord | None
    error: Exception | None = None


class MediaUploader:
    """Validate and upload files, reporting progress through callbacks.

    Parameters
    ----------
    saver:
        Coroutine function ``(file, additional_data) -> MediaRecord``.
    settings:
        Site upload policy.  Defaults to no size limit and no allow-list.
    previews:
        Registry issuing placeholder URLs.
    revoke_previews:
        Revoke a slot's placeholder URL once the slot is saved or failed.
    metrics:
        A :class:`~mediaupload.observability.MetricsHook`.
    """

    def __init__(
        self,
        saver: MediaSaver,
        settings: SiteSettings | None = None,
        previews: PreviewRegistry | None = None,
        *,
        revoke_previews: bool = False,
        metrics: Any | None = None,
    ) -> None:
        self._saver = saver
        self._settings = settings if settings is not None else StaticSiteSettings()
        self._previews = previews if previews is not None else PreviewRegistry()
        self._revoke_previews = revoke_previews
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._tasks: set[asyncio.Task] = set()
        self._in_flight = 0

    @property
    def previews(self) -> PreviewRegistry:
        return self._previews

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
        """Start uploading every file of *files_list* that *allowed_type* accepts.

        Returns immediately after the synchronous gates and placeholder
        emissions; saves continue on the running event loop and report
        through the callbacks.

        Parameters
        ----------
        allowed_type:
            Top-level MIME category, e.g. ``"image"``.  Other files are
            ignored without any callback.
        files_list:
            Candidate files, in display order.
        on_file_change:
            Called with the full compacted list after every slot change.
        additional_data:
            Form fields sent with every file.
        max_upload_file_size:
            Size limit in bytes; defaults to the site setting, ``0`` means
            no limit.
        on_error:
            Called with an :class:`UploadError` for every rejected or
            failed file.

        Raises
        ------
        RuntimeError
            If called outside a running event loop.
        """
        loop = asyncio.get_running_loop()
        files = list(files_list)
        report_error = on_error if on_error is not None else _noop
        fields: Mapping[str, Any] = additional_data if additional_data is not None else {}
        limit = (
            self._settings.max_upload_size
            if max_upload_file_size is None
            else max_upload_file_size
        )
        allowed_mime_types = self._settings.allowed_mime_types

        slots = ResultSlots(len(files))
        queue: asyncio.Queue[SlotUpdate] = asyncio.Queue()
        dispatched = 0

        try:
            for index, candidate in enumerate(files):
                if not is_allowed_type(candidate.type, allowed_type):
                    continue

                error = validate_candidate(candidate, allowed_mime_types, limit)
                if error is not None:
                    self._metrics.increment(
                        "mediaupload.upload_rejected_total",
                        tags={"code": error.code.value},
                    )
                    log.info(
                        "File rejected",
                        extra={
                            "extra_fields": {
                                "op": "validate",
                                "index": index,
                                "file": candidate.name,
                                "code": error.code.value,
                            }
                        },
                    )
                    report_error(error)
                    continue

                url = self._previews.create(candidate)
                slots[index].set_placeholder(PlaceholderMedia(url=url))
                on_file_change(slots.compacted())

                self._track(loop.create_task(
                    self._save(queue, index, candidate, fields)
                ))
                dispatched += 1
        finally:
            if dispatched:
                self._track(loop.create_task(
                    self._reconcile(queue, slots, dispatched, on_file_change, report_error)
                ))

    async def join(self) -> None:
        """Wait until every upload started so far has been reconciled.

        Cancelling the wait (e.g. through :func:`asyncio.wait_for`) leaves
        the uploads running; they still reconcile and report.
        """
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _save(
        self,
        queue: asyncio.Queue[SlotUpdate],
        index: int,
        file: CandidateFile,
        additional_data: Mapping[str, Any],
    ) -> None:
        """Run the saver for one file and post the outcome."""
        self._in_flight += 1
        self._metrics.gauge("mediaupload.uploads_in_flight", self._in_flight)
        try:
            record = await self._saver(file, additional_data)
        except asyncio.CancelledError:
            # The slot still has to leave PLACEHOLDER or _reconcile never finishes.
            queue.put_nowait(SlotUpdate(index=index, file=file, record=None))
            raise
        except Exception as exc:
            self._metrics.increment("mediaupload.upload_failure_total")
            log.warning(
                "Media save failed",
                extra={
                    "extra_fields": {
                        "op": "save",
                        "index": index,
                        "file": file.name,
                        "error": repr(exc),
                    }
                },
            )
            queue.put_nowait(SlotUpdate(index=index, file=file, record=None, error=exc))
        else:
            self._metrics.increment("mediaupload.upload_success_total")
            log.info(
                "Media saved",
                extra={
                    "extra_fields": {
                        "op": "save",
                        "index": index,
                        "file": file.name,
                        "media_id": record.id,
                    }
                },
            )
            queue.put_nowait(SlotUpdate(index=index, file=file, record=record))
        finally:
            self._in_flight -= 1
            self._metrics.gauge("mediaupload.uploads_in_flight", self._in_flight)

    async def _reconcile(
        self,
        queue: asyncio.Queue[SlotUpdate],
        slots: ResultSlots,
        pending: int,
        on_file_change: FileChangeCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Apply save outcomes to *slots* as they arrive; sole writer after dispatch."""
        while pending:
            update = await queue.get()
            pending -= 1

            slot = slots[update.index]
            previous = slot.value
            if update.record is not None:
                slot.save(update.record)
            else:
                slot.fail()

            if self._revoke_previews and isinstance(previous, PlaceholderMedia):
                self._previews.revoke(previous.url)

            self._notify(on_file_change, slots.compacted())
            if update.record is None:
                self._notify(
                    on_error,
                    UploadError(
                        code=UploadErrorCode.GENERAL,
                        message=_(
                            "Error while uploading file %s to the media library."
                        ) % update.file.name,
                        file=update.file,
                    ),
                )

    @staticmethod
    def _notify(callback: Callable[[Any], Any], payload: Any) -> None:
        """Invoke a caller callback; a failing callback must not stall other slots."""
        try:
            callback(payload)
        except Exception:
            log.exception(
                "Upload callback raised",
                extra={"extra_fields": {"op": "reconcile", "callback": repr(callback)}},
            )
