"""Tests for MediaUploader: gating, placeholders, reconciliation, callbacks.

Covers:
- empty input and type-category filtering (no callbacks)
- permission and size gates (one on_error, no save)
- synchronous placeholder emission before the save runs
- success and failure reconciliation, including callback ordering
- out-of-order completion keeps input order
- preview URL revocation hook
- robustness against failing callbacks and cancelled saves
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from mediaupload.config import StaticSiteSettings
from mediaupload.errors import MediaServerError
from mediaupload.models import (
    CandidateFile,
    MediaRecord,
    PlaceholderMedia,
    UploadError,
    UploadErrorCode,
)
from mediaupload.upload.orchestrator import MediaUploader
from mediaupload.upload.preview import PreviewRegistry

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _record(media_id: int = 5, url: str = "u") -> MediaRecord:
    return MediaRecord(id=media_id, url=url, link="l", alt="", caption="")


def _image(name: str, size: int = 1024, mime: str = "image/jpeg") -> CandidateFile:
    return CandidateFile(type=mime, size=size, name=name, data=b"x" * 4)


def _make_uploader(saver=None, **settings) -> MediaUploader:
    if saver is None:
        saver = AsyncMock(return_value=_record())
    return MediaUploader(saver, settings=StaticSiteSettings(**settings))


# =========================================================================
# No-op inputs
# =========================================================================


class TestNothingToUpload:
    async def test_empty_files_list_fires_no_callbacks(self):
        saver = AsyncMock()
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        on_error = MagicMock()

        uploader.upload("image", [], on_file_change, on_error=on_error)
        await uploader.join()

        on_file_change.assert_not_called()
        on_error.assert_not_called()
        saver.assert_not_called()

    async def test_wrong_category_is_ignored_silently(self):
        saver = AsyncMock()
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        on_error = MagicMock()
        xml = CandidateFile(type="text/xml", name="feed.xml")

        uploader.upload("image", [xml], on_file_change, on_error=on_error)
        await uploader.join()

        on_file_change.assert_not_called()
        on_error.assert_not_called()
        saver.assert_not_called()

    async def test_category_match_requires_slash(self):
        saver = AsyncMock()
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()

        uploader.upload("image", [_image("x.bin", mime="imagex/png")], on_file_change)
        await uploader.join()

        on_file_change.assert_not_called()

    def test_requires_running_event_loop(self):
        uploader = _make_uploader()
        with pytest.raises(RuntimeError):
            uploader.upload("image", [], MagicMock())


# =========================================================================
# Gates
# =========================================================================


class TestSizeGate:
    async def test_oversized_file_reports_size_above_limit(self, jpeg):
        saver = AsyncMock()
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        on_error = MagicMock()

        uploader.upload(
            "image", [jpeg], on_file_change,
            max_upload_file_size=1024, on_error=on_error,
        )
        await uploader.join()

        on_error.assert_called_once_with(
            UploadError(
                code=UploadErrorCode.SIZE_ABOVE_LIMIT,
                message="a.jpg exceeds the maximum upload size for this site.",
                file=jpeg,
            )
        )
        on_file_change.assert_not_called()
        saver.assert_not_called()

    async def test_limit_defaults_to_site_setting(self, jpeg):
        uploader = _make_uploader(max_upload_size=100)
        on_error = MagicMock()

        uploader.upload("image", [jpeg], MagicMock(), on_error=on_error)
        await uploader.join()

        assert on_error.call_args.args[0].code == UploadErrorCode.SIZE_ABOVE_LIMIT

    async def test_explicit_zero_disables_site_limit(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver, max_upload_size=100)
        on_error = MagicMock()

        uploader.upload("image", [jpeg], MagicMock(), max_upload_file_size=0, on_error=on_error)
        await uploader.join()

        on_error.assert_not_called()
        saver.assert_awaited_once()

    async def test_file_exactly_at_limit_is_accepted(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)
        on_error = MagicMock()

        uploader.upload("image", [jpeg], MagicMock(), max_upload_file_size=2048, on_error=on_error)
        await uploader.join()

        on_error.assert_not_called()


class TestPermissionGate:
    async def test_mime_missing_from_allow_list(self, jpeg):
        saver = AsyncMock()
        uploader = _make_uploader(saver, allowed_mime_types={"aac": "audio/aac"})
        on_file_change = MagicMock()
        on_error = MagicMock()

        uploader.upload("image", [jpeg], on_file_change, on_error=on_error)
        await uploader.join()

        on_error.assert_called_once_with(
            UploadError(
                code=UploadErrorCode.MIME_TYPE_NOT_ALLOWED_FOR_USER,
                message="Sorry, this file type is not permitted for security reasons.",
                file=jpeg,
            )
        )
        on_file_change.assert_not_called()
        saver.assert_not_called()

    async def test_permission_checked_before_size(self, jpeg):
        uploader = _make_uploader(allowed_mime_types={"png": "image/png"})
        on_error = MagicMock()

        uploader.upload("image", [jpeg], MagicMock(), max_upload_file_size=1, on_error=on_error)
        await uploader.join()

        on_error.assert_called_once()
        assert on_error.call_args.args[0].code == UploadErrorCode.MIME_TYPE_NOT_ALLOWED_FOR_USER

    async def test_listed_mime_passes(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver, allowed_mime_types={"jpg|jpeg|jpe": "image/jpeg"})
        on_error = MagicMock()

        uploader.upload("image", [jpeg], MagicMock(), on_error=on_error)
        await uploader.join()

        on_error.assert_not_called()
        saver.assert_awaited_once()

    async def test_rejection_does_not_block_other_files(self):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)
        big = _image("big.jpg", size=10_000)
        small = _image("small.jpg", size=10)
        on_error = MagicMock()

        uploader.upload("image", [big, small], MagicMock(), max_upload_file_size=100, on_error=on_error)
        await uploader.join()

        assert on_error.call_count == 1
        saver.assert_awaited_once()
        assert saver.await_args.args[0] is small

    async def test_default_on_error_is_noop(self, jpeg):
        uploader = _make_uploader()
        uploader.upload("image", [jpeg], MagicMock(), max_upload_file_size=1)
        await uploader.join()


# =========================================================================
# Placeholder and save
# =========================================================================


class TestPlaceholder:
    async def test_placeholder_emitted_before_save_runs(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()

        uploader.upload("image", [jpeg], on_file_change)

        # Nothing has yielded to the loop yet.
        on_file_change.assert_called_once()
        saver.assert_not_called()
        [entry] = on_file_change.call_args.args[0]
        assert isinstance(entry, PlaceholderMedia)
        assert entry.url.startswith("blob:")
        assert uploader.previews.resolve(entry.url) is jpeg

        await uploader.join()

    async def test_each_placeholder_emission_has_full_list(self):
        uploader = _make_uploader()
        on_file_change = MagicMock()
        files = [_image("1.jpg"), _image("2.jpg"), _image("3.jpg")]

        uploader.upload("image", files, on_file_change)

        sizes = [len(call.args[0]) for call in on_file_change.call_args_list]
        assert sizes == [1, 2, 3]
        await uploader.join()

    async def test_emitted_lists_are_independent_copies(self):
        uploader = _make_uploader()
        seen: list[list] = []

        uploader.upload("image", [_image("1.jpg"), _image("2.jpg")], seen.append)
        await uploader.join()

        assert len(seen[0]) == 1
        assert seen[0] is not seen[1]

    async def test_additional_data_passed_through(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)
        extra = {"post": 12, "title": "Hello"}

        uploader.upload("image", [jpeg], MagicMock(), additional_data=extra)
        await uploader.join()

        saver.assert_awaited_once_with(jpeg, extra)

    async def test_additional_data_defaults_to_empty_mapping(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)

        uploader.upload("image", [jpeg], MagicMock())
        await uploader.join()

        assert saver.await_args.args[1] == {}

    async def test_generator_input_is_accepted(self):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)

        uploader.upload("image", (f for f in [_image("g.jpg")]), MagicMock())
        await uploader.join()

        saver.assert_awaited_once()


class TestSaveOutcome:
    async def test_success_scenario(self):
        """One valid file whose save succeeds."""
        saver = AsyncMock(return_value=MediaRecord(id=5, url="u", link="l", alt="", caption=""))
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        on_error = MagicMock()
        file = CandidateFile(type="image/jpeg", size=2048, name="a.jpg")

        uploader.upload("image", [file], on_file_change, max_upload_file_size=4096, on_error=on_error)
        await uploader.join()

        assert on_file_change.call_count == 2
        assert on_file_change.call_args.args[0] == [
            MediaRecord(id=5, url="u", link="l", alt="", caption="")
        ]
        on_error.assert_not_called()

    async def test_failure_clears_slot_then_reports_general(self, jpeg):
        saver = AsyncMock(side_effect=MediaServerError("boom"))
        uploader = _make_uploader(saver)
        events: list[tuple[str, object]] = []

        uploader.upload(
            "image", [jpeg],
            lambda items: events.append(("change", items)),
            on_error=lambda err: events.append(("error", err)),
        )
        await uploader.join()

        assert [kind for kind, _ in events] == ["change", "change", "error"]
        assert events[1][1] == []
        error = events[2][1]
        assert error == UploadError(
            code=UploadErrorCode.GENERAL,
            message="Error while uploading file a.jpg to the media library.",
            file=jpeg,
        )

    async def test_failed_slot_removed_but_others_kept(self, controlled_saver):
        uploader = MediaUploader(controlled_saver)
        on_file_change = MagicMock()
        files = [_image("1.jpg"), _image("2.jpg")]

        uploader.upload("image", files, on_file_change)
        await asyncio.sleep(0)
        controlled_saver.fail("1.jpg")
        controlled_saver.resolve("2.jpg", _record(2))
        await uploader.join()

        assert on_file_change.call_args.args[0] == [_record(2)]

    async def test_out_of_order_completion_keeps_input_order(self, controlled_saver):
        uploader = MediaUploader(controlled_saver)
        on_file_change = MagicMock()
        files = [_image("1.jpg"), _image("2.jpg"), _image("3.jpg")]

        uploader.upload("image", files, on_file_change)
        await asyncio.sleep(0)

        controlled_saver.resolve("3.jpg", _record(3))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        intermediate = on_file_change.call_args.args[0]
        assert isinstance(intermediate[0], PlaceholderMedia)
        assert intermediate[2] == _record(3)

        controlled_saver.resolve("1.jpg", _record(1))
        controlled_saver.resolve("2.jpg", _record(2))
        await uploader.join()

        assert on_file_change.call_args.args[0] == [_record(1), _record(2), _record(3)]
        assert on_file_change.call_count == 6

    async def test_excluded_files_contribute_no_slot(self):
        saver = AsyncMock(side_effect=[_record(1), _record(2)])
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        files = [
            _image("1.jpg"),
            CandidateFile(type="video/mp4", name="clip.mp4"),
            _image("2.jpg"),
        ]

        uploader.upload("image", files, on_file_change)
        await uploader.join()

        final = on_file_change.call_args.args[0]
        assert final == [_record(1), _record(2)]


# =========================================================================
# Preview lifecycle
# =========================================================================


class TestPreviewRevocation:
    async def test_previews_kept_by_default(self, jpeg):
        previews = PreviewRegistry()
        uploader = MediaUploader(AsyncMock(return_value=_record()), previews=previews)

        uploader.upload("image", [jpeg], MagicMock())
        await uploader.join()

        assert len(previews) == 1

    async def test_previews_revoked_when_enabled(self, jpeg):
        previews = PreviewRegistry()
        uploader = MediaUploader(
            AsyncMock(side_effect=[_record(), RuntimeError("x")]),
            previews=previews,
            revoke_previews=True,
        )

        uploader.upload("image", [jpeg, _image("b.jpg")], MagicMock())
        await uploader.join()

        assert len(previews) == 0


# =========================================================================
# Robustness
# =========================================================================


class TestCallbackFailures:
    async def test_sync_phase_callback_error_propagates(self, jpeg):
        saver = AsyncMock(return_value=_record())
        uploader = _make_uploader(saver)
        on_file_change = MagicMock(side_effect=[None, ValueError("render failed"), None])

        with pytest.raises(ValueError, match="render failed"):
            uploader.upload("image", [jpeg, _image("b.jpg")], on_file_change)
        await uploader.join()

        # Only the first file was dispatched; it is still reconciled.
        saver.assert_awaited_once_with(jpeg, {})
        assert on_file_change.call_args.args[0][0] == _record()

    async def test_async_callback_error_does_not_stall_other_slots(self):
        saver = AsyncMock(side_effect=RuntimeError("down"))
        uploader = _make_uploader(saver)
        calls: list[list] = []

        def on_file_change(items):
            calls.append(items)
            if len(calls) > 2:
                raise ValueError("render failed")

        on_error = MagicMock()
        uploader.upload("image", [_image("1.jpg"), _image("2.jpg")], on_file_change, on_error=on_error)
        await uploader.join()

        assert len(calls) == 4
        assert on_error.call_count == 2


class TestCancellation:
    async def test_cancelled_save_fails_the_slot(self, jpeg):
        saver = AsyncMock(side_effect=asyncio.CancelledError)
        uploader = _make_uploader(saver)
        on_file_change = MagicMock()
        on_error = MagicMock()

        uploader.upload("image", [jpeg], on_file_change, on_error=on_error)
        await uploader.join()

        assert on_file_change.call_args.args[0] == []
        assert on_error.call_args.args[0].code == UploadErrorCode.GENERAL

    async def test_bounded_join_leaves_uploads_running(self, jpeg, controlled_saver):
        uploader = MediaUploader(controlled_saver)
        on_file_change = MagicMock()
        on_error = MagicMock()

        uploader.upload("image", [jpeg], on_file_change, on_error=on_error)
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(uploader.join(), 0.01)

        controlled_saver.resolve("a.jpg", _record())
        await uploader.join()

        assert on_file_change.call_count == 2
        assert on_file_change.call_args.args[0] == [_record()]
        on_error.assert_not_called()

    async def test_cancelled_join_leaves_uploads_running(self, jpeg, controlled_saver):
        uploader = MediaUploader(controlled_saver)
        on_file_change = MagicMock()

        uploader.upload("image", [jpeg], on_file_change)
        waiter = asyncio.ensure_future(uploader.join())
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        controlled_saver.fail("a.jpg")
        await uploader.join()

        assert on_file_change.call_args.args[0] == []


class TestMetrics:
    async def test_outcomes_are_counted(self, jpeg):
        metrics = MagicMock()
        uploader = MediaUploader(
            AsyncMock(side_effect=[_record(), RuntimeError("x")]),
            settings=StaticSiteSettings(max_upload_size=4096),
            metrics=metrics,
        )
        files = [jpeg, _image("b.jpg"), _image("huge.jpg", size=10_000)]

        uploader.upload("image", files, MagicMock())
        await uploader.join()

        names = [call.args[0] for call in metrics.increment.call_args_list]
        assert names.count("mediaupload.upload_success_total") == 1
        assert names.count("mediaupload.upload_failure_total") == 1
        assert names.count("mediaupload.upload_rejected_total") == 1
        metrics.gauge.assert_called_with("mediaupload.uploads_in_flight", 0)
