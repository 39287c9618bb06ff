"""Shared test fixtures for the mediaupload test suite."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from mediaupload.config import MediaUploadConfig, StaticSiteSettings
from mediaupload.models import CandidateFile, MediaRecord


class ControlledSaver:
    """Saver whose results are settled explicitly by the test.

    Every call parks on a future keyed by the file name; tests resolve or
    fail those futures in whatever order the scenario needs.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[CandidateFile, Any]] = []
        self.futures: dict[str, asyncio.Future] = {}

    async def __call__(self, file: CandidateFile, additional_data: Any) -> MediaRecord:
        self.calls.append((file, additional_data))
        future = asyncio.get_running_loop().create_future()
        self.futures[file.name] = future
        return await future

    def resolve(self, name: str, record: MediaRecord) -> None:
        self.futures[name].set_result(record)

    def fail(self, name: str, exc: Exception | None = None) -> None:
        self.futures[name].set_exception(exc or RuntimeError("save failed"))


@pytest.fixture
def config() -> MediaUploadConfig:
    """Default test configuration with dummy credentials."""
    return MediaUploadConfig(
        base_url="https://example.com/wp-json",
        token="test_token_1234",
        nonce="nonce_abcd",
    )


@pytest.fixture
def settings() -> StaticSiteSettings:
    """Site settings without limits."""
    return StaticSiteSettings()


@pytest.fixture
def jpeg() -> CandidateFile:
    return CandidateFile(type="image/jpeg", size=2048, name="a.jpg", data=b"\xff\xd8\xff")


@pytest.fixture
def controlled_saver() -> ControlledSaver:
    return ControlledSaver()
