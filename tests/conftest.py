"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest

from holders_intel.parsers.api_usage import ApiCallEvent


class RecordingSink:
    """Usage recorder that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[ApiCallEvent] = []

    def record(self, event: ApiCallEvent) -> None:
        self.events.append(event)


def _make_response(status_code: int = 200, payload: object = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_response():
    """Factory for fake httpx responses (status_code + .json())."""
    return _make_response
