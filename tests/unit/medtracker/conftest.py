"""Shared fixtures for the medtracker unit tests."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator

import pytest

from medtracker.domain.models import AppState


@pytest.fixture(autouse=True)
def local_timezone(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str], None]]:
    """Pin the process time zone to UTC; tests can switch it with the returned setter."""

    def set_zone(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    set_zone("UTC")
    yield set_zone
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def fresh_state() -> AppState:
    return AppState.initial("2024-05-01")
