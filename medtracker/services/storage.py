"""
Local persistence for the application state.

The whole ``AppState`` is stored as one JSON blob under a fixed key in a small
key/value store, read once at startup and rewritten after every change.

Key patterns:
- Protocol-based storage backends (file on disk, in-memory for tests)
- Unreadable data never blocks startup: it is logged and replaced by defaults
"""

import json
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from medtracker.domain.models import AppState
from medtracker.services.state_reducer import roll_over_day

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "healthTrackData_v14"


class BlobStorage(Protocol):
    """Minimal string key/value store."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Process-local storage, used by tests and throwaway sessions."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """
    Key/value store kept in a single JSON file.

    Writes go to a temporary sibling file which then replaces the original, so an
    interrupted write leaves the previous contents intact.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self.logger = logger.bind(component="json_file_storage", path=str(self.path))

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("storage_file_unreadable", error=str(e))
            return {}
        if not isinstance(data, dict):
            self.logger.warning("storage_file_unexpected_shape", found=type(data).__name__)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


class StateRepository:
    """Loads and saves the serialized ``AppState`` blob."""

    def __init__(self, storage: BlobStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key
        self.logger = logger.bind(component="state_repository", key=key)

    def load(self, today: str) -> AppState:
        """
        Read the saved state, rolling it over if it belongs to an earlier day.

        Missing or unparseable data yields a fresh default state.
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            self.logger.info("no_saved_state", today=today)
            return AppState.initial(today)

        try:
            state = AppState.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning("saved_state_unreadable", error_count=e.error_count())
            return AppState.initial(today)

        rolled = roll_over_day(state, today)
        if rolled is not state:
            self.logger.info(
                "day_rolled_over",
                archived_date=state.current_report.date,
                today=today,
            )
        return rolled

    def save(self, state: AppState) -> None:
        self.storage.set_item(self.key, state.model_dump_json(by_alias=True))
        self.logger.debug("state_saved", history_entries=len(state.history))

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        self.logger.info("saved_state_cleared")
