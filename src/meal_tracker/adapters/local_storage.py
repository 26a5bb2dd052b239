"""Durable key-value storage shared between contexts."""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from meal_tracker.services.sessions import (
    SessionStorage,
    StorageChange,
    StorageListener,
)

_logger = logging.getLogger(__name__)


@dataclass
class _Listeners:
    entries: list[StorageListener] = field(default_factory=list)

    def add(self, listener: StorageListener) -> Callable[[], None]:
        self.entries.append(listener)

        def remove() -> None:
            if listener in self.entries:
                self.entries.remove(listener)

        return remove

    def notify(self, change: StorageChange) -> None:
        for listener in list(self.entries):
            listener(change)


@dataclass
class InMemoryStorage(SessionStorage):
    """Storage shared by every context created in the same process."""

    values: dict[str, str] = field(default_factory=dict)
    _listeners: _Listeners = field(default_factory=_Listeners, init=False)

    def get(self, key: str) -> str | None:
        """Return the stored value, if any."""
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value and notify every subscriber."""
        if self.values.get(key) == value:
            return
        self.values[key] = value
        self._listeners.notify(StorageChange(key=key, new_value=value))

    def remove(self, key: str) -> None:
        """Remove a value and notify every subscriber."""
        if key not in self.values:
            return
        del self.values[key]
        self._listeners.notify(StorageChange(key=key, new_value=None))

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register a change listener."""
        return self._listeners.add(listener)


@dataclass
class JsonFileStorage(SessionStorage):
    """Storage kept in a JSON file that several processes may share.

    Changes made by this process are announced immediately. Changes made by
    other processes are picked up by ``poll`` (or ``watch``, which polls in a
    loop). Concurrent writers follow last-write-wins.
    """

    path: Path
    _listeners: _Listeners = field(default_factory=_Listeners, init=False)
    _snapshot: dict[str, str] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._snapshot = self._read()

    def get(self, key: str) -> str | None:
        """Return the value currently on disk."""
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        """Write a value to disk."""
        values = self._read()
        values[key] = value
        self._write(values)
        self._publish(values)

    def remove(self, key: str) -> None:
        """Delete a value from disk."""
        values = self._read()
        if values.pop(key, None) is None:
            return
        self._write(values)
        self._publish(values)

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register a change listener."""
        return self._listeners.add(listener)

    def poll(self) -> list[StorageChange]:
        """Announce changes written to disk since the last look."""
        return self._publish(self._read())

    async def watch(self, interval_seconds: float = 1.0) -> None:
        """Poll the file until cancelled."""
        while True:
            self.poll()
            await asyncio.sleep(interval_seconds)

    def _publish(self, values: dict[str, str]) -> list[StorageChange]:
        changes = [
            StorageChange(key=key, new_value=values.get(key))
            for key in sorted(set(self._snapshot) | set(values))
            if self._snapshot.get(key) != values.get(key)
        ]
        self._snapshot = dict(values)
        for change in changes:
            self._listeners.notify(change)
        return changes

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Storage file %s is not valid JSON; ignoring it", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(values, handle, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
