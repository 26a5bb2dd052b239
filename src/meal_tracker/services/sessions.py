"""Session store shared with other contexts through durable storage."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from meal_tracker.domain.credentials import (
    Viewer,
    deserialize_viewer,
    serialize_viewer,
)
from meal_tracker.domain.results import Err
from meal_tracker.domain.session import Navigator, Session

DEFAULT_STORAGE_KEY = "session"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageChange:
    """A key was written or removed by some context."""

    key: str
    new_value: str | None


StorageListener = Callable[[StorageChange], None]
SessionListener = Callable[[Session], None]


class SessionStorage(Protocol):
    """Durable key-value storage visible to every context."""

    def get(self, key: str) -> str | None:
        """Return the raw value stored under a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a raw value under a key."""

    def remove(self, key: str) -> None:
        """Remove a key."""

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""


@dataclass
class SessionStore:
    """Holds the current session and keeps it in sync with storage."""

    storage: SessionStorage
    navigator: Navigator
    key: str = DEFAULT_STORAGE_KEY
    _session: Session = field(init=False)
    _listeners: list[SessionListener] = field(init=False, default_factory=list)
    _unsubscribe_storage: Callable[[], None] | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self._session = Session(
            navigator=self.navigator,
            viewer=self._decode(self.storage.get(self.key)),
        )
        self._unsubscribe_storage = self.storage.subscribe(self._on_storage_change)

    def current(self) -> Session:
        """Return the current session."""
        return self._session

    def sign_in(self, viewer: Viewer) -> None:
        """Persist the viewer and make it current."""
        self.storage.set(self.key, serialize_viewer(viewer))
        self._replace_viewer(viewer)

    def sign_out(self) -> None:
        """Forget the persisted viewer."""
        self.storage.remove(self.key)
        self._replace_viewer(None)

    def subscribe(self, callback: SessionListener) -> Callable[[], None]:
        """Register a listener for session changes from any context.

        Listeners hear about a storage write only when it changes the viewer,
        so a context does not get its own sign-in back a second time.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def close(self) -> None:
        """Stop following storage changes."""
        if self._unsubscribe_storage is not None:
            self._unsubscribe_storage()
            self._unsubscribe_storage = None
        self._listeners.clear()

    def _on_storage_change(self, change: StorageChange) -> None:
        if change.key != self.key:
            return
        self._replace_viewer(self._decode(change.new_value))

    def _replace_viewer(self, viewer: Viewer | None) -> None:
        if viewer == self._session.viewer:
            return
        self._session = Session(navigator=self.navigator, viewer=viewer)
        for listener in list(self._listeners):
            listener(self._session)

    def _decode(self, raw: str | None) -> Viewer | None:
        if raw is None:
            return None
        result = deserialize_viewer(raw)
        if isinstance(result, Err):
            _logger.info(
                "Ignoring unreadable session under %s: %s",
                self.key,
                result.error.detail,
            )
            return None
        return result.value


def redirect_when_signed_out(
    store: SessionStore, login_path: str = "/login"
) -> Callable[[], None]:
    """Send the navigator to the sign-in page whenever the viewer goes away."""

    def on_session(session: Session) -> None:
        if session.viewer is None:
            _logger.info("Session ended, redirecting to %s", login_path)
            session.navigator.replace_url(login_path)

    return store.subscribe(on_session)
