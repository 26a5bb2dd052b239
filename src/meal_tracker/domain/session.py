"""Per-context session model."""

from dataclasses import dataclass
from typing import Protocol

from meal_tracker.domain.credentials import Credential, Viewer


class Navigator(Protocol):
    """Capability to change the current location."""

    def push_url(self, path: str) -> None:
        """Navigate to a path, keeping history."""

    def replace_url(self, path: str) -> None:
        """Navigate to a path, replacing the current entry."""


@dataclass(frozen=True)
class Session:
    """Navigation handle plus the viewer, if someone is signed in."""

    navigator: Navigator
    viewer: Viewer | None = None

    @property
    def credential(self) -> Credential | None:
        return self.viewer.credential if self.viewer else None

    @property
    def calorie_target(self) -> int | None:
        return self.viewer.calorie_target if self.viewer else None
