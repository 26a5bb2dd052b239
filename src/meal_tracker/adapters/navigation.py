"""Navigator that records locations in memory."""

from dataclasses import dataclass, field

from meal_tracker.domain.session import Navigator


@dataclass
class InMemoryNavigator(Navigator):
    """Keeps a location history instead of driving a real router."""

    history: list[str] = field(default_factory=lambda: ["/"])

    @property
    def current_path(self) -> str:
        return self.history[-1]

    def push_url(self, path: str) -> None:
        """Append a location."""
        self.history.append(path)

    def replace_url(self, path: str) -> None:
        """Replace the current location."""
        self.history[-1] = path
