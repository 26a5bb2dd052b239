"""Domain models for the day-grouped meal feed."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from meal_tracker.domain.meals import Meal


class CalorieStatus(Enum):
    """How a day's calories compare to the viewer's target."""

    OVER = "over"
    UNDER = "under"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DayGroup:
    """Meals that share a UTC calendar day."""

    day: date
    meals: tuple[Meal, ...]

    @property
    def total_calories(self) -> int:
        return sum(meal.calories for meal in self.meals)


@dataclass(frozen=True)
class FeedDay:
    """A day group with its calorie classification."""

    group: DayGroup
    status: CalorieStatus


@dataclass(frozen=True)
class Feed:
    """A page of meals ready for rendering."""

    page: int
    page_count: int
    days: tuple[FeedDay, ...]

    def has_page(self, page: int) -> bool:
        """Return True when the page can be requested."""
        return 1 <= page <= self.page_count


class FeedKind(Enum):
    """Which meals a feed lists."""

    YOUR_FEED = "your_feed"
    ALL_MEALS = "all_meals"
    AUTHOR = "author"


@dataclass(frozen=True)
class FeedSource:
    """A feed kind plus its filter."""

    kind: FeedKind
    author: str | None = None

    @classmethod
    def your_feed(cls) -> "FeedSource":
        return cls(FeedKind.YOUR_FEED)

    @classmethod
    def all_meals(cls) -> "FeedSource":
        return cls(FeedKind.ALL_MEALS)

    @classmethod
    def by_author(cls, username: str) -> "FeedSource":
        return cls(FeedKind.AUTHOR, author=username)
