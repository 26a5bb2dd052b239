"""Day-grouped meal feed with calorie classification."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from itertools import groupby

from meal_tracker.domain.errors import HttpError
from meal_tracker.domain.feed import (
    CalorieStatus,
    DayGroup,
    Feed,
    FeedDay,
    FeedSource,
)
from meal_tracker.domain.meals import Meal
from meal_tracker.domain.pagination import PaginatedResult
from meal_tracker.domain.results import Ok, Result
from meal_tracker.services.loading import LoadDriver, LoadSlot
from meal_tracker.services.meals import MealService
from meal_tracker.services.sessions import SessionStore


def group_by_day(meals: Iterable[Meal]) -> list[DayGroup]:
    """Group meals into UTC days, newest first."""
    ordered = sorted(meals, key=lambda meal: _as_utc(meal.created_at), reverse=True)
    return [
        DayGroup(day=day, meals=tuple(day_meals))
        for day, day_meals in groupby(
            ordered, key=lambda meal: _utc_day(meal.created_at)
        )
    ]


def classify(day_total: int, target: int | None) -> CalorieStatus:
    """Compare a day's calories to the target; equal counts as under."""
    if target is None:
        return CalorieStatus.UNKNOWN
    if day_total > target:
        return CalorieStatus.OVER
    return CalorieStatus.UNDER


def build_feed(result: PaginatedResult[Meal], page: int, target: int | None) -> Feed:
    """Turn a page of meals into classified day groups."""
    days = tuple(
        FeedDay(group=group, status=classify(group.total_calories, target))
        for group in group_by_day(result.items)
    )
    return Feed(page=page, page_count=result.page_count, days=days)


@dataclass(frozen=True)
class FeedQuery:
    """Which feed page to load."""

    source: FeedSource
    page: int = 1


@dataclass
class FeedLoader:
    """Loads feed pages into a single UI slot."""

    meal_service: MealService
    sessions: SessionStore
    slow_threshold_seconds: float = 0.5
    driver: LoadDriver[FeedQuery, Feed] = field(init=False)

    def __post_init__(self) -> None:
        self.driver = LoadDriver(
            fetch=self._fetch, slow_threshold_seconds=self.slow_threshold_seconds
        )

    @property
    def slot(self) -> LoadSlot[Feed]:
        return self.driver.slot

    def load(self, source: FeedSource, page: int = 1) -> int:
        """Start loading a feed page; older in-flight pages are superseded."""
        return self.driver.request(FeedQuery(source=source, page=page))

    def subscribe(
        self, listener: Callable[[LoadSlot[Feed]], None]
    ) -> Callable[[], None]:
        return self.driver.subscribe(listener)

    async def _fetch(self, query: FeedQuery) -> Result[Feed, HttpError]:
        result = await self.meal_service.list_meals(query.source, query.page)
        if not isinstance(result, Ok):
            return result
        target = self.sessions.current().calorie_target
        return Ok(build_feed(result.value, query.page, target))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _utc_day(moment: datetime) -> date:
    return _as_utc(moment).date()
