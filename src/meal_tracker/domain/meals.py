"""Domain models for meals and their authors."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import assert_never

from meal_tracker.domain.credentials import Viewer
from meal_tracker.domain.roles import Role


@dataclass(frozen=True)
class Profile:
    """Public profile of a user."""

    username: str
    image: str | None
    following: bool = False
    bio: str | None = None


@dataclass(frozen=True)
class Meal:
    """A logged meal as returned by the API."""

    slug: str
    author: Profile
    created_at: datetime
    description: str
    calories: int

    def edited(
        self,
        *,
        description: str | None = None,
        calories: int | None = None,
        created_at: datetime | None = None,
    ) -> "Meal":
        """Return a new meal with the given fields changed."""
        return replace(
            self,
            description=self.description if description is None else description,
            calories=self.calories if calories is None else calories,
            created_at=self.created_at if created_at is None else created_at,
        )


@dataclass(frozen=True)
class MealDraft:
    """Fields submitted when creating or editing a meal."""

    description: str
    calories: int
    created_at: datetime | None = None


class MealAction(Enum):
    """Actions a viewer can take on a meal."""

    EDIT = "edit"
    DELETE = "delete"


def meal_actions(viewer: Viewer | None, meal: Meal) -> frozenset[MealAction]:
    """Return the actions the viewer may take on a meal."""
    if viewer is None:
        return frozenset()
    owns_meal = viewer.username == meal.author.username
    role = viewer.role
    if role is Role.ADMIN:
        return frozenset(MealAction)
    if role is Role.MANAGER or role is Role.REGULAR:
        return frozenset(MealAction) if owns_meal else frozenset()
    assert_never(role)
