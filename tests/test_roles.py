"""Tests for meal permissions."""

from datetime import UTC, datetime

import pytest

from meal_tracker.domain.meals import MealAction, meal_actions
from meal_tracker.domain.roles import Role
from tests.conftest import make_meal, make_viewer

_MEAL = make_meal(datetime(2024, 3, 1, 8, tzinfo=UTC), 400, author="ann")


@pytest.mark.parametrize(
    ("role", "username", "expected"),
    [
        (Role.ADMIN, "bob", {MealAction.EDIT, MealAction.DELETE}),
        (Role.ADMIN, "ann", {MealAction.EDIT, MealAction.DELETE}),
        (Role.MANAGER, "bob", set()),
        (Role.MANAGER, "ann", {MealAction.EDIT, MealAction.DELETE}),
        (Role.REGULAR, "bob", set()),
        (Role.REGULAR, "ann", {MealAction.EDIT, MealAction.DELETE}),
    ],
)
def test_meal_actions_by_role(role: Role, username: str, expected: set) -> None:
    viewer = make_viewer(username=username, role=role)

    assert meal_actions(viewer, _MEAL) == expected


def test_anonymous_viewer_has_no_actions() -> None:
    assert meal_actions(None, _MEAL) == frozenset()
