"""Pydantic models for API payloads."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from meal_tracker.domain.meals import Meal, Profile

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

Decoder = Callable[[bytes], T]


class ProfilePayload(BaseModel):
    """Profile or meal author payload."""

    username: str
    image: str | None = None
    following: bool = False
    bio: str | None = None

    def to_profile(self) -> Profile:
        return Profile(
            username=self.username,
            image=self.image,
            following=self.following,
            bio=self.bio,
        )


class ProfileEnvelope(BaseModel):
    """Response of the profile endpoints."""

    profile: ProfilePayload


class MealPayload(BaseModel):
    """Meal payload."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    description: str
    calories: int
    created_at: datetime = Field(alias="createdAt")
    author: ProfilePayload

    def to_meal(self) -> Meal:
        return Meal(
            slug=self.slug,
            author=self.author.to_profile(),
            created_at=self.created_at,
            description=self.description,
            calories=self.calories,
        )


class MealEnvelope(BaseModel):
    """Response of the single-meal endpoints."""

    meal: MealPayload


class MealsEnvelope(BaseModel):
    """Response of the meal list endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    meals_count: int = Field(alias="mealsCount", ge=0)
    meals: list[MealPayload]


class UserEnvelope(BaseModel):
    """Response of the authentication and settings endpoints."""

    user: dict[str, Any]


class TagsEnvelope(BaseModel):
    """Response of the tags endpoint."""

    tags: list[str]


class ErrorEnvelope(BaseModel):
    """Structured validation errors returned with a failing status."""

    errors: dict[str, list[str]]


def json_decoder(model: type[M], transform: Callable[[M], T]) -> Decoder[T]:
    """Build a decoder that validates JSON into a model and transforms it."""

    def decode(content: bytes) -> T:
        return transform(model.model_validate_json(content))

    return decode


def ignore_body(content: bytes) -> None:
    """Decoder for responses whose body carries nothing of interest."""
    return None
