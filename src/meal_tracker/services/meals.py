"""Meal, profile and tag operations against the API."""

from dataclasses import dataclass
from typing import assert_never

from meal_tracker.adapters import endpoints
from meal_tracker.adapters.api_client import ApiClient, build_request
from meal_tracker.adapters.api_models import (
    MealEnvelope,
    MealPayload,
    MealsEnvelope,
    ProfileEnvelope,
    TagsEnvelope,
    ignore_body,
    json_decoder,
)
from meal_tracker.adapters.endpoints import Endpoint
from meal_tracker.domain.credentials import Credential
from meal_tracker.domain.errors import HttpError
from meal_tracker.domain.feed import FeedKind, FeedSource
from meal_tracker.domain.meals import Meal, MealDraft, Profile
from meal_tracker.domain.pagination import PaginatedResult, query_params
from meal_tracker.domain.results import Result
from meal_tracker.services.sessions import SessionStore


@dataclass
class MealService:
    """Application service for meals, profiles and tags."""

    api: ApiClient
    sessions: SessionStore
    results_per_page: int = 10

    async def list_meals(
        self, source: FeedSource, page: int = 1
    ) -> Result[PaginatedResult[Meal], HttpError]:
        """Fetch one page of meals for a feed source."""
        params = query_params(page, self.results_per_page)
        results_per_page = self.results_per_page

        def to_page(envelope: MealsEnvelope) -> PaginatedResult[Meal]:
            return PaginatedResult.from_server_page(
                envelope.meals_count, results_per_page, envelope.meals
            ).map(MealPayload.to_meal)

        request = build_request(
            _list_endpoint(source, params),
            self._credential(),
            "GET",
            None,
            json_decoder(MealsEnvelope, to_page),
        )
        return await self.api.send(request)

    async def get_meal(self, slug: str) -> Result[Meal, HttpError]:
        """Fetch a single meal."""
        request = build_request(
            endpoints.meal(slug),
            self._credential(),
            "GET",
            None,
            json_decoder(MealEnvelope, _to_meal),
        )
        return await self.api.send(request)

    async def create_meal(self, draft: MealDraft) -> Result[Meal, HttpError]:
        """Log a new meal."""
        request = build_request(
            endpoints.meals(),
            self._credential(),
            "POST",
            {"meal": _draft_body(draft)},
            json_decoder(MealEnvelope, _to_meal),
        )
        return await self.api.send(request)

    async def update_meal(self, slug: str, draft: MealDraft) -> Result[Meal, HttpError]:
        """Save edits to a meal and return the updated value."""
        request = build_request(
            endpoints.meal(slug),
            self._credential(),
            "PUT",
            {"meal": _draft_body(draft)},
            json_decoder(MealEnvelope, _to_meal),
        )
        return await self.api.send(request)

    async def delete_meal(self, slug: str) -> Result[None, HttpError]:
        """Delete a meal."""
        request = build_request(
            endpoints.meal(slug), self._credential(), "DELETE", None, ignore_body
        )
        return await self.api.send(request)

    async def get_profile(self, username: str) -> Result[Profile, HttpError]:
        """Fetch a user's public profile."""
        request = build_request(
            endpoints.profile(username),
            self._credential(),
            "GET",
            None,
            json_decoder(ProfileEnvelope, _to_profile),
        )
        return await self.api.send(request)

    async def follow(self, username: str) -> Result[Profile, HttpError]:
        """Follow a user."""
        request = build_request(
            endpoints.follow(username),
            self._credential(),
            "POST",
            None,
            json_decoder(ProfileEnvelope, _to_profile),
        )
        return await self.api.send(request)

    async def unfollow(self, username: str) -> Result[Profile, HttpError]:
        """Stop following a user."""
        request = build_request(
            endpoints.follow(username),
            self._credential(),
            "DELETE",
            None,
            json_decoder(ProfileEnvelope, _to_profile),
        )
        return await self.api.send(request)

    async def list_tags(self) -> Result[list[str], HttpError]:
        """Fetch the popular tags."""
        request = build_request(
            endpoints.tags(),
            None,
            "GET",
            None,
            json_decoder(TagsEnvelope, lambda envelope: envelope.tags),
        )
        return await self.api.send(request)

    def _credential(self) -> Credential | None:
        return self.sessions.current().credential


def _list_endpoint(source: FeedSource, params: list[tuple[str, str]]) -> Endpoint:
    kind = source.kind
    if kind is FeedKind.YOUR_FEED:
        return endpoints.meal_feed(params)
    if kind is FeedKind.ALL_MEALS:
        return endpoints.meals(params)
    if kind is FeedKind.AUTHOR:
        return endpoints.meals([("author", source.author or ""), *params])
    assert_never(kind)


def _draft_body(draft: MealDraft) -> dict[str, object]:
    body: dict[str, object] = {
        "description": draft.description,
        "calories": draft.calories,
    }
    if draft.created_at is not None:
        body["createdAt"] = draft.created_at.isoformat()
    return body


def _to_meal(envelope: MealEnvelope) -> Meal:
    return envelope.meal.to_meal()


def _to_profile(envelope: ProfileEnvelope) -> Profile:
    return envelope.profile.to_profile()
