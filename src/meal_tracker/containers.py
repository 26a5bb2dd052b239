"""Dependency container wiring for the client."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_tracker.adapters.api_client import ApiClient, HttpxApiClient
from meal_tracker.adapters.local_storage import InMemoryStorage, JsonFileStorage
from meal_tracker.adapters.navigation import InMemoryNavigator
from meal_tracker.app_logging import configure_logging
from meal_tracker.config import Settings
from meal_tracker.domain.session import Navigator
from meal_tracker.services.auth import AuthService
from meal_tracker.services.feed import FeedLoader
from meal_tracker.services.meals import MealService
from meal_tracker.services.sessions import (
    SessionStorage,
    SessionStore,
    redirect_when_signed_out,
)


@dataclass
class AppContainer:
    """Holds client-wide dependencies for one context."""

    settings: Settings
    storage: SessionStorage
    session_store: SessionStore
    api_client: ApiClient
    auth_service: AuthService
    meal_service: MealService
    close_resources: Callable[[], Awaitable[None]]

    def feed_loader(self) -> FeedLoader:
        """Create a loader for a new feed slot."""
        return FeedLoader(
            meal_service=self.meal_service,
            sessions=self.session_store,
            slow_threshold_seconds=self.settings.slow_load_threshold_seconds,
        )

    def watch_storage(self) -> asyncio.Task[None] | None:
        """Start following writes made by other processes, when file-backed."""
        if not isinstance(self.storage, JsonFileStorage):
            return None
        return asyncio.get_running_loop().create_task(
            self.storage.watch(self.settings.storage_poll_interval_seconds)
        )


def build_container(
    settings: Settings | None = None,
    navigator: Navigator | None = None,
    storage: SessionStorage | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    if storage is None:
        if resolved_settings.storage_path is not None:
            storage = JsonFileStorage(resolved_settings.storage_path)
        else:
            storage = InMemoryStorage()
    session_store = SessionStore(
        storage=storage,
        navigator=navigator or InMemoryNavigator(),
        key=resolved_settings.storage_key,
    )
    unsubscribe_redirect = redirect_when_signed_out(
        session_store, resolved_settings.login_path
    )
    api_client = HttpxApiClient.create(
        base_url=resolved_settings.api_base_url,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    auth_service = AuthService(api=api_client, sessions=session_store)
    meal_service = MealService(
        api=api_client,
        sessions=session_store,
        results_per_page=resolved_settings.results_per_page,
    )

    async def close_resources() -> None:
        unsubscribe_redirect()
        session_store.close()
        await api_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        session_store=session_store,
        api_client=api_client,
        auth_service=auth_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
