"""Sign-in, registration and account settings."""

import logging
from dataclasses import dataclass

from meal_tracker.adapters import endpoints
from meal_tracker.adapters.api_client import ApiClient, ApiRequest, build_request
from meal_tracker.adapters.api_models import UserEnvelope, json_decoder
from meal_tracker.adapters.endpoints import Endpoint
from meal_tracker.domain.credentials import Viewer, viewer_from_user_payload
from meal_tracker.domain.errors import HttpError, error_messages
from meal_tracker.domain.results import Err, Ok, Result
from meal_tracker.services.sessions import SessionStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsUpdate:
    """Account fields to change; ``None`` leaves a field untouched."""

    email: str | None = None
    username: str | None = None
    password: str | None = None
    image: str | None = None
    bio: str | None = None
    expected_calories: int | None = None

    def to_body(self) -> dict[str, object]:
        fields: dict[str, object | None] = {
            "email": self.email,
            "username": self.username,
            "password": self.password,
            "image": self.image,
            "bio": self.bio,
            "expectedCalories": self.expected_calories,
        }
        return {key: value for key, value in fields.items() if value is not None}


@dataclass
class AuthService:
    """Application service that turns API responses into sessions."""

    api: ApiClient
    sessions: SessionStore

    async def login(self, email: str, password: str) -> Result[Viewer, HttpError]:
        """Sign in with email and password."""
        body = {"user": {"email": email, "password": password}}
        return await self._authenticate(
            self._user_request(endpoints.login(), "POST", body, authorized=False)
        )

    async def register(
        self, username: str, email: str, password: str
    ) -> Result[Viewer, HttpError]:
        """Create an account and sign in with it."""
        body = {"user": {"username": username, "email": email, "password": password}}
        return await self._authenticate(
            self._user_request(endpoints.users(), "POST", body, authorized=False)
        )

    async def update_settings(
        self, changes: SettingsUpdate
    ) -> Result[Viewer, HttpError]:
        """Save account settings and refresh the signed-in viewer."""
        body = {"user": changes.to_body()}
        return await self._authenticate(
            self._user_request(endpoints.user(), "PUT", body, authorized=True)
        )

    async def refresh_viewer(self) -> Result[Viewer, HttpError]:
        """Reload the signed-in viewer from the API."""
        return await self._authenticate(
            self._user_request(endpoints.user(), "GET", None, authorized=True)
        )

    def sign_out(self) -> None:
        """Sign out in this and every other context."""
        self.sessions.sign_out()

    def _user_request(
        self,
        endpoint: Endpoint,
        method: str,
        body: dict[str, object] | None,
        *,
        authorized: bool,
    ) -> ApiRequest[Viewer]:
        credential = self.sessions.current().credential if authorized else None
        return build_request(
            endpoint, credential, method, body, json_decoder(UserEnvelope, _to_viewer)
        )

    async def _authenticate(
        self, request: ApiRequest[Viewer]
    ) -> Result[Viewer, HttpError]:
        result = await self.api.send(request)
        if isinstance(result, Ok):
            self.sessions.sign_in(result.value)
            _logger.info("Signed in as %s", result.value.username)
        return result


def form_errors(result: Result[object, HttpError]) -> list[str]:
    """Return the messages to show on a form after a failed submission."""
    if isinstance(result, Err):
        return error_messages(result.error)
    return []


def _to_viewer(envelope: UserEnvelope) -> Viewer:
    result = viewer_from_user_payload(envelope.user)
    if isinstance(result, Err):
        raise ValueError(result.error.detail)
    return result.value
