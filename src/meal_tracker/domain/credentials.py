"""Credential, viewer and the codec for their persisted form.

The raw bearer token is private to this module. Other code can only hand a
``Credential`` to the request builder, which asks it for an Authorization
header.
"""

import json
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from meal_tracker.domain.errors import DecodeError
from meal_tracker.domain.results import Err, Ok, Result
from meal_tracker.domain.roles import Role

DEFAULT_AVATAR_URL = "https://static.productionready.io/images/smiley-cyrus.jpg"

# Blobs written before calorie targets existed carry no expectedCalories.
LEGACY_CALORIE_TARGET = 2000


class Credential:
    """Opaque bearer token bound to the username that owns it."""

    __slots__ = ("_token", "_username")

    def __init__(self, *, username: str, token: str) -> None:
        self._username = username
        self._token = token

    @property
    def username(self) -> str:
        """Return the owning username."""
        return self._username

    def authorization_header(self) -> dict[str, str]:
        """Return the header that presents this credential to the API."""
        return {"Authorization": f"Bearer {self._token}"}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Credential):
            return NotImplemented
        return (self._username, self._token) == (other._username, other._token)

    def __hash__(self) -> int:
        return hash((self._username, self._token))

    def __repr__(self) -> str:
        return f"Credential(username={self._username!r}, token=***)"


@dataclass(frozen=True)
class Viewer:
    """The signed-in user: avatar, credential, calorie target and role."""

    credential: Credential
    calorie_target: int
    avatar: str | None = None
    role: Role = Role.REGULAR

    @property
    def username(self) -> str:
        return self.credential.username

    @property
    def avatar_url(self) -> str:
        """Return the avatar, falling back to the default placeholder."""
        return self.avatar or DEFAULT_AVATAR_URL


class _StoredUser(BaseModel):
    """User object as persisted locally and as returned by the API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token: str = Field(min_length=1, strict=True)
    username: str = Field(min_length=1, strict=True)
    image: str | None = None
    expected_calories: int | None = Field(
        default=None, alias="expectedCalories", strict=True
    )
    role: Role = Role.REGULAR


class _StoredSession(BaseModel):
    """Top-level persisted layout."""

    user: _StoredUser


def serialize_viewer(viewer: Viewer) -> str:
    """Return the canonical persisted form of a viewer."""
    payload = {
        "user": {
            "token": viewer.credential._token,
            "username": viewer.credential.username,
            "image": viewer.avatar,
            "expectedCalories": viewer.calorie_target,
            "role": viewer.role.value,
        }
    }
    return json.dumps(payload, separators=(",", ":"))


def deserialize_viewer(blob: str | None) -> Result[Viewer, DecodeError]:
    """Decode a persisted blob into a viewer."""
    if blob is None:
        return Err(DecodeError("no persisted session"))
    try:
        stored = _StoredSession.model_validate_json(blob)
    except ValidationError as exc:
        return Err(DecodeError(_describe(exc)))
    return Ok(_to_viewer(stored.user))


def viewer_from_user_payload(payload: object) -> Result[Viewer, DecodeError]:
    """Decode the ``user`` object of an authentication response."""
    try:
        stored = _StoredUser.model_validate(payload)
    except ValidationError as exc:
        return Err(DecodeError(_describe(exc)))
    return Ok(_to_viewer(stored))


def _to_viewer(stored: _StoredUser) -> Viewer:
    calorie_target = stored.expected_calories
    if calorie_target is None:
        calorie_target = LEGACY_CALORIE_TARGET
    return Viewer(
        credential=Credential(username=stored.username, token=stored.token),
        calorie_target=calorie_target,
        avatar=stored.image,
        role=stored.role,
    )


def _describe(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "blob"
    return f"{location}: {first.get('msg', 'invalid')}"
