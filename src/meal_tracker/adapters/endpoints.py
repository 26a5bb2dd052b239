"""REST endpoint descriptors."""

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote, urlencode


@dataclass(frozen=True)
class Endpoint:
    """Path segments and query parameters of an API resource."""

    segments: tuple[str, ...]
    params: tuple[tuple[str, str], ...] = ()

    def url(self, base_url: str) -> str:
        """Resolve the endpoint against the API base URL."""
        path = "/".join(quote(segment, safe="") for segment in self.segments)
        url = f"{base_url.rstrip('/')}/{path}"
        if self.params:
            url = f"{url}?{urlencode(self.params)}"
        return url


def _endpoint(
    *segments: str, params: Iterable[tuple[str, str]] = ()
) -> Endpoint:
    return Endpoint(segments=segments, params=tuple(params))


def login() -> Endpoint:
    return _endpoint("users", "login")


def user() -> Endpoint:
    return _endpoint("user")


def users() -> Endpoint:
    return _endpoint("users")


def profile(username: str) -> Endpoint:
    return _endpoint("profiles", username)


def follow(username: str) -> Endpoint:
    return _endpoint("profiles", username, "follow")


def meals(params: Iterable[tuple[str, str]] = ()) -> Endpoint:
    return _endpoint("meals", params=params)


def meal(slug: str) -> Endpoint:
    return _endpoint("meals", slug)


def meal_feed(params: Iterable[tuple[str, str]] = ()) -> Endpoint:
    return _endpoint("meals", "feed", params=params)


def tags() -> Endpoint:
    return _endpoint("tags")
