"""Authorized requests against the meal tracker REST API."""

import logging
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

import httpx
from pydantic import ValidationError

from meal_tracker.adapters.api_models import Decoder, ErrorEnvelope
from meal_tracker.adapters.endpoints import Endpoint
from meal_tracker.domain.credentials import Credential
from meal_tracker.domain.errors import (
    GENERIC_ERROR_MESSAGE,
    BadBody,
    BadStatus,
    HttpError,
    NetworkError,
    Timeout,
)
from meal_tracker.domain.results import Err, Ok, Result

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiRequest(Generic[T]):
    """A fully formed request and the decoder for its response."""

    method: str
    endpoint: Endpoint
    decoder: Decoder[T]
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, object] | None = None


def build_request(
    endpoint: Endpoint,
    credential: Credential | None,
    method: str,
    body: dict[str, object] | None,
    decoder: Decoder[T],
) -> ApiRequest[T]:
    """Build a request, authorized when a credential is available."""
    headers = {"Accept": "application/json"}
    if credential is not None:
        headers.update(credential.authorization_header())
    return ApiRequest(
        method=method.upper(),
        endpoint=endpoint,
        decoder=decoder,
        headers=headers,
        body=body,
    )


def decode_errors(raw: bytes | str) -> list[str]:
    """Flatten a ``{"errors": {field: [message]}}`` body into messages."""
    try:
        envelope = ErrorEnvelope.model_validate_json(raw)
    except ValidationError:
        return [GENERIC_ERROR_MESSAGE]
    return [
        f"{field_name} {message}"
        for field_name, messages in envelope.errors.items()
        for message in messages
    ]


class ApiClient(Protocol):
    """Interface for sending API requests."""

    async def send(self, request: ApiRequest[T]) -> Result[T, HttpError]:
        """Send a request and return the decoded body or the failure."""


@dataclass
class HttpxApiClient(ApiClient):
    """API client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 10) -> "HttpxApiClient":
        """Create an API client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def send(self, request: ApiRequest[T]) -> Result[T, HttpError]:
        """Send a request and classify any failure."""
        url = request.endpoint.url(self.base_url)
        try:
            response = await self.http_client.request(
                request.method,
                url,
                headers=request.headers,
                json=request.body,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException:
            _logger.warning("API %s %s timed out", request.method, url)
            return Err(Timeout())
        except httpx.RequestError as exc:
            _logger.warning("API %s %s failed: %s", request.method, url, exc)
            return Err(NetworkError(str(exc) or type(exc).__name__))

        if response.is_error:
            _logger.info(
                "API %s %s returned status=%s",
                request.method,
                url,
                response.status_code,
            )
            return Err(
                BadStatus(
                    status_code=response.status_code,
                    errors=tuple(decode_errors(response.content)),
                )
            )

        try:
            return Ok(request.decoder(response.content))
        except ValueError as exc:
            _logger.warning(
                "API %s %s returned an unexpected body", request.method, url
            )
            return Err(BadBody(str(exc)))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
