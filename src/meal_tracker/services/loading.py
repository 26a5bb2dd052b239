"""Load state machine for fetch-driven UI slots.

``update`` is a pure reducer returning the next slot and the effects to run.
``LoadDriver`` runs those effects on the asyncio loop: it performs the fetch,
arms the slow-load timer and feeds the outcomes back into the reducer.

Each request bumps the slot's sequence number. Outcomes carrying an older
sequence are dropped, so a slow earlier response can never overwrite a newer
one.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Generic, TypeVar

from meal_tracker.domain.errors import HttpError, NetworkError
from meal_tracker.domain.results import Err, Ok, Result

R = TypeVar("R")
T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loading:
    """Waiting for a response."""


@dataclass(frozen=True)
class LoadingSlow:
    """Still waiting after the slow-load threshold passed."""


@dataclass(frozen=True)
class Loaded(Generic[T]):
    """The response arrived."""

    value: T


@dataclass(frozen=True)
class Failed:
    """The request failed."""

    error: HttpError


LoadState = Loading | LoadingSlow | Loaded[T] | Failed


@dataclass(frozen=True)
class Requested(Generic[R]):
    """A new fetch was asked for."""

    request: R


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    """A fetch completed."""

    sequence: int
    value: T


@dataclass(frozen=True)
class FetchFailed:
    """A fetch failed."""

    sequence: int
    error: HttpError


@dataclass(frozen=True)
class SlowThresholdPassed:
    """The slow-load timer of a fetch fired."""

    sequence: int


Message = Requested | Succeeded | FetchFailed | SlowThresholdPassed


@dataclass(frozen=True)
class Fetch(Generic[R]):
    """Perform a fetch tagged with its sequence number."""

    sequence: int
    request: R


@dataclass(frozen=True)
class StartSlowTimer:
    """Arm the slow-load timer for a fetch."""

    sequence: int


Effect = Fetch | StartSlowTimer


@dataclass(frozen=True)
class LoadSlot(Generic[T]):
    """State of one UI slot and the sequence of its latest fetch."""

    sequence: int = 0
    state: LoadState = field(default_factory=Loading)

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.state, Loaded | Failed)


def update(slot: LoadSlot[T], message: Message) -> tuple[LoadSlot[T], list[Effect]]:
    """Apply a message to a slot."""
    if isinstance(message, Requested):
        sequence = slot.sequence + 1
        return (
            LoadSlot(sequence=sequence, state=Loading()),
            [Fetch(sequence, message.request), StartSlowTimer(sequence)],
        )
    if message.sequence != slot.sequence:
        return slot, []
    if isinstance(message, Succeeded):
        return replace(slot, state=Loaded(message.value)), []
    if isinstance(message, FetchFailed):
        return replace(slot, state=Failed(message.error)), []
    if isinstance(slot.state, Loading):
        return replace(slot, state=LoadingSlow()), []
    return slot, []


SlotListener = Callable[[LoadSlot[T]], None]


@dataclass
class LoadDriver(Generic[R, T]):
    """Runs the reducer and its effects for one UI slot."""

    fetch: Callable[[R], Awaitable[Result[T, HttpError]]]
    slow_threshold_seconds: float = 0.5
    _slot: LoadSlot[T] = field(default_factory=LoadSlot, init=False)
    _listeners: list[SlotListener[T]] = field(default_factory=list, init=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _slow_timer: asyncio.TimerHandle | None = field(default=None, init=False)

    @property
    def slot(self) -> LoadSlot[T]:
        return self._slot

    def subscribe(self, listener: SlotListener[T]) -> Callable[[], None]:
        """Register a listener called with the slot after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def request(self, request: R) -> int:
        """Start a fetch and return its sequence number."""
        self.dispatch(Requested(request))
        return self._slot.sequence

    def dispatch(self, message: Message) -> None:
        """Feed a message to the reducer and run the resulting effects."""
        previous = self._slot
        self._slot, effects = update(self._slot, message)
        if self._slot is previous:
            _logger.debug(
                "Ignoring %s for slot at sequence %s", message, previous.sequence
            )
        else:
            if self._slot.is_terminal:
                self._cancel_slow_timer()
            for listener in list(self._listeners):
                listener(self._slot)
        for effect in effects:
            self._run(effect)

    async def wait_idle(self) -> None:
        """Wait until every started fetch has delivered its outcome."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        """Cancel the pending timer and fetches."""
        self._cancel_slow_timer()
        for task in self._tasks:
            task.cancel()

    def _run(self, effect: Effect) -> None:
        loop = asyncio.get_running_loop()
        if isinstance(effect, Fetch):
            task = loop.create_task(self._perform(effect))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return
        self._cancel_slow_timer()
        self._slow_timer = loop.call_later(
            self.slow_threshold_seconds, self._on_slow_timer, effect.sequence
        )

    def _on_slow_timer(self, sequence: int) -> None:
        self._slow_timer = None
        self.dispatch(SlowThresholdPassed(sequence))

    def _cancel_slow_timer(self) -> None:
        if self._slow_timer is not None:
            self._slow_timer.cancel()
            self._slow_timer = None

    async def _perform(self, effect: Fetch[R]) -> None:
        try:
            result = await self.fetch(effect.request)
        except Exception as exc:
            _logger.exception("Fetch at sequence %s raised", effect.sequence)
            result = Err(NetworkError(str(exc) or type(exc).__name__))
        if isinstance(result, Ok):
            self.dispatch(Succeeded(effect.sequence, result.value))
        else:
            self.dispatch(FetchFailed(effect.sequence, result.error))
