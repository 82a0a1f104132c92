"""In-memory server state: a counter and an append-only message log."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class ServerState:
    counter: Number = 0
    messages: tuple[str, ...] = field(default_factory=tuple)

    def with_message(self, line: str, **changes) -> "ServerState":
        """Return a copy with ``line`` appended to the log and ``changes`` applied."""
        return replace(self, messages=self.messages + (line,), **changes)


class StateStore:
    """Owns the current ``ServerState`` and swaps it whole on every mutation.

    The state value is immutable, so a reader holding a snapshot never sees a
    later update, and ``mutate`` never exposes a half-applied change.
    """

    def __init__(self, initial: ServerState | None = None):
        self._state = initial if initial is not None else ServerState()

    def read(self) -> ServerState:
        return self._state

    def mutate(self, fn: Callable[[ServerState], ServerState]) -> ServerState:
        new_state = fn(self._state)
        if not isinstance(new_state, ServerState):
            raise TypeError(f"state mutation returned {type(new_state).__name__}, expected ServerState")
        self._state = new_state
        logger.info(
            "State updated: counter=%s messageCount=%d",
            new_state.counter,
            len(new_state.messages),
        )
        return new_state
