"""Unbuffered handoff channel between pipeline stages.

A channel has exactly one producer and one consumer. ``send`` blocks
until the consumer has taken the value, so a slow consumer throttles its
producer. Closing is the only end-of-stream signal the consumer sees.
"""

from __future__ import annotations

import threading
from typing import Generic, Iterator, TypeVar

from core.errors import ChannelClosedError
from core.types import ChannelState

T = TypeVar("T")

_EMPTY = object()


class HandoffChannel(Generic[T]):
    """Zero-capacity rendezvous channel."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._condition = threading.Condition()
        self._slot: object = _EMPTY
        self._state = ChannelState.OPEN

    @property
    def state(self) -> ChannelState:
        """Return the current channel lifecycle state."""
        with self._condition:
            return self._state

    def send(self, value: T) -> None:
        """Hand one value to the consumer, blocking until it is taken.

        Args:
            value: Value to hand over.

        Raises:
            ChannelClosedError: If the channel was already closed.
        """
        with self._condition:
            if self._state is not ChannelState.OPEN:
                raise ChannelClosedError(f"Cannot send on closed channel '{self.name}'.")
            while self._slot is not _EMPTY:
                self._condition.wait()
            self._slot = value
            self._condition.notify_all()
            try:
                while self._slot is value:
                    self._condition.wait()
            except BaseException:
                # Interrupted before the consumer took it; withdraw the value.
                if self._slot is value:
                    self._slot = _EMPTY
                    self._condition.notify_all()
                raise

    def receive(self) -> tuple[T | None, bool]:
        """Take the next value, blocking until one arrives or the channel closes.

        Returns:
            ``(value, True)`` for a value, ``(None, False)`` once closed.
        """
        with self._condition:
            while self._slot is _EMPTY and self._state is ChannelState.OPEN:
                self._condition.wait()
            if self._slot is _EMPTY:
                self._state = ChannelState.CLOSED
                return None, False
            value = self._slot
            self._slot = _EMPTY
            self._condition.notify_all()
            return value, True  # type: ignore[return-value]

    def close(self) -> None:
        """Signal end-of-stream. Only the producer may call this."""
        with self._condition:
            if self._state is ChannelState.OPEN:
                self._state = ChannelState.DRAINING
                self._condition.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            value, more = self.receive()
            if not more:
                return
            yield value  # type: ignore[misc]
