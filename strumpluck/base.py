"""Lifecycle interfaces and the exhaustive-match exception.

The session and timer machinery implement the lifecycle interfaces; the
closed gesture family raises MatchException when a consumer meets a value
outside the family.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any


class Closeable(metaclass=ABCMeta):
    """Owner of pending work (timers, tones) that must be released on teardown."""

    @abstractmethod
    def close(self) -> None:
        """Release pending work. Safe to call more than once."""
        raise NotImplementedError()


class Resettable(metaclass=ABCMeta):
    """Holder of mutable state with a defined initial value."""

    @abstractmethod
    def reset(self) -> None:
        """Return to the state held right after construction."""
        raise NotImplementedError()


class MatchException(Exception):
    """Raised when a value falls outside a closed family of variants."""

    def __init__(self, value: Any) -> None:
        """Record the unmatched value in the message.

        Args:
            value: The value no branch accepted.
        """
        super().__init__(f"Failed to match value: {value}")
