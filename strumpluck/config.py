"""Configuration for sessions and offline rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from strumpluck import constants


@dataclass(frozen=True)
class SessionConfig:
    """Behavioral settings for a GuitarSession."""

    log_limit: int = constants.DEFAULT_LOG_LIMIT
    """How many recent gestures the session log keeps."""
    demo_completion_delay_ms: float = constants.DEMO_COMPLETION_DELAY_MS
    """Pause after the last demo note before the demo counts as complete."""

    def __post_init__(self) -> None:
        if self.log_limit < 0:
            raise ValueError(f"log_limit must not be negative: {self.log_limit}")
        if self.demo_completion_delay_ms < 0:
            raise ValueError(
                f"demo_completion_delay_ms must not be negative: {self.demo_completion_delay_ms}"
            )


@dataclass(frozen=True)
class RenderConfig:
    """Settings for rendering recorded tones to audio."""

    sample_rate: int = constants.DEFAULT_SAMPLE_RATE
    """Samples per second."""
    tail_seconds: float = 0.5
    """Silence kept after the last tone stops."""

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive: {self.sample_rate}")
        if self.tail_seconds < 0:
            raise ValueError(f"tail_seconds must not be negative: {self.tail_seconds}")


@dataclass(frozen=True)
class Config:
    """Top-level configuration assembled from command-line options."""

    session: SessionConfig
    render: RenderConfig


def init_config(
    log_limit: Optional[int] = None, sample_rate: Optional[int] = None
) -> Config:
    """Build a configuration, using defaults for anything not given.

    Args:
        log_limit: Size of the session's gesture log.
        sample_rate: Sample rate for offline audio rendering.

    Returns:
        The assembled configuration.
    """
    session = SessionConfig(
        log_limit=log_limit if log_limit is not None else constants.DEFAULT_LOG_LIMIT
    )
    render = RenderConfig(
        sample_rate=sample_rate if sample_rate is not None else constants.DEFAULT_SAMPLE_RATE
    )
    return Config(session=session, render=render)
