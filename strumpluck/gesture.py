"""Gesture types and classification of completed pointer interactions.

A pointer interaction (press, any number of moves, release) is summarized as
a MotionSample and classified exactly once, at release, into one member of
the closed GestureEvent family: TapGesture, StrumGesture, SlideGesture or
UnknownGesture. Classification is a pure function of the sample.
"""

from __future__ import annotations

import math
from abc import ABCMeta
from dataclasses import dataclass
from enum import Enum, unique
from typing import List, Optional

from strumpluck import constants
from strumpluck.base import MatchException


@dataclass(frozen=True)
class Point:
    """A position on the surface, in pixels or normalized units."""

    x: float
    y: float


@dataclass(frozen=True)
class Layout:
    """Size of the playing surface in pixels."""

    width: float
    height: float


@unique
class StrumDirection(Enum):
    """Vertical direction of a strum; down runs from the top string."""

    Up = "up"
    Down = "down"


@unique
class SlideDirection(Enum):
    """Horizontal direction of a slide; right runs towards higher frets."""

    Left = "left"
    Right = "right"


class GestureEvent(metaclass=ABCMeta):
    """Base of the closed family of recognized gestures."""


@dataclass(frozen=True)
class TapGesture(GestureEvent):
    """A short press with almost no movement."""

    position: Point
    """Absolute end position in pixels."""
    duration_ms: float
    """Time between press and release."""
    relative_position: Optional[Point] = None
    """End position normalized to the surface, if the surface size is known."""


@dataclass(frozen=True)
class StrumGesture(GestureEvent):
    """A mostly vertical sweep across the strings."""

    direction: StrumDirection
    distance: float
    """Absolute vertical displacement in pixels."""
    speed: float
    """Absolute vertical velocity in px/ms."""
    relative_position: Optional[Point] = None


@dataclass(frozen=True)
class SlideGesture(GestureEvent):
    """A horizontal movement along a string."""

    direction: SlideDirection
    distance: float
    """Absolute horizontal displacement in pixels."""
    speed: float
    """Absolute horizontal velocity in px/ms."""
    relative_position: Optional[Point] = None


@dataclass(frozen=True)
class UnknownGesture(GestureEvent):
    """An interaction that matched none of the patterns."""

    detail: str


@dataclass(frozen=True)
class MotionSample:
    """Summary of one completed pointer interaction."""

    duration_ms: float
    dx: float
    dy: float
    vx: float
    vy: float
    end: Point
    relative_end: Optional[Point] = None


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def relative_position(point: Point, layout: Optional[Layout]) -> Optional[Point]:
    """Normalize a surface position to [0, 1] on both axes.

    Args:
        point: Position in pixels.
        layout: Size of the surface, if it has been measured.

    Returns:
        The normalized position, or None when the surface has no area.
    """
    if layout is None or not layout.width > 0 or not layout.height > 0:
        return None
    return Point(_clamp01(point.x / layout.width), _clamp01(point.y / layout.height))


def classify_motion(sample: MotionSample) -> GestureEvent:
    """Classify a completed interaction.

    Patterns are tried in priority order: tap, strum, slide. Anything else
    (for example a short diagonal drag) is an UnknownGesture.

    Args:
        sample: The motion summary taken at release.

    Returns:
        The recognized gesture.
    """
    abs_dx = abs(sample.dx)
    abs_dy = abs(sample.dy)
    if (
        sample.duration_ms <= constants.TAP_MAX_DURATION_MS
        and abs_dx <= constants.TAP_MAX_MOVEMENT_PX
        and abs_dy <= constants.TAP_MAX_MOVEMENT_PX
    ):
        return TapGesture(
            position=sample.end,
            duration_ms=sample.duration_ms,
            relative_position=sample.relative_end,
        )
    if abs_dy > abs_dx and abs_dy >= constants.MIN_STRUM_DISTANCE_PX:
        return StrumGesture(
            direction=StrumDirection.Down if sample.dy > 0 else StrumDirection.Up,
            distance=abs_dy,
            speed=abs(sample.vy),
            relative_position=sample.relative_end,
        )
    if abs_dx >= constants.MIN_SLIDE_DISTANCE_PX:
        return SlideGesture(
            direction=SlideDirection.Right if sample.dx > 0 else SlideDirection.Left,
            distance=abs_dx,
            speed=abs(sample.vx),
            relative_position=sample.relative_end,
        )
    return UnknownGesture(constants.UNKNOWN_GESTURE_DETAIL)


def format_gesture(gesture: GestureEvent) -> str:
    """Describe a gesture in one line for logs and feedback panels."""
    match gesture:
        case TapGesture(position=pos, duration_ms=duration_ms):
            return f"Tap at ({pos.x:.0f}, {pos.y:.0f}) in {duration_ms:.0f}ms"
        case StrumGesture(direction=direction, distance=distance, speed=speed):
            return f"{direction.value.upper()} strum • {distance:.0f}px at {speed:.2f}v"
        case SlideGesture(direction=direction, distance=distance, speed=speed):
            return f"{direction.value.upper()} slide • {distance:.0f}px at {speed:.2f}v"
        case UnknownGesture(detail=detail):
            return detail
        case _:
            raise MatchException(gesture)


@dataclass(frozen=True)
class _PointerSample:
    x: float
    y: float
    time_ms: float


class PointerTracker:
    """Accumulates raw pointer samples into MotionSamples.

    Velocities are taken over the last movement segment before release, in
    px/ms, which is what a pan responder reports at the end of a drag.
    """

    def __init__(self, layout: Optional[Layout] = None) -> None:
        """Initialize the tracker.

        Args:
            layout: Surface size used to normalize end positions.
        """
        self._layout = layout
        self._samples: List[_PointerSample] = []

    def set_layout(self, layout: Optional[Layout]) -> None:
        """Update the surface size after a resize."""
        self._layout = layout

    @property
    def active(self) -> bool:
        """Whether a press is in progress."""
        return len(self._samples) > 0

    def press(self, x: float, y: float, time_ms: float) -> None:
        """Begin an interaction, discarding any unfinished one."""
        self._samples = [_PointerSample(x, y, time_ms)]

    def move(self, x: float, y: float, time_ms: float) -> None:
        """Record an intermediate position; ignored when no press is active."""
        if self._samples:
            self._samples.append(_PointerSample(x, y, time_ms))

    def release(self, x: float, y: float, time_ms: float) -> MotionSample:
        """End the interaction and summarize it.

        A release without a matching press is treated as an instantaneous
        press and release at the same point.
        """
        end = _PointerSample(x, y, time_ms)
        samples = self._samples if self._samples else [end]
        self._samples = []
        start = samples[0]
        vx, vy = _final_velocity(samples + [end])
        end_point = Point(x, y)
        return MotionSample(
            duration_ms=max(0.0, end.time_ms - start.time_ms),
            dx=end.x - start.x,
            dy=end.y - start.y,
            vx=vx,
            vy=vy,
            end=end_point,
            relative_end=relative_position(end_point, self._layout),
        )


def _final_velocity(samples: List[_PointerSample]) -> tuple[float, float]:
    # Walk back to the last segment with elapsed time
    for later, earlier in zip(reversed(samples), reversed(samples[:-1])):
        dt = later.time_ms - earlier.time_ms
        if dt > 0 and math.isfinite(dt):
            return (later.x - earlier.x) / dt, (later.y - earlier.y) / dt
    return 0.0, 0.0
