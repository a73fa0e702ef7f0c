"""Musical mapping from gesture measurements to pitches and dynamics.

Every function here is pure and total: out-of-range and NaN inputs are
clamped rather than rejected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

from strumpluck import constants
from strumpluck.gesture import SlideDirection
from strumpluck.instrument import StringDef
from strumpluck.notes import note_label, note_to_frequency


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high], mapping NaN to low."""
    if math.isnan(value):
        return low
    return min(high, max(low, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going towards positive infinity."""
    return math.floor(value + 0.5)


def clamp_fret(fret: float) -> int:
    """Clamp a (possibly fractional) fret onto the playable range."""
    return round_half_up(clamp(fret, 0, constants.MAX_FRET))


@unique
class Articulation(Enum):
    """How a pitch was produced."""

    Tap = "tap"
    Slide = "slide"


@dataclass(frozen=True)
class PitchSnapshot:
    """A sounding pitch on a particular string and fret."""

    string: StringDef
    articulation: Articulation
    fret: int
    """Fret after clamping (0-12)."""
    midi: int
    """Resulting pitch number."""
    label: str
    """Scientific pitch label, e.g. 'G4'."""
    frequency: float
    """Equal-tempered frequency in Hz."""
    duration_ms: Optional[float] = None
    """Duration of the source gesture or scripted note, when known."""


def make_pitch_snapshot(
    string: StringDef,
    fret: float,
    articulation: Articulation,
    duration_ms: Optional[float] = None,
) -> PitchSnapshot:
    """Derive the pitch sounded by a string stopped at a fret.

    Args:
        string: The string being played.
        fret: Requested fret; clamped to the playable range.
        articulation: Whether the pitch came from a tap or a slide.
        duration_ms: Optional duration of the originating gesture.

    Returns:
        The snapshot with pitch number, label and frequency filled in.
    """
    clamped = clamp_fret(fret)
    midi = string.midi + clamped
    return PitchSnapshot(
        string=string,
        articulation=articulation,
        fret=clamped,
        midi=midi,
        label=note_label(midi),
        frequency=note_to_frequency(midi),
        duration_ms=duration_ms,
    )


def speed_to_velocity(speed: float) -> float:
    """Map strum or slide speed (px/ms) to a normalized velocity."""
    return clamp(
        speed * constants.STRUM_VELOCITY_SCALE,
        constants.MIN_STRUM_VELOCITY,
        constants.MAX_STRUM_VELOCITY,
    )


def tap_duration_to_velocity(duration_ms: float) -> float:
    """Map tap duration to velocity; shorter taps are louder."""
    return clamp(
        1 - duration_ms / constants.TAP_VELOCITY_DECAY_MS,
        constants.MIN_TAP_VELOCITY,
        constants.MAX_TAP_VELOCITY,
    )


def distance_to_slide_semitones(distance: float) -> float:
    """Map slide distance to a semitone span of at least one."""
    return clamp(
        distance / constants.SLIDE_PX_PER_SEMITONE,
        constants.MIN_SLIDE_SEMITONES,
        constants.MAX_SLIDE_SEMITONES,
    )


def slide_target_fret(
    start_fret: float, direction: SlideDirection, distance: float
) -> int:
    """Compute where a slide lands.

    Args:
        start_fret: Fret held on the anchor string before the slide.
        direction: Right moves towards the body (up in pitch).
        distance: Horizontal slide distance in pixels.

    Returns:
        The target fret, never outside [0, MAX_FRET].
    """
    delta = max(1, round_half_up(distance_to_slide_semitones(distance)))
    signed = delta if direction == SlideDirection.Right else -delta
    return clamp_fret(clamp_fret(start_fret) + signed)


def slide_sustain_seconds(distance: float) -> float:
    """Duration of the pitch glide for a slide of the given distance."""
    return clamp(
        distance / constants.SLIDE_PX_PER_SECOND,
        constants.MIN_SLIDE_SUSTAIN_SECONDS,
        constants.MAX_SLIDE_SUSTAIN_SECONDS,
    )
