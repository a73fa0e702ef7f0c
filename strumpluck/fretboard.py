"""Mapping between surface coordinates and fretboard positions.

Strings run horizontally across the surface, spaced evenly from the top;
frets divide the usable horizontal span (between FRETBOARD_START_RATIO and
FRETBOARD_END_RATIO of the width) into MAX_FRET equal slots. Both mappings
are total: any input, including NaN, yields a valid string index or fret.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from strumpluck import constants
from strumpluck.instrument import NUM_STRINGS
from strumpluck.mapping import clamp, round_half_up

FRETBOARD_SPAN = constants.FRETBOARD_END_RATIO - constants.FRETBOARD_START_RATIO
"""Fraction of the surface width covered by frets."""


@dataclass(frozen=True)
class StringPos:
    """A position on the fretboard as a string and fret combination."""

    str_index: int
    """The string index (0 is the top, high E string)."""
    fret: int
    """The fret (0 is the open string)."""


def string_index_from_y(y: float) -> int:
    """Find the string closest to a vertical position.

    Args:
        y: Vertical surface coordinate in pixels.

    Returns:
        The nearest string index, clamped to [0, NUM_STRINGS - 1]. NaN maps
        to the top string.
    """
    relative = (y - constants.STRING_TOP_OFFSET_PX) / constants.STRING_SPACING_PX
    return round_half_up(clamp(relative, 0, NUM_STRINGS - 1))


def fret_from_relative_x(relative_x: Optional[float]) -> int:
    """Find the fret under a normalized horizontal position.

    Positions left of the nut saturate to the open string and positions past
    the last fret saturate to MAX_FRET.

    Args:
        relative_x: Horizontal position as a fraction of the surface width,
            or None when the surface size is unknown.

    Returns:
        The fret in [0, MAX_FRET]; 0 for missing or NaN input.
    """
    if relative_x is None or math.isnan(relative_x) or FRETBOARD_SPAN <= 0:
        return 0
    normalized = clamp(
        (relative_x - constants.FRETBOARD_START_RATIO) / FRETBOARD_SPAN, 0.0, 1.0
    )
    fret = round_half_up(normalized * constants.MAX_FRET)
    return int(clamp(fret, 0, constants.MAX_FRET))


def locate(y: float, relative_x: Optional[float]) -> StringPos:
    """Map a touch to the string and fret it lands on."""
    return StringPos(string_index_from_y(y), fret_from_relative_x(relative_x))


def string_y(str_index: int) -> float:
    """Vertical position of a string's line on the surface."""
    return constants.STRING_TOP_OFFSET_PX + str_index * constants.STRING_SPACING_PX


def fret_relative_x(fret: int) -> float:
    """Normalized horizontal position that maps back onto the given fret."""
    clamped = clamp(fret, 0, constants.MAX_FRET)
    return constants.FRETBOARD_START_RATIO + FRETBOARD_SPAN * clamped / constants.MAX_FRET
