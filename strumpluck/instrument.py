"""Static model of the six-string guitar.

Strings are listed top to bottom as they appear on the playing surface, so
index 0 is the high E string and index 5 the low E string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Dict, List


@unique
class StringId(Enum):
    """Identity of each of the six string slots."""

    HighE = "highE"
    B = "B"
    G = "G"
    D = "D"
    A = "A"
    LowE = "lowE"


@dataclass(frozen=True)
class StringDef:
    """Definition of one open string."""

    string_id: StringId
    """Which slot this string occupies."""
    name: str
    """Display name (e.g. 'High E')."""
    label: str
    """Scientific pitch label of the open string (e.g. 'E4')."""
    frequency: float
    """Open-string fundamental in Hz."""
    midi: int
    """Open-string pitch number."""
    order: int
    """Position from the top of the surface (0-5)."""


GUITAR_STRINGS: List[StringDef] = [
    StringDef(StringId.HighE, "High E", "E4", 329.63, 64, 0),
    StringDef(StringId.B, "B", "B3", 246.94, 59, 1),
    StringDef(StringId.G, "G", "G3", 196.0, 55, 2),
    StringDef(StringId.D, "D", "D3", 146.83, 50, 3),
    StringDef(StringId.A, "A", "A2", 110.0, 45, 4),
    StringDef(StringId.LowE, "Low E", "E2", 82.41, 40, 5),
]
"""Standard tuning, top to bottom."""

NUM_STRINGS = len(GUITAR_STRINGS)

MIDDLE_STRING_INDEX = NUM_STRINGS // 2
"""String used as a slide anchor before anything has been touched."""


def _build_string_lookup() -> Dict[StringId, int]:
    lookup: Dict[StringId, int] = {}
    for index, string_def in enumerate(GUITAR_STRINGS):
        assert string_def.order == index
        lookup[string_def.string_id] = index
    assert len(lookup) == NUM_STRINGS
    return lookup


STRING_INDEX_LOOKUP = _build_string_lookup()
"""Lookup from string identity to its index in GUITAR_STRINGS."""


def string_index(string_id: StringId) -> int:
    """Get the top-to-bottom index of a string."""
    return STRING_INDEX_LOOKUP[string_id]


def string_by_id(string_id: StringId) -> StringDef:
    """Get the definition of a string by identity."""
    return GUITAR_STRINGS[STRING_INDEX_LOOKUP[string_id]]
