"""Note names, pitch classes and equal-tempered frequencies.

Pitch numbers follow the MIDI convention (A4 = 69, middle C = C4 = 60).
Accidentals are spelled with sharps.
"""

from __future__ import annotations

import math
from enum import Enum, unique
from typing import Dict, Tuple

from strumpluck import constants


@unique
class NoteName(Enum):
    """The twelve chromatic pitch classes, valued by semitones above C."""

    C = 0
    Cs = 1
    D = 2
    Ds = 3
    E = 4
    F = 5
    Fs = 6
    G = 7
    Gs = 8
    A = 9
    As = 10
    B = 11

    @property
    def display(self) -> str:
        """Printable spelling, e.g. 'F#' for Fs."""
        return self.name.replace("s", "#")

    def add_steps(self, steps: int) -> NoteName:
        """Transpose this pitch class by a number of semitones (may be negative)."""
        return NOTE_LOOKUP[(self.value + steps) % constants.SEMITONES_PER_OCTAVE]


def _build_note_lookup() -> Dict[int, NoteName]:
    d: Dict[int, NoteName] = {}
    for n in NoteName:
        d[n.value] = n
    assert len(d) == constants.SEMITONES_PER_OCTAVE
    return d


NOTE_LOOKUP = _build_note_lookup()
"""Lookup table from pitch class (0-11) to NoteName."""


def pitch_class(note: int) -> int:
    """Reduce a pitch number to its pitch class (0-11)."""
    return note % constants.SEMITONES_PER_OCTAVE


def name_and_octave_from_note(note: int) -> Tuple[NoteName, int]:
    """Split a pitch number into its note name and scientific octave.

    Args:
        note: Pitch number (MIDI convention).

    Returns:
        Tuple of (note_name, octave) where middle C (60) is octave 4.
    """
    name = NOTE_LOOKUP[pitch_class(note)]
    octave = note // constants.SEMITONES_PER_OCTAVE - 1
    return name, octave


def note_label(note: int) -> str:
    """Render a pitch number as a label like 'E4' or 'F#4'."""
    name, octave = name_and_octave_from_note(note)
    return f"{name.display}{octave}"


def note_to_frequency(note: float) -> float:
    """Equal-tempered frequency in Hz of a (possibly fractional) pitch number."""
    steps = (note - constants.REFERENCE_PITCH) / constants.SEMITONES_PER_OCTAVE
    return constants.REFERENCE_FREQUENCY * 2.0**steps


def frequency_to_note(frequency: float) -> float:
    """Inverse of note_to_frequency, returning a fractional pitch number."""
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive: {frequency}")
    ratio = frequency / constants.REFERENCE_FREQUENCY
    return constants.REFERENCE_PITCH + constants.SEMITONES_PER_OCTAVE * math.log2(ratio)
