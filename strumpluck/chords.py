"""Triad recognition over the currently fretted strings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Dict, FrozenSet, List, Mapping, Optional

from strumpluck import constants
from strumpluck.instrument import GUITAR_STRINGS, StringId
from strumpluck.mapping import clamp_fret
from strumpluck.notes import NOTE_LOOKUP, pitch_class

MIN_CHORD_PITCH_CLASSES = 3
"""Fewer distinct pitch classes than this can never form a triad."""


@unique
class TriadQuality(Enum):
    """Recognized triad qualities."""

    Major = "major"
    Minor = "minor"


@dataclass(frozen=True)
class TriadPattern:
    """Intervals (semitones above the root) that define a triad."""

    quality: TriadQuality
    intervals: FrozenSet[int]


TRIAD_PATTERNS: List[TriadPattern] = [
    TriadPattern(TriadQuality.Major, frozenset({0, 4, 7})),
    TriadPattern(TriadQuality.Minor, frozenset({0, 3, 7})),
]
"""Templates in tie-break order: earlier patterns win equal scores."""


@dataclass(frozen=True)
class DetectedChord:
    """The best-fitting triad for a set of sounding pitch classes."""

    root: str
    """Root note name, e.g. 'G'."""
    quality: TriadQuality
    notes: List[str]
    """Names of every sounding pitch class, ordered by interval above the root."""
    intervals: List[int]
    """Sorted intervals (0-11) of every sounding pitch class above the root."""
    label: str
    """Display label, e.g. 'G major'."""


@dataclass(frozen=True)
class _Candidate:
    root_pitch_class: int
    pattern: TriadPattern
    intervals: List[int]
    extra_count: int


def sounding_pitch_classes(frets: Mapping[StringId, int]) -> List[int]:
    """Distinct pitch classes of all six strings, in string order.

    Args:
        frets: Fret held on each string; missing strings are open.
    """
    pitches = [
        string_def.midi + clamp_fret(frets.get(string_def.string_id, 0))
        for string_def in GUITAR_STRINGS
    ]
    return list(dict.fromkeys(pitch_class(p) for p in pitches))


def _candidates(pitch_classes: List[int]) -> List[_Candidate]:
    candidates: List[_Candidate] = []
    for root in pitch_classes:
        interval_set = {
            (pc - root) % constants.SEMITONES_PER_OCTAVE for pc in pitch_classes
        }
        intervals = sorted(interval_set)
        for pattern in TRIAD_PATTERNS:
            if pattern.intervals <= interval_set:
                extra = [i for i in intervals if i != 0 and i not in pattern.intervals]
                candidates.append(_Candidate(root, pattern, intervals, len(extra)))
    return candidates


_QUALITY_RANK: Dict[TriadQuality, int] = {
    pattern.quality: rank for rank, pattern in enumerate(TRIAD_PATTERNS)
}


def detect_chord(frets: Mapping[StringId, int]) -> Optional[DetectedChord]:
    """Infer the triad formed by the fretted strings.

    Every sounding pitch class is tried as a root. A root matches a template
    when all template intervals sound; extra intervals are tolerated but
    count against the match. The candidate with the fewest extras wins, with
    major preferred over minor on a tie.

    Args:
        frets: Fret held on each string; missing strings are open.

    Returns:
        The detected chord, or None when fewer than three pitch classes sound
        or no template matches.
    """
    pitch_classes = sounding_pitch_classes(frets)
    if len(pitch_classes) < MIN_CHORD_PITCH_CLASSES:
        return None
    candidates = _candidates(pitch_classes)
    if not candidates:
        return None
    best = sorted(
        candidates,
        key=lambda c: (c.extra_count, _QUALITY_RANK[c.pattern.quality]),
    )[0]
    root = NOTE_LOOKUP[best.root_pitch_class]
    notes = [root.add_steps(interval).display for interval in best.intervals]
    return DetectedChord(
        root=root.display,
        quality=best.pattern.quality,
        notes=notes,
        intervals=best.intervals,
        label=f"{root.display} {best.pattern.quality.value}",
    )
