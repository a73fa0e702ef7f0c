"""The scripted demo performance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from strumpluck.instrument import StringId


@dataclass(frozen=True)
class DemoNoteEvent:
    """One scripted note."""

    at_ms: float
    """Offset from the start of the demo."""
    string_id: StringId
    fret: int
    duration_ms: float

    @property
    def end_ms(self) -> float:
        return self.at_ms + self.duration_ms


CLASSICAL_DEMO_SEQUENCE: List[DemoNoteEvent] = [
    DemoNoteEvent(0, StringId.LowE, 0, 460),
    DemoNoteEvent(260, StringId.A, 2, 420),
    DemoNoteEvent(520, StringId.D, 2, 420),
    DemoNoteEvent(780, StringId.G, 0, 420),
    DemoNoteEvent(1040, StringId.B, 0, 420),
    DemoNoteEvent(1300, StringId.HighE, 0, 460),
    DemoNoteEvent(1560, StringId.B, 0, 420),
    DemoNoteEvent(1820, StringId.G, 0, 420),
    DemoNoteEvent(2080, StringId.D, 2, 420),
    DemoNoteEvent(2340, StringId.A, 2, 420),
    DemoNoteEvent(2600, StringId.LowE, 0, 460),
    DemoNoteEvent(2860, StringId.B, 3, 420),
    DemoNoteEvent(3120, StringId.HighE, 0, 420),
    DemoNoteEvent(3380, StringId.B, 2, 420),
    DemoNoteEvent(3640, StringId.HighE, 0, 420),
    DemoNoteEvent(3900, StringId.B, 3, 420),
    DemoNoteEvent(4160, StringId.HighE, 0, 480),
]
"""Opening of the Spanish Romance, arpeggiated over an E minor shape."""

CLASSICAL_DEMO_HEADLINE = "Classical demo: Spanish Romance (excerpt)"


def script_duration_ms(script: Sequence[DemoNoteEvent]) -> float:
    """Time at which the last note of a script ends (0 for an empty script)."""
    return max((event.end_ms for event in script), default=0.0)


CLASSICAL_DEMO_DURATION_MS = script_duration_ms(CLASSICAL_DEMO_SEQUENCE)
