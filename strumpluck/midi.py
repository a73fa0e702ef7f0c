"""MIDI export and playback of recorded tones.

Each tone becomes a note on channel 0 at the nearest equal-tempered pitch.
Frequency glides are approximated by chromatic steps: the note is re-struck
whenever the glide crosses into the next semitone.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import mido

from strumpluck import constants
from strumpluck.mapping import clamp
from strumpluck.notes import frequency_to_note
from strumpluck.recorder import ParamTrack, RecordedTone

GUITAR_PROGRAM = 24
"""General MIDI program for the nylon-string acoustic guitar."""

GLIDE_STEP_SECONDS = 0.01
"""Resolution at which frequency glides are followed."""


@dataclass(frozen=True, order=True)
class TimedNote:
    """A note-on (velocity > 0) or note-off (velocity 0) at a time in seconds."""

    time: float
    on: bool
    note: int
    velocity: int


def _nearest_note(frequency: float) -> int:
    return int(clamp(round(frequency_to_note(frequency)), 0, 127))


def tone_velocity(gain: ParamTrack) -> int:
    """MIDI velocity for the loudest point of a gain curve."""
    return max(1, round(clamp(gain.peak(), 0.0, 1.0) * 127))


def note_steps(tone: RecordedTone) -> List[Tuple[float, float, int]]:
    """Split a tone into (start, end, note) pieces of constant nearest pitch."""
    end = tone.end
    steps: List[Tuple[float, float, int]] = []
    cur_t = tone.start
    cur_note = _nearest_note(tone.frequency.value_at(cur_t))
    t = cur_t + GLIDE_STEP_SECONDS
    while t < end:
        note = _nearest_note(tone.frequency.value_at(t))
        if note != cur_note:
            steps.append((cur_t, t, cur_note))
            cur_t = t
            cur_note = note
        t += GLIDE_STEP_SECONDS
    if end > cur_t:
        steps.append((cur_t, end, cur_note))
    return steps


def timed_notes(tones: Sequence[RecordedTone]) -> List[TimedNote]:
    """Note-on and note-off events for every tone, in time order.

    At equal times note-offs sort before note-ons, so a re-struck note is
    not cut off by the end of the previous one.
    """
    notes: List[TimedNote] = []
    for tone in tones:
        velocity = tone_velocity(tone.gain)
        for start, end, note in note_steps(tone):
            notes.append(TimedNote(start, True, note, velocity))
            notes.append(TimedNote(end, False, note, 0))
    return sorted(notes)


def render_midi(
    tones: Sequence[RecordedTone],
    ticks_per_beat: int = constants.DEFAULT_TICKS_PER_BEAT,
    tempo: int = constants.DEFAULT_TEMPO,
) -> mido.MidiFile:
    """Render recorded tones to a single-track MIDI file.

    Overlapping tones on the same note are merged: the note is re-struck,
    and only the last overlapping tone to end releases it.

    Args:
        tones: Tones captured by a RecordingDevice.
        ticks_per_beat: MIDI resolution.
        tempo: Microseconds per beat.

    Returns:
        The MIDI file.
    """
    mid = mido.MidiFile(type=0, ticks_per_beat=ticks_per_beat)
    track = mido.MidiTrack()
    mid.tracks.append(track)
    track.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))
    track.append(mido.Message("program_change", channel=0, program=GUITAR_PROGRAM, time=0))

    sounding: Counter[int] = Counter()
    last_tick = 0
    for timed in timed_notes(tones):
        if not timed.on and sounding[timed.note] == 0:
            continue
        tick = round(mido.second2tick(max(0.0, timed.time), ticks_per_beat, tempo))
        delta = max(0, tick - last_tick)
        if timed.on:
            sounding[timed.note] += 1
            track.append(
                mido.Message(
                    "note_on", channel=0, note=timed.note, velocity=timed.velocity, time=delta
                )
            )
        else:
            sounding[timed.note] -= 1
            if sounding[timed.note] > 0:
                continue
            track.append(
                mido.Message("note_off", channel=0, note=timed.note, velocity=0, time=delta)
            )
        last_tick = max(last_tick, tick)

    logging.debug(f"rendered {len(tones)} tones into {len(track)} MIDI messages")
    return mid


def play_midi(mid: mido.MidiFile, port_name: Optional[str] = None) -> None:
    """Play a MIDI file in real time on an output port.

    Args:
        mid: The file to play.
        port_name: Output port to open; None picks the backend's default.
    """
    with mido.open_output(port_name) as port:
        logging.info(f"playing {mid.length:.2f}s of MIDI on {port.name}")
        for msg in mid.play():
            port.send(msg)
