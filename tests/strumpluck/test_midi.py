from pathlib import Path
from typing import List

import mido

from strumpluck.dispatcher import SynthDispatcher
from strumpluck.gesture import SlideDirection, StrumDirection
from strumpluck.instrument import StringId, string_by_id
from strumpluck.midi import GUITAR_PROGRAM, note_steps, render_midi, tone_velocity
from strumpluck.recorder import RecordingDevice


def notes_of(mid: mido.MidiFile, kind: str) -> List[int]:
    return [msg.note for msg in mid.tracks[0] if msg.type == kind]


def test_tap_becomes_one_note() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_tap(string_by_id(StringId.G), 2, 35.0)
    mid = render_midi(device.tones)
    assert mid.type == 0
    assert mid.ticks_per_beat == 480
    track = mid.tracks[0]
    assert track[0].type == "set_tempo"
    assert track[0].tempo == 500000
    assert track[1].type == "program_change"
    assert track[1].program == GUITAR_PROGRAM
    on, off = track[2], track[3]
    assert (on.type, on.note, on.velocity, on.time) == ("note_on", 57, 114, 0)
    assert (off.type, off.note, off.time) == ("note_off", 57, 720)


def test_strum_notes_follow_strum_order() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_strum(StrumDirection.Up, 1.0, {StringId.A: 2})
    mid = render_midi(device.tones)
    assert notes_of(mid, "note_on") == [40, 47, 50, 55, 59, 64]
    assert sorted(notes_of(mid, "note_off")) == [40, 47, 50, 55, 59, 64]


def test_slide_steps_chromatically() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_slide(
        string_by_id(StringId.D), SlideDirection.Right, 90.0, 1.0, 0, 2
    )
    [tone] = device.tones
    steps = note_steps(tone)
    assert [note for _, _, note in steps] == [50, 51, 52]
    assert steps[0][0] == 0.0
    assert steps[-1][1] == tone.end
    mid = render_midi(device.tones)
    assert notes_of(mid, "note_on") == [50, 51, 52]
    assert notes_of(mid, "note_off") == [50, 51, 52]


def test_overlapping_notes_are_merged() -> None:
    device = RecordingDevice()
    dispatcher = SynthDispatcher(device)
    dispatcher.play_frequency(440.0, 0.5, 1.0)
    dispatcher.play_frequency(440.0, 0.5, 1.0, delay_seconds=0.3)
    mid = render_midi(device.tones)
    notes = [msg for msg in mid.tracks[0] if msg.type in ("note_on", "note_off")]
    assert [(msg.type, msg.note, msg.time) for msg in notes] == [
        ("note_on", 69, 0),
        ("note_on", 69, 288),
        ("note_off", 69, 768),
    ]


def test_velocity_from_gain_peak() -> None:
    device = RecordingDevice()
    dispatcher = SynthDispatcher(device)
    dispatcher.play_frequency(440.0, 0.5, 0.0)
    dispatcher.play_frequency(440.0, 0.5, 0.5)
    quiet, loud = device.tones
    assert tone_velocity(quiet.gain) == 1
    assert tone_velocity(loud.gain) == 64


def test_saved_file_reloads(tmp_path: Path) -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_strum(StrumDirection.Down, 1.0)
    path = tmp_path / "strum.mid"
    render_midi(device.tones).save(path)
    loaded = mido.MidiFile(path)
    assert notes_of(loaded, "note_on") == [64, 59, 55, 50, 45, 40]
    assert loaded.length > 0.6
