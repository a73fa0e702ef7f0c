from typing import List, Sequence

import pytest

from strumpluck import constants
from strumpluck.device import ToneDevice
from strumpluck.dispatcher import SynthDispatcher, strum_order
from strumpluck.gesture import SlideDirection, StrumDirection
from strumpluck.instrument import GUITAR_STRINGS, StringId, string_by_id
from strumpluck.notes import note_to_frequency
from strumpluck.recorder import Automation, AutomationKind, RecordedSource, RecordingDevice
from strumpluck.timer import ManualClock


def kinds(events: Sequence[Automation]) -> List[AutomationKind]:
    return [ev.kind for ev in events]


def test_tap_schedules_enveloped_tone() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_tap(string_by_id(StringId.G), 2, 35.0)
    [tone] = device.tones
    assert tone.start == 0.0
    assert tone.stop == pytest.approx(constants.TAP_SUSTAIN_SECONDS + constants.RELEASE_SECONDS)
    assert tone.frequency.value_at(0.1) == pytest.approx(note_to_frequency(57))
    assert kinds(tone.gain.events) == [
        AutomationKind.Set,
        AutomationKind.Linear,
        AutomationKind.Exponential,
    ]
    assert tone.gain.value_at(0.0) == 0.0
    assert tone.gain.value_at(constants.ATTACK_SECONDS) == pytest.approx(0.9)
    assert tone.gain.peak() == pytest.approx(0.9)
    assert tone.gain.events[-1].value == constants.SILENT_GAIN
    assert tone.gain.events[-1].time == pytest.approx(constants.TAP_SUSTAIN_SECONDS)


def test_tones_start_at_device_time() -> None:
    clock = ManualClock()
    device = RecordingDevice(clock)
    dispatcher = SynthDispatcher(device)
    clock.advance(2.0)
    dispatcher.play_frequency(440.0, 0.5, 0.7, delay_seconds=0.1)
    [tone] = device.tones
    assert tone.start == pytest.approx(2.1)
    assert tone.stop == pytest.approx(2.1 + 0.5 + constants.RELEASE_SECONDS)


def test_strum_order() -> None:
    assert strum_order(StrumDirection.Down) == list(GUITAR_STRINGS)
    assert strum_order(StrumDirection.Up) == list(reversed(GUITAR_STRINGS))


@pytest.mark.parametrize("direction", list(StrumDirection))
def test_strum_staggers_six_strings(direction: StrumDirection) -> None:
    device = RecordingDevice()
    frets = {StringId.LowE: 3, StringId.A: 2, StringId.HighE: 3}
    SynthDispatcher(device).trigger_strum(direction, 1.0, frets)
    tones = device.tones
    assert len(tones) == 6
    for index, (tone, string) in enumerate(zip(tones, strum_order(direction))):
        assert tone.start == pytest.approx(index * constants.STRUM_SPREAD_SECONDS)
        expected = note_to_frequency(string.midi + frets.get(string.string_id, 0))
        assert tone.frequency.value_at(tone.start) == pytest.approx(expected)
        assert tone.gain.peak() == pytest.approx(0.6)


def test_strum_without_frets_rings_open() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_strum(StrumDirection.Down, 0.0)
    freqs = [tone.frequency.value_at(tone.start) for tone in device.tones]
    assert freqs == pytest.approx([note_to_frequency(s.midi) for s in GUITAR_STRINGS])
    assert all(tone.gain.peak() == pytest.approx(0.25) for tone in device.tones)


def test_slide_glides_between_frets() -> None:
    device = RecordingDevice()
    d_string = string_by_id(StringId.D)
    SynthDispatcher(device).trigger_slide(d_string, SlideDirection.Right, 90.0, 0.5, 0, 2)
    [tone] = device.tones
    sustain = 0.5
    start_freq = note_to_frequency(50)
    target_freq = note_to_frequency(52)
    assert tone.frequency.value_at(0.0) == pytest.approx(start_freq)
    assert tone.frequency.value_at(sustain / 2) == pytest.approx((start_freq + target_freq) / 2)
    assert tone.frequency.value_at(sustain + 0.01) == pytest.approx(target_freq)
    assert tone.gain.value_at(constants.ATTACK_SECONDS) == pytest.approx(0.3)
    assert tone.gain.events[-1].time == pytest.approx(sustain + constants.SLIDE_DECAY_SECONDS)
    assert tone.stop == pytest.approx(sustain + constants.SLIDE_STOP_SECONDS)


def test_stepped_device_still_sounds() -> None:
    device = RecordingDevice(linear_ramps=False, exponential_ramps=False)
    dispatcher = SynthDispatcher(device)
    dispatcher.trigger_tap(string_by_id(StringId.HighE), 0, 100.0)
    dispatcher.trigger_slide(
        string_by_id(StringId.A), SlideDirection.Left, 80.0, 1.0, 5, 3
    )
    tap, slide = device.tones
    assert set(kinds(tap.gain.events)) == {AutomationKind.Set}
    assert tap.gain.peak() == pytest.approx(1 - 100.0 / 350.0)
    # Without ramps the glide lands on the target when it would have ended
    assert slide.frequency.value_at(0.1) == pytest.approx(note_to_frequency(50))
    assert slide.frequency.value_at(0.5) == pytest.approx(note_to_frequency(48))


def test_decay_falls_back_to_linear() -> None:
    device = RecordingDevice(exponential_ramps=False)
    SynthDispatcher(device).trigger_tap(string_by_id(StringId.B), 0, 0.0)
    [tone] = device.tones
    assert kinds(tone.gain.events)[-1] == AutomationKind.Linear
    assert tone.gain.events[-1].value == 0.0


def test_suspended_device_is_resumed() -> None:
    device = RecordingDevice(suspended=True)
    dispatcher = SynthDispatcher(device)
    dispatcher.trigger_tap(string_by_id(StringId.B), 0, 0.0)
    dispatcher.trigger_tap(string_by_id(StringId.B), 1, 0.0)
    assert device.resume_count == 1
    assert not device.suspended
    assert len(device.tones) == 2


def test_missing_device_is_silent() -> None:
    dispatcher = SynthDispatcher(None)
    assert not dispatcher.available
    dispatcher.trigger_tap(string_by_id(StringId.B), 0, 0.0)
    dispatcher.trigger_strum(StrumDirection.Up, 1.0)
    dispatcher.trigger_slide(string_by_id(StringId.B), SlideDirection.Right, 100.0, 1.0, 0, 3)
    dispatcher.play_frequency(440.0, 1.0, 1.0)


def test_failing_factory_degrades_to_silence() -> None:
    def factory() -> ToneDevice:
        raise RuntimeError("no audio hardware")

    assert not SynthDispatcher.open(factory).available
    assert not SynthDispatcher.open(None).available
    assert SynthDispatcher.open(RecordingDevice).available


class FailingDevice(RecordingDevice):
    def create_tone_source(self, frequency: float) -> RecordedSource:
        raise RuntimeError("audio device lost")


@pytest.mark.parametrize("trigger", ["tap", "strum", "slide"])
def test_device_failure_degrades_to_silence(trigger: str) -> None:
    dispatcher = SynthDispatcher(FailingDevice())
    b_string = string_by_id(StringId.B)
    match trigger:
        case "tap":
            dispatcher.trigger_tap(b_string, 0, 50.0)
        case "strum":
            dispatcher.trigger_strum(StrumDirection.Down, 1.0)
        case _:
            dispatcher.trigger_slide(b_string, SlideDirection.Right, 100.0, 1.0, 0, 3)
    assert not dispatcher.available
    assert dispatcher.device is None
    dispatcher.trigger_tap(b_string, 1, 50.0)
