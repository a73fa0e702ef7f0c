import wave
from pathlib import Path

import numpy as np
import pytest

from strumpluck.config import RenderConfig
from strumpluck.dispatcher import SynthDispatcher
from strumpluck.gesture import SlideDirection
from strumpluck.instrument import StringId, string_by_id
from strumpluck.recorder import (
    Automation,
    AutomationKind,
    ParamTrack,
    RecordedTone,
    RecordingDevice,
)
from strumpluck.render import eval_track, mk_lspace, render_tones, write_wav

RATE = 8000


def test_mk_lspace() -> None:
    lspace = mk_lspace(0.0, 1.0, 4)
    assert lspace.tolist() == [0.0, 0.25, 0.5, 0.75]
    assert len(mk_lspace(0.5, 0.5, 100)) == 1


def test_eval_track_follows_automation() -> None:
    track = ParamTrack(
        1.0,
        (
            Automation(AutomationKind.Set, 0.0, 0.0),
            Automation(AutomationKind.Linear, 1.0, 1.0),
            Automation(AutomationKind.Exponential, 0.25, 3.0),
        ),
    )
    lspace = np.array([-1.0, 0.0, 0.5, 1.0, 2.0, 3.0, 4.0])
    values = eval_track(track, lspace)
    assert values.tolist() == pytest.approx([1.0, 0.0, 0.5, 1.0, 0.5, 0.25, 0.25])
    assert values.tolist() == pytest.approx([track.value_at(t) for t in lspace.tolist()])


def test_exponential_ramp_from_zero_holds() -> None:
    track = ParamTrack(
        0.0,
        (
            Automation(AutomationKind.Set, 0.0, 0.0),
            Automation(AutomationKind.Exponential, 1.0, 1.0),
        ),
    )
    values = eval_track(track, np.array([0.5, 0.99, 1.0]))
    assert values.tolist() == [0.0, 0.0, 1.0]


def test_render_tap() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_tap(string_by_id(StringId.HighE), 0, 35.0)
    config = RenderConfig(sample_rate=RATE, tail_seconds=0.25)
    samples = render_tones(device.tones, config)
    assert len(samples) == round((0.75 + 0.25) * RATE)
    assert float(np.max(np.abs(samples))) <= 0.9 + 1e-9
    assert float(np.max(np.abs(samples[: int(0.5 * RATE)]))) > 0.5
    assert not np.any(samples[int(0.76 * RATE) :])


def test_render_mix_never_clips() -> None:
    device = RecordingDevice()
    dispatcher = SynthDispatcher(device)
    for _ in range(4):
        dispatcher.play_frequency(220.0, 0.5, 1.0)
    samples = render_tones(device.tones, RenderConfig(sample_rate=RATE, tail_seconds=0.0))
    assert float(np.max(np.abs(samples))) == pytest.approx(1.0)


def test_render_slide_glides() -> None:
    device = RecordingDevice()
    SynthDispatcher(device).trigger_slide(
        string_by_id(StringId.A), SlideDirection.Right, 180.0, 1.0, 0, 5
    )
    samples = render_tones(device.tones, RenderConfig(sample_rate=RATE))
    # Zero crossings per window grow as the pitch rises
    early = np.count_nonzero(np.diff(np.signbit(samples[800:1600])))
    late = np.count_nonzero(np.diff(np.signbit(samples[7000:7800])))
    assert late > early


def test_render_nothing() -> None:
    samples = render_tones([], RenderConfig(sample_rate=RATE, tail_seconds=0.5))
    assert len(samples) == RATE // 2
    assert not np.any(samples)


def test_unstopped_tone_ends_with_automation() -> None:
    tone = RecordedTone(
        start=0.0,
        stop=None,
        frequency=ParamTrack(440.0, ()),
        gain=ParamTrack(1.0, (Automation(AutomationKind.Set, 0.0, 0.5),)),
    )
    assert tone.end == 0.5


def test_write_wav(tmp_path: Path) -> None:
    path = tmp_path / "out.wav"
    samples = np.array([0.0, 0.5, -0.5, 2.0, -2.0])
    write_wav(path, samples, RATE)
    with wave.open(str(path), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getsampwidth() == 2
        assert wf.getframerate() == RATE
        frames = np.frombuffer(wf.readframes(wf.getnframes()), dtype="<i2")
    assert frames.tolist() == [0, 16383, -16383, 32767, -32767]
