"""Offline audio rendering of recorded tones."""

from __future__ import annotations

import logging
import math
import wave
from pathlib import Path
from typing import Sequence

import numpy as np
import numpy.typing as npt
import plotext as plt

from strumpluck.config import RenderConfig
from strumpluck.recorder import AutomationKind, ParamTrack, RecordedTone

type Rate = int
type Array = npt.NDArray[np.float64]

TAU = np.float64(2 * np.pi)


def mk_lspace(start: float, end: float, rate: Rate) -> Array:
    """Sample times covering [start, end] at the given rate."""
    assert start <= end
    assert rate > 0
    start_ix = round(rate * start)
    end_ix = max(start_ix, round(rate * end) - 1)
    num = end_ix - start_ix + 1
    return np.linspace(start=start_ix / rate, stop=end_ix / rate, num=num, dtype=np.float64)


def eval_track(track: ParamTrack, lspace: Array) -> Array:
    """Evaluate a parameter curve at every sample time."""
    arr = np.full_like(lspace, track.initial)
    for segment in track.segments():
        mask = (lspace >= segment.start) & (lspace < segment.end)
        if not mask.any():
            continue
        if segment.kind == AutomationKind.Set or segment.end <= segment.start:
            arr[mask] = segment.v0
            continue
        frac = (lspace[mask] - segment.start) / (segment.end - segment.start)
        if segment.kind == AutomationKind.Linear:
            arr[mask] = segment.v0 + (segment.v1 - segment.v0) * frac
        else:
            arr[mask] = segment.v0 * np.power(segment.v1 / segment.v0, frac)
    return arr


def mk_tone(lspace: Array, frequency: ParamTrack, gain: ParamTrack, rate: Rate) -> Array:
    """A sine whose frequency and amplitude follow their automation curves.

    Phase is accumulated sample by sample so frequency glides stay continuous.
    """
    freqs = eval_track(frequency, lspace)
    phase = np.cumsum(freqs) * (TAU / rate)
    np.mod(phase, TAU, out=phase)
    arr = np.sin(phase)
    np.multiply(arr, eval_track(gain, lspace), out=arr)
    return arr


def render_duration(tones: Sequence[RecordedTone], config: RenderConfig) -> float:
    return max([0.0] + [tone.end for tone in tones]) + config.tail_seconds


def render_tones(tones: Sequence[RecordedTone], config: RenderConfig) -> Array:
    """Mix recorded tones into a mono buffer starting at device time zero.

    The mix is scaled down if it would clip, so samples stay within [-1, 1].

    Args:
        tones: Tones captured by a RecordingDevice.
        config: Sample rate and trailing silence.

    Returns:
        The mixed samples.
    """
    rate = config.sample_rate
    lspace = mk_lspace(0.0, render_duration(tones, config), rate)
    out = np.zeros_like(lspace)
    for tone in tones:
        start_ix = max(0, round(tone.start * rate))
        end_ix = min(len(lspace), round(tone.end * rate))
        if end_ix <= start_ix:
            continue
        out[start_ix:end_ix] += mk_tone(lspace[start_ix:end_ix], tone.frequency, tone.gain, rate)
    peak = float(np.max(np.abs(out))) if len(out) > 0 else 0.0
    if peak > 1.0:
        np.divide(out, peak, out=out)
    logging.debug(f"rendered {len(tones)} tones into {len(out)} samples (peak {peak:.3f})")
    return out


def write_wav(path: Path, samples: Array, rate: Rate) -> None:
    """Write mono samples in [-1, 1] as 16-bit PCM."""
    pcm = np.clip(samples, -1.0, 1.0) * 32767
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(rate)
        wf.writeframes(pcm.astype("<i2").tobytes())
    logging.info(f"wrote {len(samples) / rate:.2f}s of audio to {path}")


def plot(spc: Array, arr: Array, max_points: int = 2000) -> None:
    """Plot a waveform in the terminal, decimated to at most max_points."""
    step = max(1, math.ceil(len(arr) / max_points))
    plt.clear_figure()
    plt.plot(spc[::step].tolist(), arr[::step].tolist())
    plt.title("strumpluck")
    plt.show()


def plot_samples(samples: Array, rate: Rate) -> None:
    plot(np.arange(len(samples), dtype=np.float64) / rate, samples)
