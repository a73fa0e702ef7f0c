"""An in-memory tone device that records every scheduled tone.

RecordingDevice implements the full device interface against a Clock and
keeps each tone's start/stop times and parameter automation. The recordings
feed the offline audio and MIDI renderers, and make the dispatcher testable
without audio hardware. Ramp capabilities can be switched off to reproduce
backends that only support stepped parameter changes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, unique
from typing import List, Optional, Tuple, override

from strumpluck.device import (
    AudioNode,
    AudioParam,
    Envelope,
    ExponentialRampParam,
    LinearRampParam,
    ToneDevice,
    ToneSource,
)
from strumpluck.timer import Clock, ManualClock


@unique
class AutomationKind(Enum):
    Set = "set"
    Linear = "linear"
    Exponential = "exponential"


@dataclass(frozen=True)
class Automation:
    """One scheduled parameter change."""

    kind: AutomationKind
    value: float
    time: float


@dataclass(frozen=True)
class Segment:
    """A piece of a parameter curve over [start, end)."""

    start: float
    end: float
    kind: AutomationKind
    """Set means the value holds at v0 for the whole segment."""
    v0: float
    v1: float

    def value_at(self, t: float) -> float:
        if self.kind == AutomationKind.Set or self.end <= self.start:
            return self.v0
        frac = (t - self.start) / (self.end - self.start)
        if self.kind == AutomationKind.Linear:
            return self.v0 + (self.v1 - self.v0) * frac
        return self.v0 * (self.v1 / self.v0) ** frac


def _can_ramp_exponentially(v0: float, v1: float) -> bool:
    return v0 != 0 and v1 != 0 and (v0 > 0) == (v1 > 0)


@dataclass(frozen=True)
class ParamTrack:
    """The full automation history of one parameter."""

    initial: float
    events: Tuple[Automation, ...]

    def segments(self) -> List[Segment]:
        """Piecewise description of the curve from -inf to +inf.

        A ramp runs from the previous event's time and value; a ramp with no
        previous event, or an exponential ramp across zero, holds the old
        value and jumps at the ramp's end time.
        """
        ordered = sorted(self.events, key=lambda ev: ev.time)
        segments: List[Segment] = []
        cur_t = -math.inf
        cur_v = self.initial
        for ev in ordered:
            kind = ev.kind
            if math.isinf(cur_t):
                kind = AutomationKind.Set
            elif kind == AutomationKind.Exponential and not _can_ramp_exponentially(
                cur_v, ev.value
            ):
                kind = AutomationKind.Set
            if ev.time > cur_t:
                segments.append(Segment(cur_t, ev.time, kind, cur_v, ev.value))
            cur_t = ev.time
            cur_v = ev.value
        segments.append(Segment(cur_t, math.inf, AutomationKind.Set, cur_v, cur_v))
        return segments

    def value_at(self, t: float) -> float:
        """Evaluate the curve at a device time."""
        for segment in self.segments():
            if segment.start <= t < segment.end:
                return segment.value_at(t)
        return self.initial

    def peak(self) -> float:
        """Largest value the automation sets or ramps to; the initial value if none."""
        if not self.events:
            return self.initial
        return max(ev.value for ev in self.events)


class SteppedParam(AudioParam):
    """A parameter supporting only stepped changes."""

    def __init__(self, initial: float) -> None:
        self._initial = initial
        self._events: List[Automation] = []

    @property
    @override
    def value(self) -> float:
        return self._initial

    @value.setter
    @override
    def value(self, value: float) -> None:
        self._initial = value

    @override
    def set_value_at_time(self, value: float, time: float) -> None:
        self._events.append(Automation(AutomationKind.Set, value, time))

    @property
    def events(self) -> List[Automation]:
        return list(self._events)

    def track(self) -> ParamTrack:
        """Freeze the automation recorded so far."""
        return ParamTrack(self._initial, tuple(self._events))


class LinearParam(SteppedParam, LinearRampParam):
    @override
    def linear_ramp_to_value_at_time(self, value: float, time: float) -> None:
        self._events.append(Automation(AutomationKind.Linear, value, time))


class ExponentialParam(SteppedParam, ExponentialRampParam):
    @override
    def exponential_ramp_to_value_at_time(self, value: float, time: float) -> None:
        self._events.append(Automation(AutomationKind.Exponential, value, time))


class RampParam(LinearParam, ExponentialParam):
    """A parameter supporting every kind of change."""


def _make_param(initial: float, linear: bool, exponential: bool) -> SteppedParam:
    if linear and exponential:
        return RampParam(initial)
    elif linear:
        return LinearParam(initial)
    elif exponential:
        return ExponentialParam(initial)
    else:
        return SteppedParam(initial)


class _Node(AudioNode):
    def __init__(self) -> None:
        self.outputs: List[AudioNode] = []

    @override
    def connect(self, destination: AudioNode) -> None:
        self.outputs.append(destination)


class RecordedOutput(_Node):
    """The device's final output node."""


class RecordedEnvelope(_Node, Envelope):
    def __init__(self, gain: SteppedParam) -> None:
        super().__init__()
        self._gain = gain

    @property
    @override
    def gain(self) -> SteppedParam:
        return self._gain


class RecordedSource(_Node, ToneSource):
    def __init__(self, frequency: SteppedParam) -> None:
        super().__init__()
        self._frequency = frequency
        self.start_time: Optional[float] = None
        self.stop_time: Optional[float] = None

    @property
    @override
    def frequency(self) -> SteppedParam:
        return self._frequency

    @override
    def start(self, when: float) -> None:
        self.start_time = when

    @override
    def stop(self, when: float) -> None:
        self.stop_time = when


@dataclass(frozen=True)
class RecordedTone:
    """A started tone that reaches the device output."""

    start: float
    stop: Optional[float]
    """Stop time, or None if the tone was never stopped."""
    frequency: ParamTrack
    gain: ParamTrack

    @property
    def end(self) -> float:
        """When the tone falls silent: its stop time, else its last automation."""
        if self.stop is not None:
            return max(self.start, self.stop)
        times = [ev.time for ev in self.frequency.events + self.gain.events]
        return max([self.start] + times)


class RecordingDevice(ToneDevice):
    """A tone device that records rather than sounds.

    Args:
        clock: Source of current_time; defaults to a manual clock at zero.
        linear_ramps: Whether parameters offer linear ramps.
        exponential_ramps: Whether parameters offer exponential ramps.
        suspended: Whether the device starts suspended.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        linear_ramps: bool = True,
        exponential_ramps: bool = True,
        suspended: bool = False,
    ) -> None:
        self._clock = clock if clock is not None else ManualClock()
        self._linear = linear_ramps
        self._exponential = exponential_ramps
        self._suspended = suspended
        self._output = RecordedOutput()
        self._sources: List[RecordedSource] = []
        self.resume_count = 0

    @property
    @override
    def current_time(self) -> float:
        return self._clock.now()

    @property
    @override
    def destination(self) -> RecordedOutput:
        return self._output

    @override
    def create_tone_source(self, frequency: float) -> RecordedSource:
        source = RecordedSource(_make_param(frequency, self._linear, self._exponential))
        self._sources.append(source)
        return source

    @override
    def create_envelope(self) -> RecordedEnvelope:
        return RecordedEnvelope(_make_param(1.0, self._linear, self._exponential))

    @property
    @override
    def suspended(self) -> bool:
        return self._suspended

    @override
    def resume(self) -> None:
        self.resume_count += 1
        self._suspended = False

    def _reaches_output(self, source: RecordedSource) -> Optional[RecordedEnvelope]:
        for node in source.outputs:
            if isinstance(node, RecordedEnvelope) and self._output in node.outputs:
                return node
        return None

    @property
    def tones(self) -> List[RecordedTone]:
        """Every started tone wired through an envelope to the output, by start time."""
        tones: List[RecordedTone] = []
        for source in self._sources:
            envelope = self._reaches_output(source)
            if envelope is None or source.start_time is None:
                continue
            tones.append(
                RecordedTone(
                    start=source.start_time,
                    stop=source.stop_time,
                    frequency=source.frequency.track(),
                    gain=envelope.gain.track(),
                )
            )
        return sorted(tones, key=lambda tone: tone.start)

    def clear(self) -> None:
        """Forget every recorded tone."""
        self._sources = []
