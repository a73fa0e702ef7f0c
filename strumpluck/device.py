"""Capability interface towards an external tone-synthesis device.

The interface mirrors a small subset of a web-audio style graph: a tone
source (oscillator) feeds an envelope (gain stage) which feeds the device
output. Parameters always support stepped changes at a scheduled time;
smooth ramps are optional capabilities advertised by implementing
LinearRampParam and/or ExponentialRampParam.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Callable


class AudioNode(metaclass=ABCMeta):
    """Anything that can be wired into the signal graph."""

    @abstractmethod
    def connect(self, destination: AudioNode) -> None:
        """Route this node's output into another node."""
        raise NotImplementedError()


class AudioParam(metaclass=ABCMeta):
    """A schedulable numeric parameter such as frequency or gain."""

    @property
    @abstractmethod
    def value(self) -> float:
        """The current (unscheduled) value."""
        raise NotImplementedError()

    @value.setter
    @abstractmethod
    def value(self, value: float) -> None:
        raise NotImplementedError()

    @abstractmethod
    def set_value_at_time(self, value: float, time: float) -> None:
        """Step to a value at a device time (seconds)."""
        raise NotImplementedError()


class LinearRampParam(AudioParam):
    """Capability: linear ramps from the previous scheduled value."""

    @abstractmethod
    def linear_ramp_to_value_at_time(self, value: float, time: float) -> None:
        """Ramp linearly so the value is reached at the given device time."""
        raise NotImplementedError()


class ExponentialRampParam(AudioParam):
    """Capability: exponential ramps from the previous scheduled value."""

    @abstractmethod
    def exponential_ramp_to_value_at_time(self, value: float, time: float) -> None:
        """Ramp exponentially so the value is reached at the given device time."""
        raise NotImplementedError()


class ToneSource(AudioNode):
    """A periodic oscillator."""

    @property
    @abstractmethod
    def frequency(self) -> AudioParam:
        raise NotImplementedError()

    @abstractmethod
    def start(self, when: float) -> None:
        """Start sounding at a device time."""
        raise NotImplementedError()

    @abstractmethod
    def stop(self, when: float) -> None:
        """Stop sounding at a device time."""
        raise NotImplementedError()


class Envelope(AudioNode):
    """An amplitude stage shaped over time through its gain parameter."""

    @property
    @abstractmethod
    def gain(self) -> AudioParam:
        raise NotImplementedError()


class ToneDevice(metaclass=ABCMeta):
    """Factory and clock for tone graphs on some audio backend."""

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Device time in seconds; all scheduling is relative to it."""
        raise NotImplementedError()

    @property
    @abstractmethod
    def destination(self) -> AudioNode:
        """The final output node."""
        raise NotImplementedError()

    @abstractmethod
    def create_tone_source(self, frequency: float) -> ToneSource:
        """Create an oscillator at an initial frequency."""
        raise NotImplementedError()

    @abstractmethod
    def create_envelope(self) -> Envelope:
        """Create an amplitude envelope with unit gain."""
        raise NotImplementedError()

    @property
    def suspended(self) -> bool:
        """Whether the device is paused and needs resume() before it sounds."""
        return False

    def resume(self) -> None:
        """Resume a suspended device. Devices without suspension ignore this."""


DeviceFactory = Callable[[], ToneDevice]
"""Zero-argument constructor for a device; may raise when none is available."""
