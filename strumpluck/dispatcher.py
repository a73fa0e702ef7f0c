"""Scheduling of tap, strum and slide tones on a tone device.

The dispatcher decides which tones to start, when, and with which frequency
and amplitude envelope. It never blocks: every call schedules work on the
device relative to the device clock and returns. Without a device every
trigger is a silent no-op.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from strumpluck import constants
from strumpluck.device import (
    AudioParam,
    DeviceFactory,
    ExponentialRampParam,
    LinearRampParam,
    ToneDevice,
)
from strumpluck.gesture import SlideDirection, StrumDirection
from strumpluck.instrument import GUITAR_STRINGS, StringDef, StringId
from strumpluck.mapping import (
    Articulation,
    make_pitch_snapshot,
    slide_sustain_seconds,
    speed_to_velocity,
    tap_duration_to_velocity,
)


def strum_order(direction: StrumDirection) -> List[StringDef]:
    """Strings in the order a strum reaches them: top first for a down strum."""
    if direction == StrumDirection.Down:
        return list(GUITAR_STRINGS)
    else:
        return list(reversed(GUITAR_STRINGS))


def _set(param: AudioParam, value: float, time: float) -> None:
    param.set_value_at_time(value, time)


def _ramp_linear(param: AudioParam, value: float, time: float) -> None:
    if isinstance(param, LinearRampParam):
        param.linear_ramp_to_value_at_time(value, time)
    else:
        param.set_value_at_time(value, time)


def _decay(param: AudioParam, time: float) -> None:
    # Exponential ramps cannot reach zero, so they target near-silence
    if isinstance(param, ExponentialRampParam):
        param.exponential_ramp_to_value_at_time(constants.SILENT_GAIN, time)
    else:
        _ramp_linear(param, 0.0, time)


class SynthDispatcher:
    """Turns musical triggers into scheduled tones on a ToneDevice."""

    def __init__(self, device: Optional[ToneDevice]) -> None:
        """Initialize the dispatcher.

        Args:
            device: The device to drive, or None to run silently.
        """
        self._device = device

    @classmethod
    def open(cls, factory: Optional[DeviceFactory]) -> SynthDispatcher:
        """Create a dispatcher, falling back to silence if the device fails.

        Args:
            factory: Constructor for the device; None means no audio.

        Returns:
            A dispatcher driving the device, or a silent one.
        """
        if factory is None:
            return cls(None)
        try:
            device = factory()
        except Exception as e:
            logging.warning(f"Tone device unavailable, continuing silently: {e}")
            return cls(None)
        return cls(device)

    @property
    def device(self) -> Optional[ToneDevice]:
        return self._device

    @property
    def available(self) -> bool:
        """Whether triggers produce sound."""
        return self._device is not None

    def _ensure_ready(self, device: ToneDevice) -> None:
        if device.suspended:
            try:
                device.resume()
            except Exception as e:
                logging.debug(f"Tone device resume failed: {e}")

    def _drop_device(self, e: Exception) -> None:
        logging.warning(f"Tone device failed, continuing silently: {e}")
        self._device = None

    def play_frequency(
        self,
        frequency: float,
        duration_seconds: float,
        velocity: float,
        delay_seconds: float = 0.0,
    ) -> None:
        """Schedule one enveloped tone.

        The tone rises to velocity over the attack, decays towards silence
        by the end of duration_seconds and stops after the release. If the
        device fails while scheduling, it is dropped and later calls are
        silent.

        Args:
            frequency: Pitch in Hz.
            duration_seconds: Time from start to the end of the decay.
            velocity: Peak amplitude (0-1).
            delay_seconds: Offset of the start from the current device time.
        """
        device = self._device
        if device is None:
            return
        self._ensure_ready(device)
        try:
            self._schedule_tone(device, frequency, duration_seconds, velocity, delay_seconds)
        except Exception as e:
            self._drop_device(e)

    def _schedule_tone(
        self,
        device: ToneDevice,
        frequency: float,
        duration_seconds: float,
        velocity: float,
        delay_seconds: float,
    ) -> None:
        source = device.create_tone_source(frequency)
        envelope = device.create_envelope()
        source.connect(envelope)
        envelope.connect(device.destination)

        start = device.current_time + delay_seconds
        release = start + duration_seconds
        _set(source.frequency, frequency, start)

        _set(envelope.gain, 0.0, start)
        _ramp_linear(envelope.gain, velocity, start + constants.ATTACK_SECONDS)
        _decay(envelope.gain, release)

        source.start(start)
        source.stop(release + constants.RELEASE_SECONDS)

    def trigger_tap(self, string: StringDef, fret: int, duration_ms: float) -> None:
        """Sound a single fretted note; short taps are louder."""
        snapshot = make_pitch_snapshot(string, fret, Articulation.Tap)
        self.play_frequency(
            snapshot.frequency,
            constants.TAP_SUSTAIN_SECONDS,
            tap_duration_to_velocity(duration_ms),
        )

    def trigger_strum(
        self,
        direction: StrumDirection,
        speed: float,
        frets: Optional[Mapping[StringId, int]] = None,
    ) -> None:
        """Sound all six strings, staggered in strum order.

        Args:
            direction: Down starts at the top string, up at the bottom one.
            speed: Strum speed in px/ms, mapped to velocity.
            frets: Fret held on each string; missing strings ring open.
        """
        if self._device is None:
            return
        velocity = speed_to_velocity(speed)
        held = frets if frets is not None else {}
        for index, string in enumerate(strum_order(direction)):
            snapshot = make_pitch_snapshot(
                string, held.get(string.string_id, 0), Articulation.Tap
            )
            self.play_frequency(
                snapshot.frequency,
                constants.STRUM_SUSTAIN_SECONDS,
                velocity,
                index * constants.STRUM_SPREAD_SECONDS,
            )

    def trigger_slide(
        self,
        string: StringDef,
        direction: SlideDirection,
        distance: float,
        speed: float,
        start_fret: int,
        target_fret: int,
    ) -> None:
        """Sound one tone that glides from the start fret to the target fret.

        Args:
            string: The anchor string.
            direction: Which way the slide moved.
            distance: Slide distance in pixels; sets the glide duration.
            speed: Slide speed in px/ms, mapped to velocity.
            start_fret: Fret the glide starts from.
            target_fret: Fret the glide lands on.
        """
        device = self._device
        if device is None:
            return
        self._ensure_ready(device)
        start_frequency = make_pitch_snapshot(string, start_fret, Articulation.Slide).frequency
        target_frequency = make_pitch_snapshot(string, target_fret, Articulation.Slide).frequency
        velocity = speed_to_velocity(speed)
        sustain = slide_sustain_seconds(distance)
        logging.debug(
            f"slide {direction.value} on {string.name}: {start_fret} -> {target_fret} over {sustain:.2f}s"
        )
        try:
            self._schedule_glide(device, start_frequency, target_frequency, velocity, sustain)
        except Exception as e:
            self._drop_device(e)

    def _schedule_glide(
        self,
        device: ToneDevice,
        start_frequency: float,
        target_frequency: float,
        velocity: float,
        sustain: float,
    ) -> None:
        source = device.create_tone_source(start_frequency)
        envelope = device.create_envelope()
        source.connect(envelope)
        envelope.connect(device.destination)

        start = device.current_time
        _set(source.frequency, start_frequency, start)
        _ramp_linear(source.frequency, target_frequency, start + sustain)

        _set(envelope.gain, 0.0, start)
        _ramp_linear(envelope.gain, velocity, start + constants.ATTACK_SECONDS)
        _ramp_linear(
            envelope.gain, constants.SILENT_GAIN, start + sustain + constants.SLIDE_DECAY_SECONDS
        )

        source.start(start)
        source.stop(start + sustain + constants.SLIDE_STOP_SECONDS)
