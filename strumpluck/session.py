"""The session engine: musical state, gesture handling and demo playback.

A GuitarSession owns every piece of cross-gesture state (fretted strings,
last touched position, gesture log, status and pending demo timers) and
mutates it only through its entry points. All entry points and demo ticks
run on the thread that drives the session's TimerQueue, so no locking is
needed. The status is an immutable snapshot replaced wholesale on every
update, so readers never observe a partial change.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Sequence, Set, Tuple, override

from strumpluck import constants
from strumpluck.base import Closeable, MatchException, Resettable
from strumpluck.chords import DetectedChord, detect_chord
from strumpluck.config import SessionConfig
from strumpluck.demo import (
    CLASSICAL_DEMO_HEADLINE,
    CLASSICAL_DEMO_SEQUENCE,
    DemoNoteEvent,
    script_duration_ms,
)
from strumpluck.dispatcher import SynthDispatcher, strum_order
from strumpluck.fretboard import (
    StringPos,
    fret_from_relative_x,
    fret_relative_x,
    string_index_from_y,
    string_y,
)
from strumpluck.gesture import (
    GestureEvent,
    Layout,
    Point,
    SlideDirection,
    SlideGesture,
    StrumDirection,
    StrumGesture,
    TapGesture,
    UnknownGesture,
    format_gesture,
    relative_position,
)
from strumpluck.instrument import (
    GUITAR_STRINGS,
    MIDDLE_STRING_INDEX,
    NUM_STRINGS,
    StringDef,
    StringId,
    string_index,
)
from strumpluck.mapping import (
    Articulation,
    PitchSnapshot,
    make_pitch_snapshot,
    slide_target_fret,
    speed_to_velocity,
)
from strumpluck.timer import TimerHandle, TimerQueue

IDLE_HEADLINE = "Waiting for gestures..."
IDLE_MESSAGE = "Waiting for gestures..."
DEMO_PLAYING_MESSAGE = "Playing classical demo..."
DEMO_COMPLETE_HEADLINE = "Demo complete - try your own gestures"
DEMO_COMPLETE_MESSAGE = "Demo complete. Try your own interactions!"

NOMINAL_LAYOUT = Layout(
    width=constants.NOMINAL_SURFACE_WIDTH_PX,
    height=2 * constants.STRING_TOP_OFFSET_PX
    + (NUM_STRINGS - 1) * constants.STRING_SPACING_PX,
)
"""Surface on which scripted notes are placed when they are logged as taps."""


@dataclass(frozen=True)
class StrumSnapshot:
    """Summary of the last strum."""

    direction: StrumDirection
    velocity: float
    strings: Tuple[StringDef, ...]
    """Strings in the order the strum sounded them."""


@dataclass(frozen=True)
class SlideSnapshot:
    """Summary of the last slide."""

    direction: SlideDirection
    velocity: float
    distance: float
    string: StringDef
    start_fret: int
    target_fret: int
    pitch: PitchSnapshot
    """Where the slide landed."""


@dataclass(frozen=True)
class EngineStatus:
    """Externally visible snapshot of the session.

    At most one of active_string, strum and slide is set.
    """

    last_gesture: Optional[GestureEvent] = None
    message: Optional[str] = None
    active_string: Optional[PitchSnapshot] = None
    strum: Optional[StrumSnapshot] = None
    slide: Optional[SlideSnapshot] = None
    chord: Optional[DetectedChord] = None

    @property
    def active_pitch(self) -> Optional[PitchSnapshot]:
        """The pitch currently sounding from a tap, demo note or slide."""
        if self.active_string is not None:
            return self.active_string
        elif self.slide is not None:
            return self.slide.pitch
        else:
            return None


def _open_frets() -> Dict[StringId, int]:
    return {string_def.string_id: 0 for string_def in GUITAR_STRINGS}


def demo_tap(event: DemoNoteEvent) -> TapGesture:
    """The tap that would have played a scripted note on the nominal surface."""
    point = Point(
        x=fret_relative_x(event.fret) * NOMINAL_LAYOUT.width,
        y=string_y(string_index(event.string_id)),
    )
    return TapGesture(
        position=point,
        duration_ms=event.duration_ms,
        relative_position=relative_position(point, NOMINAL_LAYOUT),
    )


class GuitarSession(Resettable, Closeable):
    """Reacts to gestures and demo ticks, keeping the musical state."""

    def __init__(
        self,
        config: SessionConfig,
        dispatcher: SynthDispatcher,
        timers: TimerQueue,
        script: Sequence[DemoNoteEvent] = CLASSICAL_DEMO_SEQUENCE,
        demo_headline: str = CLASSICAL_DEMO_HEADLINE,
    ) -> None:
        """Initialize the session.

        Args:
            config: Session settings (log size, demo timing).
            dispatcher: Where triggers are sent for synthesis.
            timers: Queue on which demo notes are scheduled.
            script: Notes played by play_demo.
            demo_headline: Headline shown while the demo plays.
        """
        self._config = config
        self._dispatcher = dispatcher
        self._timers = timers
        self._script = list(script)
        self._demo_headline = demo_headline
        self._demo_handles: Set[TimerHandle] = set()
        self._demo_playing = False
        self._frets = _open_frets()
        self._last_touched: Optional[StringPos] = None
        self._log: Deque[GestureEvent] = deque(maxlen=config.log_limit)
        self._headline = IDLE_HEADLINE
        self._status = EngineStatus(message=IDLE_MESSAGE)

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def headline(self) -> str:
        """One-line description of the latest gesture or demo event."""
        return self._headline

    @property
    def gesture_log(self) -> List[GestureEvent]:
        """Recent gestures, most recent first."""
        return list(self._log)

    @property
    def gesture_descriptions(self) -> List[str]:
        """The gesture log rendered with format_gesture."""
        return [format_gesture(gesture) for gesture in self._log]

    @property
    def fretted_state(self) -> Dict[StringId, int]:
        """Copy of the fret held on each string."""
        return dict(self._frets)

    @property
    def last_touched(self) -> Optional[StringPos]:
        return self._last_touched

    @property
    def is_demo_playing(self) -> bool:
        return self._demo_playing

    @property
    def pending_demo_timers(self) -> int:
        return sum(1 for handle in self._demo_handles if handle.pending)

    def handle_gesture(self, gesture: GestureEvent) -> None:
        """Process one recognized gesture.

        A running demo is canceled before anything else changes. The gesture
        is then logged and handled according to its kind.

        Args:
            gesture: The gesture to process.
        """
        if self._demo_playing or self._demo_handles:
            self._cancel_demo()

        self._log.appendleft(gesture)
        self._headline = format_gesture(gesture)
        logging.debug(f"gesture: {self._headline}")

        match gesture:
            case TapGesture():
                self._capture_tap(gesture)
            case StrumGesture():
                self._capture_strum(gesture)
            case SlideGesture():
                self._capture_slide(gesture)
            case UnknownGesture():
                self._status = EngineStatus(last_gesture=gesture, message=gesture.detail)
            case _:
                raise MatchException(gesture)

    def _hold(self, str_index: int, snapshot: PitchSnapshot) -> None:
        self._last_touched = StringPos(str_index, snapshot.fret)
        self._frets[snapshot.string.string_id] = snapshot.fret

    def _capture_tap(self, gesture: TapGesture) -> None:
        str_index = string_index_from_y(gesture.position.y)
        string = GUITAR_STRINGS[str_index]
        relative_x = (
            gesture.relative_position.x if gesture.relative_position is not None else None
        )
        fret = fret_from_relative_x(relative_x)
        snapshot = make_pitch_snapshot(string, fret, Articulation.Tap, gesture.duration_ms)
        self._hold(str_index, snapshot)
        self._status = EngineStatus(
            last_gesture=gesture,
            message=f"Trigger {snapshot.label}",
            active_string=snapshot,
        )
        self._dispatcher.trigger_tap(string, snapshot.fret, gesture.duration_ms)

    def _capture_strum(self, gesture: StrumGesture) -> None:
        velocity = speed_to_velocity(gesture.speed)
        chord = detect_chord(self._frets)
        if chord is not None:
            message = f"Detected {chord.label} chord"
        elif gesture.direction == StrumDirection.Down:
            message = "Downward strum"
        else:
            message = "Upward strum"
        self._status = EngineStatus(
            last_gesture=gesture,
            message=message,
            strum=StrumSnapshot(
                direction=gesture.direction,
                velocity=velocity,
                strings=tuple(strum_order(gesture.direction)),
            ),
            chord=chord,
        )
        self._dispatcher.trigger_strum(gesture.direction, gesture.speed, dict(self._frets))

    def _capture_slide(self, gesture: SlideGesture) -> None:
        if self._last_touched is None:
            str_index = MIDDLE_STRING_INDEX
            start_fret = 0
        else:
            str_index = self._last_touched.str_index
            start_fret = self._last_touched.fret
        string = GUITAR_STRINGS[str_index]
        target_fret = slide_target_fret(start_fret, gesture.direction, gesture.distance)
        snapshot = make_pitch_snapshot(string, target_fret, Articulation.Slide)
        self._hold(str_index, snapshot)
        verb = "Forward" if gesture.direction == SlideDirection.Right else "Backward"
        self._status = EngineStatus(
            last_gesture=gesture,
            message=f"{verb} slide to {snapshot.label}",
            slide=SlideSnapshot(
                direction=gesture.direction,
                velocity=speed_to_velocity(gesture.speed),
                distance=gesture.distance,
                string=string,
                start_fret=start_fret,
                target_fret=snapshot.fret,
                pitch=snapshot,
            ),
        )
        self._dispatcher.trigger_slide(
            string,
            gesture.direction,
            gesture.distance,
            gesture.speed,
            start_fret,
            snapshot.fret,
        )

    def _schedule_demo(self, delay_ms: float, callback: Callable[[], None]) -> None:
        def fire() -> None:
            self._demo_handles.discard(handle)
            callback()

        handle = self._timers.schedule(delay_ms, fire)
        self._demo_handles.add(handle)

    def play_demo(self) -> bool:
        """Start the scripted performance.

        Returns:
            False if a demo was already playing (nothing changes), else True.
        """
        if self._demo_playing:
            return False
        self._cancel_demo()
        self._demo_playing = True
        self._headline = self._demo_headline
        self._status = EngineStatus(message=DEMO_PLAYING_MESSAGE)
        logging.info(f"demo starting with {len(self._script)} notes")

        for event in self._script:
            self._schedule_demo(event.at_ms, lambda event=event: self._play_demo_note(event))
        self._schedule_demo(
            script_duration_ms(self._script) + self._config.demo_completion_delay_ms,
            self._finish_demo,
        )
        return True

    def _play_demo_note(self, event: DemoNoteEvent) -> None:
        str_index = string_index(event.string_id)
        string = GUITAR_STRINGS[str_index]
        snapshot = make_pitch_snapshot(string, event.fret, Articulation.Tap, event.duration_ms)
        gesture = demo_tap(event)
        self._log.appendleft(gesture)
        self._hold(str_index, snapshot)
        self._headline = f"Demo note {snapshot.label}"
        self._status = EngineStatus(
            last_gesture=gesture,
            message=f"Demo note {snapshot.label}",
            active_string=snapshot,
        )
        self._dispatcher.trigger_tap(string, snapshot.fret, event.duration_ms)

    def _finish_demo(self) -> None:
        self._demo_playing = False
        self._headline = DEMO_COMPLETE_HEADLINE
        self._status = EngineStatus(
            last_gesture=self._status.last_gesture,
            message=DEMO_COMPLETE_MESSAGE,
            chord=self._status.chord,
        )
        logging.info("demo complete")

    def _cancel_demo(self) -> int:
        canceled = self._timers.cancel_all(self._demo_handles)
        self._demo_handles = set()
        if self._demo_playing:
            logging.info(f"demo canceled with {canceled} pending timers")
        self._demo_playing = False
        return canceled

    def stop_demo(self) -> bool:
        """Cancel a running demo without touching the rest of the state.

        Returns:
            Whether a demo was playing.
        """
        was_playing = self._demo_playing
        self._cancel_demo()
        return was_playing

    @override
    def reset(self) -> None:
        """Cancel any demo and return to the freshly constructed state."""
        self._cancel_demo()
        self._frets = _open_frets()
        self._last_touched = None
        self._log.clear()
        self._headline = IDLE_HEADLINE
        self._status = EngineStatus(message=IDLE_MESSAGE)
        logging.info("session reset")

    @override
    def close(self) -> None:
        """Cancel pending demo timers; the session stays readable."""
        self._cancel_demo()
