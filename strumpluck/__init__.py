"""Gesture-driven six-string guitar: gestures in, scheduled tones out."""

from strumpluck.chords import DetectedChord, detect_chord
from strumpluck.config import SessionConfig, init_config
from strumpluck.dispatcher import SynthDispatcher
from strumpluck.gesture import (
    GestureEvent,
    MotionSample,
    PointerTracker,
    SlideGesture,
    StrumGesture,
    TapGesture,
    UnknownGesture,
    classify_motion,
    format_gesture,
)
from strumpluck.session import EngineStatus, GuitarSession
from strumpluck.timer import TimerQueue

__all__ = [
    "DetectedChord",
    "detect_chord",
    "SessionConfig",
    "init_config",
    "SynthDispatcher",
    "GestureEvent",
    "MotionSample",
    "PointerTracker",
    "TapGesture",
    "StrumGesture",
    "SlideGesture",
    "UnknownGesture",
    "classify_motion",
    "format_gesture",
    "EngineStatus",
    "GuitarSession",
    "TimerQueue",
]
