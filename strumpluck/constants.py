"""Constants for gesture classification, fretboard geometry and synthesis.

All thresholds are fixed; distances are in surface pixels, durations in
milliseconds unless the name says seconds, and velocities in pixels per
millisecond as reported by a pan responder.
"""

TAP_MAX_DURATION_MS = 200.0
"""Longest press (ms) that can still count as a tap."""

TAP_MAX_MOVEMENT_PX = 12.0
"""Largest displacement on either axis (px) that can still count as a tap."""

MIN_STRUM_DISTANCE_PX = 120.0
"""Minimum vertical displacement (px) for a strum."""

MIN_SLIDE_DISTANCE_PX = 80.0
"""Minimum horizontal displacement (px) for a slide."""

UNKNOWN_GESTURE_DETAIL = "No matching gesture pattern detected"
"""Diagnostic carried by gestures that match no pattern."""

STRING_SPACING_PX = 40.0
"""Vertical distance between adjacent strings on the surface."""

STRING_TOP_OFFSET_PX = 40.0
"""Vertical position of the top (high E) string."""

FRETBOARD_START_RATIO = 0.1
"""Normalized horizontal position of the nut."""

FRETBOARD_END_RATIO = 0.9
"""Normalized horizontal position of the last fret."""

MAX_FRET = 12
"""Highest playable fret."""

NOMINAL_SURFACE_WIDTH_PX = 360.0
"""Surface width used when synthesizing taps for scripted notes."""

REFERENCE_PITCH = 69
"""Pitch number of the tuning reference (A4)."""

REFERENCE_FREQUENCY = 440.0
"""Frequency of the tuning reference in Hz."""

SEMITONES_PER_OCTAVE = 12
"""Number of equal-tempered steps in an octave."""

STRUM_VELOCITY_SCALE = 0.6
"""Velocity gained per unit of strum or slide speed."""

MIN_STRUM_VELOCITY = 0.25
MAX_STRUM_VELOCITY = 1.0

TAP_VELOCITY_DECAY_MS = 350.0
"""Tap duration at which the unclamped tap velocity reaches zero."""

MIN_TAP_VELOCITY = 0.2
MAX_TAP_VELOCITY = 0.9

SLIDE_PX_PER_SEMITONE = 40.0
"""Horizontal distance covering one semitone of slide."""

MIN_SLIDE_SEMITONES = 1.0
MAX_SLIDE_SEMITONES = 6.0

SLIDE_PX_PER_SECOND = 180.0
"""Slide distance that maps to one second of glide."""

MIN_SLIDE_SUSTAIN_SECONDS = 0.3
MAX_SLIDE_SUSTAIN_SECONDS = 1.0

ATTACK_SECONDS = 0.0125
"""Time for a tone to reach its peak amplitude."""

RELEASE_SECONDS = 0.3
"""Time a tone keeps running after its decay target."""

SILENT_GAIN = 0.0001
"""Near-silent target for exponential decays (which cannot reach zero)."""

TAP_SUSTAIN_SECONDS = 0.45
STRUM_SUSTAIN_SECONDS = 0.6

STRUM_SPREAD_SECONDS = 0.025
"""Delay between successive strings of a strum."""

SLIDE_DECAY_SECONDS = 0.25
"""Decay after the slide glide completes."""

SLIDE_STOP_SECONDS = 0.4
"""Time after the glide at which a slide tone stops."""

DEFAULT_LOG_LIMIT = 5
"""Default number of gestures kept in the session log."""

DEMO_COMPLETION_DELAY_MS = 480.0
"""Pause after the last demo note before the demo is marked complete."""

DEFAULT_SAMPLE_RATE = 44100
"""Sample rate used for offline rendering."""

DEFAULT_TICKS_PER_BEAT = 480
"""MIDI ticks per quarter note for exported files."""

DEFAULT_TEMPO = 500000
"""MIDI tempo (microseconds per quarter note) for exported files."""
