"""Command-line entry point.

Both commands drive a session against a RecordingDevice on a manual clock,
so they run as fast as the machine allows. The recorded tones can then be
written as audio or MIDI, played on a MIDI port, or plotted in the terminal.
"""

import json
import logging
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any, Dict, List, Tuple

from strumpluck import constants
from strumpluck.config import Config, init_config
from strumpluck.dispatcher import SynthDispatcher
from strumpluck.gesture import MotionSample, Point, classify_motion
from strumpluck.midi import play_midi, render_midi
from strumpluck.recorder import RecordingDevice
from strumpluck.render import plot_samples, render_tones, write_wav
from strumpluck.session import GuitarSession
from strumpluck.timer import ManualClock, TimerQueue


def _number(obj: Dict[str, Any], key: str) -> float:
    value = obj[key]
    try:
        return float(value)
    except TypeError:
        raise ValueError(f"Field {key} is not a number: {value!r}")


def parse_motion(obj: Any) -> Tuple[float, MotionSample]:
    """Read one replay entry as (at_ms, sample).

    Raises:
        KeyError: If a required field is missing.
        ValueError: If the entry is not an object or a field is not a number.
    """
    if not isinstance(obj, dict):
        raise ValueError(f"Motion entry is not an object: {obj!r}")
    relative_end = None
    if obj.get("rel_x") is not None and obj.get("rel_y") is not None:
        relative_end = Point(_number(obj, "rel_x"), _number(obj, "rel_y"))
    sample = MotionSample(
        duration_ms=_number(obj, "duration_ms"),
        dx=_number(obj, "dx"),
        dy=_number(obj, "dy"),
        vx=_number(obj, "vx"),
        vy=_number(obj, "vy"),
        end=Point(_number(obj, "x"), _number(obj, "y")),
        relative_end=relative_end,
    )
    return _number(obj, "at_ms"), sample


def load_motions(path: Path) -> List[Tuple[float, MotionSample]]:
    """Load a replay file: a JSON list of motion entries, sorted by time."""
    with open(path) as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of motions in {path}")
    return sorted((parse_motion(obj) for obj in raw), key=lambda pair: pair[0])


class Rig:
    """A session wired to a recording device and timers on one manual clock."""

    def __init__(self, config: Config) -> None:
        self.clock = ManualClock()
        self.timers = TimerQueue(self.clock)
        self.device = RecordingDevice(self.clock)
        self.session = GuitarSession(
            config.session, SynthDispatcher(self.device), self.timers
        )

    def report(self) -> None:
        status = self.session.status
        print(f"{self.clock.now():7.3f}s  {self.session.headline} | {status.message}")


def run_demo(rig: Rig) -> None:
    rig.session.play_demo()
    rig.report()
    due = rig.timers.next_due()
    while due is not None:
        rig.timers.run_until(due)
        rig.report()
        due = rig.timers.next_due()


def run_replay(rig: Rig, path: Path) -> None:
    motions = load_motions(path)
    logging.info(f"replaying {len(motions)} motions from {path}")
    for at_ms, sample in motions:
        rig.timers.run_until(at_ms / 1000.0)
        rig.session.handle_gesture(classify_motion(sample))
        rig.report()
    rig.timers.run_until_idle()


def emit(rig: Rig, config: Config, args: Namespace) -> None:
    """Write, play or plot what the rig recorded, as requested."""
    tones = rig.device.tones
    logging.info(f"recorded {len(tones)} tones")
    if args.wav is not None or args.plot:
        samples = render_tones(tones, config.render)
        if args.wav is not None:
            write_wav(args.wav, samples, config.render.sample_rate)
        if args.plot:
            plot_samples(samples, config.render.sample_rate)
    if args.midi is not None or args.port is not None:
        mid = render_midi(tones)
        if args.midi is not None:
            mid.save(args.midi)
            logging.info(f"wrote MIDI to {args.midi}")
        if args.port is not None:
            play_midi(mid, args.port)


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser."""
    parser = ArgumentParser(prog="strumpluck")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-limit", type=int, default=constants.DEFAULT_LOG_LIMIT)
    parser.add_argument("--sample-rate", type=int, default=constants.DEFAULT_SAMPLE_RATE)

    outputs = ArgumentParser(add_help=False)
    outputs.add_argument("--wav", type=Path, help="write rendered audio here")
    outputs.add_argument("--midi", type=Path, help="write a MIDI file here")
    outputs.add_argument("--port", help="play the MIDI on this output port")
    outputs.add_argument("--plot", action="store_true", help="plot the waveform")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("demo", parents=[outputs], help="perform the classical demo")
    replay = commands.add_parser("replay", parents=[outputs], help="replay recorded motions")
    replay.add_argument("file", type=Path)
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def main() -> None:
    parser = make_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    config = init_config(log_limit=args.log_limit, sample_rate=args.sample_rate)
    rig = Rig(config)
    try:
        if args.command == "demo":
            run_demo(rig)
        else:
            run_replay(rig, args.file)
        emit(rig, config, args)
    except (OSError, KeyError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        raise SystemExit(1)
    finally:
        rig.session.close()
        rig.timers.close()
    logging.info("done")


if __name__ == "__main__":
    main()
