"""Command-line driver: analyse a file, then replay the detected beats.

Usage:
    beatstream song.flac                       # print every beat
    beatstream song.flac --realtime            # pace output in wall-clock time
    beatstream song.flac --bands 4 --factor 1.6
"""

import argparse
import logging
import sys
import time

from beatstream.analysis.analyzer import Analyzer, AnalyzerConfig
from beatstream.analysis.models import BeatEvent, ConfigurationError
from beatstream.analysis.observer import RecordingObserver
from beatstream.audio.loader import load_audio
from beatstream.config import settings

logger = logging.getLogger(__name__)

_RESET = "\x1b[m"


def band_color(idx: int) -> str:
    """ANSI colour for a band column: 7 hues, alternating dim and bold."""
    weight = 1 if (idx % 14) >= 7 else 2
    return f"\x1b[0;{weight};{(idx % 7) + 31}m"


def render_beat(event: BeatEvent, color: bool = True) -> str:
    line = "* " if event.main is not None else "  "
    for idx, flag in enumerate(event.band_flags):
        mark = "*" if flag else " "
        line += band_color(idx) + mark if color else mark
    if color:
        line += _RESET
    return line


def replay(
    observer: RecordingObserver,
    realtime: bool = False,
    color: bool = True,
    out=None,
    clock=time.monotonic,
    sleep=time.sleep,
) -> None:
    """Print recorded events in order, optionally paced against wall-clock time.

    When pacing, output that is already behind schedule is printed at once.
    """
    out = out or sys.stdout
    events: list[tuple[float, str]] = [
        (event.time, render_beat(event, color=color)) for event in observer.beats
    ]
    events.append((observer.duration, "done"))

    start = clock()
    for event_time, text in events:
        if realtime:
            wait = event_time - (clock() - start)
            if wait > 0:
                sleep(wait)
        print(f"{event_time:>8.3f}: {text}", file=out, flush=realtime)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Streaming energy beat detection")
    parser.add_argument("file", help="Audio file to analyse")
    parser.add_argument("--window", type=int, default=settings.window_size,
                        help="Samples per analysis window")
    parser.add_argument("--bands", type=int, default=settings.band_count,
                        help="Number of frequency bands")
    parser.add_argument("--factor", type=float, default=settings.energy_threshold_factor,
                        help="Energy multiple over the baseline that counts as a beat")
    parser.add_argument("--decay", type=float, default=settings.energy_decay,
                        help="Baseline decay per window without a beat")
    parser.add_argument("--realtime", action="store_true",
                        help="Replay events at the pace of the audio")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colours")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")
    for _name in ("numba", "PySoundFile", "audioread"):
        logging.getLogger(_name).setLevel(logging.ERROR)

    try:
        config = AnalyzerConfig(
            window_size=args.window,
            band_count=args.bands,
            energy_threshold_factor=args.factor,
            energy_decay=args.decay,
        )
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logger.debug(f"Using {config}")

    try:
        source = load_audio(args.file)
    except Exception as e:
        print(f"Could not decode {args.file}: {e}", file=sys.stderr)
        return 1

    print("Running analysis...")
    observer = RecordingObserver()
    Analyzer(config).run(source, observer)

    print(f"Sample rate is {observer.sample_rate}; "
          f"bands {observer.band_count}, window {observer.window_size}")
    print(f"Last event is at time {observer.duration:.3f} "
          f"(source reports {source.duration:.3f})")
    if args.realtime:
        print("Playing back...")
    replay(observer, realtime=args.realtime, color=not args.no_color)
    return 0


if __name__ == "__main__":
    sys.exit(main())
