#!/usr/bin/env python3
"""Command line entry point: parse a TAF and print its timeline."""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from taf_timeline.config import Config
from taf_timeline.parser import TafParser
from taf_timeline.reports import TimelineReport
from taf_timeline.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure logging from environment."""
    log_level = Config.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-20s | %(filename)-15s | %(funcName)-15s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _parse_instant(value: str) -> datetime:
    try:
        return ensure_utc(datetime.fromisoformat(value.replace('Z', '+00:00')))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 instant: {value}")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Parse a TAF bulletin into a contiguous forecast timeline'
    )
    parser.add_argument('taf', nargs='*',
                        help='Raw TAF text (read from --file or stdin when omitted)')
    parser.add_argument('--file', metavar='PATH',
                        help='Read the raw TAF from a file')
    parser.add_argument('--at', type=_parse_instant, metavar='ISO8601',
                        help='Reference instant in UTC (default: now)')
    parser.add_argument('--format', choices=Config.OUTPUT_FORMATS, default=None,
                        help=f'Output format (default: {Config.OUTPUT_FORMAT})')
    parser.add_argument('--version', action='version', version=Config.VERSION)
    return parser


def read_bulletin(args: argparse.Namespace) -> str:
    """Pick the TAF text from arguments, a file, or stdin."""
    if args.taf:
        return ' '.join(args.taf)
    if args.file:
        with open(Path(args.file), 'r', encoding='utf-8') as f:
            return f.read()
    return sys.stdin.read()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    configure_logging()
    args = build_arg_parser().parse_args(argv)

    try:
        Config.validate()
        raw = read_bulletin(args)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to start TAF timeline: {e}")
        return 2

    timeline = TafParser().parse(raw, now=args.at)
    logger.info(
        f"Parsed {timeline.station or 'unknown station'}: "
        f"{len(timeline.blocks)} block(s), current index {timeline.current_block_index}"
    )

    print(TimelineReport(timeline).render(args.format))
    return 0 if timeline.blocks else 1


if __name__ == '__main__':
    sys.exit(main())
