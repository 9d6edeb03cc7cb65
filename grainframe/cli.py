import argparse
import json
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from grainframe.config import LengthPolicy, get_settings
from grainframe.logging import LoggingEventSink, create_logger, ring_buffer
from grainframe.parsing.frame import FormatVersion, FrameLengthError, decode_hex_frame


def _read_frame(args: argparse.Namespace) -> str:
    if args.frame:
        return " ".join(args.frame)
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode a grain condition frame given as space separated hex bytes.")
    parser.add_argument("frame", nargs="*", help="Frame bytes, e.g. 'AA 55 24 03 15 10 30 00 ...'. Reads stdin if omitted.")
    parser.add_argument("--file", type=str, default=None, help="Read the frame from a text file.")
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        choices=[version.name.lower() for version in FormatVersion],
        help="Frame format version.",
    )
    parser.add_argument("--sensors", type=int, default=None, help="Expected sensor count, used for length negotiation.")
    parser.add_argument("--max-payload", type=int, default=None, help="Maximum payload bytes to decode.")
    parser.add_argument("--strict-length", action="store_true", help="Reject frames shorter than the negotiated length.")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation.")
    parser.add_argument("--verbose", action="store_true", help="Print decode events to stderr.")
    return parser


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}" for error in exc.errors()
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = get_settings()
        config = settings.to_decode_config(
            format_version=args.format,
            expected_sensor_count=args.sensors,
            max_payload_bytes=args.max_payload,
            length_policy=LengthPolicy.STRICT if args.strict_length else None,
        )
    except ValidationError as exc:
        parser.error(f"invalid decoder options: {_describe(exc)}")

    logger = create_logger("grainframe.cli", settings.log_ring_size)
    sink = LoggingEventSink(logger)
    ring = ring_buffer(logger)
    if ring is not None:
        ring.clear()

    try:
        result = decode_hex_frame(_read_frame(args), config, sink)
    except FrameLengthError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.verbose and ring is not None:
        for event in ring.get_events(limit=settings.log_ring_size):
            print(f"{event['level']:<7} {event['event']}", file=sys.stderr)

    print(json.dumps(result.as_dict(), indent=args.indent or None, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
