"""Command-line interface for hidremote.

Provides the descriptor and report tooling (parse, decode, encode,
monitor) and the entry point for the HTTP remote-control server.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

_HEX_NOISE = re.compile(r"0[xX]|[\s,:;{}]")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="hidremote",
        description="HID report descriptor parser, report codec and remote control",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/hidremote.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse a report descriptor")
    parse_parser.add_argument(
        "descriptor",
        help="Descriptor as hex, or @path to a binary or hex text file",
    )
    parse_parser.add_argument("--items", action="store_true", help="Print the item table")
    parse_parser.add_argument("--dump", action="store_true", help="Print a hex dump")

    decode_parser = subparsers.add_parser("decode", help="Decode an inbound report")
    decode_parser.add_argument("report_id", type=int, help="Report ID")
    decode_parser.add_argument("data", help="Report payload as hex")
    decode_parser.add_argument(
        "--descriptor", default=None,
        help="Descriptor (hex or @path); defaults to the configured profile's",
    )

    encode_parser = subparsers.add_parser("encode", help="Print the reports for key presses")
    encode_parser.add_argument("keys", nargs="+", help="Key tokens pressed in order")
    encode_parser.add_argument(
        "--release", action="store_true",
        help="Release the keys again in reverse order",
    )
    encode_parser.add_argument("--profile", default=None, help="Device profile override")

    monitor_parser = subparsers.add_parser(
        "monitor", help="Decode a capture of inbound reports and optionally export it"
    )
    monitor_parser.add_argument(
        "capture",
        help="File with one '<report_id> <hex payload>' per line, or - for stdin",
    )
    monitor_parser.add_argument(
        "--format", choices=["full", "hex", "decoded"], default="full",
        help="Output line format (default: full)",
    )
    monitor_parser.add_argument(
        "--descriptor", default=None,
        help="Descriptor (hex or @path); defaults to the configured profile's",
    )
    monitor_parser.add_argument(
        "--export", type=Path, default=None, metavar="PATH",
        help="Write the decoded reports to PATH (.json for JSON, otherwise CSV)",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP remote-control server")
    serve_parser.add_argument(
        "--dry-run", action="store_true",
        help="Record reports in memory instead of writing to the HID device",
    )

    return parser.parse_args(argv)


def read_hex_argument(value: str) -> bytes:
    """Decode a hex argument or ``@file`` reference into bytes.

    Files holding hex text (C array or plain) are decoded; anything
    else is read as raw binary.

    Raises:
        ValueError: If an inline argument is not valid hex.
    """
    if value.startswith("@"):
        raw = Path(value[1:]).read_bytes()
        try:
            return bytes.fromhex(_HEX_NOISE.sub("", raw.decode("ascii")))
        except (UnicodeDecodeError, ValueError):
            return raw
    return bytes.fromhex(_HEX_NOISE.sub("", value))


def _fail(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def _cmd_parse(args: argparse.Namespace) -> None:
    from hidremote.hid.descriptor import parse_descriptor
    from hidremote.hid.render import format_summary, hex_dump, item_table, report_map, report_structure

    try:
        data = read_hex_argument(args.descriptor)
    except (OSError, ValueError) as e:
        _fail(f"cannot read descriptor: {e}")
        return

    result = parse_descriptor(data)
    print(f"Descriptor: {len(data)} bytes")
    if args.dump:
        print()
        print(hex_dump(data))
    if args.items:
        print()
        print(item_table(result.items))
    print()
    print(report_map(result))
    print()
    print(report_structure(result))
    print()
    print(format_summary(result))
    if result.truncated:
        sys.exit(1)


def _cmd_decode(args: argparse.Namespace, settings) -> None:
    from hidremote.hid.decoder import decode_report
    from hidremote.hid.descriptor import parse_descriptor
    from hidremote.hid.profiles import get_profile

    try:
        payload = read_hex_argument(args.data)
        if args.descriptor:
            descriptor = read_hex_argument(args.descriptor)
        else:
            descriptor = get_profile(settings.device.profile).descriptor
    except (OSError, ValueError) as e:
        _fail(str(e))
        return

    decoded = decode_report(args.report_id, payload, parse_descriptor(descriptor).table)
    print(decoded.text)
    if not decoded.valid:
        sys.exit(1)


def _cmd_encode(args: argparse.Namespace, settings) -> None:
    from hidremote.hid.encoder import ReportEncoder
    from hidremote.hid.profiles import get_profile

    try:
        profile = get_profile(args.profile or settings.device.profile)
    except ValueError as e:
        _fail(str(e))
        return

    encoder = ReportEncoder(profile)
    steps = [("press", key) for key in args.keys]
    if args.release:
        steps += [("release", key) for key in reversed(args.keys)]

    for action, key in steps:
        result = encoder.press(key) if action == "press" else encoder.release(key)
        if not result.ok:
            _fail(f"{action} {key!r}: {result.error.value if result.error else ''} {result.message}")
            return
        for report in result.reports:
            print(f"{action:<7} {key:<12} id={report.report_id} {report.payload.hex(' ')}")


def parse_capture_line(line: str) -> tuple[int, bytes] | None:
    """Split a ``<report_id> <hex payload>`` capture line.

    Returns None for blank lines and ``#`` comments.

    Raises:
        ValueError: If the report ID or payload is malformed.
    """
    line = line.split("#", 1)[0].strip()
    if not line:
        return None
    report_id, *rest = line.split(None, 1)
    payload = rest[0] if rest else ""
    rid = int(report_id, 0)
    if not 0 <= rid <= 0xFF:
        raise ValueError(f"report ID {rid} out of range")
    return rid, bytes.fromhex(_HEX_NOISE.sub("", payload))


def _cmd_monitor(args: argparse.Namespace, settings) -> None:
    from hidremote.hid.decoder import ReportDecoder
    from hidremote.hid.descriptor import parse_descriptor
    from hidremote.hid.profiles import get_profile
    from hidremote.monitor import MonitorError, OutputFormat, ReportMonitor, format_record

    try:
        if args.descriptor:
            descriptor = read_hex_argument(args.descriptor)
        else:
            descriptor = get_profile(settings.device.profile).descriptor
        if args.capture == "-":
            lines = sys.stdin.read().splitlines()
        else:
            lines = Path(args.capture).read_text(encoding="utf-8").splitlines()
    except (OSError, ValueError) as e:
        _fail(str(e))
        return

    monitor = ReportMonitor(
        decoder=ReportDecoder(parse_descriptor(descriptor)),
        buffer_size=max(settings.monitor.buffer_size, len(lines) or 1),
        output_format=OutputFormat(args.format),
    )
    monitor.start()
    for number, line in enumerate(lines, start=1):
        try:
            parsed = parse_capture_line(line)
        except ValueError as e:
            _fail(f"line {number}: {e}")
            return
        if parsed is None:
            continue
        record = monitor.on_report(*parsed)
        if record is not None:
            print(format_record(record, monitor.output_format))
    monitor.stop()

    if args.export is not None:
        try:
            count = monitor.export(args.export)
        except MonitorError as e:
            _fail(str(e))
            return
        print(f"Exported {count} reports to {args.export}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the hidremote CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from hidremote.config.settings import load_settings
    from hidremote.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "parse":
        _cmd_parse(args)

    elif args.command == "decode":
        _cmd_decode(args, settings)

    elif args.command == "encode":
        _cmd_encode(args, settings)

    elif args.command == "monitor":
        _cmd_monitor(args, settings)

    elif args.command == "serve":
        from hidremote.server import main as serve

        if args.dry_run:
            settings.transport.backend = "null"
        logger.info(
            "Starting remote server on %s:%d", settings.server.host, settings.server.port
        )
        serve(settings)


if __name__ == "__main__":
    main()
