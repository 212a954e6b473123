"""Inbound report decoder.

Turns the payload of a received report into a one-line human-readable
summary. The report table built from the sender's descriptor decides how
a payload is interpreted; the decoder never raises on malformed input.

Layouts understood:

- keyboard: ``[modifiers, reserved, key1 .. key6]``
- consumer: consecutive little-endian 16-bit usage codes
- mouse:    ``[buttons, x, y, (wheel)]`` with signed 8-bit deltas
"""

from __future__ import annotations

import logging

from hidremote.domain.models import DecodedReport, ParseResult, ReportClass, ReportEntry
from hidremote.hid.usages import consumer_code_name, keycode_name, modifier_labels

logger = logging.getLogger(__name__)

MIN_LENGTHS: dict[ReportClass, int] = {
    ReportClass.KEYBOARD: 3,
    ReportClass.CONSUMER: 2,
    ReportClass.MOUSE: 3,
}

_CLASS_MARKERS: tuple[tuple[str, ReportClass], ...] = (
    ("Keyboard", ReportClass.KEYBOARD),
    ("Consumer", ReportClass.CONSUMER),
    ("Mouse", ReportClass.MOUSE),
)


def classify(entry: ReportEntry) -> ReportClass:
    """Pick a decoder from the entry description, then its collection."""
    for text in (entry.description, entry.collection or ""):
        for marker, report_class in _CLASS_MARKERS:
            if marker in text:
                return report_class
    return ReportClass.UNKNOWN


def hex_summary(data: bytes) -> str:
    return data.hex(" ") if data else "(empty)"


def _to_signed(byte: int) -> int:
    return byte - 256 if byte & 0x80 else byte


def decode_keyboard(data: bytes) -> str:
    parts = []
    labels = modifier_labels(data[0])
    if labels:
        parts.append("Modifiers: " + " ".join(labels))
    keys = [keycode_name(k) for k in data[2:8] if k]
    if keys:
        parts.append("Keys: " + " ".join(keys))
    return " | ".join(parts) if parts else "No keys pressed"


def decode_consumer(data: bytes) -> str:
    names = []
    for i in range(0, len(data) - 1, 2):
        code = int.from_bytes(data[i:i + 2], "little")
        if code:
            names.append(consumer_code_name(code))
    return " ".join(names) if names else "No consumer keys"


def decode_mouse(data: bytes) -> str:
    parts = []
    buttons = data[0]
    pressed = [name for bit, name in ((0x01, "L"), (0x02, "R"), (0x04, "M")) if buttons & bit]
    if pressed:
        parts.append("Buttons: " + " ".join(pressed))
    dx, dy = _to_signed(data[1]), _to_signed(data[2])
    if dx or dy:
        parts.append(f"Delta: X={dx} Y={dy}")
    if len(data) > 3 and data[3]:
        parts.append(f"Wheel: {_to_signed(data[3])}")
    return " | ".join(parts) if parts else "No mouse activity"


_DECODERS = {
    ReportClass.KEYBOARD: decode_keyboard,
    ReportClass.CONSUMER: decode_consumer,
    ReportClass.MOUSE: decode_mouse,
}


def decode_report(
    report_id: int,
    payload: bytes,
    table: dict[int, ReportEntry] | None = None,
) -> DecodedReport:
    """Decode one inbound report against a report table.

    Without a table, or for a report ID missing from it, the payload is
    rendered as hex.
    """
    payload = bytes(payload)
    if table is None:
        return DecodedReport(
            report_id=report_id, summary=hex_summary(payload), payload=payload,
            note="no report table",
        )

    entry = table.get(report_id)
    if entry is None:
        logger.debug("Report ID %d not in report table", report_id)
        return DecodedReport(
            report_id=report_id, summary=hex_summary(payload), payload=payload,
            valid=False, note="unknown report ID",
        )

    report_class = classify(entry)
    decoder = _DECODERS.get(report_class)
    if decoder is None:
        return DecodedReport(
            report_id=report_id, kind=report_class, label=entry.description,
            summary=hex_summary(payload), payload=payload,
        )

    minimum = MIN_LENGTHS[report_class]
    if len(payload) < minimum:
        logger.debug(
            "Short %s report %d: %d bytes", report_class.value, report_id, len(payload)
        )
        return DecodedReport(
            report_id=report_id, kind=report_class, label=entry.description,
            summary=hex_summary(payload), payload=payload, valid=False,
            note=f"invalid {report_class.value} report size: "
                 f"{len(payload)} bytes, need {minimum}",
        )

    return DecodedReport(
        report_id=report_id, kind=report_class, label=entry.description,
        summary=decoder(payload), payload=payload,
    )


class ReportDecoder:
    """Decoder bound to the report table of one device."""

    def __init__(self, table: dict[int, ReportEntry] | ParseResult | None = None) -> None:
        self.table = table.table if isinstance(table, ParseResult) else table

    def decode(self, report_id: int, payload: bytes) -> DecodedReport:
        return decode_report(report_id, payload, self.table)
