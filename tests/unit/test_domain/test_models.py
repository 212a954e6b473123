"""Tests for the shared domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hidremote.domain.models import (
    ConsumerLayout,
    ConsumerState,
    DecodedReport,
    KeyboardState,
    OutboundReport,
    ParseResult,
    ReportEntry,
    ReportKind,
)


class TestReportEntry:
    def test_byte_length_rounds_up(self) -> None:
        entry = ReportEntry(report_id=1, kind=ReportKind.INPUT, bit_width=13, description="X")
        assert entry.byte_length == 2


class TestParseResult:
    def test_report_length(self) -> None:
        result = ParseResult(layout={ReportKind.INPUT: {1: 64}, ReportKind.OUTPUT: {1: 5}})
        assert result.report_length(1) == 8
        assert result.report_length(1, ReportKind.OUTPUT) == 1
        assert result.report_length(2) == 0

    def test_ok(self) -> None:
        assert ParseResult().ok
        assert not ParseResult(error="empty descriptor").ok


class TestKeyboardState:
    def test_to_bytes(self) -> None:
        state = KeyboardState(modifiers=0x02, keys=[0x04, 0, 0, 0, 0, 0])
        assert state.to_bytes() == bytes([0x02, 0, 0x04, 0, 0, 0, 0, 0])
        assert state.pressed == [0x04]

    def test_six_slots_required(self) -> None:
        with pytest.raises(ValidationError):
            KeyboardState(keys=[0] * 7)


class TestConsumerState:
    def test_usage_array_padded(self) -> None:
        state = ConsumerState(slots=[0xE9, 0x224])
        assert state.to_bytes(5) == bytes([0xE9, 0x00, 0x24, 0x02, 0x00])

    def test_bitmask_cut(self) -> None:
        state = ConsumerState(layout=ConsumerLayout.BITMASK, slots=[0x8001])
        assert state.to_bytes(2) == bytes([0x01, 0x80])
        assert state.to_bytes(1) == bytes([0x01])


class TestSerialization:
    def test_payload_as_hex(self) -> None:
        report = OutboundReport(report_id=2, payload=bytes([0xE9, 0x00]))
        assert report.model_dump(mode="json") == {"report_id": 2, "payload": "e900"}

    def test_report_id_range(self) -> None:
        with pytest.raises(ValidationError):
            OutboundReport(report_id=256, payload=b"")

    def test_decoded_text_without_label(self) -> None:
        decoded = DecodedReport(report_id=4, summary="01 02")
        assert decoded.text == "Report 4 (ID:4): 01 02"
