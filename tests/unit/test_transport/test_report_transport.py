"""Tests for report transports (mocked /dev/hidg0)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from hidremote.domain.models import OutboundReport
from hidremote.transport import (
    HidGadgetTransport,
    NullTransport,
    TransportError,
    create_transport,
    frame_report,
)


@pytest.fixture
def report() -> OutboundReport:
    return OutboundReport(report_id=1, payload=bytes([0x02, 0, 0x04, 0, 0, 0, 0, 0]))


class TestFraming:
    def test_report_id_prefix(self, report: OutboundReport) -> None:
        assert frame_report(report) == bytes([0x01, 0x02, 0, 0x04, 0, 0, 0, 0, 0])


class TestHidGadgetOpen:
    @pytest.mark.asyncio
    async def test_open_sets_fd(self) -> None:
        t = HidGadgetTransport()
        with patch("os.open", return_value=42):
            await t.open()
        assert t._fd == 42
        assert t.is_open
        t._fd = None

    @pytest.mark.asyncio
    async def test_open_failure_raises(self) -> None:
        t = HidGadgetTransport(device_path="/dev/nonexistent")
        with patch("os.open", side_effect=OSError("No such device")):
            with pytest.raises(TransportError, match="Cannot open") as exc_info:
                await t.open()
        assert exc_info.value.backend == "gadget"
        assert not t.is_open


class TestHidGadgetSend:
    @pytest.mark.asyncio
    async def test_send_writes_framed_report(self, report: OutboundReport) -> None:
        t = HidGadgetTransport()
        t._fd = 42
        with patch("os.write") as mock_write:
            await t.send(report)
            mock_write.assert_called_once_with(42, frame_report(report))

    @pytest.mark.asyncio
    async def test_send_not_open(self, report: OutboundReport) -> None:
        t = HidGadgetTransport()
        with pytest.raises(TransportError, match="not open"):
            await t.send(report)

    @pytest.mark.asyncio
    async def test_send_os_error(self, report: OutboundReport) -> None:
        t = HidGadgetTransport()
        t._fd = 42
        with patch("os.write", side_effect=OSError("Broken pipe")):
            with pytest.raises(TransportError, match="Failed to write"):
                await t.send(report)

    @pytest.mark.asyncio
    async def test_send_all_in_order(self, report: OutboundReport) -> None:
        second = OutboundReport(report_id=2, payload=bytes(5))
        t = HidGadgetTransport()
        t._fd = 42
        with patch("os.write") as mock_write:
            await t.send_all([report, second])
        assert [c.args[1][0] for c in mock_write.call_args_list] == [1, 2]


class TestHidGadgetClose:
    @pytest.mark.asyncio
    async def test_close_releases_fd(self) -> None:
        t = HidGadgetTransport()
        t._fd = 42
        with patch("os.close") as mock_close:
            await t.close()
            mock_close.assert_called_once_with(42)
        assert not t.is_open

    @pytest.mark.asyncio
    async def test_close_when_not_open(self) -> None:
        t = HidGadgetTransport()
        with patch("os.close") as mock_close:
            await t.close()
            mock_close.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        with patch("os.open", return_value=7), patch("os.close") as mock_close:
            async with HidGadgetTransport() as t:
                assert t.is_open
            mock_close.assert_called_once_with(7)


class TestNullTransport:
    @pytest.mark.asyncio
    async def test_records_reports(self, null_transport: NullTransport, report: OutboundReport) -> None:
        await null_transport.open()
        await null_transport.send(report)
        assert null_transport.sent == [report]

    @pytest.mark.asyncio
    async def test_send_when_closed(self, null_transport: NullTransport, report: OutboundReport) -> None:
        with pytest.raises(TransportError):
            await null_transport.send(report)


class TestCreateTransport:
    def test_backends(self) -> None:
        assert isinstance(create_transport("gadget", "/dev/hidg1"), HidGadgetTransport)
        assert isinstance(create_transport("null"), NullTransport)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unknown transport backend"):
            create_transport("serial")
