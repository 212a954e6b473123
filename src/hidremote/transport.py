"""Report transports.

A transport delivers complete outbound reports to the host. The codec
never touches I/O itself; it returns ``OutboundReport`` values and the
caller passes them to a transport.

``HidGadgetTransport`` writes to a Linux HID gadget device (``/dev/hidg0``).
With report IDs in the descriptor, every write is the report ID byte
followed by the payload::

    [report_id, payload...]

``NullTransport`` keeps reports in memory, for dry runs and tests.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import os
from pathlib import Path

from hidremote.domain.models import OutboundReport

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a transport cannot deliver a report."""

    def __init__(self, message: str, backend: str = "unknown") -> None:
        super().__init__(message)
        self.backend = backend


class ReportTransport(abc.ABC):
    """Abstract sink for outbound reports.

    Usage::

        async with HidGadgetTransport("/dev/hidg0") as transport:
            await transport.send(report)
    """

    name: str = "unknown"

    @property
    @abc.abstractmethod
    def is_open(self) -> bool:
        ...

    @abc.abstractmethod
    async def open(self) -> None:
        """Acquire the underlying device.

        Raises:
            TransportError: If the device cannot be opened.
        """

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the device. Safe to call when already closed."""

    @abc.abstractmethod
    async def send(self, report: OutboundReport) -> None:
        """Deliver one report.

        Raises:
            TransportError: If the transport is closed or the write fails.
        """

    async def send_all(self, reports: list[OutboundReport]) -> None:
        for report in reports:
            await self.send(report)

    async def __aenter__(self) -> ReportTransport:
        await self.open()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        await self.close()


def frame_report(report: OutboundReport) -> bytes:
    """Report ID byte followed by the payload."""
    return bytes([report.report_id]) + report.payload


class HidGadgetTransport(ReportTransport):
    """Writes reports to a Linux USB/BT HID gadget character device."""

    name = "gadget"

    def __init__(self, device_path: str = "/dev/hidg0") -> None:
        self._device_path = Path(device_path)
        self._fd: int | None = None

    @property
    def device_path(self) -> Path:
        return self._device_path

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    async def open(self) -> None:
        try:
            loop = asyncio.get_running_loop()
            self._fd = await loop.run_in_executor(
                None, lambda: os.open(str(self._device_path), os.O_WRONLY)
            )
            logger.info("Opened HID device: %s", self._device_path)
        except OSError as e:
            raise TransportError(
                f"Cannot open HID device {self._device_path}: {e}", backend=self.name
            ) from e

    async def close(self) -> None:
        if self._fd is None:
            return
        fd = self._fd
        self._fd = None
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, lambda: os.close(fd))
        except OSError as e:
            logger.warning("Error closing HID device %s: %s", self._device_path, e)
        logger.info("Closed HID device")

    async def send(self, report: OutboundReport) -> None:
        if self._fd is None:
            raise TransportError("HID device not open", backend=self.name)
        data = frame_report(report)
        try:
            loop = asyncio.get_running_loop()
            fd = self._fd
            await loop.run_in_executor(None, lambda: os.write(fd, data))
        except OSError as e:
            raise TransportError(f"Failed to write HID report: {e}", backend=self.name) from e
        logger.debug("Sent report %d: %s", report.report_id, report.payload.hex(" "))


class NullTransport(ReportTransport):
    """Records reports in memory instead of sending them."""

    name = "null"

    def __init__(self) -> None:
        self._open = False
        self.sent: list[OutboundReport] = []

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        self._open = True
        logger.info("Null transport opened (reports are not sent)")

    async def close(self) -> None:
        self._open = False

    async def send(self, report: OutboundReport) -> None:
        if not self._open:
            raise TransportError("Transport not open", backend=self.name)
        self.sent.append(report)
        logger.debug("Recorded report %d: %s", report.report_id, report.payload.hex(" "))


def create_transport(backend: str, device_path: str = "/dev/hidg0") -> ReportTransport:
    """Build a transport for a configured backend name.

    Raises:
        ValueError: If the backend is not known.
    """
    if backend == "gadget":
        return HidGadgetTransport(device_path)
    if backend == "null":
        return NullTransport()
    raise ValueError(f"Unknown transport backend: {backend!r}")
