"""Inbound report monitor.

Collects reports received from a device, decodes them against the
device's report table and keeps a bounded history with statistics.
Records can optionally be appended to a log file (rotated to ``.old``
once it grows past a size limit) and exported as CSV or JSON.
"""

from __future__ import annotations

import csv
import enum
import json
import logging
import time
from collections import Counter, deque
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, Field

from hidremote.domain.models import ReportRecord
from hidremote.hid.decoder import ReportDecoder

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1000
DEFAULT_MAX_LOG_BYTES = 1_000_000


class MonitorError(Exception):
    """Raised when the monitor cannot write its log or an export file."""


class OutputFormat(str, enum.Enum):
    FULL = "full"  # [HH:MM:SS.mmm] decoded [hex]
    HEX = "hex"
    DECODED = "decoded"


class MonitorStatistics(BaseModel):
    """Counters since the last statistics reset."""

    total: int = 0
    by_kind: dict[str, int] = Field(default_factory=dict)
    duration: float = Field(default=0.0, description="Seconds spent monitoring")
    buffered: int = 0
    buffer_size: int = DEFAULT_BUFFER_SIZE

    @property
    def rate(self) -> float:
        """Reports per second."""
        return self.total / self.duration if self.duration > 0 else 0.0


def format_timestamp(record: ReportRecord) -> str:
    ts = record.timestamp
    return f"[{ts:%H:%M:%S}.{ts.microsecond // 1000:03d}]"


def format_record(record: ReportRecord, output_format: OutputFormat = OutputFormat.FULL) -> str:
    """Render a record as one line of text."""
    hex_data = record.payload.hex(" ")
    decoded = record.decoded.text if record.decoded else f"Report {record.report_id}"
    if output_format == OutputFormat.HEX:
        return f"{format_timestamp(record)} ID:{record.report_id} {hex_data}"
    if output_format == OutputFormat.DECODED:
        return decoded
    return f"{format_timestamp(record)} {decoded} [{hex_data}]"


class ReportMonitor:
    """Bounded history of inbound reports.

    Reports passed to ``on_report`` while the monitor is stopped are
    ignored.
    """

    def __init__(
        self,
        decoder: ReportDecoder | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        output_format: OutputFormat = OutputFormat.FULL,
        max_log_bytes: int = DEFAULT_MAX_LOG_BYTES,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.decoder = decoder or ReportDecoder()
        self.output_format = output_format
        self.max_log_bytes = max_log_bytes
        self._buffer: deque[ReportRecord] = deque(maxlen=buffer_size)
        self._monitoring = False
        self._started: float | None = None
        self._elapsed = 0.0
        self._total = 0
        self._by_kind: Counter[str] = Counter()
        self._log_path: Path | None = None
        self._callback: Callable[[ReportRecord], None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    def start(self) -> None:
        if self._monitoring:
            return
        self._monitoring = True
        self._started = time.monotonic()
        logger.info("Report monitoring started")

    def stop(self) -> None:
        if not self._monitoring:
            return
        self._elapsed += time.monotonic() - (self._started or time.monotonic())
        self._started = None
        self._monitoring = False
        logger.info("Report monitoring stopped (%d reports)", self._total)

    def set_callback(self, callback: Callable[[ReportRecord], None] | None) -> None:
        """Call ``callback`` with every accepted record."""
        self._callback = callback

    # ------------------------------------------------------------------
    # Buffer
    # ------------------------------------------------------------------

    @property
    def buffer_size(self) -> int:
        return self._buffer.maxlen or 0

    def set_buffer_size(self, size: int) -> None:
        """Resize the history, keeping the newest records."""
        if size <= 0:
            raise ValueError("buffer_size must be positive")
        self._buffer = deque(self._buffer, maxlen=size)

    @property
    def records(self) -> list[ReportRecord]:
        return list(self._buffer)

    def recent(self, count: int = 10) -> list[ReportRecord]:
        if count <= 0:
            return []
        return list(self._buffer)[-count:]

    def clear(self) -> None:
        self._buffer.clear()

    def on_report(self, report_id: int, payload: bytes) -> ReportRecord | None:
        """Record and decode one received report.

        Returns:
            The stored record, or None if monitoring is stopped.

        Raises:
            MonitorError: If the report log cannot be written. The report
                is then not recorded.
        """
        if not self._monitoring:
            return None
        payload = bytes(payload)
        decoded = self.decoder.decode(report_id, payload)
        record = ReportRecord(report_id=report_id, payload=payload, decoded=decoded)
        if self._log_path is not None:
            self._write_log(self._log_path, format_record(record, OutputFormat.FULL))
        self._buffer.append(record)
        self._total += 1
        self._by_kind[decoded.kind.value] += 1
        logger.debug("%s", format_record(record, self.output_format))
        if self._callback is not None:
            self._callback(record)
        return record

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self) -> MonitorStatistics:
        duration = self._elapsed
        if self._monitoring and self._started is not None:
            duration += time.monotonic() - self._started
        return MonitorStatistics(
            total=self._total,
            by_kind=dict(self._by_kind),
            duration=duration,
            buffered=len(self._buffer),
            buffer_size=self.buffer_size,
        )

    def reset_statistics(self) -> None:
        self._total = 0
        self._by_kind.clear()
        self._elapsed = 0.0
        if self._monitoring:
            self._started = time.monotonic()

    # ------------------------------------------------------------------
    # Log file
    # ------------------------------------------------------------------

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    def start_logging(self, path: Path | str) -> None:
        """Append every accepted record to ``path``.

        Raises:
            MonitorError: If the file cannot be opened for appending.
        """
        log_path = Path(path)
        try:
            with open(log_path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            raise MonitorError(f"Cannot open report log {log_path}: {e}") from e
        self._log_path = log_path
        logger.info("Logging reports to %s", log_path)

    def stop_logging(self) -> None:
        if self._log_path is not None:
            logger.info("Stopped logging reports to %s", self._log_path)
        self._log_path = None

    def _write_log(self, log_path: Path, line: str) -> None:
        try:
            if log_path.exists() and log_path.stat().st_size >= self.max_log_bytes:
                backup = log_path.with_name(log_path.name + ".old")
                log_path.replace(backup)
                logger.info("Rotated report log to %s", backup)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise MonitorError(f"Failed to write report log {log_path}: {e}") from e

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def write_csv(self, stream: TextIO) -> int:
        """Write the buffered records to ``stream`` as CSV. Returns the row count."""
        records = self.records
        writer = csv.writer(stream)
        writer.writerow(["timestamp", "report_id", "length", "hex", "decoded"])
        for record in records:
            writer.writerow([
                record.timestamp.isoformat(),
                record.report_id,
                len(record.payload),
                record.payload.hex(" "),
                record.decoded.text if record.decoded else "",
            ])
        return len(records)

    def write_json(self, stream: TextIO) -> int:
        """Write the buffered records and statistics to ``stream`` as JSON."""
        records = self.records
        document = {
            "statistics": self.statistics().model_dump(mode="json"),
            "reports": [
                {
                    "timestamp": record.timestamp.isoformat(),
                    "report_id": record.report_id,
                    "data": record.payload.hex(),
                    "decoded": record.decoded.text if record.decoded else None,
                    "kind": record.decoded.kind.value if record.decoded else None,
                }
                for record in records
            ],
        }
        json.dump(document, stream, indent=2)
        return len(records)

    def export_csv(self, path: Path | str) -> int:
        """Write the buffered records to a CSV file. Returns the row count."""
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                count = self.write_csv(f)
        except OSError as e:
            raise MonitorError(f"Failed to export CSV to {path}: {e}") from e
        logger.info("Exported %d reports to %s", count, path)
        return count

    def export_json(self, path: Path | str) -> int:
        """Write the buffered records and statistics to a JSON file."""
        try:
            with open(path, "w", encoding="utf-8") as f:
                count = self.write_json(f)
        except OSError as e:
            raise MonitorError(f"Failed to export JSON to {path}: {e}") from e
        logger.info("Exported %d reports to %s", count, path)
        return count

    def export(self, path: Path | str) -> int:
        """Export by file suffix: ``.json`` writes JSON, anything else CSV."""
        if Path(path).suffix.lower() == ".json":
            return self.export_json(path)
        return self.export_csv(path)
