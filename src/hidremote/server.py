"""HTTP remote-control API.

Accepts key commands over HTTP, runs them through the report encoder and
hands the resulting reports to the configured transport. Also exposes
the descriptor tooling (parse, decode) for inspection.

    GET  /health            -> {"status": "ok", ...}
    POST /api/press         <- {"key": "volumeup"}
    POST /api/release       <- {"key": "volumeup"}
    POST /api/key           <- {"key": "a", "delay_ms": 20}
    POST /api/releaseall
    GET  /api/state
    GET  /api/descriptor
    POST /api/decode        <- {"report_id": 1, "data": "0200040000000000"}
    POST /api/parse         <- {"descriptor": "05010906a101..."}
    GET  /api/monitor       -> recent decoded reports + statistics
    GET  /api/monitor/export?format=csv|json -> buffered reports as a download
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Response
from pydantic import BaseModel, Field

from hidremote import __version__
from hidremote.config.settings import Settings
from hidremote.domain.models import EncodeResult
from hidremote.hid.decoder import ReportDecoder
from hidremote.hid.descriptor import parse_descriptor
from hidremote.hid.encoder import ReportEncoder
from hidremote.hid.profiles import get_profile
from hidremote.hid.render import descriptor_summary
from hidremote.monitor import MonitorError, ReportMonitor
from hidremote.transport import ReportTransport, TransportError, create_transport

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class KeyRequest(BaseModel):
    key: str = Field(description="Key token (e.g., 'a', 'enter', 'volumeup', '0xB0')")


class TapRequest(BaseModel):
    key: str = Field(description="Key token to press and release")
    delay_ms: int | None = Field(
        default=None, ge=0, le=10_000, description="Hold time before release"
    )


class DecodeRequest(BaseModel):
    report_id: int = Field(ge=0, le=255)
    data: str = Field(description="Report payload as hex, spaces allowed")


class ParseRequest(BaseModel):
    descriptor: str = Field(description="Report descriptor as hex, spaces allowed")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = __version__
    profile: str = "remote"
    transport: str = "null"
    transport_open: bool = False


def _parse_hex(text: str, field: str) -> bytes:
    try:
        return bytes.fromhex(text.replace(" ", "").replace(":", ""))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"{field} is not valid hex") from e


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    encoder: ReportEncoder | None = None,
    transport: ReportTransport | None = None,
    monitor: ReportMonitor | None = None,
) -> FastAPI:
    """Create the remote-control API application.

    Args:
        settings: Loaded settings; defaults are used if None.
        encoder: Optional pre-configured encoder (for testing).
        transport: Optional pre-configured transport (for testing).
        monitor: Optional pre-configured report monitor (for testing).
    """
    settings = settings or Settings()
    profile = encoder.profile if encoder else get_profile(settings.device.profile)
    if encoder is None:
        encoder = ReportEncoder(profile)
    device_table = parse_descriptor(profile.descriptor)
    if monitor is None:
        monitor = ReportMonitor(
            decoder=ReportDecoder(device_table),
            buffer_size=settings.monitor.buffer_size,
            max_log_bytes=settings.monitor.max_log_bytes,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        t = app.state.transport
        if t is None:
            t = create_transport(settings.transport.backend, settings.transport.device_path)
            app.state.transport = t
        try:
            await t.open()
            logger.info("Remote server started (profile=%s, transport=%s)", profile.key, t.name)
        except TransportError:
            logger.warning(
                "Transport %s not available; key endpoints will return errors",
                settings.transport.device_path,
            )
        if settings.monitor.log_file:
            monitor.start_logging(settings.monitor.log_file)
        monitor.start()

        yield

        monitor.stop()
        monitor.stop_logging()
        if t.is_open:
            try:
                await t.send_all(encoder.release_all().reports)
            except TransportError as e:
                logger.warning("Could not release keys on shutdown: %s", e)
        await t.close()
        logger.info("Remote server stopped")

    app = FastAPI(
        title="hidremote",
        description="HID remote control and report codec REST API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.encoder = encoder
    app.state.transport = transport
    app.state.monitor = monitor
    app.state.lock = asyncio.Lock()

    async def _send(action: Callable[[ReportEncoder], EncodeResult]) -> dict[str, Any]:
        """Run an encoder action and deliver its reports.

        The encoder state is rolled back when the reports cannot be
        delivered, so it keeps matching what the host last received.
        """
        enc: ReportEncoder = app.state.encoder
        checkpoint = enc.checkpoint()
        result = action(enc)
        if not result.ok:
            raise HTTPException(
                status_code=400,
                detail={"error": result.error.value if result.error else None,
                        "message": result.message},
            )
        t: ReportTransport | None = app.state.transport
        try:
            if t is None:
                raise TransportError("Transport not configured")
            await t.send_all(result.reports)
        except TransportError as e:
            enc.rollback(checkpoint)
            raise HTTPException(status_code=503, detail=str(e)) from e
        return {
            "status": "ok",
            "message": result.message,
            "reports": [r.model_dump(mode="json") for r in result.reports],
        }

    @app.get("/health")
    async def health_check() -> HealthResponse:
        t: ReportTransport | None = app.state.transport
        return HealthResponse(
            profile=profile.key,
            transport=t.name if t else "none",
            transport_open=t.is_open if t else False,
        )

    # -------------------------------------------------------------------
    # Key endpoints
    # -------------------------------------------------------------------

    @app.post("/api/press")
    async def press(request: KeyRequest) -> dict[str, Any]:
        async with app.state.lock:
            return await _send(lambda enc: enc.press(request.key))

    @app.post("/api/release")
    async def release(request: KeyRequest) -> dict[str, Any]:
        async with app.state.lock:
            return await _send(lambda enc: enc.release(request.key))

    @app.post("/api/key")
    async def tap(request: TapRequest) -> dict[str, Any]:
        delay = (
            request.delay_ms / 1000 if request.delay_ms is not None
            else settings.transport.key_delay
        )
        async with app.state.lock:
            pressed = await _send(lambda enc: enc.press(request.key))
            await asyncio.sleep(delay)
            released = await _send(lambda enc: enc.release(request.key))
        return {
            "status": "ok",
            "message": f"tapped {request.key!r}",
            "reports": pressed["reports"] + released["reports"],
        }

    @app.post("/api/releaseall")
    async def release_all() -> dict[str, Any]:
        async with app.state.lock:
            return await _send(lambda enc: enc.release_all())

    @app.get("/api/state")
    async def state() -> dict[str, Any]:
        enc: ReportEncoder = app.state.encoder
        return {
            "profile": enc.profile.key,
            "keyboard": enc.keyboard_state.model_dump(mode="json"),
            "consumer": enc.consumer_state.model_dump(mode="json"),
        }

    # -------------------------------------------------------------------
    # Descriptor tooling
    # -------------------------------------------------------------------

    @app.get("/api/descriptor")
    async def descriptor() -> dict[str, Any]:
        return {
            "profile": profile.key,
            "name": settings.device.name or profile.name,
            "manufacturer": settings.device.manufacturer or profile.manufacturer,
            "vendor_id": profile.vendor_id,
            "product_id": profile.product_id,
            "version": profile.version,
            "descriptor": profile.descriptor.hex(),
            "reports": [e.model_dump(mode="json") for e in device_table.table.values()],
            "summary": descriptor_summary(device_table),
        }

    @app.post("/api/decode")
    async def decode(request: DecodeRequest) -> dict[str, Any]:
        data = _parse_hex(request.data, "data")
        mon: ReportMonitor = app.state.monitor
        try:
            record = mon.on_report(request.report_id, data)
        except MonitorError as e:
            logger.warning("Report not recorded: %s", e)
            record = None
        decoded = record.decoded if record else mon.decoder.decode(request.report_id, data)
        result = decoded.model_dump(mode="json")
        result["text"] = decoded.text
        return result

    @app.post("/api/parse")
    async def parse(request: ParseRequest) -> dict[str, Any]:
        result = parse_descriptor(_parse_hex(request.descriptor, "descriptor"))
        return {
            "ok": result.ok,
            "truncated": result.truncated,
            "error": result.error,
            "reports": [e.model_dump(mode="json") for e in result.table.values()],
            "layout": {
                kind.value: {str(rid): bits for rid, bits in by_id.items()}
                for kind, by_id in result.layout.items()
            },
            "summary": descriptor_summary(result),
        }

    @app.get("/api/monitor")
    async def monitor_status(count: int = 20) -> dict[str, Any]:
        mon: ReportMonitor = app.state.monitor
        stats = mon.statistics()
        return {
            "statistics": {**stats.model_dump(mode="json"), "rate": stats.rate},
            "reports": [
                {"timestamp": r.timestamp.isoformat(), "report_id": r.report_id,
                 "data": r.payload.hex(), "text": r.decoded.text if r.decoded else None}
                for r in mon.recent(count)
            ],
        }

    @app.get("/api/monitor/export")
    async def monitor_export(
        fmt: str = Query(default="csv", alias="format", pattern="^(csv|json)$"),
    ) -> Response:
        mon: ReportMonitor = app.state.monitor
        buffer = io.StringIO()
        if fmt == "json":
            count = mon.write_json(buffer)
            media_type = "application/json"
        else:
            count = mon.write_csv(buffer)
            media_type = "text/csv"
        logger.info("Exported %d reports as %s", count, fmt)
        return Response(
            content=buffer.getvalue(),
            media_type=media_type,
            headers={"Content-Disposition": f"attachment; filename=reports.{fmt}"},
        )

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the remote-control server."""
    settings = settings or Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
