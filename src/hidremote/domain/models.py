"""Core domain models for the hidremote system.

These models represent the data flowing through the HID report codec:
descriptor items produced by the tokenizer, the parse context and report
table built by the descriptor state machine, the keyboard and consumer
state owned by the outbound encoder, and the decoded form of inbound
reports.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ItemType(enum.IntEnum):
    """The 2-bit item type field of a short descriptor item."""

    MAIN = 0
    GLOBAL = 1
    LOCAL = 2
    RESERVED = 3


class ReportKind(str, enum.Enum):
    """Direction of a report as declared by its Main item."""

    INPUT = "input"  # Device -> host
    OUTPUT = "output"  # Host -> device
    FEATURE = "feature"  # Bidirectional configuration data


class ReportClass(str, enum.Enum):
    """How an inbound report is interpreted by the decoder."""

    KEYBOARD = "keyboard"
    CONSUMER = "consumer"
    MOUSE = "mouse"
    UNKNOWN = "unknown"


class ConsumerLayout(str, enum.Enum):
    """Wire layout of a consumer-control report."""

    USAGE_ARRAY = "usage_array"  # One 16-bit usage code per slot
    BITMASK = "bitmask"  # One bit per declared media usage


class EncodeError(str, enum.Enum):
    """Why a press or release could not be encoded."""

    UNRESOLVED_KEY = "unresolved_key"
    SLOT_EXHAUSTED = "slot_exhausted"


# ---------------------------------------------------------------------------
# Descriptor Models
# ---------------------------------------------------------------------------


class DescriptorItem(BaseModel):
    """A single short item read from a report descriptor."""

    model_config = ConfigDict(frozen=True)

    tag: int = Field(ge=0, le=0x0F, description="4-bit item tag")
    item_type: ItemType = Field(description="Main, Global, Local or Reserved")
    size: int = Field(ge=0, le=4, description="Payload length in bytes (0, 1, 2 or 4)")
    value: int = Field(ge=0, le=0xFFFFFFFF, description="Little-endian unsigned payload")
    offset: int = Field(ge=0, description="Byte offset of the prefix within the descriptor")
    raw: bytes = Field(default=b"", description="Prefix byte followed by the payload")

    @property
    def prefix(self) -> int:
        return self.raw[0] if self.raw else (self.tag << 4) | (int(self.item_type) << 2)

    @property
    def length(self) -> int:
        """Total encoded length (prefix + payload)."""
        return 1 + self.size

    @property
    def signed_value(self) -> int:
        """The payload interpreted as a two's complement integer of its size."""
        if self.size == 0:
            return 0
        bits = self.size * 8
        if self.value & (1 << (bits - 1)):
            return self.value - (1 << bits)
        return self.value

    @field_serializer("raw", when_used="json")
    def _serialize_raw(self, raw: bytes) -> str:
        return raw.hex()


class ParseContext(BaseModel):
    """Live global + local state of the descriptor state machine."""

    usage_page: int = 0
    usage_minimum: int = 0
    usage_maximum: int = 0
    usages: list[int] = Field(default_factory=list)
    logical_minimum: int = 0
    logical_maximum: int = 0
    report_size: int = 0
    report_count: int = 0
    report_id: int = 0
    collection: str | None = Field(
        default=None, description="Name of the enclosing application collection"
    )

    @property
    def has_usage_range(self) -> bool:
        return self.usage_minimum != 0 or self.usage_maximum != 0

    def clear_locals(self) -> None:
        self.usages.clear()
        self.usage_minimum = 0
        self.usage_maximum = 0


class ReportEntry(BaseModel):
    """One row of the report table."""

    model_config = ConfigDict(frozen=True)

    report_id: int = Field(ge=0)
    kind: ReportKind
    bit_width: int = Field(ge=0, description="report_size x report_count of the Main item")
    description: str
    usage_page: int = 0
    collection: str | None = None

    @property
    def byte_length(self) -> int:
        return (self.bit_width + 7) // 8


class ParseResult(BaseModel):
    """Everything produced by parsing one report descriptor.

    ``table`` keeps one entry per report ID (the last Main item wins);
    ``layout`` accumulates the full bit width of every report per kind
    so that whole reports can be sized.
    """

    table: dict[int, ReportEntry] = Field(default_factory=dict)
    items: list[DescriptorItem] = Field(default_factory=list)
    layout: dict[ReportKind, dict[int, int]] = Field(default_factory=dict)
    collections: int = 0
    truncated: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def report_bits(self, report_id: int, kind: ReportKind = ReportKind.INPUT) -> int:
        return self.layout.get(kind, {}).get(report_id, 0)

    def report_length(self, report_id: int, kind: ReportKind = ReportKind.INPUT) -> int:
        """Whole-report size in bytes, excluding the report ID prefix."""
        return (self.report_bits(report_id, kind) + 7) // 8


# ---------------------------------------------------------------------------
# Outbound (encoder) Models
# ---------------------------------------------------------------------------


class KeyboardState(BaseModel):
    """Currently pressed modifiers and keys of the emulated keyboard.

    ``modifiers`` is the byte sent to the host: the modifier keys held
    explicitly plus the shift a held character needs implicitly.
    """

    modifiers: int = Field(default=0, ge=0, le=0xFF)
    keys: list[int] = Field(default_factory=lambda: [0] * 6, min_length=6, max_length=6)
    held_modifiers: int = Field(default=0, ge=0, le=0xFF, description="Modifier keys pressed")
    implicit_modifiers: dict[int, int] = Field(
        default_factory=dict, description="Keycode -> modifier bits added by that key"
    )

    @property
    def pressed(self) -> list[int]:
        return [k for k in self.keys if k]

    def update_modifiers(self) -> None:
        """Recompute ``modifiers`` from held and implicit bits."""
        bits = self.held_modifiers
        for implicit in self.implicit_modifiers.values():
            bits |= implicit
        self.modifiers = bits

    def to_bytes(self) -> bytes:
        """The 8-byte keyboard input report for this state."""
        return bytes([self.modifiers, 0x00, *self.keys])


class ConsumerState(BaseModel):
    """Currently pressed consumer-control usages (or bitmask)."""

    layout: ConsumerLayout = ConsumerLayout.USAGE_ARRAY
    slots: list[int] = Field(default_factory=lambda: [0, 0])

    @property
    def pressed(self) -> list[int]:
        return [s for s in self.slots if s]

    def to_bytes(self, length: int) -> bytes:
        """Little-endian 16-bit slots, zero padded or cut to ``length`` bytes."""
        data = b"".join(slot.to_bytes(2, "little") for slot in self.slots)
        return data[:length].ljust(length, b"\x00")


class OutboundReport(BaseModel):
    """A complete report ready to be handed to the transport."""

    model_config = ConfigDict(frozen=True)

    report_id: int = Field(ge=0, le=0xFF)
    payload: bytes

    @field_serializer("payload", when_used="json")
    def _serialize_payload(self, payload: bytes) -> str:
        return payload.hex()


class EncodeResult(BaseModel):
    """Outcome of a press/release/release-all call."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    error: EncodeError | None = None
    reports: list[OutboundReport] = Field(default_factory=list)
    message: str = ""


# ---------------------------------------------------------------------------
# Inbound (decoder / monitor) Models
# ---------------------------------------------------------------------------


class DecodedReport(BaseModel):
    """Human-readable interpretation of one inbound report."""

    model_config = ConfigDict(frozen=True)

    report_id: int
    kind: ReportClass = ReportClass.UNKNOWN
    label: str = Field(default="", description="Report table description, if known")
    summary: str
    payload: bytes = b""
    valid: bool = True
    note: str | None = None

    @property
    def text(self) -> str:
        label = self.label or f"Report {self.report_id}"
        text = f"{label} (ID:{self.report_id}): {self.summary}"
        if self.note:
            text += f" [{self.note}]"
        return text

    @field_serializer("payload", when_used="json")
    def _serialize_payload(self, payload: bytes) -> str:
        return payload.hex()


class ReportRecord(BaseModel):
    """An inbound report as captured by the report monitor."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    report_id: int
    payload: bytes
    decoded: DecodedReport | None = None

    @field_serializer("payload", when_used="json")
    def _serialize_payload(self, payload: bytes) -> str:
        return payload.hex()
