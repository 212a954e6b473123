"""Domain models for hidremote.

This package contains the core data structures and enumerations used
throughout the codec. All models use Pydantic v2 for validation and
serialization.
"""

from hidremote.domain.models import (
    ConsumerLayout,
    ConsumerState,
    DecodedReport,
    DescriptorItem,
    EncodeError,
    EncodeResult,
    ItemType,
    KeyboardState,
    OutboundReport,
    ParseContext,
    ParseResult,
    ReportClass,
    ReportEntry,
    ReportKind,
    ReportRecord,
)

__all__ = [
    "ConsumerLayout",
    "ConsumerState",
    "DecodedReport",
    "DescriptorItem",
    "EncodeError",
    "EncodeResult",
    "ItemType",
    "KeyboardState",
    "OutboundReport",
    "ParseContext",
    "ParseResult",
    "ReportClass",
    "ReportEntry",
    "ReportKind",
    "ReportRecord",
]
