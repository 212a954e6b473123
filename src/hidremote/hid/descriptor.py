"""Report descriptor state machine and report table builder.

Consumes the item stream produced by the tokenizer and tracks the global
and local parsing context. Every Input/Output/Feature item produces a
``ReportEntry`` keyed by the current report ID; Collection items push a
copy of the context onto a scope stack and End Collection restores it.

Usage::

    result = parse_descriptor(descriptor_bytes)
    for report_id, entry in result.table.items():
        print(report_id, entry.kind.value, entry.bit_width, entry.description)
"""

from __future__ import annotations

import logging

from hidremote.domain.models import (
    DescriptorItem,
    ItemType,
    ParseContext,
    ParseResult,
    ReportEntry,
    ReportKind,
)
from hidremote.hid.tokenizer import TruncatedDescriptorError, iter_items
from hidremote.hid.usages import COLLECTION_APPLICATION, usage_name

logger = logging.getLogger(__name__)

# Main item tags
TAG_INPUT = 0x08
TAG_OUTPUT = 0x09
TAG_COLLECTION = 0x0A
TAG_FEATURE = 0x0B
TAG_END_COLLECTION = 0x0C

# Global item tags
TAG_USAGE_PAGE = 0x00
TAG_LOGICAL_MINIMUM = 0x01
TAG_LOGICAL_MAXIMUM = 0x02
TAG_REPORT_SIZE = 0x07
TAG_REPORT_ID = 0x08
TAG_REPORT_COUNT = 0x09
TAG_PUSH = 0x0A
TAG_POP = 0x0B

# Local item tags
TAG_USAGE = 0x00
TAG_USAGE_MINIMUM = 0x01
TAG_USAGE_MAXIMUM = 0x02

REPORT_KINDS: dict[int, ReportKind] = {
    TAG_INPUT: ReportKind.INPUT,
    TAG_OUTPUT: ReportKind.OUTPUT,
    TAG_FEATURE: ReportKind.FEATURE,
}


class DescriptorParser:
    """Builds a report table from a descriptor's item stream.

    A parser instance is single-use per descriptor; call ``parse()`` to
    reset and run it. The scope stack holds deep copies of the context,
    so restoring a scope never aliases state from inside the collection.
    """

    def __init__(self) -> None:
        self._context = ParseContext()
        self._stack: list[ParseContext] = []
        self._result = ParseResult()

    def parse(self, data: bytes) -> ParseResult:
        """Parse ``data`` and return the table, items and layout.

        Never raises on malformed input: a truncated descriptor stops
        parsing and returns the partial table with ``truncated`` set.
        """
        self._context = ParseContext()
        self._stack = []
        self._result = ParseResult()

        if not data:
            logger.warning("Empty HID report descriptor")
            self._result.error = "empty descriptor"
            return self._result

        logger.debug("Parsing HID report descriptor (%d bytes)", len(data))
        try:
            for item in iter_items(bytes(data)):
                self._result.items.append(item)
                self._process(item)
        except TruncatedDescriptorError as e:
            logger.warning("Descriptor parsing stopped: %s", e)
            self._result.truncated = True
            self._result.error = str(e)

        logger.debug(
            "Parsed %d HID items, %d report IDs",
            len(self._result.items), len(self._result.table),
        )
        return self._result

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _process(self, item: DescriptorItem) -> None:
        if item.item_type == ItemType.MAIN:
            self._process_main(item)
        elif item.item_type == ItemType.GLOBAL:
            self._process_global(item)
        elif item.item_type == ItemType.LOCAL:
            self._process_local(item)

    def _process_main(self, item: DescriptorItem) -> None:
        ctx = self._context
        if item.tag in REPORT_KINDS:
            kind = REPORT_KINDS[item.tag]
            bit_width = ctx.report_size * ctx.report_count
            entry = ReportEntry(
                report_id=ctx.report_id,
                kind=kind,
                bit_width=bit_width,
                description=self._describe(ctx),
                usage_page=ctx.usage_page,
                collection=ctx.collection,
            )
            if ctx.report_id in self._result.table:
                logger.debug("Report ID %d entry replaced by %s item", ctx.report_id, kind.value)
            self._result.table[ctx.report_id] = entry
            by_id = self._result.layout.setdefault(kind, {})
            by_id[ctx.report_id] = by_id.get(ctx.report_id, 0) + bit_width
        elif item.tag == TAG_COLLECTION:
            self._result.collections += 1
            self._stack.append(ctx.model_copy(deep=True))
            if item.value == COLLECTION_APPLICATION or ctx.collection is None:
                if ctx.usages or ctx.has_usage_range:
                    ctx.collection = self._describe(ctx)
        elif item.tag == TAG_END_COLLECTION:
            if self._stack:
                self._context = self._stack.pop()
            else:
                logger.debug("End Collection at offset %d without open collection", item.offset)
        self._context.clear_locals()

    def _process_global(self, item: DescriptorItem) -> None:
        ctx = self._context
        if item.tag == TAG_USAGE_PAGE:
            ctx.usage_page = item.value
        elif item.tag == TAG_LOGICAL_MINIMUM:
            ctx.logical_minimum = item.signed_value
        elif item.tag == TAG_LOGICAL_MAXIMUM:
            ctx.logical_maximum = item.signed_value
        elif item.tag == TAG_REPORT_SIZE:
            ctx.report_size = item.value
        elif item.tag == TAG_REPORT_ID:
            ctx.report_id = item.value
        elif item.tag == TAG_REPORT_COUNT:
            ctx.report_count = item.value
        elif item.tag in (TAG_PUSH, TAG_POP):
            # Global state stack is not tracked
            logger.debug(
                "Ignoring %s at offset %d", "Push" if item.tag == TAG_PUSH else "Pop", item.offset
            )

    def _process_local(self, item: DescriptorItem) -> None:
        ctx = self._context
        if item.tag == TAG_USAGE:
            ctx.usages.append(item.value)
        elif item.tag == TAG_USAGE_MINIMUM:
            ctx.usage_minimum = item.value
        elif item.tag == TAG_USAGE_MAXIMUM:
            ctx.usage_maximum = item.value

    @staticmethod
    def _describe(ctx: ParseContext) -> str:
        if ctx.usages:
            return usage_name(ctx.usage_page, ctx.usages[0])
        if ctx.has_usage_range:
            return usage_name(ctx.usage_page, ctx.usage_minimum)
        return "Unknown"


def parse_descriptor(data: bytes) -> ParseResult:
    """Parse a report descriptor into a report table."""
    return DescriptorParser().parse(data)
