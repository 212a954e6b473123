"""Text rendering of parsed descriptors for diagnostics.

All functions return strings; printing is left to the caller (the CLI
writes them to stdout, the HTTP API embeds the summary in JSON).
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from hidremote.domain.models import DescriptorItem, ItemType, ParseResult, ReportKind
from hidremote.hid.usages import (
    collection_type_name,
    main_flags_description,
    usage_name,
    usage_page_name,
)

_TYPE_LABELS: dict[ItemType, str] = {
    ItemType.MAIN: "Main",
    ItemType.GLOBAL: "Global",
    ItemType.LOCAL: "Local",
    ItemType.RESERVED: "Resrvd",
}

_GLOBAL_NAMES: dict[int, str] = {
    0x03: "Physical Minimum",
    0x04: "Physical Maximum",
    0x05: "Unit Exponent",
    0x06: "Unit",
}

_LOCAL_NAMES: dict[int, str] = {
    0x03: "Designator Index",
    0x04: "Designator Minimum",
    0x05: "Designator Maximum",
    0x07: "String Index",
    0x08: "String Minimum",
    0x09: "String Maximum",
}


def describe_item(item: DescriptorItem, usage_page: int = 0) -> str:
    """One-line description of an item; ``usage_page`` resolves Usage items."""
    tag, value = item.tag, item.value
    if item.item_type == ItemType.MAIN:
        if tag == 0x08:
            return f"Input({main_flags_description(value)})"
        if tag == 0x09:
            return f"Output({main_flags_description(value)})"
        if tag == 0x0A:
            return f"Collection({collection_type_name(value)})"
        if tag == 0x0B:
            return f"Feature({main_flags_description(value)})"
        if tag == 0x0C:
            return "End Collection"
        return f"Main Item {tag:x}"
    if item.item_type == ItemType.GLOBAL:
        if tag == 0x00:
            return f"Usage Page({usage_page_name(value)})"
        if tag == 0x01:
            return f"Logical Minimum({item.signed_value})"
        if tag == 0x02:
            return f"Logical Maximum({item.signed_value})"
        if tag == 0x07:
            return f"Report Size({value} bits)"
        if tag == 0x08:
            return f"Report ID({value})"
        if tag == 0x09:
            return f"Report Count({value})"
        if tag == 0x0A:
            return "Push"
        if tag == 0x0B:
            return "Pop"
        if tag in _GLOBAL_NAMES:
            return f"{_GLOBAL_NAMES[tag]}({item.signed_value})"
        return f"Global Item {tag:x}"
    if item.item_type == ItemType.LOCAL:
        if tag == 0x00:
            return f"Usage({usage_name(usage_page, value)})"
        if tag == 0x01:
            return f"Usage Minimum(0x{value:x})"
        if tag == 0x02:
            return f"Usage Maximum(0x{value:x})"
        if tag == 0x0A:
            return "Delimiter"
        if tag in _LOCAL_NAMES:
            return f"{_LOCAL_NAMES[tag]}({value})"
        return f"Local Item {tag:x}"
    return "Reserved Item"


def item_table(items: list[DescriptorItem]) -> str:
    """Tabular analysis: offset, hex bytes, type, tag, size, value, description."""
    lines = [
        "Offset | Hex Data       | Type   | Tag | Size | Value      | Description",
        "-------|----------------|--------|-----|------|------------|---------------------------",
    ]
    usage_page = 0
    for item in items:
        if item.item_type == ItemType.GLOBAL and item.tag == 0x00:
            usage_page = item.value
        value = f"0x{item.value:X}" if item.size else "-"
        lines.append(
            f"{item.offset:06X} | {item.raw.hex(' ').upper():<14} | "
            f"{_TYPE_LABELS[item.item_type]:<6} | {item.tag:3d} | {item.size:4d} | "
            f"{value:>10} | {describe_item(item, usage_page)}"
        )
    return "\n".join(lines)


def descriptor_summary(result: ParseResult) -> dict[str, Any]:
    """Counts of items, report kinds, collections, report IDs and usage pages."""
    by_type = Counter(item.item_type for item in result.items)
    main_tags = Counter(
        item.tag for item in result.items if item.item_type == ItemType.MAIN
    )
    report_ids = sorted({
        item.value for item in result.items
        if item.item_type == ItemType.GLOBAL and item.tag == 0x08
    })
    usage_pages = sorted({
        item.value for item in result.items
        if item.item_type == ItemType.GLOBAL and item.tag == 0x00
    })
    return {
        "total_items": len(result.items),
        "main_items": by_type[ItemType.MAIN],
        "global_items": by_type[ItemType.GLOBAL],
        "local_items": by_type[ItemType.LOCAL],
        "input_items": main_tags[0x08],
        "output_items": main_tags[0x09],
        "feature_items": main_tags[0x0B],
        "collections": result.collections,
        "report_ids": report_ids,
        "usage_pages": [usage_page_name(page) for page in usage_pages],
        "truncated": result.truncated,
    }


def format_summary(result: ParseResult) -> str:
    summary = descriptor_summary(result)
    lines = [
        f"Total Items: {summary['total_items']} (Main: {summary['main_items']}, "
        f"Global: {summary['global_items']}, Local: {summary['local_items']})",
        f"Reports: Input: {summary['input_items']}, Output: {summary['output_items']}, "
        f"Feature: {summary['feature_items']}",
        f"Collections: {summary['collections']}",
    ]
    if summary["report_ids"]:
        lines.append("Report IDs: " + " ".join(str(i) for i in summary["report_ids"]))
    if summary["usage_pages"]:
        lines.append("Usage Pages: " + ", ".join(summary["usage_pages"]))
    if result.truncated:
        lines.append(f"Truncated: {result.error}")
    return "\n".join(lines)


def report_map(result: ParseResult) -> str:
    """One line per report table entry."""
    if not result.table:
        return "No reports defined"
    lines = []
    for report_id in sorted(result.table):
        entry = result.table[report_id]
        line = (
            f"Report ID {report_id}: {entry.kind.value}, {entry.bit_width} bits, "
            f"{entry.description}"
        )
        if entry.collection:
            line += f" [{entry.collection}]"
        lines.append(line)
    return "\n".join(lines)


def report_structure(result: ParseResult) -> str:
    """Whole-report sizes per kind plus total input/output bandwidth."""
    lines = []
    totals: dict[ReportKind, int] = {}
    for kind in ReportKind:
        by_id = result.layout.get(kind, {})
        for report_id in sorted(by_id):
            length = result.report_length(report_id, kind)
            totals[kind] = totals.get(kind, 0) + length
            lines.append(
                f"{kind.value.capitalize()} report {report_id}: {by_id[report_id]} bits "
                f"({length} bytes)"
            )
    lines.append(f"Input bandwidth: {totals.get(ReportKind.INPUT, 0)} bytes per report set")
    lines.append(f"Output bandwidth: {totals.get(ReportKind.OUTPUT, 0)} bytes per report set")
    return "\n".join(lines)


def hex_dump(data: bytes, width: int = 16) -> str:
    """Classic offset / hex / ASCII dump."""
    lines = []
    for start in range(0, len(data), width):
        chunk = data[start:start + width]
        text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        lines.append(f"{start:04X}  {chunk.hex(' ').upper():<{width * 3 - 1}}  {text}")
    return "\n".join(lines)
