"""Tests for the report descriptor tokenizer."""

from __future__ import annotations

import pytest

from hidremote.domain.models import ItemType
from hidremote.hid.tokenizer import TruncatedDescriptorError, iter_items, read_item


class TestReadItem:
    def test_prefix_fields(self) -> None:
        item, next_offset = read_item(bytes([0x05, 0x0C]), 0)
        assert item.tag == 0
        assert item.item_type == ItemType.GLOBAL
        assert item.size == 1
        assert item.value == 0x0C
        assert next_offset == 2

    def test_zero_size_item(self) -> None:
        item, next_offset = read_item(bytes([0xC0]), 0)
        assert item.item_type == ItemType.MAIN
        assert item.tag == 0x0C
        assert item.size == 0
        assert item.value == 0
        assert next_offset == 1

    def test_two_byte_payload_is_little_endian(self) -> None:
        item, _ = read_item(bytes([0x26, 0xFF, 0x03]), 0)
        assert item.item_type == ItemType.GLOBAL
        assert item.tag == 0x02
        assert item.value == 0x03FF

    def test_size_code_three_reads_four_bytes(self) -> None:
        item, next_offset = read_item(bytes([0x27, 0x01, 0x02, 0x03, 0x04]), 0)
        assert item.size == 4
        assert item.value == 0x04030201
        assert next_offset == 5

    def test_reads_at_offset(self) -> None:
        data = bytes([0x05, 0x01, 0x09, 0x06])
        item, next_offset = read_item(data, 2)
        assert item.item_type == ItemType.LOCAL
        assert item.value == 0x06
        assert item.offset == 2
        assert next_offset == 4

    def test_raw_holds_prefix_and_payload(self) -> None:
        item, _ = read_item(bytes([0x0A, 0x23, 0x02]), 0)
        assert item.raw == bytes([0x0A, 0x23, 0x02])
        assert item.prefix == 0x0A
        assert item.length == 3

    def test_truncated_payload_raises(self) -> None:
        with pytest.raises(TruncatedDescriptorError) as exc_info:
            read_item(bytes([0x26, 0xFF]), 0)
        assert exc_info.value.offset == 0

    @pytest.mark.parametrize("offset", [2, 5])
    def test_offset_past_end_raises(self, offset: int) -> None:
        with pytest.raises(TruncatedDescriptorError) as exc_info:
            read_item(bytes([0x05, 0x01]), offset)
        assert exc_info.value.offset == offset

    def test_long_item_prefix_is_reserved_short_item(self) -> None:
        item, next_offset = read_item(bytes([0xFE, 0x00, 0x00, 0x00, 0x00]), 0)
        assert item.item_type == ItemType.RESERVED
        assert item.tag == 0x0F
        assert next_offset == 5


class TestSignedValue:
    def test_negative_one_byte(self) -> None:
        item, _ = read_item(bytes([0x15, 0x81]), 0)
        assert item.signed_value == -127

    def test_positive_one_byte(self) -> None:
        item, _ = read_item(bytes([0x25, 0x7F]), 0)
        assert item.signed_value == 127

    def test_negative_two_bytes(self) -> None:
        item, _ = read_item(bytes([0x16, 0x00, 0x80]), 0)
        assert item.signed_value == -32768

    def test_zero_size(self) -> None:
        item, _ = read_item(bytes([0xC0]), 0)
        assert item.signed_value == 0


class TestIterItems:
    def test_yields_all_items(self) -> None:
        items = list(iter_items(bytes([0x05, 0x01, 0x09, 0x06, 0xA1, 0x01, 0xC0])))
        assert [i.offset for i in items] == [0, 2, 4, 6]
        assert [i.item_type for i in items] == [
            ItemType.GLOBAL, ItemType.LOCAL, ItemType.MAIN, ItemType.MAIN,
        ]

    def test_empty_input(self) -> None:
        assert list(iter_items(b"")) == []

    def test_items_before_truncation_are_yielded(self) -> None:
        collected = []
        with pytest.raises(TruncatedDescriptorError):
            for item in iter_items(bytes([0x05, 0x01, 0x26, 0xFF])):
                collected.append(item)
        assert len(collected) == 1
        assert collected[0].value == 0x01
