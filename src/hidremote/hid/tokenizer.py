"""Report descriptor tokenizer.

Splits a report descriptor into short items. Each item starts with one
prefix byte::

    bit  7..4   3..2   1..0
         tag    type   size

followed by 0, 1, 2 or 4 little-endian payload bytes (size code 3 means
four bytes).
"""

from __future__ import annotations

from collections.abc import Iterator

from hidremote.domain.models import DescriptorItem, ItemType

# Size code -> payload length in bytes
PAYLOAD_LENGTHS: tuple[int, int, int, int] = (0, 1, 2, 4)


class TruncatedDescriptorError(Exception):
    """Raised when an item's payload runs past the end of the descriptor."""

    def __init__(self, offset: int, needed: int, available: int) -> None:
        super().__init__(
            f"Truncated item at offset {offset}: "
            f"needs {needed} bytes, {available} available"
        )
        self.offset = offset


def read_item(data: bytes, offset: int) -> tuple[DescriptorItem, int]:
    """Read one item at ``offset``.

    Returns:
        The item and the offset of the next item.

    Raises:
        TruncatedDescriptorError: If ``offset`` is past the end or the
            payload exceeds the buffer.
    """
    if offset >= len(data):
        raise TruncatedDescriptorError(offset, 1, 0)
    prefix = data[offset]
    size = PAYLOAD_LENGTHS[prefix & 0x03]
    start = offset + 1
    end = start + size
    if end > len(data):
        raise TruncatedDescriptorError(offset, size, len(data) - start)
    item = DescriptorItem(
        tag=(prefix >> 4) & 0x0F,
        item_type=ItemType((prefix >> 2) & 0x03),
        size=size,
        value=int.from_bytes(data[start:end], "little"),
        offset=offset,
        raw=bytes(data[offset:end]),
    )
    return item, end


def iter_items(data: bytes) -> Iterator[DescriptorItem]:
    """Yield every item of ``data`` in order.

    Raises:
        TruncatedDescriptorError: When the last item is cut short. Items
            before it have already been yielded.
    """
    offset = 0
    while offset < len(data):
        item, offset = read_item(data, offset)
        yield item
