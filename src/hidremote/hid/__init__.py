"""HID report codec: descriptor parsing, report decoding and encoding."""

from hidremote.hid.decoder import ReportDecoder, decode_report
from hidremote.hid.descriptor import DescriptorParser, parse_descriptor
from hidremote.hid.encoder import ReportEncoder
from hidremote.hid.profiles import (
    MEDIA_KEYBOARD_PROFILE,
    PROFILES,
    REMOTE_PROFILE,
    DeviceProfile,
    get_profile,
)
from hidremote.hid.tokenizer import TruncatedDescriptorError, iter_items, read_item

__all__ = [
    "DescriptorParser",
    "DeviceProfile",
    "MEDIA_KEYBOARD_PROFILE",
    "PROFILES",
    "REMOTE_PROFILE",
    "ReportDecoder",
    "ReportEncoder",
    "TruncatedDescriptorError",
    "decode_report",
    "get_profile",
    "iter_items",
    "parse_descriptor",
    "read_item",
]
