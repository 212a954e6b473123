"""Built-in device profiles.

A profile bundles what the emulated device announces to the host: its
report descriptor, identity, the report IDs used for keyboard and
consumer-control reports, and the media key names it understands.

Two profiles ship with the package:

- ``remote``: TV remote. Keyboard report 1 (with LED output) and a
  consumer usage array report 2 carrying two 16-bit usage codes.
- ``media_keyboard``: keyboard report 1 and a consumer bitmask report 2
  with one bit per declared media key.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from hidremote.domain.models import ConsumerLayout

# ---------------------------------------------------------------------------
# Report descriptors
# ---------------------------------------------------------------------------

KEYBOARD_REPORT_ID: int = 0x01
CONSUMER_REPORT_ID: int = 0x02

KEYBOARD_DESCRIPTOR: bytes = bytes([
    0x05, 0x01,        # Usage Page (Generic Desktop)
    0x09, 0x06,        # Usage (Keyboard)
    0xA1, 0x01,        # Collection (Application)
    0x85, KEYBOARD_REPORT_ID,  # Report ID (1)
    0x05, 0x07,        #   Usage Page (Keyboard/Keypad)
    0x19, 0xE0,        #   Usage Minimum (Left Control)
    0x29, 0xE7,        #   Usage Maximum (Right GUI)
    0x15, 0x00,        #   Logical Minimum (0)
    0x25, 0x01,        #   Logical Maximum (1)
    0x75, 0x01,        #   Report Size (1)
    0x95, 0x08,        #   Report Count (8)
    0x81, 0x02,        #   Input (Data,Var,Abs) modifier byte
    0x95, 0x01,        #   Report Count (1)
    0x75, 0x08,        #   Report Size (8)
    0x81, 0x01,        #   Input (Const) reserved byte
    0x95, 0x05,        #   Report Count (5)
    0x75, 0x01,        #   Report Size (1)
    0x05, 0x08,        #   Usage Page (LEDs)
    0x19, 0x01,        #   Usage Minimum (Num Lock)
    0x29, 0x05,        #   Usage Maximum (Kana)
    0x91, 0x02,        #   Output (Data,Var,Abs) LED report
    0x95, 0x01,        #   Report Count (1)
    0x75, 0x03,        #   Report Size (3)
    0x91, 0x01,        #   Output (Const) LED padding
    0x95, 0x06,        #   Report Count (6)
    0x75, 0x08,        #   Report Size (8)
    0x15, 0x00,        #   Logical Minimum (0)
    0x25, 0x65,        #   Logical Maximum (101)
    0x05, 0x07,        #   Usage Page (Keyboard/Keypad)
    0x19, 0x00,        #   Usage Minimum (0)
    0x29, 0x65,        #   Usage Maximum (101)
    0x81, 0x00,        #   Input (Data,Array,Abs) key slots
    0xC0,              # End Collection
])

CONSUMER_ARRAY_DESCRIPTOR: bytes = bytes([
    0x05, 0x0C,        # Usage Page (Consumer)
    0x09, 0x01,        # Usage (Consumer Control)
    0xA1, 0x01,        # Collection (Application)
    0x85, CONSUMER_REPORT_ID,  # Report ID (2)
    0x15, 0x00,        #   Logical Minimum (0)
    0x26, 0xFF, 0x03,  #   Logical Maximum (1023)
    0x19, 0x00,        #   Usage Minimum (0)
    0x2A, 0xFF, 0x03,  #   Usage Maximum (1023)
    0x75, 0x10,        #   Report Size (16)
    0x95, 0x02,        #   Report Count (2)
    0x81, 0x00,        #   Input (Data,Array,Abs) two usage slots
    0x75, 0x08,        #   Report Size (8)
    0x95, 0x01,        #   Report Count (1)
    0x81, 0x01,        #   Input (Const) padding
    0xC0,              # End Collection
])

CONSUMER_BITMASK_DESCRIPTOR: bytes = bytes([
    0x05, 0x0C,        # Usage Page (Consumer)
    0x09, 0x01,        # Usage (Consumer Control)
    0xA1, 0x01,        # Collection (Application)
    0x85, CONSUMER_REPORT_ID,  # Report ID (2)
    0x15, 0x00,        #   Logical Minimum (0)
    0x25, 0x01,        #   Logical Maximum (1)
    0x75, 0x01,        #   Report Size (1)
    0x95, 0x10,        #   Report Count (16)
    0x09, 0xB5,        #   Usage (Scan Next Track)
    0x09, 0xB6,        #   Usage (Scan Previous Track)
    0x09, 0xB7,        #   Usage (Stop)
    0x09, 0xCD,        #   Usage (Play/Pause)
    0x09, 0xE2,        #   Usage (Mute)
    0x09, 0xE9,        #   Usage (Volume Up)
    0x09, 0xEA,        #   Usage (Volume Down)
    0x0A, 0x23, 0x02,  #   Usage (AC Home)
    0x0A, 0x94, 0x01,  #   Usage (AL Local Machine Browser)
    0x0A, 0x92, 0x01,  #   Usage (AL Calculator)
    0x0A, 0x2A, 0x02,  #   Usage (AC Bookmarks)
    0x0A, 0x21, 0x02,  #   Usage (AC Search)
    0x0A, 0x26, 0x02,  #   Usage (AC Stop)
    0x0A, 0x24, 0x02,  #   Usage (AC Back)
    0x0A, 0x83, 0x01,  #   Usage (AL Consumer Control Configuration)
    0x0A, 0x8A, 0x01,  #   Usage (AL Email Reader)
    0x81, 0x02,        #   Input (Data,Var,Abs)
    0xC0,              # End Collection
])

# ---------------------------------------------------------------------------
# Media key tables
# ---------------------------------------------------------------------------

# Media name -> consumer usage code (usage array layout)
REMOTE_MEDIA_KEYS: dict[str, int] = {
    "power": 0x30,
    "menu": 0x40,
    "ok": 0x41,
    "mkup": 0x42,
    "mkdown": 0x43,
    "mkleft": 0x44,
    "mkright": 0x45,
    "tv": 0x89,
    "program": 0x8D, "prog": 0x8D,
    "channelup": 0x9C, "chup": 0x9C,
    "channeldown": 0x9D, "chdown": 0x9D,
    "play": 0xB0,
    "pause": 0xB1,
    "record": 0xB2,
    "fastforward": 0xB3, "ff": 0xB3,
    "rewind": 0xB4,
    "next": 0xB5,
    "previous": 0xB6, "prev": 0xB6,
    "stop": 0xB7,
    "playpause": 0xCD,
    "mute": 0xE2,
    "volumeup": 0xE9, "volup": 0xE9,
    "volumedown": 0xEA, "voldown": 0xEA,
    "search": 0x221,
    "home": 0x223,
    "back": 0x224,
}

# Bit order follows the usages declared in CONSUMER_BITMASK_DESCRIPTOR
MEDIA_BITMASK_ORDER: tuple[str, ...] = (
    "next", "previous", "stop", "playpause",
    "mute", "volumeup", "volumedown", "home",
    "computer", "calculator", "bookmarks", "search",
    "browserstop", "back", "mediaselect", "mail",
)

# Media name -> bit within the 16-bit consumer mask
MEDIA_KEYBOARD_KEYS: dict[str, int] = {
    name: 1 << bit for bit, name in enumerate(MEDIA_BITMASK_ORDER)
}


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class DeviceProfile(BaseModel):
    """Descriptor, identity and key tables of an emulated device."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Short profile identifier")
    name: str
    manufacturer: str = "hidremote"
    vendor_id: int = Field(default=0x05AC, ge=0, le=0xFFFF)
    product_id: int = Field(default=0x820A, ge=0, le=0xFFFF)
    version: int = Field(default=0x0210, ge=0, le=0xFFFF)
    descriptor: bytes
    keyboard_report_id: int = KEYBOARD_REPORT_ID
    consumer_report_id: int = CONSUMER_REPORT_ID
    consumer_layout: ConsumerLayout = ConsumerLayout.USAGE_ARRAY
    media_keys: dict[str, int] = Field(default_factory=dict)

    @property
    def consumer_slots(self) -> int:
        """Number of 16-bit slots in the consumer state."""
        return 1 if self.consumer_layout == ConsumerLayout.BITMASK else 2

    @field_serializer("descriptor", when_used="json")
    def _serialize_descriptor(self, descriptor: bytes) -> str:
        return descriptor.hex()


REMOTE_PROFILE = DeviceProfile(
    key="remote",
    name="BLE Remote Control",
    descriptor=KEYBOARD_DESCRIPTOR + CONSUMER_ARRAY_DESCRIPTOR,
    consumer_layout=ConsumerLayout.USAGE_ARRAY,
    media_keys=REMOTE_MEDIA_KEYS,
)

MEDIA_KEYBOARD_PROFILE = DeviceProfile(
    key="media_keyboard",
    name="BLE Media Keyboard",
    descriptor=KEYBOARD_DESCRIPTOR + CONSUMER_BITMASK_DESCRIPTOR,
    consumer_layout=ConsumerLayout.BITMASK,
    media_keys=MEDIA_KEYBOARD_KEYS,
)

PROFILES: dict[str, DeviceProfile] = {
    REMOTE_PROFILE.key: REMOTE_PROFILE,
    MEDIA_KEYBOARD_PROFILE.key: MEDIA_KEYBOARD_PROFILE,
}


def get_profile(key: str) -> DeviceProfile:
    """Look up a built-in profile by key.

    Raises:
        ValueError: If no profile has that key.
    """
    try:
        return PROFILES[key]
    except KeyError:
        raise ValueError(
            f"Unknown device profile: {key!r} (available: {', '.join(PROFILES)})"
        ) from None
