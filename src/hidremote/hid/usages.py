"""HID usage tables and name resolution.

Reference: USB HID Usage Tables v1.4 -- Generic Desktop (0x01),
Keyboard/Keypad (0x07), LED (0x08), Button (0x09) and Consumer (0x0C)
pages.

The tables cover the concrete controls this system emulates and inspects
(keyboards, TV remotes, media keys, mice). Anything unmapped renders as
``Page<page>_<usage>`` in lowercase hex.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Usage pages
# ---------------------------------------------------------------------------

USAGE_PAGE_GENERIC_DESKTOP: int = 0x01
USAGE_PAGE_KEYBOARD: int = 0x07
USAGE_PAGE_LED: int = 0x08
USAGE_PAGE_BUTTON: int = 0x09
USAGE_PAGE_CONSUMER: int = 0x0C

USAGE_PAGE_NAMES: dict[int, str] = {
    0x01: "Generic Desktop",
    0x02: "Simulation",
    0x03: "VR Controls",
    0x04: "Sport",
    0x05: "Game",
    0x06: "Generic Device",
    0x07: "Keyboard/Keypad",
    0x08: "LEDs",
    0x09: "Button",
    0x0A: "Ordinal",
    0x0B: "Telephony",
    0x0C: "Consumer",
    0x0D: "Digitizer",
    0x0F: "PID",
    0x10: "Unicode",
    0x14: "Alphanumeric",
    0x40: "Medical",
}

# ---------------------------------------------------------------------------
# Usages per page
# ---------------------------------------------------------------------------

GENERIC_DESKTOP_USAGES: dict[int, str] = {
    0x01: "Pointer",
    0x02: "Mouse",
    0x04: "Joystick",
    0x05: "Gamepad",
    0x06: "Keyboard",
    0x07: "Keypad",
    0x30: "X",
    0x31: "Y",
    0x32: "Z",
    0x38: "Wheel",
    0x80: "System Control",
    0x81: "System Power Down",
    0x82: "System Sleep",
    0x83: "System Wake Up",
}

KEYBOARD_USAGES: dict[int, str] = {
    0x00: "Keyboard Reserved",
    0x01: "Keyboard ErrorRollOver",
    0x28: "Keyboard Return",
    0x29: "Keyboard Escape",
    0x2A: "Keyboard Backspace",
    0x2B: "Keyboard Tab",
    0x2C: "Keyboard Spacebar",
    0x39: "Keyboard Caps Lock",
    0x46: "Keyboard PrintScreen",
    0x47: "Keyboard Scroll Lock",
    0x48: "Keyboard Pause",
    0x49: "Keyboard Insert",
    0x4A: "Keyboard Home",
    0x4B: "Keyboard PageUp",
    0x4C: "Keyboard Delete",
    0x4D: "Keyboard End",
    0x4E: "Keyboard PageDown",
    0x4F: "Keyboard RightArrow",
    0x50: "Keyboard LeftArrow",
    0x51: "Keyboard DownArrow",
    0x52: "Keyboard UpArrow",
    0x65: "Keyboard Application",
    0xE0: "Keyboard LeftControl",
    0xE1: "Keyboard LeftShift",
    0xE2: "Keyboard LeftAlt",
    0xE3: "Keyboard Left GUI",
    0xE4: "Keyboard RightControl",
    0xE5: "Keyboard RightShift",
    0xE6: "Keyboard RightAlt",
    0xE7: "Keyboard Right GUI",
}
# Letters, digits and function keys are contiguous ranges
KEYBOARD_USAGES.update({0x04 + i: f"Keyboard {chr(ord('A') + i)}" for i in range(26)})
KEYBOARD_USAGES.update({0x1E + i: f"Keyboard {(i + 1) % 10}" for i in range(10)})
KEYBOARD_USAGES.update({0x3A + i: f"Keyboard F{i + 1}" for i in range(12)})

LED_USAGES: dict[int, str] = {
    0x01: "Num Lock",
    0x02: "Caps Lock",
    0x03: "Scroll Lock",
    0x04: "Compose",
    0x05: "Kana",
}

CONSUMER_USAGES: dict[int, str] = {
    0x01: "Consumer Control",
    0x30: "Power",
    0x40: "Menu",
    0x41: "Menu Pick",
    0x42: "Menu Up",
    0x43: "Menu Down",
    0x44: "Menu Left",
    0x45: "Menu Right",
    0x46: "Menu Escape",
    0x89: "Media Select TV",
    0x8D: "Media Select Program Guide",
    0x9C: "Channel Increment",
    0x9D: "Channel Decrement",
    0xB0: "Play",
    0xB1: "Pause",
    0xB2: "Record",
    0xB3: "Fast Forward",
    0xB4: "Rewind",
    0xB5: "Scan Next Track",
    0xB6: "Scan Previous Track",
    0xB7: "Stop",
    0xCD: "Play/Pause",
    0xE2: "Mute",
    0xE9: "Volume Up",
    0xEA: "Volume Down",
    0x183: "AL Consumer Control Configuration",
    0x18A: "AL Email Reader",
    0x192: "AL Calculator",
    0x194: "AL Local Machine Browser",
    0x221: "AC Search",
    0x223: "AC Home",
    0x224: "AC Back",
    0x226: "AC Stop",
    0x22A: "AC Bookmarks",
}

_PAGE_TABLES: dict[int, dict[int, str]] = {
    USAGE_PAGE_GENERIC_DESKTOP: GENERIC_DESKTOP_USAGES,
    USAGE_PAGE_KEYBOARD: KEYBOARD_USAGES,
    USAGE_PAGE_LED: LED_USAGES,
    USAGE_PAGE_CONSUMER: CONSUMER_USAGES,
}

# ---------------------------------------------------------------------------
# Decoder tables (inbound report rendering)
# ---------------------------------------------------------------------------

# Modifier bit -> label, in bit order (byte 0 of a keyboard report)
MODIFIER_LABELS: dict[int, str] = {
    0x01: "L_CTRL",
    0x02: "L_SHIFT",
    0x04: "L_ALT",
    0x08: "L_GUI",
    0x10: "R_CTRL",
    0x20: "R_SHIFT",
    0x40: "R_ALT",
    0x80: "R_GUI",
}

KEYCODE_NAMES: dict[int, str] = {
    0x28: "ENTER", 0x29: "ESC", 0x2A: "BACKSPACE", 0x2B: "TAB",
    0x2C: "SPACE", 0x2D: "-", 0x2E: "=", 0x2F: "[", 0x30: "]",
    0x31: "\\", 0x33: ";", 0x34: "'", 0x35: "`",
    0x36: ",", 0x37: ".", 0x38: "/",
    0x39: "CAPS",
    0x46: "PRINTSCREEN", 0x47: "SCROLLLOCK", 0x48: "PAUSE",
    0x49: "INSERT", 0x4A: "HOME", 0x4B: "PAGEUP",
    0x4C: "DELETE", 0x4D: "END", 0x4E: "PAGEDOWN",
    0x4F: "RIGHT", 0x50: "LEFT", 0x51: "DOWN", 0x52: "UP",
}
KEYCODE_NAMES.update({0x04 + i: chr(ord("A") + i) for i in range(26)})
KEYCODE_NAMES.update({0x1E + i: str((i + 1) % 10) for i in range(10)})
KEYCODE_NAMES.update({0x3A + i: f"F{i + 1}" for i in range(12)})

CONSUMER_CODE_NAMES: dict[int, str] = {
    0x0030: "POWER",
    0x0040: "MENU",
    0x0041: "OK",
    0x0042: "MENU_UP",
    0x0043: "MENU_DOWN",
    0x0044: "MENU_LEFT",
    0x0045: "MENU_RIGHT",
    0x0089: "TV",
    0x008D: "PROGRAM",
    0x009C: "CH_UP",
    0x009D: "CH_DOWN",
    0x00B0: "PLAY",
    0x00B1: "PAUSE",
    0x00B2: "RECORD",
    0x00B3: "FF",
    0x00B4: "REWIND",
    0x00B5: "NEXT",
    0x00B6: "PREVIOUS",
    0x00B7: "STOP",
    0x00CD: "PLAY_PAUSE",
    0x00E2: "MUTE",
    0x00E9: "VOL_UP",
    0x00EA: "VOL_DOWN",
    0x0221: "SEARCH",
    0x0223: "HOME",
    0x0224: "BACK",
}

COLLECTION_TYPE_NAMES: dict[int, str] = {
    0x00: "Physical",
    0x01: "Application",
    0x02: "Logical",
    0x03: "Report",
    0x04: "Named Array",
    0x05: "Usage Switch",
    0x06: "Usage Modifier",
}

COLLECTION_APPLICATION: int = 0x01


def usage_name(usage_page: int, usage: int) -> str:
    """Resolve a (usage page, usage) pair to a human-readable name."""
    table = _PAGE_TABLES.get(usage_page)
    if table is not None and usage in table:
        return table[usage]
    if usage_page == USAGE_PAGE_BUTTON:
        return f"Button {usage}" if usage else "No Button Pressed"
    return f"Page{usage_page:x}_{usage:x}"


def usage_page_name(usage_page: int) -> str:
    """Resolve a usage page number to its name."""
    if usage_page in USAGE_PAGE_NAMES:
        return USAGE_PAGE_NAMES[usage_page]
    if usage_page >= 0xFF00:
        return f"Vendor(0x{usage_page:x})"
    return f"0x{usage_page:x}"


def collection_type_name(collection_type: int) -> str:
    return COLLECTION_TYPE_NAMES.get(collection_type, f"0x{collection_type:x}")


def main_flags_description(flags: int) -> str:
    """Compact rendering of Input/Output/Feature data flags."""
    parts = [
        "Const" if flags & 0x01 else "Data",
        "Var" if flags & 0x02 else "Array",
        "Rel" if flags & 0x04 else "Abs",
    ]
    if flags & 0x08:
        parts.append("Wrap")
    if flags & 0x40:
        parts.append("Null")
    return ",".join(parts)


def modifier_labels(modifiers: int) -> list[str]:
    """Names of the modifier bits set in ``modifiers``, in bit order."""
    return [label for bit, label in MODIFIER_LABELS.items() if modifiers & bit]


def keycode_name(keycode: int) -> str:
    return KEYCODE_NAMES.get(keycode, f"0x{keycode:02x}")


def consumer_code_name(code: int) -> str:
    return CONSUMER_CODE_NAMES.get(code, f"0x{code:04x}")
