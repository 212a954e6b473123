"""Key-space values and key token resolution for the outbound encoder.

Every keyboard key is addressed by a single 8-bit *key-space* value:

- ``0..127``   : an ASCII character, translated through ``ASCII_MAP``
- ``128..135`` : a modifier, bit ``1 << (value - 128)`` of report byte 0
- ``136..255`` : a raw keycode, ``value - 136``

A keyboard input report is 8 bytes::

    [modifier_byte, 0x00, key1, key2, key3, key4, key5, key6]

Reference: USB HID Usage Tables v1.4, Section 10 (Keyboard/Keypad Page 0x07).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Modifier bitmasks (byte 0 of the keyboard report)
# ---------------------------------------------------------------------------

MODIFIER_NONE: int = 0x00
MODIFIER_LEFT_CTRL: int = 0x01
MODIFIER_LEFT_SHIFT: int = 0x02
MODIFIER_LEFT_ALT: int = 0x04
MODIFIER_LEFT_GUI: int = 0x08
MODIFIER_RIGHT_CTRL: int = 0x10
MODIFIER_RIGHT_SHIFT: int = 0x20
MODIFIER_RIGHT_ALT: int = 0x40
MODIFIER_RIGHT_GUI: int = 0x80

# ASCII_MAP flag: the character needs an implicit left shift
SHIFT_FLAG: int = 0x80

MODIFIER_BASE: int = 128
KEYCODE_BASE: int = 136

# ---------------------------------------------------------------------------
# Key-space values for named keys
# ---------------------------------------------------------------------------

KEY_LEFT_CTRL: int = 0x80
KEY_LEFT_SHIFT: int = 0x81
KEY_LEFT_ALT: int = 0x82
KEY_LEFT_GUI: int = 0x83
KEY_RIGHT_CTRL: int = 0x84
KEY_RIGHT_SHIFT: int = 0x85
KEY_RIGHT_ALT: int = 0x86
KEY_RIGHT_GUI: int = 0x87

KEY_RETURN: int = 0xB0
KEY_ESC: int = 0xB1
KEY_BACKSPACE: int = 0xB2
KEY_TAB: int = 0xB3
KEY_CAPS_LOCK: int = 0xC1
KEY_F1: int = 0xC2
KEY_PRINT_SCREEN: int = 0xCE
KEY_SCROLL_LOCK: int = 0xCF
KEY_PAUSE: int = 0xD0
KEY_INSERT: int = 0xD1
KEY_HOME: int = 0xD2
KEY_PAGE_UP: int = 0xD3
KEY_DELETE: int = 0xD4
KEY_END: int = 0xD5
KEY_PAGE_DOWN: int = 0xD6
KEY_RIGHT_ARROW: int = 0xD7
KEY_LEFT_ARROW: int = 0xD8
KEY_DOWN_ARROW: int = 0xD9
KEY_UP_ARROW: int = 0xDA
KEY_F13: int = 0xF0

# Lowercase key name -> key-space value
NAMED_KEYS: dict[str, int] = {
    # Modifiers
    "ctrl": KEY_LEFT_CTRL, "left_ctrl": KEY_LEFT_CTRL,
    "shift": KEY_LEFT_SHIFT, "left_shift": KEY_LEFT_SHIFT,
    "alt": KEY_LEFT_ALT, "left_alt": KEY_LEFT_ALT,
    "win": KEY_LEFT_GUI, "gui": KEY_LEFT_GUI, "meta": KEY_LEFT_GUI,
    "super": KEY_LEFT_GUI, "left_gui": KEY_LEFT_GUI,
    "rctrl": KEY_RIGHT_CTRL, "right_ctrl": KEY_RIGHT_CTRL,
    "rshift": KEY_RIGHT_SHIFT, "right_shift": KEY_RIGHT_SHIFT,
    "ralt": KEY_RIGHT_ALT, "right_alt": KEY_RIGHT_ALT,
    "rwin": KEY_RIGHT_GUI, "rgui": KEY_RIGHT_GUI, "right_gui": KEY_RIGHT_GUI,
    # Control keys
    "enter": KEY_RETURN, "return": KEY_RETURN,
    "esc": KEY_ESC, "escape": KEY_ESC,
    "backspace": KEY_BACKSPACE,
    "tab": KEY_TAB,
    "space": ord(" "),
    "capslock": KEY_CAPS_LOCK,
    # Navigation
    "insert": KEY_INSERT,
    "delete": KEY_DELETE, "del": KEY_DELETE,
    "home": KEY_HOME,
    "end": KEY_END,
    "pageup": KEY_PAGE_UP,
    "pagedown": KEY_PAGE_DOWN,
    "up": KEY_UP_ARROW,
    "down": KEY_DOWN_ARROW,
    "left": KEY_LEFT_ARROW,
    "right": KEY_RIGHT_ARROW,
    "printscreen": KEY_PRINT_SCREEN,
    "scrolllock": KEY_SCROLL_LOCK,
    "pause": KEY_PAUSE,
}
# Function keys (F1-F12 and F13-F24 are two separate runs)
NAMED_KEYS.update({f"f{i + 1}": KEY_F1 + i for i in range(12)})
NAMED_KEYS.update({f"f{i + 13}": KEY_F13 + i for i in range(12)})

# ---------------------------------------------------------------------------
# ASCII -> keycode (US layout)
# ---------------------------------------------------------------------------

KEY_CODES: dict[str, int] = {
    # Letters (a=0x04 .. z=0x1D)
    "a": 0x04, "b": 0x05, "c": 0x06, "d": 0x07,
    "e": 0x08, "f": 0x09, "g": 0x0A, "h": 0x0B,
    "i": 0x0C, "j": 0x0D, "k": 0x0E, "l": 0x0F,
    "m": 0x10, "n": 0x11, "o": 0x12, "p": 0x13,
    "q": 0x14, "r": 0x15, "s": 0x16, "t": 0x17,
    "u": 0x18, "v": 0x19, "w": 0x1A, "x": 0x1B,
    "y": 0x1C, "z": 0x1D,
    # Numbers (1=0x1E .. 0=0x27)
    "1": 0x1E, "2": 0x1F, "3": 0x20, "4": 0x21,
    "5": 0x22, "6": 0x23, "7": 0x24, "8": 0x25,
    "9": 0x26, "0": 0x27,
    # Control characters
    "\n": 0x28, "\b": 0x2A, "\t": 0x2B,
    " ": 0x2C,
    # Punctuation / symbols
    "-": 0x2D, "=": 0x2E,
    "[": 0x2F, "]": 0x30,
    "\\": 0x31,
    ";": 0x33, "'": 0x34,
    "`": 0x35,
    ",": 0x36, ".": 0x37, "/": 0x38,
}

# Characters typed with Shift held -> their unshifted key
SHIFT_CHARS: dict[str, str] = {
    "!": "1", "@": "2", "#": "3", "$": "4",
    "%": "5", "^": "6", "&": "7", "*": "8",
    "(": "9", ")": "0", "_": "-", "+": "=",
    "{": "[", "}": "]", "|": "\\",
    ":": ";", '"': "'", "~": "`",
    "<": ",", ">": ".", "?": "/",
}
SHIFT_CHARS.update({c.upper(): c for c in "abcdefghijklmnopqrstuvwxyz"})


def _build_ascii_map() -> tuple[int, ...]:
    table = [0] * 128
    for char, code in KEY_CODES.items():
        table[ord(char)] = code
    for char, base in SHIFT_CHARS.items():
        table[ord(char)] = KEY_CODES[base] | SHIFT_FLAG
    return tuple(table)


# 128 entries: keycode, ORed with SHIFT_FLAG for shifted characters; 0 = none
ASCII_MAP: tuple[int, ...] = _build_ascii_map()

_HEX_TOKEN = re.compile(r"^0[xX]([0-9a-fA-F]{1,2})$")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedKey:
    """A token resolved to either a consumer code or a key-space value."""

    token: str
    value: int
    consumer: bool = False


@dataclass(frozen=True)
class KeyStroke:
    """Report contribution of a keyboard key-space value."""

    modifiers: int
    keycode: int


def parse_hex_token(token: str) -> int | None:
    """Parse ``0xNN`` (one or two hex digits) into a value, else None."""
    match = _HEX_TOKEN.match(token)
    if match is None:
        return None
    return int(match.group(1), 16)


def resolve_key(token: str, media_keys: Mapping[str, int] | None = None) -> ResolvedKey | None:
    """Resolve a key token.

    Lookup order: media name (case-insensitive), hex ``0xNN``, a single
    ASCII character, then a named key (case-insensitive).

    Returns:
        The resolved key, or None if the token is unknown.
    """
    if not token:
        return None
    lowered = token.lower()
    if media_keys and lowered in media_keys:
        return ResolvedKey(token=token, value=media_keys[lowered], consumer=True)

    value = parse_hex_token(token)
    if value is not None:
        return ResolvedKey(token=token, value=value)

    if len(token) == 1:
        code = ord(token)
        if code >= 128:
            return None
        return ResolvedKey(token=token, value=code)

    if lowered in NAMED_KEYS:
        return ResolvedKey(token=token, value=NAMED_KEYS[lowered])
    return None


def key_stroke(value: int) -> KeyStroke | None:
    """Translate a key-space value into its modifier bits and keycode.

    Returns None for ASCII characters without a keyboard mapping and for
    keycode 0, which is the empty slot marker.
    """
    if value >= KEYCODE_BASE:
        if value == KEYCODE_BASE:
            return None
        return KeyStroke(modifiers=MODIFIER_NONE, keycode=value - KEYCODE_BASE)
    if value >= MODIFIER_BASE:
        return KeyStroke(modifiers=1 << (value - MODIFIER_BASE), keycode=0)
    entry = ASCII_MAP[value]
    if entry == 0:
        return None
    if entry & SHIFT_FLAG:
        return KeyStroke(modifiers=MODIFIER_LEFT_SHIFT, keycode=entry & ~SHIFT_FLAG)
    return KeyStroke(modifiers=MODIFIER_NONE, keycode=entry)
