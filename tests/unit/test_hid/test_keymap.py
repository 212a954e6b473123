"""Tests for key-space values and key token resolution."""

from __future__ import annotations

import pytest

from hidremote.hid.keymap import (
    ASCII_MAP,
    KEY_CODES,
    KEY_F1,
    KEY_F13,
    KEY_LEFT_SHIFT,
    KEY_RETURN,
    KEY_UP_ARROW,
    MODIFIER_LEFT_SHIFT,
    MODIFIER_RIGHT_GUI,
    NAMED_KEYS,
    SHIFT_FLAG,
    key_stroke,
    parse_hex_token,
    resolve_key,
)
from hidremote.hid.profiles import REMOTE_MEDIA_KEYS


class TestAsciiMap:
    def test_has_128_entries(self) -> None:
        assert len(ASCII_MAP) == 128

    def test_letters(self) -> None:
        for i, letter in enumerate("abcdefghijklmnopqrstuvwxyz"):
            assert ASCII_MAP[ord(letter)] == 0x04 + i
            assert ASCII_MAP[ord(letter.upper())] == (0x04 + i) | SHIFT_FLAG

    def test_digits_are_contiguous(self) -> None:
        for i, digit in enumerate("1234567890"):
            assert KEY_CODES[digit] == 0x1E + i
            assert ASCII_MAP[ord(digit)] == 0x1E + i

    def test_control_characters(self) -> None:
        assert ASCII_MAP[ord("\n")] == 0x28
        assert ASCII_MAP[ord("\b")] == 0x2A
        assert ASCII_MAP[ord("\t")] == 0x2B
        assert ASCII_MAP[ord(" ")] == 0x2C

    def test_shifted_symbols(self) -> None:
        assert ASCII_MAP[ord("!")] == 0x1E | SHIFT_FLAG
        assert ASCII_MAP[ord("@")] == 0x1F | SHIFT_FLAG
        assert ASCII_MAP[ord("?")] == 0x38 | SHIFT_FLAG
        assert ASCII_MAP[ord("~")] == 0x35 | SHIFT_FLAG

    def test_unmapped_entries_are_zero(self) -> None:
        assert ASCII_MAP[0x00] == 0
        assert ASCII_MAP[0x7F] == 0
        assert ASCII_MAP[0x1B] == 0


class TestNamedKeys:
    def test_key_space_values(self) -> None:
        assert NAMED_KEYS["up"] == 0xDA
        assert NAMED_KEYS["enter"] == 0xB0
        assert NAMED_KEYS["esc"] == 0xB1
        assert NAMED_KEYS["ctrl"] == 0x80
        assert NAMED_KEYS["shift"] == 0x81
        assert NAMED_KEYS["win"] == 0x83
        assert NAMED_KEYS["space"] == 0x20

    def test_function_keys(self) -> None:
        assert NAMED_KEYS["f1"] == KEY_F1 == 0xC2
        assert NAMED_KEYS["f12"] == 0xCD
        assert NAMED_KEYS["f13"] == KEY_F13 == 0xF0
        assert NAMED_KEYS["f24"] == 0xFB

    def test_all_names_are_lowercase(self) -> None:
        assert all(name == name.lower() for name in NAMED_KEYS)


class TestParseHexToken:
    @pytest.mark.parametrize("token, expected", [("0x41", 0x41), ("0XB0", 0xB0), ("0x7", 7)])
    def test_valid(self, token: str, expected: int) -> None:
        assert parse_hex_token(token) == expected

    @pytest.mark.parametrize("token", ["0x", "0x123", "41", "0xZZ", "x41"])
    def test_invalid(self, token: str) -> None:
        assert parse_hex_token(token) is None


class TestResolveKey:
    def test_media_name_case_insensitive(self) -> None:
        key = resolve_key("VolumeUp", REMOTE_MEDIA_KEYS)
        assert key is not None
        assert key.consumer
        assert key.value == 0xE9

    def test_media_name_wins_over_named_key(self) -> None:
        key = resolve_key("home", REMOTE_MEDIA_KEYS)
        assert key is not None and key.consumer
        assert key.value == 0x223

    def test_named_key_without_media_table(self) -> None:
        key = resolve_key("home")
        assert key is not None and not key.consumer
        assert key.value == 0xD2

    def test_hex_token(self) -> None:
        key = resolve_key("0xB0")
        assert key is not None
        assert key.value == KEY_RETURN

    def test_single_character(self) -> None:
        key = resolve_key("A")
        assert key is not None
        assert key.value == ord("A")

    def test_named_key_case_insensitive(self) -> None:
        key = resolve_key("UP")
        assert key is not None
        assert key.value == KEY_UP_ARROW

    def test_non_ascii_character_fails(self) -> None:
        assert resolve_key("é") is None

    def test_unknown_name_fails(self) -> None:
        assert resolve_key("nosuchkey") is None
        assert resolve_key("") is None


class TestKeyStroke:
    def test_plain_character(self) -> None:
        stroke = key_stroke(ord("a"))
        assert stroke is not None
        assert stroke.modifiers == 0
        assert stroke.keycode == 0x04

    def test_shifted_character(self) -> None:
        stroke = key_stroke(ord("A"))
        assert stroke is not None
        assert stroke.modifiers == MODIFIER_LEFT_SHIFT
        assert stroke.keycode == 0x04

    def test_modifier_range(self) -> None:
        stroke = key_stroke(KEY_LEFT_SHIFT)
        assert stroke is not None
        assert stroke.modifiers == MODIFIER_LEFT_SHIFT
        assert stroke.keycode == 0
        assert key_stroke(0x87).modifiers == MODIFIER_RIGHT_GUI  # type: ignore[union-attr]

    def test_keycode_range(self) -> None:
        stroke = key_stroke(KEY_UP_ARROW)
        assert stroke is not None
        assert stroke.modifiers == 0
        assert stroke.keycode == 0x52

    def test_keycode_zero_is_not_a_key(self) -> None:
        assert key_stroke(0x88) is None
        assert key_stroke(0x89).keycode == 0x01  # type: ignore[union-attr]

    def test_unmapped_ascii(self) -> None:
        assert key_stroke(0x1B) is None
