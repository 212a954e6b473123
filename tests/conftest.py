"""Shared test fixtures for the hidremote test suite.

Provides descriptors, parsed report tables, encoders and transports
used across the unit tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from hidremote.domain.models import ParseResult
from hidremote.hid.descriptor import parse_descriptor
from hidremote.hid.encoder import ReportEncoder
from hidremote.hid.profiles import MEDIA_KEYBOARD_PROFILE, REMOTE_PROFILE
from hidremote.transport import NullTransport, ReportTransport


# ---------------------------------------------------------------------------
# Descriptor Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def collection_only_descriptor() -> bytes:
    """Usage Page, Usage, Collection(Application), End Collection."""
    return bytes([0x05, 0x01, 0x09, 0x06, 0xA1, 0x01, 0xC0])


@pytest.fixture
def mouse_descriptor() -> bytes:
    """A minimal boot-style mouse: 3 buttons, X/Y and wheel, no report ID."""
    return bytes([
        0x05, 0x01,  # Usage Page (Generic Desktop)
        0x09, 0x02,  # Usage (Mouse)
        0xA1, 0x01,  # Collection (Application)
        0x09, 0x01,  #   Usage (Pointer)
        0xA1, 0x00,  #   Collection (Physical)
        0x05, 0x09,  #     Usage Page (Button)
        0x19, 0x01,  #     Usage Minimum (1)
        0x29, 0x03,  #     Usage Maximum (3)
        0x15, 0x00,  #     Logical Minimum (0)
        0x25, 0x01,  #     Logical Maximum (1)
        0x95, 0x03,  #     Report Count (3)
        0x75, 0x01,  #     Report Size (1)
        0x81, 0x02,  #     Input (Data,Var,Abs)
        0x95, 0x01,  #     Report Count (1)
        0x75, 0x05,  #     Report Size (5)
        0x81, 0x01,  #     Input (Const)
        0x05, 0x01,  #     Usage Page (Generic Desktop)
        0x09, 0x30,  #     Usage (X)
        0x09, 0x31,  #     Usage (Y)
        0x09, 0x38,  #     Usage (Wheel)
        0x15, 0x81,  #     Logical Minimum (-127)
        0x25, 0x7F,  #     Logical Maximum (127)
        0x75, 0x08,  #     Report Size (8)
        0x95, 0x03,  #     Report Count (3)
        0x81, 0x06,  #     Input (Data,Var,Rel)
        0xC0,        #   End Collection
        0xC0,        # End Collection
    ])


@pytest.fixture
def remote_parse() -> ParseResult:
    """The parsed descriptor of the default remote profile."""
    return parse_descriptor(REMOTE_PROFILE.descriptor)


# ---------------------------------------------------------------------------
# Encoder Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def encoder() -> ReportEncoder:
    """A fresh encoder for the default remote profile."""
    return ReportEncoder(REMOTE_PROFILE)


@pytest.fixture
def media_encoder() -> ReportEncoder:
    """A fresh encoder for the bitmask media keyboard profile."""
    return ReportEncoder(MEDIA_KEYBOARD_PROFILE)


# ---------------------------------------------------------------------------
# Transport Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def null_transport() -> NullTransport:
    return NullTransport()


@pytest.fixture
def mock_transport() -> AsyncMock:
    """A mock ReportTransport with all async methods stubbed."""
    transport = AsyncMock(spec=ReportTransport)
    transport.is_open = True
    transport.name = "mock"
    return transport
