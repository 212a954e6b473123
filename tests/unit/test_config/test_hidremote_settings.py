"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from hidremote.config.settings import (
    DeviceConfig,
    MonitorConfig,
    Settings,
    TransportConfig,
    load_settings,
)


class TestSettings:
    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.device.profile == "remote"
        assert settings.transport.backend == "gadget"
        assert settings.transport.device_path == "/dev/hidg0"
        assert settings.server.port == 8080
        assert settings.monitor.buffer_size == 1000

    def test_section_defaults(self) -> None:
        assert DeviceConfig().name is None
        assert TransportConfig().key_delay == 0.02
        assert MonitorConfig().log_file is None

    def test_invalid_profile(self) -> None:
        with pytest.raises(ValidationError):
            DeviceConfig(profile="toaster")

    def test_negative_key_delay(self) -> None:
        with pytest.raises(ValidationError):
            TransportConfig(key_delay=-1)

    def test_invalid_buffer_size(self) -> None:
        with pytest.raises(ValidationError):
            MonitorConfig(buffer_size=0)


class TestLoadSettings:
    def test_missing_file(self, tmp_path: Path) -> None:
        """load_settings with missing file should return defaults."""
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.device.profile == "remote"

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "hidremote.yaml"
        path.write_text(
            "device:\n"
            "  profile: media_keyboard\n"
            "  name: Living Room\n"
            "transport:\n"
            "  backend: \"null\"\n"
            "server:\n"
            "  port: 9000\n"
        )
        settings = load_settings(path)
        assert settings.device.profile == "media_keyboard"
        assert settings.device.name == "Living Room"
        assert settings.server.port == 9000
        # untouched sections keep their defaults
        assert settings.monitor.buffer_size == 1000

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).server.port == 8080

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIDREMOTE_SERVER__PORT", "9100")
        monkeypatch.setenv("HIDREMOTE_TRANSPORT__DEVICE_PATH", "/dev/hidg1")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.server.port == 9100
        assert settings.transport.device_path == "/dev/hidg1"

    def test_invalid_yaml_value(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("server:\n  port: 0\n")
        with pytest.raises(ValidationError):
            load_settings(path)
