"""Tests for decode configuration and environment settings."""
import pytest
from pydantic import ValidationError

from grainframe.config import DecodeConfig, DecoderSettings, LengthPolicy, get_settings
from grainframe.formats import FormatVersion


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    config = DecodeConfig()
    assert config.expected_sensor_count is None
    assert config.max_payload_bytes is None
    assert config.format_version == FormatVersion.LEGACY
    assert config.length_policy == LengthPolicy.CLAMP
    assert config.plausible_range == (-100.0, 100.0)


def test_device_config_key_aliases():
    config = DecodeConfig.model_validate({"totalPoints": 600, "dataSize": 1024, "formatVersion": "command"})
    assert config.expected_sensor_count == 600
    assert config.max_payload_bytes == 1024
    assert config.format_version == FormatVersion.COMMAND


def test_camel_case_aliases():
    config = DecodeConfig.model_validate({"expectedSensorCount": 12, "maxPayloadBytes": 8, "lengthPolicy": "strict"})
    assert config.expected_sensor_count == 12
    assert config.max_payload_bytes == 8
    assert config.length_policy == LengthPolicy.STRICT


@pytest.mark.parametrize("value", ["extended", "EXTENDED", "3", 3, FormatVersion.EXTENDED])
def test_format_version_parsing(value):
    assert DecodeConfig(format_version=value).format_version == FormatVersion.EXTENDED


def test_unknown_format_rejected():
    with pytest.raises(ValidationError):
        DecodeConfig(format_version="v9")


def test_sensor_count_must_be_positive():
    with pytest.raises(ValidationError):
        DecodeConfig(expected_sensor_count=0)


def test_negative_payload_rejected():
    with pytest.raises(ValidationError):
        DecodeConfig(max_payload_bytes=-1)


def test_plausible_band_must_be_ordered():
    with pytest.raises(ValidationError):
        DecodeConfig(plausible_min=50, plausible_max=-50)


def test_unknown_keys_ignored():
    config = DecodeConfig.model_validate({"ip": "10.0.0.1", "port": 5000})
    assert config == DecodeConfig()


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GRAINFRAME_EXPECTED_SENSOR_COUNT", "600")
    monkeypatch.setenv("GRAINFRAME_FORMAT", "command")
    monkeypatch.setenv("GRAINFRAME_LENGTH_POLICY", "strict")
    settings = get_settings()
    assert settings.expected_sensor_count == 600
    config = settings.to_decode_config()
    assert config.format_version == FormatVersion.COMMAND
    assert config.length_policy == LengthPolicy.STRICT
    assert get_settings() is settings


def test_settings_overrides_skip_none():
    settings = DecoderSettings(expected_sensor_count=100)
    config = settings.to_decode_config(expected_sensor_count=None, max_payload_bytes=64, format_version="extended")
    assert config.expected_sensor_count == 100
    assert config.max_payload_bytes == 64
    assert config.format_version == FormatVersion.EXTENDED
