"""Tests for header decoding and length negotiation."""
import pytest

from grainframe.config import DecodeConfig, LengthPolicy
from grainframe.formats import FormatVersion, get_format
from grainframe.parsing.frame import EventRecorder, FrameLengthError, IssueKind, Severity, decode_header, negotiate_length
from grainframe.parsing.tokens import tokenize_hex

COMMAND_FRAME = "AA 55 24 03 15 10 30 00 12 34 00 0C 01 01 90 FF FF"
LEGACY_FRAME = "AA 55 24 03 15 10 30 00 00 07 90 01 FF FF"


def test_command_header_fields():
    recorder = EventRecorder()
    header = decode_header(tokenize_hex(COMMAND_FRAME), get_format(FormatVersion.COMMAND), recorder=recorder)
    assert header is not None
    assert header.marker == "AA 55"
    assert header.timestamp is not None
    assert header.timestamp.isoformat() == "2024-03-15 10:30:00"
    assert header.device_id == 0x1234
    assert header.device_id_hex == "12 34"
    assert header.declared_length == 12
    assert header.length_source == "field"
    assert header.command_code == 0x01
    assert header.payload_offset == 13
    assert header.token_count == 17


def test_command_header_without_config_uses_declared_frame_length():
    recorder = EventRecorder()
    header = decode_header(tokenize_hex(COMMAND_FRAME), get_format(FormatVersion.COMMAND), recorder=recorder)
    # payload offset 13 + declared payload length 12
    assert header.negotiated_length == 25
    assert header.walk_length == 17
    assert header.is_truncated
    mismatches = recorder.of_kind(IssueKind.LENGTH_MISMATCH)
    assert len(mismatches) == 1
    assert mismatches[0].severity == Severity.WARN


def test_legacy_header_infers_length_from_token_count():
    recorder = EventRecorder()
    header = decode_header(tokenize_hex(LEGACY_FRAME), get_format(FormatVersion.LEGACY), recorder=recorder)
    assert header.device_id == 7
    assert header.device_id_hex == "07"
    assert header.length_source == "inferred"
    assert header.declared_length == 14
    assert header.negotiated_length == 14
    assert header.command_code is None
    assert recorder.of_kind(IssueKind.LENGTH_MISMATCH) == []


def test_legacy_header_at_minimum_length_has_no_device_id():
    recorder = EventRecorder()
    header = decode_header(tokenize_hex("AA 55 24 03 15 10 30 00"), get_format(FormatVersion.LEGACY), recorder=recorder)
    assert header is not None
    assert header.device_id is None
    assert header.timestamp.year == 2024


@pytest.mark.parametrize(
    "version, count",
    [(FormatVersion.LEGACY, 7), (FormatVersion.COMMAND, 12), (FormatVersion.EXTENDED, 1067)],
)
def test_frame_too_short_returns_none(version, count):
    recorder = EventRecorder()
    tokens = tokenize_hex(" ".join(["00"] * count))
    assert decode_header(tokens, get_format(version), recorder=recorder) is None
    errors = recorder.of_kind(IssueKind.FRAME_TOO_SHORT)
    assert len(errors) == 1
    assert errors[0].severity == Severity.ERROR
    assert errors[0].details["token_count"] == count


def test_invalid_bcd_timestamp_degrades_to_none():
    recorder = EventRecorder()
    frame = "AA 55 24 1A 15 10 30 00 12 34 00 0C 01 01 90 FF FF"
    header = decode_header(tokenize_hex(frame), get_format(FormatVersion.COMMAND), recorder=recorder)
    assert header is not None
    assert header.timestamp is None
    assert header.device_id == 0x1234
    events = recorder.of_kind(IssueKind.TIMESTAMP_OUT_OF_RANGE)
    assert len(events) == 1
    assert events[0].details["fields"] == ["month"]
    assert events[0].details["surfaced"]["month"] == 20


def test_valid_bcd_but_impossible_date():
    recorder = EventRecorder()
    frame = "AA 55 24 13 32 10 30 00 00 07"
    header = decode_header(tokenize_hex(frame), get_format(FormatVersion.LEGACY), recorder=recorder)
    assert header.timestamp.month == 13
    assert header.timestamp.as_datetime() is None


def test_malformed_device_id():
    recorder = EventRecorder()
    frame = "AA 55 24 03 15 10 30 00 XX 34 00 0C 01 01 90 FF FF"
    header = decode_header(tokenize_hex(frame), get_format(FormatVersion.COMMAND), recorder=recorder)
    assert header.device_id is None
    assert header.device_id_hex == "XX 34"
    assert header.timestamp is not None
    assert recorder.of_kind(IssueKind.MALFORMED_TOKEN)[0].details["field"] == "device_id"


def test_negotiate_length():
    assert negotiate_length(500, 17) == 1068
    assert negotiate_length(512, 17) == 1068
    assert negotiate_length(513, 17) == 2136
    assert negotiate_length(1000, 17) == 2136
    assert negotiate_length(None, 42) == 42


def test_configured_sensor_count_sets_canonical_length():
    recorder = EventRecorder()
    config = DecodeConfig(expected_sensor_count=500)
    header = decode_header(tokenize_hex(LEGACY_FRAME), get_format(FormatVersion.LEGACY), config, recorder)
    assert header.negotiated_length == 1068
    assert header.walk_length == 14
    assert recorder.of_kind(IssueKind.LENGTH_MISMATCH)[0].severity == Severity.WARN


def test_frame_longer_than_negotiated_is_info():
    recorder = EventRecorder()
    config = DecodeConfig(expected_sensor_count=1000)
    tokens = tokenize_hex(" ".join(["AA", "55", "24", "03", "15", "10", "30", "00"] + ["FF"] * 2192))
    header = decode_header(tokens, get_format(FormatVersion.LEGACY), config, recorder)
    assert header.negotiated_length == 2136
    assert header.walk_length == 2136
    assert recorder.of_kind(IssueKind.LENGTH_MISMATCH)[0].severity == Severity.INFO


def test_strict_policy_rejects_truncated_frame():
    config = DecodeConfig(expected_sensor_count=500, length_policy=LengthPolicy.STRICT)
    with pytest.raises(FrameLengthError) as exc_info:
        decode_header(tokenize_hex(LEGACY_FRAME), get_format(FormatVersion.LEGACY), config)
    assert exc_info.value.negotiated_length == 1068
    assert exc_info.value.token_count == 14
