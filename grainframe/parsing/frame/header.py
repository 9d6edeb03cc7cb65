"""
Header decoding for grain condition frames.

Every format shares the same prefix::

    +---------+----------------------------+-----------+--------+---------+----------
    | Marker  | Timestamp (BCD)            | Device id | Length | Command | Payload
    | 2 bytes | YY MM DD hh mm ss, 6 bytes | 1-8 bytes | 2 (BE) | 1 byte  | ...
    +---------+----------------------------+-----------+--------+---------+----------

Length and command bytes exist only in command-style formats. See
``grainframe.formats`` for the exact offsets per version.
"""
from __future__ import annotations

from typing import Optional, Sequence

from grainframe.config import (
    LARGE_FRAME_LENGTH,
    SMALL_ARRAY_MAX_SENSORS,
    SMALL_FRAME_LENGTH,
    DecodeConfig,
    LengthPolicy,
)
from grainframe.core.binary import bcd_to_decimal, bytes_to_int, is_valid_bcd, safe_byte_at
from grainframe.formats import FrameFormat
from grainframe.parsing.frame.events import EventRecorder, IssueKind
from grainframe.parsing.frame.model import FrameHeader, Timestamp
from grainframe.parsing.tokens import TokenSequence

TIMESTAMP_START = 2
TIMESTAMP_FIELDS = ("year", "month", "day", "hour", "minute", "second")


class FrameLengthError(ValueError):
    """Raised under ``LengthPolicy.STRICT`` when a frame is shorter than its negotiated length."""

    def __init__(self, negotiated_length: int, token_count: int) -> None:
        super().__init__(
            f"Frame has {token_count} bytes but {negotiated_length} were negotiated"
        )
        self.negotiated_length = negotiated_length
        self.token_count = token_count


def negotiate_length(expected_sensor_count: Optional[int], declared_frame_length: int) -> int:
    """
    Reconcile the device-declared frame length with the configured sensor count.

    Arrays of up to 512 sensors are sent in a 1068 byte frame, larger arrays
    in a 2136 byte frame. Without a sensor count the declared length stands.
    """
    if expected_sensor_count is None:
        return declared_frame_length
    if expected_sensor_count <= SMALL_ARRAY_MAX_SENSORS:
        return SMALL_FRAME_LENGTH
    return LARGE_FRAME_LENGTH


def _decode_timestamp(values: Sequence[Optional[int]], recorder: EventRecorder) -> Optional[Timestamp]:
    raw = [safe_byte_at(values, TIMESTAMP_START + i) for i in range(len(TIMESTAMP_FIELDS))]
    surfaced = {
        name: (bcd_to_decimal(byte) if byte is not None else None)
        for name, byte in zip(TIMESTAMP_FIELDS, raw)
    }
    bad_fields = [
        name for name, byte in zip(TIMESTAMP_FIELDS, raw)
        if byte is None or not is_valid_bcd(byte)
    ]
    if bad_fields:
        recorder.warn(
            IssueKind.TIMESTAMP_OUT_OF_RANGE,
            f"timestamp is not valid BCD: {', '.join(bad_fields)}",
            fields=bad_fields,
            surfaced=surfaced,
        )
        return None
    return Timestamp(
        year=2000 + surfaced["year"],
        month=surfaced["month"],
        day=surfaced["day"],
        hour=surfaced["hour"],
        minute=surfaced["minute"],
        second=surfaced["second"],
    )


def _decode_device_id(tokens: TokenSequence, fmt: FrameFormat, recorder: EventRecorder) -> tuple[Optional[int], str]:
    span = range(fmt.device_id_start, fmt.device_id_stop)
    texts = " ".join(tokens.text_at(i) for i in span if i < len(tokens))
    values = [safe_byte_at(tokens.values, i) for i in span]
    if len(tokens) < fmt.device_id_stop:
        return None, texts
    if any(value is None for value in values):
        recorder.warn(
            IssueKind.MALFORMED_TOKEN,
            f"device id bytes are malformed: {texts}",
            field="device_id",
            offset=fmt.device_id_start,
        )
        return None, texts
    return bytes_to_int(values), texts


def _read_word(tokens: TokenSequence, index: int, name: str, recorder: EventRecorder) -> Optional[int]:
    high = safe_byte_at(tokens.values, index)
    low = safe_byte_at(tokens.values, index + 1)
    if high is None or low is None:
        if index + 1 < len(tokens):
            recorder.warn(IssueKind.MALFORMED_TOKEN, f"{name} bytes are malformed", field=name, offset=index)
        return None
    return high * 256 + low


def decode_header(
    tokens: TokenSequence,
    fmt: FrameFormat,
    config: Optional[DecodeConfig] = None,
    recorder: Optional[EventRecorder] = None,
) -> Optional[FrameHeader]:
    """
    Decode the fixed-position header of a frame.

    Decoding is tolerant: a bad timestamp or device id degrades that field to
    ``None`` and is reported through ``recorder`` without stopping the rest.

    Args:
        tokens: The tokenized frame.
        fmt: The frame format selected by the caller.
        config: Optional decode configuration (sensor count, length policy).
        recorder: Receives diagnostics; a private one is used if omitted.

    Returns:
        The decoded ``FrameHeader``, or ``None`` when the frame is shorter than
        the format's minimum header length.

    Raises:
        FrameLengthError: Only under ``LengthPolicy.STRICT``, when the frame is
            shorter than its negotiated length.
    """
    recorder = recorder or EventRecorder()
    token_count = len(tokens)
    if token_count < fmt.min_length:
        recorder.error(
            IssueKind.FRAME_TOO_SHORT,
            f"frame has {token_count} bytes, {fmt.name} format needs at least {fmt.min_length}",
            token_count=token_count,
            min_length=fmt.min_length,
        )
        return None

    marker = " ".join(tokens.texts[:2])
    timestamp = _decode_timestamp(tokens.values, recorder)
    device_id, device_id_hex = _decode_device_id(tokens, fmt, recorder)

    declared_length = token_count
    length_source = "inferred"
    declared_frame_length = token_count
    if fmt.length_index is not None:
        value = _read_word(tokens, fmt.length_index, "length", recorder)
        if value is not None:
            declared_length = value
            length_source = "field"
            declared_frame_length = fmt.payload_offset + value

    command_code = None
    if fmt.command_index is not None:
        command_code = safe_byte_at(tokens.values, fmt.command_index)
        if command_code is None and fmt.command_index < token_count:
            recorder.warn(
                IssueKind.MALFORMED_TOKEN,
                "command byte is malformed",
                field="command",
                offset=fmt.command_index,
            )

    expected = config.expected_sensor_count if config else None
    negotiated_length = negotiate_length(expected, declared_frame_length)
    if negotiated_length != token_count:
        details = dict(
            negotiated_length=negotiated_length,
            token_count=token_count,
            expected_sensor_count=expected,
        )
        if token_count < negotiated_length:
            if config is not None and config.length_policy == LengthPolicy.STRICT:
                raise FrameLengthError(negotiated_length, token_count)
            recorder.warn(
                IssueKind.LENGTH_MISMATCH,
                f"frame truncated: {token_count} of {negotiated_length} bytes present",
                **details,
            )
        else:
            recorder.info(
                IssueKind.LENGTH_MISMATCH,
                f"frame has {token_count - negotiated_length} bytes beyond the negotiated {negotiated_length}",
                **details,
            )

    return FrameHeader(
        marker=marker,
        timestamp=timestamp,
        device_id=device_id,
        device_id_hex=device_id_hex,
        declared_length=declared_length,
        length_source=length_source,
        negotiated_length=negotiated_length,
        token_count=token_count,
        payload_offset=fmt.payload_offset,
        command_code=command_code,
    )
