"""
Temperature array decoding.

The payload is a run of two-byte samples, one per sensor, terminated early by
an ``FF FF`` pair. Each sample is a two's-complement 16-bit value in units of
``scale`` degrees Celsius.
"""
from __future__ import annotations

from typing import Optional, Sequence

from grainframe.core.binary import combine_word, decode_signed_word, is_sentinel_pair
from grainframe.formats import PRIMARY_SCALE
from grainframe.parsing.frame.events import EventRecorder, IssueKind
from grainframe.parsing.frame.model import SensorReading
from grainframe.parsing.tokens import TokenSequence

DEFAULT_PLAUSIBLE_RANGE = (-100.0, 100.0)


def walk_end(
    token_count: int,
    start_offset: int,
    max_payload_bytes: Optional[int] = None,
    end: Optional[int] = None,
) -> int:
    """
    Index one past the last byte the payload walk may read.

    A ``max_payload_bytes`` of 0 means no cap, as device configurations store it.
    """
    limit = token_count
    if end is not None:
        limit = min(limit, end)
    if max_payload_bytes:
        limit = min(limit, start_offset + max_payload_bytes)
    return limit


def decode_temperatures(
    tokens: TokenSequence | Sequence[Optional[int]],
    start_offset: int,
    max_payload_bytes: Optional[int] = None,
    *,
    end: Optional[int] = None,
    scale: float = PRIMARY_SCALE,
    byte_order: str = "little",
    plausible_range: tuple[float, float] = DEFAULT_PLAUSIBLE_RANGE,
    recorder: Optional[EventRecorder] = None,
) -> list[SensorReading]:
    """
    Decode the per-sensor temperature array.

    Sensor ids are assigned in payload order, counting only samples that
    decoded; a pair with a malformed byte is reported and skipped without
    leaving a gap in the numbering. Values outside ``plausible_range`` are
    kept and flagged ``out_of_range``.

    Args:
        tokens: Frame bytes, ``None`` where a token was malformed.
        start_offset: Index of the first sample's first byte.
        max_payload_bytes: Caps the walk at ``start_offset + max_payload_bytes``;
            ``None`` or 0 leaves it uncapped.
        end: Caps the walk at this frame length (the negotiated length).
        scale: Degrees Celsius per least significant bit.
        byte_order: ``"little"`` when the low byte comes first.
        plausible_range: Inclusive band outside of which a value is an anomaly.
        recorder: Receives diagnostics; a private one is used if omitted.

    Returns:
        The decoded readings in payload order.
    """
    recorder = recorder or EventRecorder()
    values = tokens.values if isinstance(tokens, TokenSequence) else tuple(tokens)
    limit = walk_end(len(values), start_offset, max_payload_bytes, end)
    low_bound, high_bound = plausible_range

    readings: list[SensorReading] = []
    if limit - start_offset < 2:
        recorder.warn(
            IssueKind.PAYLOAD_TOO_SHORT,
            "frame too short to contain temperature data",
            start_offset=start_offset,
            limit=limit,
        )
        return readings

    for i in range(start_offset, limit - 1, 2):
        first, second = values[i], values[i + 1]
        if is_sentinel_pair(first, second):
            recorder.info(IssueKind.END_OF_DATA, f"end of data marker at position {i}", offset=i)
            break
        if first is None or second is None:
            recorder.warn(
                IssueKind.MALFORMED_TOKEN,
                f"bytes at position {i} could not be parsed as hex, sample skipped",
                offset=i,
            )
            continue

        raw = combine_word(first, second, byte_order)
        temperature = decode_signed_word(raw, scale)
        sensor_id = len(readings) + 1
        out_of_range = temperature < low_bound or temperature > high_bound
        if out_of_range:
            recorder.warn(
                IssueKind.TEMPERATURE_OUT_OF_RANGE,
                f"sensor #{sensor_id} temperature {temperature} outside {low_bound}..{high_bound}, raw 0x{raw:04X}",
                sensor_id=sensor_id,
                temperature=temperature,
                raw=raw,
                offset=i,
            )
        readings.append(
            SensorReading(
                sensor_id=sensor_id,
                temperature=temperature,
                raw=raw,
                offset=i,
                out_of_range=out_of_range,
            )
        )

    return readings
