from __future__ import annotations

from typing import Optional

from grainframe.core.binary import SENTINEL, combine_word, decode_signed_word, is_sentinel_pair, safe_byte_at
from grainframe.formats import EnvironmentLayout
from grainframe.parsing.frame.events import EventRecorder, IssueKind
from grainframe.parsing.frame.model import EnvironmentalRecord
from grainframe.parsing.tokens import TokenSequence


def _read_humidity(
    tokens: TokenSequence, index: int, name: str, layout: EnvironmentLayout, recorder: EventRecorder
) -> Optional[int]:
    value = safe_byte_at(tokens.values, index)
    if value is None:
        recorder.warn(IssueKind.MALFORMED_TOKEN, f"{name} byte is malformed", field=name, offset=index)
        return None
    if value == SENTINEL:
        return None
    return min(value, layout.humidity_max)


def _read_temperature(
    tokens: TokenSequence, index: int, name: str, layout: EnvironmentLayout, recorder: EventRecorder
) -> Optional[float]:
    first = safe_byte_at(tokens.values, index)
    second = safe_byte_at(tokens.values, index + 1)
    if first is None or second is None:
        recorder.warn(IssueKind.MALFORMED_TOKEN, f"{name} bytes are malformed", field=name, offset=index)
        return None
    if is_sentinel_pair(first, second):
        return None
    return decode_signed_word(combine_word(first, second, layout.byte_order), layout.scale)


def decode_environment(
    tokens: TokenSequence,
    layout: EnvironmentLayout,
    recorder: Optional[EventRecorder] = None,
) -> Optional[EnvironmentalRecord]:
    """
    Decode the indoor/outdoor block of a long frame.

    Returns ``None`` when the frame does not reach the block. Within the
    block, ``FF`` humidity and ``FF FF`` temperature mean the probe is not
    installed and decode to ``None``. Humidity is clamped to 100 %.
    """
    recorder = recorder or EventRecorder()
    if len(tokens) < layout.min_length:
        return None
    return EnvironmentalRecord(
        indoor_temperature=_read_temperature(tokens, layout.indoor_temperature, "indoor_temperature", layout, recorder),
        indoor_humidity=_read_humidity(tokens, layout.indoor_humidity, "indoor_humidity", layout, recorder),
        outdoor_temperature=_read_temperature(tokens, layout.outdoor_temperature, "outdoor_temperature", layout, recorder),
        outdoor_humidity=_read_humidity(tokens, layout.outdoor_humidity, "outdoor_humidity", layout, recorder),
    )
