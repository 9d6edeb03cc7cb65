from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from grainframe.config import DecodeConfig
from grainframe.formats import get_format
from grainframe.parsing.frame.environment import decode_environment
from grainframe.parsing.frame.events import EventRecorder, EventSink, IssueKind
from grainframe.parsing.frame.header import decode_header
from grainframe.parsing.frame.model import DecodeResult
from grainframe.parsing.frame.payload import decode_temperatures
from grainframe.parsing.tokens import TokenSequence, tokenize_hex

ConfigLike = Union[DecodeConfig, Mapping[str, Any], None]


def coerce_config(config: ConfigLike) -> DecodeConfig:
    if config is None:
        return DecodeConfig()
    if isinstance(config, DecodeConfig):
        return config
    return DecodeConfig.model_validate(dict(config))


def decode_frame(
    tokens: TokenSequence,
    config: ConfigLike = None,
    sink: Optional[EventSink] = None,
) -> DecodeResult:
    """
    Decode a tokenized frame into a ``DecodeResult``.

    The header is decoded first; its negotiated length and payload offset
    then drive the temperature walk. A frame too short for its header still
    has its payload walked. Long formats also get their
    environmental block decoded when the frame reaches it.

    Args:
        tokens: The tokenized frame.
        config: A ``DecodeConfig`` or a mapping of its fields (the
            camelCase keys are accepted).
        sink: Called with every ``DecodeEvent`` as it is recorded.
    """
    cfg = coerce_config(config)
    fmt = get_format(cfg.format_version)
    recorder = EventRecorder(sink)

    header = decode_header(tokens, fmt, cfg, recorder)
    # Frames below the format minimum have no header; the walk then runs to
    # the last token.
    readings = decode_temperatures(
        tokens,
        fmt.payload_offset,
        cfg.max_payload_bytes,
        end=header.walk_length if header is not None else None,
        scale=fmt.scale,
        byte_order=fmt.byte_order,
        plausible_range=cfg.plausible_range,
        recorder=recorder,
    )
    environment = decode_environment(tokens, fmt.environment, recorder) if fmt.environment else None

    recorder.info(
        IssueKind.SUMMARY,
        f"decoded {len(readings)} temperature readings",
        readings=len(readings),
        anomalies=sum(1 for reading in readings if reading.out_of_range),
    )
    return DecodeResult(
        format=fmt.version,
        token_count=len(tokens),
        header=header,
        readings=tuple(readings),
        environment=environment,
        events=recorder.events,
    )


def decode_hex_frame(
    text: str,
    config: ConfigLike = None,
    sink: Optional[EventSink] = None,
) -> DecodeResult:
    """Tokenize ``text`` and decode it; see ``decode_frame``."""
    tokens = tokenize_hex(text)
    if tokens.is_clean:
        return decode_frame(tokens, config, sink)

    recorder = EventRecorder(sink)
    for bad in tokens.malformed:
        recorder.warn(
            IssueKind.MALFORMED_TOKEN,
            f"token {bad.text!r} at position {bad.index} is not a hex byte",
            offset=bad.index,
            text=bad.text,
        )
    result = decode_frame(tokens, config, sink)
    return replace(result, events=recorder.events + result.events)
