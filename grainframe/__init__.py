from grainframe.config import DecodeConfig, DecoderSettings, LengthPolicy, get_settings
from grainframe.parsing.frame import (
    DecodeEvent,
    DecodeResult,
    EnvironmentalRecord,
    FormatVersion,
    FrameHeader,
    FrameLengthError,
    IssueKind,
    SensorReading,
    Severity,
    decode_frame,
    decode_hex_frame,
)
from grainframe.parsing.tokens import MalformedTokenError, TokenSequence, tokenize_hex
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "DecodeConfig",
    "DecoderSettings",
    "LengthPolicy",
    "get_settings",
    "DecodeEvent",
    "DecodeResult",
    "EnvironmentalRecord",
    "FormatVersion",
    "FrameHeader",
    "FrameLengthError",
    "IssueKind",
    "SensorReading",
    "Severity",
    "decode_frame",
    "decode_hex_frame",
    "MalformedTokenError",
    "TokenSequence",
    "tokenize_hex",
]

try:
    __version__ = version("grainframe")
except PackageNotFoundError:
    __version__ = "0.0.0"
