from grainframe.formats import EnvironmentLayout, FORMATS, FormatVersion, FrameFormat, get_format
from grainframe.parsing.frame.decode import decode_frame, decode_hex_frame
from grainframe.parsing.frame.environment import decode_environment
from grainframe.parsing.frame.events import DecodeEvent, EventRecorder, EventSink, IssueKind, Severity
from grainframe.parsing.frame.header import FrameLengthError, decode_header, negotiate_length
from grainframe.parsing.frame.model import DecodeResult, EnvironmentalRecord, FrameHeader, SensorReading, Timestamp
from grainframe.parsing.frame.payload import decode_temperatures

__all__ = [
    "decode_frame",
    "decode_hex_frame",
    "decode_header",
    "decode_temperatures",
    "decode_environment",
    "negotiate_length",
    "DecodeEvent",
    "DecodeResult",
    "EnvironmentLayout",
    "EnvironmentalRecord",
    "EventRecorder",
    "EventSink",
    "FORMATS",
    "FormatVersion",
    "FrameFormat",
    "FrameHeader",
    "FrameLengthError",
    "IssueKind",
    "SensorReading",
    "Severity",
    "Timestamp",
    "get_format",
]
