from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Optional

from grainframe.formats import FormatVersion
from grainframe.parsing.frame.events import DecodeEvent, Severity


@dataclass(frozen=True)
class Timestamp:
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def as_datetime(self) -> Optional[dt.datetime]:
        try:
            return dt.datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)
        except ValueError:
            return None

    def isoformat(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )


@dataclass(frozen=True)
class FrameHeader:
    marker: str
    timestamp: Optional[Timestamp]
    device_id: Optional[int]
    device_id_hex: str
    declared_length: int
    length_source: str
    negotiated_length: int
    token_count: int
    payload_offset: int
    command_code: Optional[int] = None

    @property
    def walk_length(self) -> int:
        """Frame length the payload walk is clamped to."""
        return min(self.negotiated_length, self.token_count)

    @property
    def is_truncated(self) -> bool:
        return self.token_count < self.negotiated_length

    def as_dict(self) -> dict:
        return {
            "marker": self.marker,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "device_id": self.device_id,
            "device_id_hex": self.device_id_hex,
            "declared_length": self.declared_length,
            "length_source": self.length_source,
            "negotiated_length": self.negotiated_length,
            "token_count": self.token_count,
            "payload_offset": self.payload_offset,
            "command_code": self.command_code,
        }


@dataclass(frozen=True)
class SensorReading:
    sensor_id: int
    temperature: float
    raw: int
    offset: int
    out_of_range: bool = False

    def as_dict(self) -> dict:
        return {
            "sensor_id": self.sensor_id,
            "temperature": self.temperature,
            "raw": f"0x{self.raw:04X}",
            "offset": self.offset,
            "out_of_range": self.out_of_range,
        }


@dataclass(frozen=True)
class EnvironmentalRecord:
    indoor_temperature: Optional[float] = None
    indoor_humidity: Optional[int] = None
    outdoor_temperature: Optional[float] = None
    outdoor_humidity: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "indoor_temperature": self.indoor_temperature,
            "indoor_humidity": self.indoor_humidity,
            "outdoor_temperature": self.outdoor_temperature,
            "outdoor_humidity": self.outdoor_humidity,
        }


@dataclass(frozen=True)
class DecodeResult:
    """
    Everything that could be salvaged from one frame.

    A result is always returned, even for garbage input: ``header`` is
    ``None`` when the frame is too short, and every field or sample that
    could not be trusted is described by an entry in ``events``.

    Attributes:
        format: The frame format the tokens were decoded with.
        token_count: Total number of tokens in the frame.
        header: The decoded header, or ``None`` if the frame is too short.
        readings: Sensor readings in payload order.
        environment: Indoor/outdoor record for long frames, otherwise ``None``.
        events: Diagnostics recorded during the decode, in order.
    """
    format: FormatVersion
    token_count: int
    header: Optional[FrameHeader] = None
    readings: tuple[SensorReading, ...] = ()
    environment: Optional[EnvironmentalRecord] = None
    events: tuple[DecodeEvent, ...] = field(default=())

    @property
    def warnings(self) -> list[str]:
        return [event.message for event in self.events if event.severity == Severity.WARN]

    @property
    def errors(self) -> list[str]:
        return [event.message for event in self.events if event.severity == Severity.ERROR]

    @property
    def anomalies(self) -> list[SensorReading]:
        return [reading for reading in self.readings if reading.out_of_range]

    @property
    def ok(self) -> bool:
        return self.header is not None and not self.errors

    def reading(self, sensor_id: int) -> Optional[SensorReading]:
        for reading in self.readings:
            if reading.sensor_id == sensor_id:
                return reading
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.name.lower(),
            "token_count": self.token_count,
            "header": self.header.as_dict() if self.header else None,
            "readings": [reading.as_dict() for reading in self.readings],
            "environment": self.environment.as_dict() if self.environment else None,
            "events": [event.as_dict() for event in self.events],
        }
