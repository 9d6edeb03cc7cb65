from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

VALID_BYTE_ORDERS = {"little", "big"}

PRIMARY_SCALE = 0.0625
ENVIRONMENT_SCALE = 0.1


class FormatVersion(IntEnum):
    LEGACY = 1
    COMMAND = 2
    EXTENDED = 3

    @classmethod
    def parse(cls, value: "FormatVersion | int | str") -> "FormatVersion":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                raise ValueError(f"Unknown frame format: {value!r}") from None
        return cls(value)


@dataclass(frozen=True)
class EnvironmentLayout:
    indoor_humidity: int
    indoor_temperature: int
    outdoor_humidity: int
    outdoor_temperature: int
    byte_order: str = "big"
    scale: float = ENVIRONMENT_SCALE
    humidity_max: int = 100

    @property
    def min_length(self) -> int:
        return max(
            self.indoor_humidity,
            self.indoor_temperature + 1,
            self.outdoor_humidity,
            self.outdoor_temperature + 1,
        ) + 1

    def validate(self) -> None:
        if self.byte_order not in VALID_BYTE_ORDERS:
            raise ValueError(f"byte_order must be one of {sorted(VALID_BYTE_ORDERS)}")
        if min(self.indoor_humidity, self.indoor_temperature, self.outdoor_humidity, self.outdoor_temperature) < 0:
            raise ValueError("environment offsets must be non-negative")


@dataclass(frozen=True)
class FrameFormat:
    """
    Byte layout of one frame format version.

    Attributes:
        version: The format tag callers select explicitly.
        min_length: Fewest tokens a frame needs before its header can be decoded.
        device_id_start: Index of the first device identifier byte.
        device_id_stop: Index one past the last device identifier byte.
        length_index: Index of the two-byte big-endian payload length, or ``None``
            when the length is inferred from the token count.
        command_index: Index of the command byte in command-style frames.
        payload_offset: Index of the first temperature byte.
        byte_order: Byte order of each temperature pair in the payload.
        scale: Degrees Celsius per least significant bit.
        environment: Layout of the environmental block, if the format carries one.
    """
    version: FormatVersion
    min_length: int
    device_id_start: int
    device_id_stop: int
    payload_offset: int
    length_index: Optional[int] = None
    command_index: Optional[int] = None
    byte_order: str = "little"
    scale: float = PRIMARY_SCALE
    environment: Optional[EnvironmentLayout] = None

    @property
    def name(self) -> str:
        return self.version.name.lower()

    @property
    def has_length_field(self) -> bool:
        return self.length_index is not None

    def validate(self) -> None:
        if self.byte_order not in VALID_BYTE_ORDERS:
            raise ValueError(f"byte_order must be one of {sorted(VALID_BYTE_ORDERS)}")
        if self.device_id_stop <= self.device_id_start:
            raise ValueError("device id span must not be empty")
        if self.device_id_stop - self.device_id_start > 8:
            raise ValueError("device id span must be at most 8 bytes")
        if self.payload_offset < self.device_id_stop:
            raise ValueError("payload must start after the device id")
        if self.environment is not None:
            self.environment.validate()


LEGACY_ENVIRONMENT = EnvironmentLayout(
    indoor_humidity=1034,
    indoor_temperature=1035,
    outdoor_humidity=1052,
    outdoor_temperature=1053,
)

# Extended frames carry three extra header bytes (length and command),
# which shifts the environmental block by the same amount.
EXTENDED_ENVIRONMENT = EnvironmentLayout(
    indoor_humidity=1037,
    indoor_temperature=1038,
    outdoor_humidity=1055,
    outdoor_temperature=1056,
)

FORMATS: Dict[FormatVersion, FrameFormat] = {
    FormatVersion.LEGACY: FrameFormat(
        version=FormatVersion.LEGACY,
        min_length=8,
        device_id_start=9,
        device_id_stop=10,
        payload_offset=10,
        environment=LEGACY_ENVIRONMENT,
    ),
    FormatVersion.COMMAND: FrameFormat(
        version=FormatVersion.COMMAND,
        min_length=13,
        device_id_start=8,
        device_id_stop=10,
        length_index=10,
        command_index=12,
        payload_offset=13,
    ),
    FormatVersion.EXTENDED: FrameFormat(
        version=FormatVersion.EXTENDED,
        min_length=1068,
        device_id_start=8,
        device_id_stop=10,
        length_index=10,
        command_index=12,
        payload_offset=13,
        environment=EXTENDED_ENVIRONMENT,
    ),
}


def get_format(version: FormatVersion | int | str) -> FrameFormat:
    return FORMATS[FormatVersion.parse(version)]


__all__ = [
    "EnvironmentLayout",
    "FrameFormat",
    "FormatVersion",
    "FORMATS",
    "get_format",
    "PRIMARY_SCALE",
    "ENVIRONMENT_SCALE",
]
