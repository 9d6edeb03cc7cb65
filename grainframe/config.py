from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grainframe.formats import FormatVersion

SMALL_ARRAY_MAX_SENSORS = 512
SMALL_FRAME_LENGTH = 1068
LARGE_FRAME_LENGTH = 2136


class LengthPolicy(str, Enum):
    CLAMP = "clamp"
    STRICT = "strict"


class DecodeConfig(BaseModel):
    """Per-call decoder options, usually built from the host's saved settings."""

    expected_sensor_count: Optional[int] = Field(
        None,
        ge=1,
        validation_alias=AliasChoices("expected_sensor_count", "expectedSensorCount", "totalPoints"),
    )
    max_payload_bytes: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("max_payload_bytes", "maxPayloadBytes", "dataSize"),
    )
    format_version: FormatVersion = Field(
        FormatVersion.LEGACY,
        validation_alias=AliasChoices("format_version", "formatVersion"),
    )
    length_policy: LengthPolicy = Field(
        LengthPolicy.CLAMP,
        validation_alias=AliasChoices("length_policy", "lengthPolicy"),
    )
    plausible_min: float = Field(-100.0, validation_alias=AliasChoices("plausible_min", "plausibleMin"))
    plausible_max: float = Field(100.0, validation_alias=AliasChoices("plausible_max", "plausibleMax"))

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("format_version", mode="before")
    @classmethod
    def _parse_format(cls, value):
        return FormatVersion.parse(value)

    @model_validator(mode="after")
    def _check_band(self) -> "DecodeConfig":
        if self.plausible_min >= self.plausible_max:
            raise ValueError("plausible_min must be lower than plausible_max")
        return self

    @property
    def plausible_range(self) -> tuple[float, float]:
        return (self.plausible_min, self.plausible_max)


class DecoderSettings(BaseSettings):
    expected_sensor_count: Optional[int] = Field(None, validation_alias="GRAINFRAME_EXPECTED_SENSOR_COUNT")
    max_payload_bytes: Optional[int] = Field(None, validation_alias="GRAINFRAME_MAX_PAYLOAD_BYTES")
    format_version: str = Field("legacy", validation_alias="GRAINFRAME_FORMAT")
    length_policy: LengthPolicy = Field(LengthPolicy.CLAMP, validation_alias="GRAINFRAME_LENGTH_POLICY")
    plausible_min: float = Field(-100.0, validation_alias="GRAINFRAME_PLAUSIBLE_MIN")
    plausible_max: float = Field(100.0, validation_alias="GRAINFRAME_PLAUSIBLE_MAX")

    log_ring_size: int = Field(200, validation_alias="GRAINFRAME_LOG_RING_SIZE")
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore")

    def to_decode_config(self, **overrides) -> DecodeConfig:
        values = {
            "expected_sensor_count": self.expected_sensor_count,
            "max_payload_bytes": self.max_payload_bytes,
            "format_version": self.format_version,
            "length_policy": self.length_policy,
            "plausible_min": self.plausible_min,
            "plausible_max": self.plausible_max,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return DecodeConfig.model_validate(values)


@lru_cache
def get_settings() -> DecoderSettings:
    return DecoderSettings()
