"""Tests for the frame format table."""
import dataclasses

import pytest

from grainframe.formats import ENVIRONMENT_SCALE, FORMATS, PRIMARY_SCALE, FormatVersion, get_format


def test_builtin_formats_validate():
    for fmt in FORMATS.values():
        fmt.validate()


def test_payload_offsets_per_version():
    assert get_format(FormatVersion.LEGACY).payload_offset == 10
    assert get_format(FormatVersion.COMMAND).payload_offset == 13
    assert get_format(FormatVersion.EXTENDED).payload_offset == 13


def test_minimum_lengths_per_version():
    assert [get_format(v).min_length for v in FormatVersion] == [8, 13, 1068]


def test_payload_pairs_are_little_endian_everywhere():
    assert {fmt.byte_order for fmt in FORMATS.values()} == {"little"}


def test_environment_only_on_long_formats():
    assert get_format("legacy").environment is not None
    assert get_format("command").environment is None
    assert get_format("extended").environment.byte_order == "big"


def test_get_format_by_name_and_number():
    assert get_format("Command") is FORMATS[FormatVersion.COMMAND]
    assert get_format(3).name == "extended"
    with pytest.raises(ValueError):
        get_format("v4")


def test_validate_rejects_bad_layout():
    legacy = get_format(FormatVersion.LEGACY)
    with pytest.raises(ValueError):
        dataclasses.replace(legacy, byte_order="middle").validate()
    with pytest.raises(ValueError):
        dataclasses.replace(legacy, device_id_start=2, device_id_stop=12).validate()
    with pytest.raises(ValueError):
        dataclasses.replace(legacy, payload_offset=8).validate()


def test_scales_per_block():
    assert {fmt.scale for fmt in FORMATS.values()} == {PRIMARY_SCALE}
    assert {fmt.environment.scale for fmt in FORMATS.values() if fmt.environment} == {ENVIRONMENT_SCALE}
