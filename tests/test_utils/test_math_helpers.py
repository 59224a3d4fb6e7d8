"""Tests for number parsing helpers."""

from __future__ import annotations

import math

from svgraster.utils.math_helpers import (
    compress_spaces,
    format_number,
    parse_float,
    to_number_array,
    vector_angle,
    vector_ratio,
)


def test_parse_float_reads_leading_number():
    assert parse_float("12.5px") == 12.5
    assert parse_float("-.5e1") == -5.0
    assert parse_float(3) == 3.0
    assert math.isnan(parse_float("abc"))
    assert math.isnan(parse_float(None))


def test_to_number_array_mixed_separators():
    assert to_number_array("1, 2 3,4") == [1, 2, 3, 4]
    values = to_number_array("1 x 3")
    assert values[0] == 1 and math.isnan(values[1]) and values[2] == 3


def test_compress_spaces():
    assert compress_spaces("a \n\t b") == "a b"


def test_vector_angle_is_signed():
    assert math.isclose(vector_angle((1, 0), (0, 1)), math.pi / 2)
    assert math.isclose(vector_angle((1, 0), (0, -1)), -math.pi / 2)
    assert math.isnan(vector_ratio((0, 0), (1, 0)))


def test_format_number():
    assert format_number(50.0) == "50"
    assert format_number(0.5) == "0.5"
