import doctest

import pytest

import compat_core.angles as angles
from compat_core.angles import (
    calculate_midpoint,
    circular_distance,
    degree_in_sign,
    equal_house_cusps,
    house_from_longitude,
    normalize_angle,
    ordinal,
    sign_index,
)


def test_module_doctests():
    failures, _ = doctest.testmod(angles)
    assert failures == 0


@pytest.mark.parametrize("raw, expected", [(-30, 330.0), (360, 0.0), (720.5, 0.5), (0, 0.0), (359.5, 359.5)])
def test_normalize_angle(raw, expected):
    assert normalize_angle(raw) == pytest.approx(expected)


def test_normalize_tiny_negative_stays_below_360():
    value = normalize_angle(-1e-20)
    assert 0.0 <= value < 360.0


@pytest.mark.parametrize("a", [0.0, 15.5, 180.0, 359.9, -42.0])
@pytest.mark.parametrize("k", [-3, -1, 1, 5])
def test_normalize_is_periodic(a, k):
    assert normalize_angle(a + 360 * k) == pytest.approx(normalize_angle(a), abs=1e-9)


@pytest.mark.parametrize("a, b, expected", [(350, 10, 20.0), (10, 350, 20.0), (0, 180, 180.0), (0, 90, 90.0), (45, 45, 0.0)])
def test_circular_distance(a, b, expected):
    assert circular_distance(a, b) == pytest.approx(expected)


def test_midpoint_basic_values():
    assert calculate_midpoint(0, 120) == 60.0
    assert calculate_midpoint(120, 120) == 120.0
    assert calculate_midpoint(0, 180) == 90.0


def test_midpoint_takes_short_arc_across_zero():
    assert calculate_midpoint(350, 10) == 0.0
    assert calculate_midpoint(10, 350) == 0.0
    assert calculate_midpoint(340, 20) == 0.0
    assert calculate_midpoint(300, 60) == 0.0


@pytest.mark.parametrize("a, b", [(0, 120), (350, 10), (200, 10), (90, 300), (0, 180), (179.5, 359.5)])
def test_midpoint_is_symmetric(a, b):
    assert calculate_midpoint(a, b) == pytest.approx(calculate_midpoint(b, a))


@pytest.mark.parametrize("x", [0.0, 12.25, 180.0, 359.75])
def test_midpoint_of_point_with_itself(x):
    assert calculate_midpoint(x, x) == pytest.approx(x)


def test_sign_helpers():
    assert sign_index(0) == 0
    assert sign_index(45) == 1
    assert sign_index(359.99) == 11
    assert degree_in_sign(75.5) == pytest.approx(15.5)


def test_equal_house_cusps_wrap():
    cusps = equal_house_cusps(350)
    assert len(cusps) == 12
    assert cusps[0] == pytest.approx(350)
    assert cusps[1] == pytest.approx(20)
    assert cusps[11] == pytest.approx(320)


def test_house_lookup_is_half_open():
    cusps = equal_house_cusps(0)
    assert house_from_longitude(15, cusps) == 1
    assert house_from_longitude(30, cusps) == 2
    assert house_from_longitude(29.999, cusps) == 1
    assert house_from_longitude(359, cusps) == 12


def test_house_lookup_wraps_past_zero():
    cusps = equal_house_cusps(90)
    assert house_from_longitude(95, cusps) == 1
    assert house_from_longitude(80, cusps) == 12
    assert house_from_longitude(0, cusps) == 10


def test_house_lookup_degenerate_cusps_default_to_first():
    assert house_from_longitude(123, [0.0] * 12) == 1


@pytest.mark.parametrize("n, text", [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd"), (112, "112th")])
def test_ordinal(n, text):
    assert ordinal(n) == text
