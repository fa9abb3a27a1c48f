import doctest
import math

import pytest

import compat_core.aspects as aspects_mod
from compat_core.aspects import (
    ASPECT_WEIGHTS,
    AspectDetector,
    AspectSpec,
    calculate_aspect,
    calculate_aspect_strength,
)
from compat_core.errors import CalculationError, ValidationError


def test_module_doctests():
    failures, _ = doctest.testmod(aspects_mod)
    assert failures == 0


def test_conjunction_within_orb():
    hit = calculate_aspect(0, 5)
    assert hit.type == "conjunction"
    assert hit.orb == pytest.approx(5)


def test_orb_limit_is_included():
    hit = calculate_aspect(0, 8)
    assert hit is not None
    assert hit.type == "conjunction"
    assert hit.orb == pytest.approx(8)
    assert hit.exactness == pytest.approx(0.0)


def test_just_beyond_orb_is_no_aspect():
    assert calculate_aspect(0, 8.1) is None


def test_opposition():
    hit = calculate_aspect(0, 175)
    assert hit.type == "opposition"
    assert hit.orb == pytest.approx(5)


def test_conjunction_across_zero():
    hit = calculate_aspect(355, 3)
    assert hit.type == "conjunction"
    assert hit.orb == pytest.approx(8)


def test_twenty_degrees_apart_is_no_aspect():
    assert calculate_aspect(350, 10) is None


@pytest.mark.parametrize(
    "a, b, kind, orb",
    [(0, 120, "trine", 0.0), (0, 93, "square", 3.0), (0, 64, "sextile", 4.0), (200, 20, "opposition", 0.0), (10, 250, "trine", 0.0)],
)
def test_aspect_table(a, b, kind, orb):
    hit = calculate_aspect(a, b)
    assert hit.type == kind
    assert hit.orb == pytest.approx(orb)


def test_common_case_is_none():
    assert calculate_aspect(0, 45) is None
    assert calculate_aspect(0, 150) is None


def test_exactness_scales_with_orb():
    assert calculate_aspect(0, 4).exactness == pytest.approx(0.5)
    assert calculate_aspect(0, 0).exactness == pytest.approx(1.0)


def test_strength_uses_type_weight():
    assert calculate_aspect_strength(calculate_aspect(0, 0)) == pytest.approx(1.0)
    assert calculate_aspect_strength(calculate_aspect(0, 120)) == pytest.approx(ASPECT_WEIGHTS["trine"])
    square = calculate_aspect(0, 93.5)
    assert calculate_aspect_strength(square) == pytest.approx(0.5 * 0.6)


def test_harmonious_weighted_above_square():
    assert ASPECT_WEIGHTS["trine"] > ASPECT_WEIGHTS["square"]
    assert ASPECT_WEIGHTS["sextile"] > ASPECT_WEIGHTS["square"]


def test_custom_orbs():
    detector = AspectDetector([AspectSpec("conjunction", 0, 1, 1.0)])
    assert detector.detect(0, 2) is None
    assert detector.detect(0, 1).type == "conjunction"


def test_overlapping_orbs_pick_tightest():
    detector = AspectDetector([AspectSpec("wide", 0, 10, 1.0), AspectSpec("semi", 10, 10, 1.0)])
    hit = detector.detect(0, 9)
    assert hit.type == "semi"
    assert hit.orb == pytest.approx(1)


def test_unknown_type_weight_falls_back():
    detector = AspectDetector([AspectSpec("quincunx", 150, 3, 0.3)])
    assert detector.weight_for("quincunx") == pytest.approx(0.3)
    assert detector.weight_for("biquintile") == pytest.approx(0.5)


def test_invalid_policies():
    with pytest.raises(ValidationError) as excinfo:
        AspectDetector([])
    assert excinfo.value.code == "INVALID_CONFIG"
    with pytest.raises(ValidationError) as excinfo:
        AspectDetector([AspectSpec("conjunction", 0, -1, 1.0)])
    assert excinfo.value.details["aspect"] == "conjunction"


def test_nan_longitude_is_calculation_error():
    with pytest.raises(CalculationError):
        calculate_aspect(math.nan, 0)
