"""Angle helpers shared by the synastry and composite paths.

All longitudes are ecliptic degrees. Results are normalized to [0, 360)
unless stated otherwise.

>>> normalize_angle(-30)
330.0
>>> circular_distance(350, 10)
20.0
>>> calculate_midpoint(0, 120)
60.0
"""
from __future__ import annotations

import math
from typing import List, Sequence

DEGREES_PER_CIRCLE = 360.0
DEGREES_PER_SIGN = 30.0
HOUSES_COUNT = 12

SIGN_NAMES = [
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
]


def normalize_angle(angle: float) -> float:
    """Reduce any real angle into [0, 360)."""
    x = float(angle) % DEGREES_PER_CIRCLE
    # float modulo can round a tiny negative input up to exactly 360.0
    if x >= DEGREES_PER_CIRCLE:
        x -= DEGREES_PER_CIRCLE
    return x + 0.0


def circular_distance(a: float, b: float) -> float:
    """Shorter-arc separation between two longitudes, in [0, 180]."""
    d = abs(normalize_angle(a) - normalize_angle(b))
    return d if d <= 180.0 else DEGREES_PER_CIRCLE - d


def calculate_midpoint(a: float, b: float) -> float:
    """Short-arc midpoint of two longitudes.

    The naive mean is shifted by 180 degrees when the raw difference exceeds
    180, so 350 and 10 meet at 0 rather than at 180. Symmetric in its
    arguments and ``calculate_midpoint(x, x) == x``.
    """
    lon_a = normalize_angle(a)
    lon_b = normalize_angle(b)
    midpoint = (lon_a + lon_b) / 2.0
    if abs(lon_a - lon_b) > 180.0:
        midpoint += 180.0
    return normalize_angle(midpoint)


def sign_index(longitude: float) -> int:
    """Zodiac sign index 0..11 (Aries=0)."""
    return int(math.floor(normalize_angle(longitude) / DEGREES_PER_SIGN)) % 12


def degree_in_sign(longitude: float) -> float:
    return normalize_angle(longitude) % DEGREES_PER_SIGN


def equal_house_cusps(ascendant: float) -> List[float]:
    """Twelve cusps spaced 30 degrees apart starting at the ascendant."""
    return [normalize_angle(ascendant + DEGREES_PER_SIGN * k) for k in range(HOUSES_COUNT)]


def house_from_longitude(longitude: float, cusps: Sequence[float]) -> int:
    """Return the 1-based house whose half-open interval contains ``longitude``.

    House i spans [cusp_i, cusp_{i+1}); the interval that wraps past 0 degrees
    is handled explicitly. Falls back to the 1st house for degenerate cusp
    sets where every interval is empty.
    """
    lon = normalize_angle(longitude)
    n = len(cusps)
    for i in range(n):
        start = normalize_angle(cusps[i])
        end = normalize_angle(cusps[(i + 1) % n])
        if end > start:
            if start <= lon < end:
                return i + 1
        elif end < start:
            if lon >= start or lon < end:
                return i + 1
    return 1


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th'."""
    suffixes = ["th", "st", "nd", "rd"]
    v = n % 100
    if 10 < v < 14:
        return f"{n}th"
    return f"{n}{suffixes[n % 10] if n % 10 < 4 else 'th'}"
