"""Aspect detection between two ecliptic longitudes.

An aspect is found when the circular separation of two points lies within
the orb of one of the target angles below. The orb limit itself is
included (``<=``). When configurable orbs overlap, the tightest match wins.

Default policy
--------------
============  ======  =====  ========
aspect        angle   orb    weight
============  ======  =====  ========
conjunction   0       8      1.0
sextile       60      6      0.8
square        90      7      0.6
trine         120     8      0.9
opposition    180     8      0.7
============  ======  =====  ========

``weight`` scales exactness into the synastry strength of a hit.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from compat_core.angles import circular_distance
from compat_core.errors import ValidationError, ensure_finite

HARMONIOUS_ASPECTS = frozenset({"trine", "sextile"})
CHALLENGING_ASPECTS = frozenset({"square", "opposition"})


@dataclass(frozen=True)
class AspectSpec:
    name: str
    angle: float
    orb: float
    weight: float


@dataclass(frozen=True)
class Aspect:
    """A detected aspect. ``orb`` is the deviation from exact in degrees."""

    type: str
    angle: float
    orb: float
    exactness: float


DEFAULT_ASPECT_SPECS: Tuple[AspectSpec, ...] = (
    AspectSpec("conjunction", 0.0, 8.0, 1.0),
    AspectSpec("sextile", 60.0, 6.0, 0.8),
    AspectSpec("square", 90.0, 7.0, 0.6),
    AspectSpec("trine", 120.0, 8.0, 0.9),
    AspectSpec("opposition", 180.0, 8.0, 0.7),
)

ASPECT_WEIGHTS: Dict[str, float] = {s.name: s.weight for s in DEFAULT_ASPECT_SPECS}

# Weight used when a hit carries an aspect type the policy does not know
_FALLBACK_WEIGHT = 0.5


class AspectDetector:
    """Classify pairs of longitudes against a fixed aspect table."""

    def __init__(self, specs: Optional[Sequence[AspectSpec]] = None):
        self.specs: Tuple[AspectSpec, ...] = tuple(specs) if specs is not None else DEFAULT_ASPECT_SPECS
        if not self.specs:
            raise ValidationError("Aspect policy must define at least one aspect", code="INVALID_CONFIG")
        for spec in self.specs:
            if spec.orb < 0:
                raise ValidationError(
                    f"Orb for {spec.name} must be non-negative",
                    code="INVALID_CONFIG",
                    details={"aspect": spec.name, "orb": spec.orb},
                )
        self._weights = {s.name: s.weight for s in self.specs}

    def detect(self, lon1: float, lon2: float) -> Optional[Aspect]:
        """Return the aspect formed by two longitudes, or None."""
        separation = ensure_finite(circular_distance(lon1, lon2), "Angular separation")
        best: Optional[Aspect] = None
        for spec in self.specs:
            deviation = abs(separation - spec.angle)
            if deviation > spec.orb:
                continue
            if spec.orb > 0:
                exactness = max(0.0, min(1.0, 1.0 - deviation / spec.orb))
            else:
                exactness = 1.0
            if best is None or deviation < best.orb:
                best = Aspect(type=spec.name, angle=spec.angle, orb=deviation, exactness=exactness)
        return best

    def weight_for(self, aspect_type: str) -> float:
        return self._weights.get(aspect_type, _FALLBACK_WEIGHT)

    def strength(self, aspect: Aspect) -> float:
        """Exactness scaled by the aspect-type weight, clamped to [0, 1]."""
        value = aspect.exactness * self.weight_for(aspect.type)
        return max(0.0, min(1.0, value))


_DEFAULT_DETECTOR = AspectDetector()


def calculate_aspect(lon1: float, lon2: float) -> Optional[Aspect]:
    """Detect an aspect using the default policy.

    >>> calculate_aspect(0, 5).type
    'conjunction'
    >>> calculate_aspect(0, 45) is None
    True
    """
    return _DEFAULT_DETECTOR.detect(lon1, lon2)


def calculate_aspect_strength(aspect: Aspect) -> float:
    return _DEFAULT_DETECTOR.strength(aspect)
