"""
Composite (midpoint) chart generation.

A composite chart represents the relationship itself: every planet present in
both inputs is placed at the short-arc midpoint of the two longitudes, the
ascendant likewise, and houses are laid out 30 degrees apart from the
composite ascendant.

Public API
----------
generate_composite(chart_a, chart_b, *, detector=None) -> CompositeChart
CompositeChartGenerator(chart_a, chart_b, *, detector=None).generate()

Returned structure (``CompositeChart.to_dict()``):
    {
       "planets": {name: {longitude, sign, degree, house}, ...},
       "ascendant": {longitude, sign, degree},
       "houses": [12 cusps],
       "aspects": [ {planets: [p1, p2], aspect, orb, strength, interpretation}, ... ],
       "interpretation": {dominantThemes, relationshipStyle, challenges,
                          strengths, summary}
    }
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from itertools import combinations
from typing import Any, Dict, List, Optional, Tuple

from compat_core.angles import (
    calculate_midpoint,
    degree_in_sign,
    equal_house_cusps,
    house_from_longitude,
    sign_index,
    SIGN_NAMES,
)
from compat_core.aspects import CHALLENGING_ASPECTS, HARMONIOUS_ASPECTS, AspectDetector
from compat_core.charts import read_ascendant, read_planets
from compat_core.errors import CalculationError, CompatibilityError, ensure_finite

logger = logging.getLogger(__name__)

COMPOSITE_ASPECT_INTERPRETATIONS: Dict[str, str] = {
    "conjunction": "{p1}-{p2} conjunction shows merged energies and shared purpose",
    "trine": "{p1}-{p2} trine indicates natural flow and mutual support",
    "sextile": "{p1}-{p2} sextile suggests cooperative and adaptive relationship",
    "square": "{p1}-{p2} square reveals tension that drives relationship evolution",
    "opposition": "{p1}-{p2} opposition highlights complementary differences",
}

ROMANTIC_HOUSES = frozenset({5, 7, 8})


@dataclass(frozen=True)
class CompositePlanet:
    longitude: float
    sign: int
    degree: float
    house: int


@dataclass(frozen=True)
class CompositeAspect:
    planets: Tuple[str, str]
    aspect: str
    orb: float
    strength: float
    interpretation: str = ""


@dataclass(frozen=True)
class CompositeChart:
    planets: Dict[str, CompositePlanet]
    ascendant: float
    houses: Tuple[float, ...]
    aspects: List[CompositeAspect] = field(default_factory=list)
    interpretation: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "planets": {name: asdict(p) for name, p in self.planets.items()},
            "ascendant": {
                "longitude": self.ascendant,
                "sign": sign_index(self.ascendant),
                "degree": degree_in_sign(self.ascendant),
            },
            "houses": list(self.houses),
            "aspects": [
                {
                    "planets": list(a.planets),
                    "aspect": a.aspect,
                    "orb": a.orb,
                    "strength": a.strength,
                    "interpretation": a.interpretation,
                }
                for a in self.aspects
            ],
            "interpretation": dict(self.interpretation),
        }


def composite_aspect_interpretation(planet1: str, planet2: str, aspect: str) -> str:
    template = COMPOSITE_ASPECT_INTERPRETATIONS.get(aspect)
    if template is None:
        return f"{planet1}-{planet2} {aspect} in composite chart"
    return template.format(p1=planet1, p2=planet2)


class CompositeChartGenerator:
    """Midpoint composite of two charts. Validates on construction."""

    def __init__(self, chart_a: Any, chart_b: Any, *, detector: Optional[AspectDetector] = None):
        self.planets_a = read_planets(chart_a, "chart1")
        self.planets_b = read_planets(chart_b, "chart2")
        self.ascendant_a = read_ascendant(chart_a, "chart1")
        self.ascendant_b = read_ascendant(chart_b, "chart2")
        self.detector = detector or AspectDetector()

    def composite_ascendant(self) -> float:
        return calculate_midpoint(self.ascendant_a, self.ascendant_b)

    def composite_longitudes(self) -> Dict[str, float]:
        """Midpoints for planets present in both charts, in chart A's order."""
        return {
            name: ensure_finite(calculate_midpoint(pos.longitude, self.planets_b[name].longitude), f"{name} midpoint")
            for name, pos in self.planets_a.items()
            if name in self.planets_b
        }

    def composite_aspects(self, longitudes: Dict[str, float]) -> List[CompositeAspect]:
        out: List[CompositeAspect] = []
        for p1, p2 in combinations(longitudes, 2):
            hit = self.detector.detect(longitudes[p1], longitudes[p2])
            if hit is None:
                continue
            out.append(
                CompositeAspect(
                    planets=(p1, p2),
                    aspect=hit.type,
                    orb=hit.orb,
                    strength=hit.exactness,
                    interpretation=composite_aspect_interpretation(p1, p2, hit.type),
                )
            )
        return out

    def generate(self) -> CompositeChart:
        try:
            ascendant = ensure_finite(self.composite_ascendant(), "Composite ascendant")
            houses = tuple(equal_house_cusps(ascendant))
            longitudes = self.composite_longitudes()
            planets = {
                name: CompositePlanet(
                    longitude=lon,
                    sign=sign_index(lon),
                    degree=degree_in_sign(lon),
                    house=house_from_longitude(lon, houses),
                )
                for name, lon in longitudes.items()
            }
            aspects = self.composite_aspects(longitudes)
            interpretation = interpret_composite(planets, aspects)
        except CompatibilityError:
            raise
        except Exception as exc:
            raise CalculationError(
                f"Composite chart generation failed: {exc}",
                details={"operation": "generate_composite"},
                cause=exc,
            ) from exc
        logger.info("composite_generated", extra={"planets": len(planets), "aspects": len(aspects)})
        return CompositeChart(
            planets=planets,
            ascendant=ascendant,
            houses=houses,
            aspects=aspects,
            interpretation=interpretation,
        )


def _dominant_themes(planets: Dict[str, CompositePlanet], aspects: List[CompositeAspect]) -> List[str]:
    themes: List[str] = []
    sign_counts: Dict[int, int] = {}
    for p in planets.values():
        sign_counts[p.sign] = sign_counts.get(p.sign, 0) + 1
    if sign_counts:
        top = max(sign_counts.values())
        if top >= 3:
            # first sign reaching the max, in planet order
            dominant = next(s for s, c in sign_counts.items() if c == top)
            themes.append(f"Strong {SIGN_NAMES[dominant]} emphasis in relationship")

    harmonious = sum(1 for a in aspects if a.aspect in HARMONIOUS_ASPECTS)
    challenging = sum(1 for a in aspects if a.aspect in CHALLENGING_ASPECTS)
    if harmonious > challenging * 1.5:
        themes.append("Harmonious aspects dominate, suggesting smooth relationship flow")
    elif challenging > harmonious * 1.5:
        themes.append("Challenging aspects suggest relationship requires active growth")
    return themes


def _relationship_style(planets: Dict[str, CompositePlanet]) -> str:
    venus = planets.get("VENUS")
    mars = planets.get("MARS")
    if venus is not None and mars is not None:
        if venus.house == mars.house:
            return "Intensely romantic and passionate connection"
        if venus.house in ROMANTIC_HOUSES and mars.house in ROMANTIC_HOUSES:
            return "Romantic relationship with strong physical attraction"
    return "Balanced relationship with complementary energies"


def interpret_composite(planets: Dict[str, CompositePlanet], aspects: List[CompositeAspect]) -> Dict[str, Any]:
    counts: Dict[str, int] = {}
    for a in aspects:
        counts[a.aspect] = counts.get(a.aspect, 0) + 1

    challenges: List[str] = []
    if counts.get("square", 0) > 2:
        challenges.append("Multiple squares indicate areas requiring compromise")
    if counts.get("opposition", 0) > 1:
        challenges.append("Oppositions suggest need for balance and understanding")

    strengths: List[str] = []
    if counts.get("trine", 0) > 2:
        strengths.append("Multiple trines suggest natural harmony and ease")
    if counts.get("sextile", 0) > 2:
        strengths.append("Sextiles indicate cooperative and supportive energy")

    summary = f"Composite chart with {len(planets)} planets and {len(aspects)} aspects. "
    if len(aspects) > 10:
        summary += "Highly active relationship with many interconnected energies."
    elif len(aspects) > 5:
        summary += "Moderately active relationship with balanced dynamics."
    else:
        summary += "Relationship with focused, selective energies."

    return {
        "dominantThemes": _dominant_themes(planets, aspects),
        "relationshipStyle": _relationship_style(planets),
        "challenges": challenges,
        "strengths": strengths,
        "summary": summary,
    }


def generate_composite(chart_a: Any, chart_b: Any, *, detector: Optional[AspectDetector] = None) -> CompositeChart:
    """Entry point: build the composite chart of two natal charts."""
    return CompositeChartGenerator(chart_a, chart_b, detector=detector).generate()
