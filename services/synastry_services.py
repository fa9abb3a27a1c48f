"""
Synastry (cross-chart) analysis.

Compares every planet of chart A against every planet of chart B and maps
chart B's planets onto chart A's houses.

Public API
----------
compute_synastry(chart_a, chart_b, *, detector=None) -> SynastryResult
    Validate both charts, then run aspects + overlays + summary.

SynastryAnalyzer(chart_a, chart_b, *, detector=None)
    .compute_aspects()        -> list[SynastryAspect]
    .compute_house_overlays() -> list[HouseOverlay]
    .analyze()                -> SynastryResult

Returned structure (``SynastryResult.to_dict()``):
    {
       "aspects": [ {planet1, planet2, aspect, orb, strength, interpretation}, ... ],
       "overlays": [ {planet, house, sign, interpretation}, ... ],
       "summary": {totalAspects, totalOverlays, aspectDistribution,
                   overlayDistribution, keyThemes}
    }

Notes
-----
- Aspect emission order: chart A planets outer, chart B planets inner, both
  in insertion order.
- Overlay ``sign`` is the 0-based zodiac sign of chart B's planet.
- Empty planet maps are valid and produce empty lists.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from compat_core.angles import house_from_longitude, ordinal, sign_index
from compat_core.aspects import CHALLENGING_ASPECTS, HARMONIOUS_ASPECTS, AspectDetector
from compat_core.errors import CalculationError, CompatibilityError, ensure_finite
from compat_core.charts import read_houses, read_planets

logger = logging.getLogger(__name__)

ASPECT_INTERPRETATIONS: Dict[str, str] = {
    "conjunction": "{p1}-{p2} conjunction creates intense connection and shared energy",
    "trine": "{p1}-{p2} trine indicates natural harmony and understanding",
    "sextile": "{p1}-{p2} sextile shows supportive and cooperative energy",
    "square": "{p1}-{p2} square suggests tension that can lead to growth",
    "opposition": "{p1}-{p2} opposition highlights differences and balance needs",
}

HOUSE_THEMES: Dict[int, str] = {
    1: "self-image and personal identity",
    2: "values, finances, and self-worth",
    3: "communication, learning, and siblings",
    4: "home, family, and emotional security",
    5: "romance, children, and creativity",
    6: "health, service, and daily routines",
    7: "partnerships and committed relationships",
    8: "intimacy, transformation, and shared resources",
    9: "philosophy, travel, and higher learning",
    10: "career, reputation, and public image",
    11: "friendships, hopes, and community",
    12: "spirituality, subconscious, and sacrifice",
}

RELATIONSHIP_HOUSES = frozenset({5, 7, 8})


@dataclass(frozen=True)
class SynastryAspect:
    planet1: str
    planet2: str
    aspect: str
    orb: float
    strength: float
    interpretation: str = ""


@dataclass(frozen=True)
class HouseOverlay:
    planet: str
    house: int
    sign: int
    interpretation: str = ""


@dataclass(frozen=True)
class SynastryResult:
    aspects: List[SynastryAspect] = field(default_factory=list)
    overlays: List[HouseOverlay] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aspects": [asdict(a) for a in self.aspects],
            "overlays": [asdict(o) for o in self.overlays],
            "summary": dict(self.summary),
        }


def aspect_interpretation(planet1: str, planet2: str, aspect: str) -> str:
    template = ASPECT_INTERPRETATIONS.get(aspect)
    if template is None:
        return f"{planet1}-{planet2} {aspect} requires individual assessment"
    return template.format(p1=planet1, p2=planet2)


def overlay_interpretation(planet: str, house: int) -> str:
    theme = HOUSE_THEMES.get(house, "general life areas")
    return f"{planet} in {ordinal(house)} house brings {planet.lower()} energy to {theme}"


class SynastryAnalyzer:
    """Cross-chart aspect matrix and house overlays. Validates on construction."""

    def __init__(self, chart_a: Any, chart_b: Any, *, detector: Optional[AspectDetector] = None):
        self.planets_a = read_planets(chart_a, "chart1")
        self.planets_b = read_planets(chart_b, "chart2")
        self.houses_a = read_houses(chart_a, "chart1")
        # B's cusps are not used for overlays but still must be well formed
        self.houses_b = read_houses(chart_b, "chart2")
        self.detector = detector or AspectDetector()

    def compute_aspects(self) -> List[SynastryAspect]:
        out: List[SynastryAspect] = []
        for name_a, pos_a in self.planets_a.items():
            for name_b, pos_b in self.planets_b.items():
                hit = self.detector.detect(pos_a.longitude, pos_b.longitude)
                if hit is None:
                    continue
                strength = ensure_finite(self.detector.strength(hit), "Aspect strength")
                out.append(
                    SynastryAspect(
                        planet1=name_a,
                        planet2=name_b,
                        aspect=hit.type,
                        orb=hit.orb,
                        strength=strength,
                        interpretation=aspect_interpretation(name_a, name_b, hit.type),
                    )
                )
        return out

    def compute_house_overlays(self) -> List[HouseOverlay]:
        out: List[HouseOverlay] = []
        for name, pos in self.planets_b.items():
            house = house_from_longitude(pos.longitude, self.houses_a)
            out.append(
                HouseOverlay(
                    planet=name,
                    house=house,
                    sign=sign_index(pos.longitude),
                    interpretation=overlay_interpretation(name, house),
                )
            )
        return out

    def analyze(self) -> SynastryResult:
        try:
            aspects = self.compute_aspects()
            overlays = self.compute_house_overlays()
            summary = summarize_synastry(aspects, overlays)
        except CompatibilityError:
            raise
        except Exception as exc:
            raise CalculationError(
                f"Synastry analysis failed: {exc}",
                details={"operation": "analyze_synastry"},
                cause=exc,
            ) from exc
        logger.info(
            "synastry_computed",
            extra={"aspects": len(aspects), "overlays": len(overlays)},
        )
        return SynastryResult(aspects=aspects, overlays=overlays, summary=summary)


def summarize_synastry(aspects: List[SynastryAspect], overlays: List[HouseOverlay]) -> Dict[str, Any]:
    aspect_types: Dict[str, int] = {}
    for a in aspects:
        aspect_types[a.aspect] = aspect_types.get(a.aspect, 0) + 1
    houses: Dict[int, int] = {}
    for o in overlays:
        houses[o.house] = houses.get(o.house, 0) + 1

    themes: List[str] = []
    harmonious = sum(1 for a in aspects if a.aspect in HARMONIOUS_ASPECTS)
    challenging = sum(1 for a in aspects if a.aspect in CHALLENGING_ASPECTS)
    if harmonious > len(aspects) * 0.4:
        themes.append("Strong harmonious connections suggest natural compatibility")
    if challenging > len(aspects) * 0.3:
        themes.append("Challenging aspects indicate areas for growth and understanding")
    if sum(1 for o in overlays if o.house in RELATIONSHIP_HOUSES) > 2:
        themes.append("Multiple planets in relationship houses show strong romantic potential")

    return {
        "totalAspects": len(aspects),
        "totalOverlays": len(overlays),
        "aspectDistribution": aspect_types,
        "overlayDistribution": houses,
        "keyThemes": themes,
    }


def compute_synastry(chart_a: Any, chart_b: Any, *, detector: Optional[AspectDetector] = None) -> SynastryResult:
    """Entry point: full synastry analysis of two charts."""
    return SynastryAnalyzer(chart_a, chart_b, detector=detector).analyze()
