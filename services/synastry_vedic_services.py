"""synastry_vedic_services
================================================================================
Vedic Ashtakoota (Guna Milan) compatibility scorer.

Scores two Moon-nakshatra placements against the eight classical kootas
(0-36 total), rates the total, and derives recommendations, mitigating
exceptions and a short analysis block. The first chart is the bride's side,
the second the groom's; only Varna and Vashya are directional.

Design principles
-----------------
- Pure functions with explicit inputs/outputs; no I/O in the core logic.
- All classification tables live in ``compat_core.koota_tables``; the Tara
  and Bhakoot point tables can be overridden per calculator.
- Deterministic: identical inputs give identical results.

Public API
----------
- score_guna_milan(chart_a, chart_b, *, tara_points=None, bhakoot_points=None) -> GunaMilanResult
- GunaMilanCalculator(...).calculate_compatibility(chart_a, chart_b)
- explain_guna_milan(result) -> str
- nakshatra_from_longitude(moon_longitude) -> Nakshatra

Internal helpers
----------------
- score_* functions per koota, each returning {"awarded", "max", "detail"}
- koota_compatibility_status, interpret_total_score
- guna_recommendations, guna_exceptions, guna_analysis

Doctests
--------
>>> koota_compatibility_status(0, 8)
'Dosha (bad)'
>>> koota_compatibility_status(6, 6)
'Excellent'
>>> interpret_total_score(30)["rating"]
'Excellent Match'
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from compat_core.angles import normalize_angle, sign_index
from compat_core.charts import Nakshatra, read_moon_nakshatra
from compat_core.errors import CalculationError, CompatibilityError, ensure_finite
from compat_core.koota_tables import (
    BHAKOOT_POINTS,
    DEFAULT_VASHYA_GROUP,
    GANA_COMPATIBLE,
    GRAHA_MAITRI_POINTS,
    KOOTA_MAX_POINTS,
    KOOTA_MEANINGS,
    KOOTA_NAMES,
    KOOTA_TITLES,
    MAX_TOTAL_POINTS,
    NAKSHATRA_GANA,
    NAKSHATRA_LORD,
    NAKSHATRA_NADI,
    NAKSHATRA_NAMES,
    NAKSHATRA_SPAN_DEG,
    NAKSHATRA_YONI,
    PLANETARY_FRIENDSHIP,
    RATING_BANDS,
    TARA_POINTS,
    VARNA_BY_SIGN,
    VARNA_HIERARCHY,
    VASHYA_COMPATIBLE,
    VASHYA_GROUP_BY_LORD,
    YONI_COMPATIBLE,
)

logger = logging.getLogger(__name__)


def koota_compatibility_status(awarded: float, max_points: float) -> str:
    """Map a koota score to a simple compatibility status label.

    Statuses are derived purely from awarded/max ratio:
    - 0 -> "Dosha (bad)"
    - (0, 0.5) -> "Neutral"
    - [0.5, 0.75) -> "Average"
    - [0.75, 0.95) -> "Good"
    - [0.95, 1.0] -> "Excellent"
    """
    if max_points <= 0:
        return "Neutral"
    if awarded <= 0:
        return "Dosha (bad)"
    ratio = awarded / max_points
    if ratio >= 0.95:
        return "Excellent"
    if ratio >= 0.75:
        return "Good"
    if ratio >= 0.50:
        return "Average"
    return "Neutral"


def interpret_total_score(total: float) -> Dict[str, str]:
    for lower, rating, advice in RATING_BANDS:
        if total >= lower:
            return {"rating": rating, "advice": advice}
    lower, rating, advice = RATING_BANDS[-1]
    return {"rating": rating, "advice": advice}


# ============================ Koota scorers ============================

def score_varna(bride: Nakshatra, groom: Nakshatra) -> Dict:
    """Groom's varna should be equal to or higher than the bride's."""
    r1 = VARNA_HIERARCHY[bride.caste]
    r2 = VARNA_HIERARCHY[groom.caste]
    awarded = 1.0 if r2 >= r1 else 0.0
    return {
        "awarded": awarded,
        "max": KOOTA_MAX_POINTS["varna"],
        "detail": {"varna1": bride.caste, "varna2": groom.caste, "rank1": r1, "rank2": r2},
    }


def vashya_group(lord: str) -> str:
    return VASHYA_GROUP_BY_LORD.get(lord, DEFAULT_VASHYA_GROUP)


def score_vashya(bride: Nakshatra, groom: Nakshatra) -> Dict:
    g1 = vashya_group(bride.lord)
    g2 = vashya_group(groom.lord)
    if g1 == g2:
        awarded = 2.0
    elif g2 in VASHYA_COMPATIBLE.get(g1, frozenset()):
        awarded = 1.0
    else:
        awarded = 0.0
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["vashya"], "detail": {"group1": g1, "group2": g2}}


def tara_distance(n1: int, n2: int) -> int:
    """Nakshatra distance folded into 0..13."""
    diff = abs(n1 - n2) % 27
    return 27 - diff if diff > 13 else diff


def score_tara(bride: Nakshatra, groom: Nakshatra, table: Optional[Mapping[int, float]] = None) -> Dict:
    table = TARA_POINTS if table is None else table
    diff = tara_distance(bride.number, groom.number)
    awarded = float(table.get(diff, 0.0))
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["tara"], "detail": {"diff": diff}}


def score_yoni(bride: Nakshatra, groom: Nakshatra) -> Dict:
    y1 = NAKSHATRA_YONI[bride.name]
    y2 = NAKSHATRA_YONI[groom.name]
    if y1 == y2:
        awarded, cls = 4.0, "same"
    # either row counts; a bride-row-only lookup would score Snake->Buffalo 0
    elif y2 in YONI_COMPATIBLE.get(y1, frozenset()) or y1 in YONI_COMPATIBLE.get(y2, frozenset()):
        awarded, cls = 2.0, "compatible"
    else:
        awarded, cls = 0.0, "incompatible"
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["yoni"], "detail": {"yoni1": y1, "yoni2": y2, "class": cls}}


def graha_relation(lord1: str, lord2: str) -> str:
    """Relation between the bride's lord (``lord1``) and the groom's (``lord2``).

    Friendship counts in either direction. Neutrality and enmity are read
    from the bride's lord table only; anything else is "unlisted".

    >>> graha_relation("JUPITER", "MERCURY")
    'enemy'
    >>> graha_relation("MOON", "RAHU")
    'unlisted'
    """
    if lord1 == lord2:
        return "same_lord"
    t1 = PLANETARY_FRIENDSHIP.get(lord1, {})
    t2 = PLANETARY_FRIENDSHIP.get(lord2, {})
    if lord2 in t1.get("friends", ()) or lord1 in t2.get("friends", ()):
        return "friend"
    if lord2 in t1.get("neutrals", ()):
        return "neutral"
    if lord2 in t1.get("enemies", ()):
        return "enemy"
    return "unlisted"


def score_graha_maitri(bride: Nakshatra, groom: Nakshatra) -> Dict:
    relation = graha_relation(bride.lord, groom.lord)
    return {
        "awarded": GRAHA_MAITRI_POINTS[relation],
        "max": KOOTA_MAX_POINTS["graha_maitri"],
        "detail": {"lord1": bride.lord, "lord2": groom.lord, "relation": relation},
    }


def score_gana(bride: Nakshatra, groom: Nakshatra) -> Dict:
    g1 = NAKSHATRA_GANA[bride.name]
    g2 = NAKSHATRA_GANA[groom.name]
    if g1 == g2:
        awarded = 6.0
    elif g2 in GANA_COMPATIBLE.get(g1, frozenset()):
        awarded = 3.0
    else:
        awarded = 0.0
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["gana"], "detail": {"gana1": g1, "gana2": g2}}


def bhakoot_distance(s1: int, s2: int) -> int:
    """Sign distance folded into 0..6."""
    diff = abs(s1 - s2) % 12
    return 12 - diff if diff > 6 else diff


def score_bhakoot(bride: Nakshatra, groom: Nakshatra, table: Optional[Mapping[int, float]] = None) -> Dict:
    table = BHAKOOT_POINTS if table is None else table
    diff = bhakoot_distance(bride.sign, groom.sign)
    awarded = float(table.get(diff, 0.0))
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["bhakoot"], "detail": {"distance": diff}}


def score_nadi(bride: Nakshatra, groom: Nakshatra) -> Dict:
    n1 = NAKSHATRA_NADI[bride.name]
    n2 = NAKSHATRA_NADI[groom.name]
    awarded = 0.0 if n1 == n2 else 8.0
    return {"awarded": awarded, "max": KOOTA_MAX_POINTS["nadi"], "detail": {"nadi1": n1, "nadi2": n2}}


# ======================== Advisory output ========================

def guna_recommendations(scores: Mapping[str, float], total: float) -> List[Dict[str, Any]]:
    recs: List[Dict[str, Any]] = []
    if scores["nadi"] == 0:
        recs.append({
            "type": "Critical",
            "message": "Nadi dosha present - may affect health and progeny. Consider remedies.",
            "remedies": ["Perform Nadi dosha nivaran puja", "Donate to charitable causes", "Wear specific gemstones"],
        })
    if scores["bhakoot"] == 0:
        recs.append({
            "type": "Critical",
            "message": "Bhakoot dosha present - may cause financial and relationship issues.",
            "remedies": ["Perform Bhakoot dosha nivaran rituals", "Fast on Tuesdays", "Donate food to poor"],
        })
    if total < 18:
        recs.append({
            "type": "Warning",
            "message": "Overall compatibility is low. Consider consulting elders or performing additional analysis.",
            "suggestions": [
                "Check divisional chart compatibility",
                "Consider astrological remedies",
                "Evaluate other factors like education and family background",
            ],
        })
    if scores["yoni"] >= 2:
        recs.append({"type": "Positive", "message": "Good sexual and physical compatibility indicated."})
    if scores["gana"] >= 3:
        recs.append({"type": "Positive", "message": "Temperament compatibility is favorable."})
    return recs


def guna_exceptions(scores: Mapping[str, float]) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    if scores["nadi"] == 0 and scores["tara"] >= 2:
        out.append({
            "type": "Exception",
            "name": "Rajju Exception",
            "description": "Good Tara score may mitigate Nadi dosha effects.",
            "condition": "Tara >= 2 despite Nadi dosha",
        })
    return out


def guna_analysis(scores: Mapping[str, float], total: float) -> Dict[str, Any]:
    strengths: List[str] = []
    if scores["yoni"] >= 4:
        strengths.append("Excellent sexual compatibility")
    if scores["gana"] >= 6:
        strengths.append("Perfect temperament match")
    if scores["graha_maitri"] >= 5:
        strengths.append("Strong mental harmony")
    if scores["tara"] >= 3:
        strengths.append("Excellent longevity prospects")

    challenges: List[str] = []
    if scores["nadi"] == 0:
        challenges.append("Nadi dosha may affect progeny")
    if scores["bhakoot"] == 0:
        challenges.append("Bhakoot dosha may cause financial issues")
    if scores["varna"] == 0:
        challenges.append("Social compatibility concerns")
    if total < 18:
        challenges.append("Overall compatibility below recommended threshold")

    days: List[str] = []
    if scores["yoni"] >= 2:
        days.append("Fridays")
    if scores["gana"] >= 3:
        days.append("Wednesdays")
    if scores["tara"] >= 2:
        days.append("Mondays")

    if total >= 25:
        confidence = "High"
    elif total >= 18:
        confidence = "Medium"
    else:
        confidence = "Low"

    return {
        "strengths": strengths,
        "challenges": challenges,
        "favourableDays": days or ["Consult astrologer for auspicious dates"],
        "confidence": confidence,
    }


# ============================ Result ============================

@dataclass(frozen=True)
class GunaMilanResult:
    bride: Nakshatra
    groom: Nakshatra
    scores: Dict[str, float]
    koota_details: Dict[str, Dict[str, Any]]
    total: float
    percentage: int
    rating: str
    advice: str
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    exceptions: List[Dict[str, str]] = field(default_factory=list)
    analysis: Dict[str, Any] = field(default_factory=dict)
    max_score: int = MAX_TOTAL_POINTS

    def to_dict(self) -> Dict[str, Any]:
        def party(n: Nakshatra) -> Dict[str, Any]:
            return {"nakshatra": n.name, "number": n.number, "lord": n.lord, "sign": n.sign}

        return {
            "bride": party(self.bride),
            "groom": party(self.groom),
            "scores": dict(self.scores),
            "kootas": {k: dict(v) for k, v in self.koota_details.items()},
            "totalScore": self.total,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "compatibility": self.rating,
            "advice": self.advice,
            "recommendations": [dict(r) for r in self.recommendations],
            "exceptions": [dict(e) for e in self.exceptions],
            "analysis": dict(self.analysis),
        }


class GunaMilanCalculator:
    """Eight-koota scorer with optional Tara/Bhakoot table overrides."""

    def __init__(
        self,
        tara_points: Optional[Mapping[int, float]] = None,
        bhakoot_points: Optional[Mapping[int, float]] = None,
    ):
        self.tara_points = dict(TARA_POINTS if tara_points is None else tara_points)
        self.bhakoot_points = dict(BHAKOOT_POINTS if bhakoot_points is None else bhakoot_points)

    def score_kootas(self, bride: Nakshatra, groom: Nakshatra) -> Dict[str, Dict]:
        parts = {
            "varna": score_varna(bride, groom),
            "vashya": score_vashya(bride, groom),
            "tara": score_tara(bride, groom, self.tara_points),
            "yoni": score_yoni(bride, groom),
            "graha_maitri": score_graha_maitri(bride, groom),
            "gana": score_gana(bride, groom),
            "bhakoot": score_bhakoot(bride, groom, self.bhakoot_points),
            "nadi": score_nadi(bride, groom),
        }
        for key, part in parts.items():
            awarded = ensure_finite(part["awarded"], f"{KOOTA_TITLES[key]} score")
            if not 0.0 <= awarded <= part["max"]:
                raise CalculationError(
                    f"{KOOTA_TITLES[key]} score {awarded} outside 0..{part['max']}",
                    details={"koota": key, "awarded": awarded},
                )
            part["compatibility_status"] = koota_compatibility_status(awarded, part["max"])
            part["meaning"] = KOOTA_MEANINGS[key]
        return parts

    def calculate_compatibility(self, chart_a: Any, chart_b: Any) -> GunaMilanResult:
        bride = read_moon_nakshatra(chart_a, "chart1")
        groom = read_moon_nakshatra(chart_b, "chart2")
        try:
            parts = self.score_kootas(bride, groom)
            scores = {k: parts[k]["awarded"] for k in KOOTA_NAMES}
            total = ensure_finite(sum(scores.values()), "Guna Milan total")
            percentage = int(math.floor(total / MAX_TOTAL_POINTS * 100 + 0.5))
            band = interpret_total_score(total)
            result = GunaMilanResult(
                bride=bride,
                groom=groom,
                scores=scores,
                koota_details=parts,
                total=total,
                percentage=percentage,
                rating=band["rating"],
                advice=band["advice"],
                recommendations=guna_recommendations(scores, total),
                exceptions=guna_exceptions(scores),
                analysis=guna_analysis(scores, total),
            )
        except CompatibilityError:
            raise
        except Exception as exc:
            raise CalculationError(
                f"Guna Milan calculation failed: {exc}",
                details={"operation": "calculate_compatibility"},
                cause=exc,
            ) from exc
        logger.info(
            "guna_milan_scored",
            extra={"total": total, "rating": result.rating, "bride": bride.name, "groom": groom.name},
        )
        return result


def score_guna_milan(
    chart_a: Any,
    chart_b: Any,
    *,
    tara_points: Optional[Mapping[int, float]] = None,
    bhakoot_points: Optional[Mapping[int, float]] = None,
) -> GunaMilanResult:
    """Entry point: Ashtakoota score of two charts' Moon nakshatras."""
    calc = GunaMilanCalculator(tara_points=tara_points, bhakoot_points=bhakoot_points)
    return calc.calculate_compatibility(chart_a, chart_b)


def nakshatra_from_longitude(moon_longitude: float) -> Nakshatra:
    """Build the Moon nakshatra record from a sidereal Moon longitude.

    >>> nakshatra_from_longitude(45.0).name
    'Rohini'
    """
    lon = normalize_angle(ensure_finite(moon_longitude, "Moon longitude"))
    idx = min(int(lon // NAKSHATRA_SPAN_DEG), 26)
    name = NAKSHATRA_NAMES[idx]
    sign = sign_index(lon)
    return Nakshatra(name=name, number=idx + 1, lord=NAKSHATRA_LORD[name], caste=VARNA_BY_SIGN[sign], sign=sign)


def explain_guna_milan(result: GunaMilanResult) -> str:
    """Build a human-readable explanation per koota with awarded points and factor descriptions."""
    lines: List[str] = [
        f"Bride: {result.bride.name} ({result.bride.lord}), Groom: {result.groom.name} ({result.groom.lord})",
    ]
    labels = {
        "varna": [("varna1", "P1"), ("varna2", "P2")],
        "vashya": [("group1", "P1"), ("group2", "P2")],
        "tara": [("diff", "distance")],
        "yoni": [("yoni1", "P1"), ("yoni2", "P2"), ("class", "class")],
        "graha_maitri": [("lord1", "P1"), ("lord2", "P2"), ("relation", "relation")],
        "gana": [("gana1", "P1"), ("gana2", "P2")],
        "bhakoot": [("distance", "distance")],
        "nadi": [("nadi1", "P1"), ("nadi2", "P2")],
    }
    for key in KOOTA_NAMES:
        part = result.koota_details.get(key)
        if part is None:
            continue
        detail = part.get("detail", {})
        extras = [f"{label}: {detail[dk]}" for dk, label in labels[key] if dk in detail]
        extra = f" ({'; '.join(extras)})" if extras else ""
        lines.append(f"{KOOTA_TITLES[key]}: {part['awarded']}/{part['max']}{extra} - {KOOTA_MEANINGS[key]}")
    lines.append(f"Total: {result.total}/{result.max_score} ({result.percentage}%)")
    lines.append(f"Rating: {result.rating}. {result.advice}")
    for exc in result.exceptions:
        lines.append(f"{exc['name']}: {exc['description']}")
    return "\n".join(lines)
