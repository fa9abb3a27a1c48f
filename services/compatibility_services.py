"""
Compatibility score fusion.

Turns the upstream analyses into one normalized report. The scorer only sees
scored lists (aspect types/strengths, overlay houses) and the optional Guna
Milan percentage; it knows nothing about chart internals.

Public API
----------
score_compatibility(synastry, composite, guna_milan=None, *, weights=None) -> CompatibilityReport
CompatibilityScorer(synastry, composite, guna_milan=None, *, weights=None)
    .calculate()         -> CompatibilityReport
    .detailed_report()   -> dict

synastry_score(aspects) / overlay_score(overlays) / composite_score(aspects)
    Component scores in [0, 1]; each returns exactly 0.5 for an empty list.

Inputs may be the result dataclasses of the analysis services or plain
mappings with the same keys (``aspects``, ``overlays``, ``percentage``...).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from compat_core.config import FusionWeights
from compat_core.errors import CalculationError, CompatibilityError, ValidationError, ensure_finite

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

SYNASTRY_ASPECT_SCORES: Dict[str, float] = {
    "conjunction": 0.7,
    "trine": 0.9,
    "sextile": 0.8,
    "square": 0.4,
    "opposition": 0.5,
}

COMPOSITE_ASPECT_SCORES: Dict[str, float] = {
    "conjunction": 0.6,
    "trine": 0.8,
    "sextile": 0.7,
    "square": 0.4,
    "opposition": 0.5,
}

# 4th and 7th rank highest, 6th lowest
HOUSE_COMPATIBILITY_SCORES: Dict[int, float] = {
    1: 0.8, 2: 0.7, 3: 0.6, 4: 0.9, 5: 0.8, 6: 0.4,
    7: 0.9, 8: 0.5, 9: 0.8, 10: 0.8, 11: 0.7, 12: 0.5,
}

# (inclusive lower bound, interpretation, recommendation)
OVERALL_BANDS: List[Tuple[float, str, str]] = [
    (0.8, "Excellent compatibility with strong harmonious connections",
     "Strong compatibility suggests natural harmony - focus on maintaining open communication"),
    (0.7, "Good compatibility with positive potential",
     "Good foundation exists - work on understanding each other's differences"),
    (0.6, "Moderate compatibility with some challenges to work through",
     "Moderate compatibility - conscious effort needed to build understanding"),
    (0.5, "Fair compatibility requiring effort and understanding",
     "Fair compatibility - focus on shared goals and mutual respect"),
    (0.4, "Challenging compatibility with significant differences",
     "Challenging compatibility - consider if fundamental values align"),
    (0.0, "Poor compatibility with fundamental incompatibilities",
     "Challenging compatibility - consider if fundamental values align"),
]

STRENGTH_THRESHOLD = 0.7
CHALLENGE_THRESHOLD = 0.5
COMPONENT_ADVICE_THRESHOLD = 0.6

COMPONENT_STRENGTHS = {
    "synastry": "Strong synastry aspects indicate natural harmony",
    "composite": "Composite chart shows positive relationship potential",
    "overlays": "Beneficial house overlays support relationship growth",
}
COMPONENT_CHALLENGES = {
    "synastry": "Challenging synastry aspects may require conscious effort",
    "composite": "Composite chart suggests areas needing attention",
    "overlays": "Some house overlays may present relationship difficulties",
}
COMPONENT_ADVICE = {
    "synastry": "Synastry aspects suggest areas for personal growth and understanding",
    "overlays": "House overlays indicate need for compromise in relationship areas",
    "composite": "Composite chart suggests relationship requires active nurturing",
}

COMPONENT_INTERPRETATIONS: Dict[str, List[Tuple[float, str]]] = {
    "synastry": [
        (0.8, "Excellent planetary interactions"),
        (0.7, "Strong positive connections"),
        (0.6, "Mixed but workable aspects"),
        (0.5, "Challenging planetary dynamics"),
        (0.0, "Significant astrological tensions"),
    ],
    "overlays": [
        (0.8, "Beneficial house placements"),
        (0.7, "Supportive relationship house emphasis"),
        (0.6, "Balanced house distribution"),
        (0.5, "Some challenging house overlays"),
        (0.0, "Difficult house placements requiring attention"),
    ],
    "composite": [
        (0.8, "Harmonious relationship entity"),
        (0.7, "Positive relationship potential"),
        (0.6, "Relationship requires nurturing"),
        (0.5, "Challenging relationship dynamics"),
        (0.0, "Relationship needs significant work"),
    ],
}


def _field(item: Any, key: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(key, default)
    return getattr(item, key, default)


def _items(source: Any, key: str, label: str) -> Sequence[Any]:
    raw = _field(source, key)
    if raw is None:
        return []
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, (list, tuple)):
        raise ValidationError(f"{label}.{key} must be a list", details={"field": f"{label}.{key}"})
    return raw


# ============================ Component scores ============================

def synastry_score(aspects: Optional[Sequence[Any]]) -> float:
    """Strength-weighted mean of per-type aspect scores."""
    if not aspects:
        return NEUTRAL_SCORE
    total = 0.0
    weight = 0.0
    for a in aspects:
        base = SYNASTRY_ASPECT_SCORES.get(_field(a, "aspect"), NEUTRAL_SCORE)
        strength = float(_field(a, "strength", 0.0) or 0.0)
        total += base * strength
        weight += strength
    if weight <= 0:
        return NEUTRAL_SCORE
    return ensure_finite(total / weight, "Synastry score")


def overlay_score(overlays: Optional[Sequence[Any]]) -> float:
    if not overlays:
        return NEUTRAL_SCORE
    total = sum(HOUSE_COMPATIBILITY_SCORES.get(_field(o, "house"), NEUTRAL_SCORE) for o in overlays)
    return ensure_finite(total / len(overlays), "Overlay score")


def composite_score(aspects: Optional[Sequence[Any]]) -> float:
    if not aspects:
        return NEUTRAL_SCORE
    total = sum(COMPOSITE_ASPECT_SCORES.get(_field(a, "aspect"), NEUTRAL_SCORE) for a in aspects)
    return ensure_finite(total / len(aspects), "Composite score")


def interpret_overall(score: float) -> str:
    return next(text for lower, text, _ in OVERALL_BANDS if score >= lower)


def overall_recommendation(score: float) -> str:
    return next(rec for lower, _, rec in OVERALL_BANDS if score >= lower)


def interpret_component(component: str, score: float) -> str:
    return next(text for lower, text in COMPONENT_INTERPRETATIONS[component] if score >= lower)


def identify_strengths(breakdown: Mapping[str, float]) -> List[str]:
    return [
        COMPONENT_STRENGTHS[k] for k in ("synastry", "composite", "overlays")
        if breakdown[k] > STRENGTH_THRESHOLD
    ]


def identify_challenges(breakdown: Mapping[str, float]) -> List[str]:
    return [
        COMPONENT_CHALLENGES[k] for k in ("synastry", "composite", "overlays")
        if breakdown[k] < CHALLENGE_THRESHOLD
    ]


def confidence_level(breakdown: Mapping[str, float]) -> str:
    s, o, c = breakdown["synastry"], breakdown["overlays"], breakdown["composite"]
    spread = abs(s - c) + abs(s - o) + abs(c - o)
    if spread < 0.2:
        return "High - consistent across all analysis methods"
    if spread < 0.4:
        return "Medium - some variation between methods"
    return "Low - significant variation suggests complex dynamics"


def relationship_insights(breakdown: Mapping[str, float]) -> List[str]:
    s, o, c = breakdown["synastry"], breakdown["overlays"], breakdown["composite"]
    insights: List[str] = []
    if s > c + 0.1:
        insights.append("Individual compatibility stronger than relationship potential")
    elif c > s + 0.1:
        insights.append("Relationship has growth potential beyond individual connections")
    if o > 0.7:
        insights.append("Strong house overlays suggest deep relationship integration")
    if (s + o + c) / 3 >= 0.7:
        insights.append("Well-balanced compatibility across all astrological factors")
    return insights


# ============================ Report ============================

@dataclass(frozen=True)
class CompatibilityReport:
    overall: float
    breakdown: Dict[str, float]
    interpretation: str
    strengths: List[str] = field(default_factory=list)
    challenges: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    weights: Dict[str, float] = field(default_factory=dict)
    exceptions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "breakdown": dict(self.breakdown),
            "interpretation": self.interpretation,
            "strengths": list(self.strengths),
            "challenges": list(self.challenges),
            "recommendations": list(self.recommendations),
            "weights": dict(self.weights),
            "exceptions": list(self.exceptions),
        }


class CompatibilityScorer:
    """Weighted fusion of synastry, overlay, composite and optional Guna Milan scores."""

    def __init__(
        self,
        synastry: Any,
        composite: Any,
        guna_milan: Any = None,
        *,
        weights: Optional[FusionWeights] = None,
    ):
        if synastry is None or isinstance(synastry, (str, bytes, int, float, list, tuple)):
            raise ValidationError("Synastry data is required and must be an object", details={"field": "synastry"})
        if composite is None or isinstance(composite, (str, bytes, int, float, list, tuple)):
            raise ValidationError("Composite data is required and must be an object", details={"field": "composite"})
        self.synastry_aspects = _items(synastry, "aspects", "synastry")
        self.overlays = _items(synastry, "overlays", "synastry")
        self.composite_aspects = _items(composite, "aspects", "composite")
        self.guna_milan = guna_milan
        self.guna_percentage: Optional[float] = None
        if guna_milan is not None:
            pct = _field(guna_milan, "percentage")
            if pct is None:
                raise ValidationError("Guna Milan result must carry a percentage", details={"field": "guna_milan.percentage"})
            self.guna_percentage = ensure_finite(pct, "Guna Milan percentage")
        self.weights = weights or FusionWeights()

    def effective_weights(self) -> Dict[str, float]:
        if self.guna_percentage is None:
            return self.weights.without_guna_milan()
        return self.weights.with_guna_milan()

    def _guna_flags(self) -> Tuple[List[str], List[str], List[str], List[str]]:
        """(critical, warning, positive, exception) messages from the Guna Milan result."""
        critical: List[str] = []
        warning: List[str] = []
        positive: List[str] = []
        if self.guna_milan is None:
            return critical, warning, positive, []
        for rec in _field(self.guna_milan, "recommendations", None) or []:
            kind = _field(rec, "type")
            msg = _field(rec, "message")
            if not msg:
                continue
            if kind == "Critical":
                critical.append(msg)
            elif kind == "Warning":
                warning.append(msg)
            elif kind == "Positive":
                positive.append(msg)
        exceptions = [
            f"{_field(e, 'name')}: {_field(e, 'description')}"
            for e in (_field(self.guna_milan, "exceptions", None) or [])
        ]
        return critical, warning, positive, exceptions

    def calculate(self) -> CompatibilityReport:
        try:
            breakdown = {
                "synastry": synastry_score(self.synastry_aspects),
                "overlays": overlay_score(self.overlays),
                "composite": composite_score(self.composite_aspects),
            }
            if self.guna_percentage is not None:
                breakdown["guna_milan"] = max(0.0, min(1.0, self.guna_percentage / 100.0))
            weights = self.effective_weights()
            raw = sum(breakdown[k] * w for k, w in weights.items())
            overall = round(ensure_finite(raw, "Overall compatibility score"), 2)

            critical, warning, positive, exceptions = self._guna_flags()
            challenges = identify_challenges(breakdown) + critical
            recommendations = list(critical) + list(warning) + [overall_recommendation(overall)]
            recommendations += [
                COMPONENT_ADVICE[k] for k in ("synastry", "overlays", "composite")
                if breakdown[k] < COMPONENT_ADVICE_THRESHOLD
            ]
            recommendations += positive

            report = CompatibilityReport(
                overall=overall,
                breakdown=breakdown,
                interpretation=interpret_overall(overall),
                strengths=identify_strengths(breakdown),
                challenges=challenges,
                recommendations=recommendations,
                weights=weights,
                exceptions=exceptions,
            )
        except CompatibilityError:
            raise
        except Exception as exc:
            raise CalculationError(
                f"Compatibility scoring failed: {exc}",
                details={"operation": "calculate_overall_score"},
                cause=exc,
            ) from exc
        logger.info(
            "compatibility_scored",
            extra={"overall": report.overall, "with_guna_milan": self.guna_percentage is not None},
        )
        return report

    def detailed_report(self) -> Dict[str, Any]:
        report = self.calculate()
        b = report.breakdown
        detail: Dict[str, Any] = {
            "summary": {
                "overallScore": report.overall,
                "compatibility": report.interpretation,
                "confidence": confidence_level(b),
            },
            "componentAnalysis": {
                "synastry": {
                    "score": b["synastry"],
                    "aspects": len(self.synastry_aspects),
                    "interpretation": interpret_component("synastry", b["synastry"]),
                },
                "overlays": {
                    "score": b["overlays"],
                    "overlays": len(self.overlays),
                    "interpretation": interpret_component("overlays", b["overlays"]),
                },
                "composite": {
                    "score": b["composite"],
                    "aspects": len(self.composite_aspects),
                    "interpretation": interpret_component("composite", b["composite"]),
                },
            },
            "strengths": report.strengths,
            "challenges": report.challenges,
            "recommendations": report.recommendations,
            "relationshipInsights": relationship_insights(b),
        }
        if "guna_milan" in b:
            detail["componentAnalysis"]["gunaMilan"] = {
                "score": b["guna_milan"],
                "totalScore": _field(self.guna_milan, "total", _field(self.guna_milan, "totalScore")),
                "rating": _field(self.guna_milan, "rating", _field(self.guna_milan, "compatibility")),
                "exceptions": report.exceptions,
            }
        return detail


def score_compatibility(
    synastry: Any,
    composite: Any,
    guna_milan: Any = None,
    *,
    weights: Optional[FusionWeights] = None,
) -> CompatibilityReport:
    """Entry point: fuse upstream analyses into one CompatibilityReport."""
    return CompatibilityScorer(synastry, composite, guna_milan, weights=weights).calculate()
