from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from compat_core.aspects import DEFAULT_ASPECT_SPECS, AspectDetector, AspectSpec
from compat_core.errors import ValidationError
from compat_core.koota_tables import BHAKOOT_POINTS, TARA_POINTS

# env var -> FusionWeights field
WEIGHT_ENV_OVERRIDES: Dict[str, str] = {
    "COMPATIBILITY_SYNASTRY_WEIGHT": "synastry",
    "COMPATIBILITY_OVERLAY_WEIGHT": "overlays",
    "COMPATIBILITY_COMPOSITE_WEIGHT": "composite",
    "COMPATIBILITY_GUNA_MILAN_WEIGHT": "guna_milan",
}


class AspectRule(BaseModel):
    """One row of the aspect table."""

    angle: float = Field(..., ge=0.0, le=180.0)
    orb: float = Field(..., ge=0.0, le=30.0)
    weight: float = Field(..., ge=0.0, le=1.0)


class AspectPolicy(BaseModel):
    """Target angles, orb tolerances and strength weights per aspect type."""

    aspects: Dict[str, AspectRule] = Field(
        default_factory=lambda: {
            s.name: AspectRule(angle=s.angle, orb=s.orb, weight=s.weight) for s in DEFAULT_ASPECT_SPECS
        }
    )

    def to_specs(self) -> Tuple[AspectSpec, ...]:
        return tuple(AspectSpec(name, r.angle, r.orb, r.weight) for name, r in self.aspects.items())

    def build_detector(self) -> AspectDetector:
        return AspectDetector(self.to_specs())


class FusionWeights(BaseModel):
    """Weights of the fused compatibility score. Must sum to 1."""

    synastry: float = Field(default=0.4, ge=0.0)
    overlays: float = Field(default=0.3, ge=0.0)
    composite: float = Field(default=0.3, ge=0.0)
    guna_milan: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _check_sum(self) -> "FusionWeights":
        total = self.synastry + self.overlays + self.composite + self.guna_milan
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"fusion weights must sum to 1.0 (got {total:.6f})")
        return self

    def without_guna_milan(self) -> Dict[str, float]:
        """Synastry/overlay/composite weights re-normalized to sum to 1."""
        base = {"synastry": self.synastry, "overlays": self.overlays, "composite": self.composite}
        s = sum(base.values())
        if s <= 0:
            return {k: 1.0 / len(base) for k in base}
        return {k: v / s for k, v in base.items()}

    def with_guna_milan(self) -> Dict[str, float]:
        return {
            "synastry": self.synastry,
            "overlays": self.overlays,
            "composite": self.composite,
            "guna_milan": self.guna_milan,
        }


class GunaMilanTables(BaseModel):
    """Overridable point tables; different schools use variant Tara tables."""

    tara_points: Dict[int, float] = Field(default_factory=lambda: dict(TARA_POINTS))
    bhakoot_points: Dict[int, float] = Field(default_factory=lambda: dict(BHAKOOT_POINTS))

    @field_validator("tara_points")
    @classmethod
    def _tara_range(cls, v: Dict[int, float]) -> Dict[int, float]:
        missing = [d for d in range(14) if d not in v]
        if missing:
            raise ValueError(f"tara_points missing distances {missing}")
        for d, pts in v.items():
            if not 0.0 <= float(pts) <= 3.0:
                raise ValueError(f"tara_points[{d}]={pts} outside 0..3")
        return v

    @field_validator("bhakoot_points")
    @classmethod
    def _bhakoot_range(cls, v: Dict[int, float]) -> Dict[int, float]:
        missing = [d for d in range(7) if d not in v]
        if missing:
            raise ValueError(f"bhakoot_points missing distances {missing}")
        for d, pts in v.items():
            if not 0.0 <= float(pts) <= 7.0:
                raise ValueError(f"bhakoot_points[{d}]={pts} outside 0..7")
        return v


class CompatibilitySettings(BaseModel):
    """Engine configuration root. Every field has a documented default."""

    aspects: AspectPolicy = Field(default_factory=AspectPolicy)
    weights: FusionWeights = Field(default_factory=FusionWeights)
    guna_milan: GunaMilanTables = Field(default_factory=GunaMilanTables)


def _env_weight_overrides(environ: Dict[str, str]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for env_name, field in WEIGHT_ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or not str(raw).strip():
            continue
        try:
            out[field] = float(raw)
        except ValueError as exc:
            raise ValidationError(
                f"{env_name} must be a number",
                code="INVALID_CONFIG",
                details={"field": env_name, "value": raw},
            ) from exc
    return out


def load_settings(
    path: Optional[Union[str, Path]] = None,
    *,
    environ: Optional[Dict[str, str]] = None,
) -> CompatibilitySettings:
    """Build settings from an optional YAML file plus weight env overrides.

    Env overrides replace individual weights; the merged set must still sum
    to 1, otherwise an INVALID_CONFIG ValidationError is raised.
    """
    data: Dict[str, Any] = {}
    if path:
        p = Path(path)
        try:
            with p.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ValidationError(
                f"Could not read compatibility config: {exc}",
                code="INVALID_CONFIG",
                details={"field": "path", "path": str(p)},
            ) from exc
        if not isinstance(loaded, dict):
            raise ValidationError(
                "Compatibility config must be a mapping at top level",
                code="INVALID_CONFIG",
                details={"path": str(p)},
            )
        data = loaded

    overrides = _env_weight_overrides(dict(os.environ) if environ is None else environ)
    if overrides:
        weights = dict(data.get("weights") or {})
        weights.update(overrides)
        data["weights"] = weights

    try:
        return CompatibilitySettings.model_validate(data)
    except PydanticValidationError as exc:
        issues: List[Dict[str, Any]] = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "issue": err.get("msg")}
            for err in exc.errors()
        ]
        raise ValidationError(
            "Invalid compatibility configuration",
            code="INVALID_CONFIG",
            details={"issues": issues},
        ) from exc
