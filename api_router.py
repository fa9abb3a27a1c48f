from __future__ import annotations
from functools import lru_cache
from typing import Optional, Annotated, Any, Dict

from fastapi import APIRouter, Depends, Header, HTTPException, Body

from schemas import (
    ChartPairIn,
    ScoreIn,
    SynastryOut, SynastryData,
    CompositeOut, CompositeData,
    GunaMilanOut, GunaMilanData,
    CompatibilityReportOut, CompatibilityReportData,
    RelationshipOut, RelationshipData,
)
from settings import COMPAT_CONFIG_PATH
from compat_core.config import CompatibilitySettings, load_settings
from services.synastry_services import compute_synastry
from services.composite_services import generate_composite
from services.synastry_vedic_services import GunaMilanCalculator, explain_guna_milan
from services.compatibility_services import CompatibilityScorer
from services.relationship_services import analyze_relationship


def _require_api_headers(
    x_correlation_id: Annotated[Optional[str], Header(alias="X-Correlation-ID")] = None,
    x_transaction_id: Annotated[Optional[str], Header(alias="X-Transaction-ID")] = None,
    x_session_id: Annotated[Optional[str], Header(alias="X-Session-ID")] = None,
    x_app_id: Annotated[Optional[str], Header(alias="X-App-ID")] = None,
    authorization: Annotated[Optional[str], Header(alias="Authorization")] = None,
) -> None:
    if not authorization or not str(authorization).strip():
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    missing = []
    if not x_correlation_id:
        missing.append("X-Correlation-ID")
    if not x_transaction_id:
        missing.append("X-Transaction-ID")
    if not x_session_id:
        missing.append("X-Session-ID")
    if not x_app_id:
        missing.append("X-App-ID")

    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required headers: {', '.join(missing)}")


router = APIRouter(prefix="/api", dependencies=[Depends(_require_api_headers)])


# --------------------- Helpers ---------------------

@lru_cache()
def get_engine_settings() -> CompatibilitySettings:
    """Engine settings from COMPAT_CONFIG_PATH plus env weight overrides, loaded once."""
    return load_settings(COMPAT_CONFIG_PATH)


def _guna_calculator(cfg: CompatibilitySettings) -> GunaMilanCalculator:
    return GunaMilanCalculator(
        tara_points=cfg.guna_milan.tara_points,
        bhakoot_points=cfg.guna_milan.bhakoot_points,
    )


def _report_data(scorer: CompatibilityScorer, detailed: bool) -> CompatibilityReportData:
    report = scorer.calculate()
    payload: Dict[str, Any] = report.to_dict()
    if detailed:
        payload["detailed"] = scorer.detailed_report()
    return CompatibilityReportData.model_validate(payload)


_PAIR_EXAMPLE = {
    "sample": {
        "summary": "Sample",
        "value": {
            "chart1": {
                "planets": {"SUN": {"longitude": 15.5}, "MOON": {"longitude": 45.0}, "VENUS": {"longitude": 130.0}},
                "houses": [0, 30, 60, 90, 120, 150, 180, 210, 240, 270, 300, 330],
                "ascendant": {"longitude": 0.0},
                "moonDetails": {"nakshatra": {"name": "Rohini", "lord": "MOON", "caste": "Vaishya", "sign": 1}},
            },
            "chart2": {
                "planets": {"SUN": {"longitude": 135.0}, "MOON": {"longitude": 200.0}, "MARS": {"longitude": 10.0}},
                "houses": [90, 120, 150, 180, 210, 240, 270, 300, 330, 0, 30, 60],
                "ascendant": {"longitude": 90.0},
                "moonDetails": {"nakshatra": {"name": "Vishakha", "lord": "JUPITER", "caste": "Shudra", "sign": 6}},
            },
        },
    }
}


# --------------- Compatibility -----------------
@router.post("/compat/synastry", response_model=SynastryOut, tags=["Compatibility"], summary="Synastry aspects and house overlays")
def compat_synastry(req: ChartPairIn = Body(..., openapi_examples=_PAIR_EXAMPLE)) -> SynastryOut:
    cfg = get_engine_settings()
    result = compute_synastry(req.chart1.to_engine(), req.chart2.to_engine(), detector=cfg.aspects.build_detector())
    return SynastryOut(data=SynastryData.model_validate(result.to_dict()))


@router.post("/compat/composite", response_model=CompositeOut, tags=["Compatibility"], summary="Midpoint composite chart")
def compat_composite(req: ChartPairIn = Body(..., openapi_examples=_PAIR_EXAMPLE)) -> CompositeOut:
    cfg = get_engine_settings()
    chart = generate_composite(req.chart1.to_engine(), req.chart2.to_engine(), detector=cfg.aspects.build_detector())
    return CompositeOut(data=CompositeData.model_validate(chart.to_dict()))


@router.post(
    "/compat/guna-milan",
    response_model=GunaMilanOut,
    tags=["Compatibility"],
    summary="Vedic Ashtakoota (Guna Milan) score and explanation",
)
def compat_guna_milan(req: ChartPairIn = Body(..., openapi_examples=_PAIR_EXAMPLE)) -> GunaMilanOut:
    """Score the two Moon nakshatras; chart1 is the bride side, chart2 the groom side."""
    result = _guna_calculator(get_engine_settings()).calculate_compatibility(
        req.chart1.to_engine(), req.chart2.to_engine()
    )
    return GunaMilanOut(data=GunaMilanData(result=result.to_dict(), explanation=explain_guna_milan(result)))


@router.post("/compat/score", response_model=CompatibilityReportOut, tags=["Compatibility"], summary="Fuse pre-computed analyses into one report")
def compat_score(req: ScoreIn) -> CompatibilityReportOut:
    weights = req.weights or get_engine_settings().weights
    scorer = CompatibilityScorer(req.synastry, req.composite, req.gunaMilan, weights=weights)
    return CompatibilityReportOut(data=_report_data(scorer, req.detailed))


@router.post("/compat/report", response_model=RelationshipOut, tags=["Compatibility"], summary="Full relationship analysis of two charts")
def compat_report(req: ChartPairIn = Body(..., openapi_examples=_PAIR_EXAMPLE)) -> RelationshipOut:
    """Run synastry, composite and Guna Milan concurrently and fuse them.

    A failing branch is reported under ``errors`` and does not fail the request.
    """
    out = analyze_relationship(req.chart1.to_engine(), req.chart2.to_engine(), settings=get_engine_settings())
    guna = out["guna_milan"]
    data = RelationshipData(
        synastry=SynastryData.model_validate(out["synastry"].to_dict()) if out["synastry"] is not None else None,
        composite=CompositeData.model_validate(out["composite"].to_dict()) if out["composite"] is not None else None,
        gunaMilan=GunaMilanData(result=guna.to_dict(), explanation=explain_guna_milan(guna)) if guna is not None else None,
        report=CompatibilityReportData.model_validate(out["report"].to_dict()),
        errors=out["errors"],
    )
    return RelationshipOut(data=data)
