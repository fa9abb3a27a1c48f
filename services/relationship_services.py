"""
Relationship analysis orchestrator.

Runs synastry, composite and Guna Milan as independent tasks against the same
two charts and fuses whatever succeeded. A failing branch never aborts the
report: its error is recorded under ``errors`` and the scorer sees an empty
result (synastry/composite) or no result (Guna Milan) in its place.

Public API
----------
analyze_relationship(chart_a, chart_b, *, settings=None, max_workers=3) -> dict
    {"synastry", "composite", "guna_milan", "report", "errors"}
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from compat_core.config import CompatibilitySettings
from compat_core.errors import CompatibilityError
from services.compatibility_services import CompatibilityScorer
from services.composite_services import CompositeChartGenerator
from services.synastry_services import SynastryAnalyzer, SynastryResult
from services.synastry_vedic_services import GunaMilanCalculator

logger = logging.getLogger(__name__)

EMPTY_COMPOSITE: Dict[str, Any] = {"aspects": []}


def _run_branch(name: str, fn: Callable[[], Any], errors: Dict[str, Dict[str, Any]]) -> Optional[Any]:
    try:
        return fn()
    except CompatibilityError as exc:
        errors[name] = exc.to_dict()
        logger.warning(
            "relationship_branch_failed",
            extra={"branch": name, "code": exc.code, "error": exc.message},
        )
        return None


def analyze_relationship(
    chart_a: Any,
    chart_b: Any,
    *,
    settings: Optional[CompatibilitySettings] = None,
    max_workers: int = 3,
) -> Dict[str, Any]:
    """Full relationship analysis with per-branch failure tolerance.

    The fused report itself can still raise (for instance on an invalid
    weight configuration); branch failures cannot.
    """
    settings = settings or CompatibilitySettings()
    detector = settings.aspects.build_detector()
    tables = settings.guna_milan

    tasks: Dict[str, Callable[[], Any]] = {
        "synastry": lambda: SynastryAnalyzer(chart_a, chart_b, detector=detector).analyze(),
        "composite": lambda: CompositeChartGenerator(chart_a, chart_b, detector=detector).generate(),
        "guna_milan": lambda: GunaMilanCalculator(
            tara_points=tables.tara_points, bhakoot_points=tables.bhakoot_points
        ).calculate_compatibility(chart_a, chart_b),
    }

    errors: Dict[str, Dict[str, Any]] = {}
    results: Dict[str, Any] = {}
    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {name: executor.submit(_run_branch, name, fn, errors) for name, fn in tasks.items()}
            for name, future in futures.items():
                results[name] = future.result()
    else:
        for name, fn in tasks.items():
            results[name] = _run_branch(name, fn, errors)

    synastry = results["synastry"]
    composite = results["composite"]
    guna = results["guna_milan"]

    report = CompatibilityScorer(
        synastry if synastry is not None else SynastryResult(),
        composite if composite is not None else EMPTY_COMPOSITE,
        guna,
        weights=settings.weights,
    ).calculate()

    logger.info(
        "relationship_analyzed",
        extra={"overall": report.overall, "failed_branches": sorted(errors)},
    )
    return {
        "synastry": synastry,
        "composite": composite,
        "guna_milan": guna,
        "report": report,
        "errors": dict(sorted(errors.items())),
    }
