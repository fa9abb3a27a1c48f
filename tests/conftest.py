from typing import Any, Dict, Optional

import pytest

EQUAL_HOUSES = [float(30 * k) for k in range(12)]


def build_chart(
    planets: Optional[Dict[str, float]] = None,
    *,
    houses=EQUAL_HOUSES,
    ascendant: Optional[float] = 0.0,
    nakshatra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    chart: Dict[str, Any] = {
        "planets": {name: {"longitude": lon} for name, lon in (planets or {}).items()},
    }
    if houses is not None:
        chart["houses"] = list(houses)
    if ascendant is not None:
        chart["ascendant"] = {"longitude": ascendant}
    if nakshatra is not None:
        chart["moonDetails"] = {"nakshatra": dict(nakshatra)}
    return chart


def moon(name: str, lord: str, caste: str, sign: int, **extra: Any) -> Dict[str, Any]:
    return {"name": name, "lord": lord, "caste": caste, "sign": sign, **extra}


@pytest.fixture
def make_chart():
    return build_chart


@pytest.fixture
def make_moon():
    return moon


@pytest.fixture
def rohini():
    return moon("Rohini", "MOON", "Vaishya", 1)
