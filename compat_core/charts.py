"""Chart data contract and the validating readers used by every analyzer.

Charts arrive either as plain mappings (JSON-decoded request bodies) or as
the frozen dataclasses below. The readers accept both and raise
``ValidationError(code="INVALID_CHART")`` naming the chart side and field.

Accepted mapping shape::

    {
      "planets": {"SUN": {"longitude": 12.5}, "MOON": 201.0, ...},
      "houses": [12 cusp longitudes],
      "ascendant": {"longitude": 95.0},        # or a bare number
      "moonDetails": {"nakshatra": {"name": "Rohini", "lord": "MOON",
                                    "caste": "Vaishya", "sign": 1}}
    }
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from compat_core.angles import HOUSES_COUNT
from compat_core.errors import ValidationError
from compat_core.koota_tables import NAKSHATRA_NUMBER, VARNA_HIERARCHY, canonical_nakshatra_name

SIDE_LABELS = {"chart1": "First", "chart2": "Second"}
NAKSHATRA_REQUIRED_FIELDS = ("name", "lord", "caste", "sign")


@dataclass(frozen=True)
class PlanetPosition:
    longitude: float
    latitude: Optional[float] = None
    speed: Optional[float] = None


@dataclass(frozen=True)
class Nakshatra:
    """Moon nakshatra placement used by Guna Milan."""

    name: str
    number: int
    lord: str
    caste: str
    sign: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "number": self.number, "lord": self.lord, "caste": self.caste, "sign": self.sign}


@dataclass(frozen=True)
class Chart:
    """Immutable natal (or derived) chart."""

    planets: Mapping[str, PlanetPosition] = field(default_factory=dict)
    houses: Optional[Tuple[float, ...]] = None
    ascendant: Optional[float] = None
    moon_nakshatra: Optional[Nakshatra] = None

    def __post_init__(self):
        object.__setattr__(self, "planets", MappingProxyType(dict(self.planets)))
        if self.houses is not None:
            object.__setattr__(self, "houses", tuple(self.houses))


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _label(side: str) -> str:
    return SIDE_LABELS.get(side, side)


def _fail(message: str, side: str, fld: str, **extra: Any) -> None:
    details = {"chart": side, "field": fld}
    details.update(extra)
    raise ValidationError(message, code="INVALID_CHART", details=details)


def _missing_chart(side: str) -> None:
    _fail(f"{_label(side)} chart is required", side, side)


def _as_longitude(value: Any, side: str, fld: str) -> float:
    if isinstance(value, bool):
        _fail(f"{_label(side)} chart: {fld} must be a number", side, fld, value=repr(value))
    try:
        lon = float(value)
    except (TypeError, ValueError):
        _fail(f"{_label(side)} chart: {fld} must be a number", side, fld, value=repr(value))
    if not math.isfinite(lon) or not 0.0 <= lon < 360.0:
        _fail(f"{_label(side)} chart: {fld} must be a finite longitude in [0, 360)", side, fld, value=lon)
    return lon


def read_planets(chart: Any, side: str) -> Dict[str, PlanetPosition]:
    """Return the chart's planets in insertion order. An empty mapping is valid."""
    if chart is None:
        _missing_chart(side)
    raw = _get(chart, "planets")
    if raw is None or not isinstance(raw, Mapping):
        _fail(f"{_label(side)} chart must have a planets mapping", side, f"{side}.planets")

    out: Dict[str, PlanetPosition] = {}
    for name, entry in raw.items():
        fld = f"{side}.planets.{name}.longitude"
        if isinstance(entry, PlanetPosition):
            lon = _as_longitude(entry.longitude, side, fld)
            out[str(name)] = PlanetPosition(lon, entry.latitude, entry.speed)
        elif isinstance(entry, Mapping):
            if "longitude" not in entry:
                _fail(f"{_label(side)} chart: planet {name} has no longitude", side, fld)
            lon = _as_longitude(entry["longitude"], side, fld)
            out[str(name)] = PlanetPosition(lon, entry.get("latitude"), entry.get("speed"))
        else:
            out[str(name)] = PlanetPosition(_as_longitude(entry, side, fld))
    return out


def read_houses(chart: Any, side: str) -> Tuple[float, ...]:
    """Exactly twelve finite cusp longitudes."""
    if chart is None:
        _missing_chart(side)
    raw = _get(chart, "houses")
    fld = f"{side}.houses"
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        _fail(f"{_label(side)} chart must have {HOUSES_COUNT} house cusps", side, fld)
    try:
        cusps = list(raw)
    except TypeError:
        _fail(f"{_label(side)} chart must have {HOUSES_COUNT} house cusps", side, fld)
    if len(cusps) != HOUSES_COUNT:
        _fail(
            f"{_label(side)} chart must have exactly {HOUSES_COUNT} house cusps (got {len(cusps)})",
            side, fld, count=len(cusps),
        )
    # cusps may be plain numbers or {"longitude": x}
    return tuple(
        _as_longitude(_get(c, "longitude") if isinstance(c, Mapping) else c, side, f"{fld}[{i}]")
        for i, c in enumerate(cusps)
    )


def read_ascendant(chart: Any, side: str) -> float:
    if chart is None:
        _missing_chart(side)
    raw = _get(chart, "ascendant")
    fld = f"{side}.ascendant"
    if raw is None:
        _fail(f"{_label(side)} chart must have an ascendant", side, fld)
    if isinstance(raw, Mapping):
        if "longitude" not in raw:
            _fail(f"{_label(side)} chart: ascendant has no longitude", side, f"{fld}.longitude")
        return _as_longitude(raw["longitude"], side, f"{fld}.longitude")
    return _as_longitude(raw, side, fld)


def _raw_nakshatra(chart: Any) -> Any:
    if isinstance(chart, Chart):
        return chart.moon_nakshatra
    moon = _get(chart, "moonDetails")
    if moon is not None:
        nak = _get(moon, "nakshatra")
        if nak is not None:
            return nak
    return _get(chart, "moon_nakshatra")


def read_moon_nakshatra(chart: Any, side: str) -> Nakshatra:
    """Validate the Moon nakshatra block; all of name, lord, caste, sign are required."""
    if chart is None:
        _missing_chart(side)
    raw = _raw_nakshatra(chart)
    base = f"{side}.moonDetails.nakshatra"
    if raw is None:
        _fail(f"{_label(side)} chart must have Moon nakshatra details", side, base)
    if isinstance(raw, Nakshatra):
        return raw

    values = {
        "name": _get(raw, "name", _get(raw, "nakshatraName")),
        "number": _get(raw, "number", _get(raw, "nakshatraNumber")),
        "lord": _get(raw, "lord"),
        "caste": _get(raw, "caste"),
        "sign": _get(raw, "sign"),
    }
    missing = [f for f in NAKSHATRA_REQUIRED_FIELDS if values[f] is None or values[f] == ""]
    if missing:
        _fail(
            f"{_label(side)} chart Moon nakshatra is missing: {', '.join(missing)}",
            side, f"{base}.{missing[0]}", missing=missing,
        )

    name = canonical_nakshatra_name(values["name"])
    if name is None:
        _fail(f"{_label(side)} chart: unknown nakshatra {values['name']!r}", side, f"{base}.name")

    caste = next((c for c in VARNA_HIERARCHY if c.lower() == str(values["caste"]).strip().lower()), None)
    if caste is None:
        _fail(f"{_label(side)} chart: unknown caste {values['caste']!r}", side, f"{base}.caste")

    try:
        sign = int(values["sign"])
    except (TypeError, ValueError):
        sign = -1
    if isinstance(values["sign"], bool) or not 0 <= sign <= 11:
        _fail(f"{_label(side)} chart: Moon sign must be 0..11", side, f"{base}.sign", value=values["sign"])

    number = values["number"]
    if number is None:
        number = NAKSHATRA_NUMBER[name]
    else:
        try:
            number = int(number)
        except (TypeError, ValueError):
            number = 0
        if not 1 <= number <= 27:
            _fail(f"{_label(side)} chart: nakshatra number must be 1..27", side, f"{base}.number")

    return Nakshatra(name=name, number=number, lord=str(values["lord"]).strip().upper(), caste=caste, sign=sign)
