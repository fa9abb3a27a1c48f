from __future__ import annotations
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, ConfigDict

from compat_core.config import FusionWeights


# --------- Common ---------
class ErrorDetail(BaseModel):
    field: Optional[str] = None
    issue: Optional[str] = None


class ErrorEnvelope(BaseModel):
    code: str = Field(default="SERVER_ERROR")
    message: str
    details: Optional[List[ErrorDetail]] = None


class ErrorResponse(BaseModel):
    error: ErrorEnvelope


# --------- Inputs ---------
class PlanetIn(BaseModel):
    longitude: float = Field(..., description="Ecliptic longitude in degrees, 0 <= lon < 360.", examples=[15.5])
    latitude: Optional[float] = Field(default=None, description="Ecliptic latitude in degrees.")
    speed: Optional[float] = Field(default=None, description="Daily motion in degrees.")


class AscendantIn(BaseModel):
    longitude: float = Field(..., description="Ascendant longitude in degrees.", examples=[95.0])


class NakshatraIn(BaseModel):
    """Moon nakshatra placement. ``number`` is derived from ``name`` when omitted."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="nakshatraName", examples=["Rohini"])
    number: Optional[int] = Field(default=None, alias="nakshatraNumber", examples=[4])
    lord: Optional[str] = Field(default=None, description="Nakshatra lord, e.g. MOON.", examples=["MOON"])
    caste: Optional[str] = Field(default=None, description="Brahmin | Kshatriya | Vaishya | Shudra.", examples=["Vaishya"])
    sign: Optional[int] = Field(default=None, description="Moon sign index 0..11 (Aries = 0).", examples=[1])


class MoonDetailsIn(BaseModel):
    nakshatra: Optional[NakshatraIn] = None


class ChartIn(BaseModel):
    """One natal chart as supplied by the chart-construction layer."""
    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "planets": {"SUN": {"longitude": 15.5}, "MOON": {"longitude": 45.0}, "VENUS": {"longitude": 130.0}},
                "houses": [0, 30, 60, 90, 120, 150, 180, 210, 240, 270, 300, 330],
                "ascendant": {"longitude": 0.0},
                "moonDetails": {"nakshatra": {"name": "Rohini", "lord": "MOON", "caste": "Vaishya", "sign": 1}},
            }
        ]
    })

    planets: Optional[Dict[str, PlanetIn]] = Field(default=None, description="Planet identifier -> position.")
    houses: Optional[List[float]] = Field(default=None, description="Exactly 12 house cusp longitudes.")
    ascendant: Optional[AscendantIn] = None
    moonDetails: Optional[MoonDetailsIn] = None

    def to_engine(self) -> Dict[str, Any]:
        """Plain mapping for the engine; absent sections stay absent so the engine names them."""
        return self.model_dump(exclude_none=True)


class ChartPairIn(BaseModel):
    """Two charts; chart1 is the first party (bride side for Guna Milan)."""
    chart1: ChartIn = Field(..., description="First chart")
    chart2: ChartIn = Field(..., description="Second chart")


class ScoreIn(BaseModel):
    """Pre-computed analyses to fuse into one report."""
    synastry: Optional[Dict[str, Any]] = Field(default=None, description="Synastry result with aspects and overlays.")
    composite: Optional[Dict[str, Any]] = Field(default=None, description="Composite result with aspects.")
    gunaMilan: Optional[Dict[str, Any]] = Field(default=None, description="Optional Guna Milan result with percentage.")
    weights: Optional[FusionWeights] = Field(default=None, description="Optional fusion weights; must sum to 1.")
    detailed: bool = Field(default=False, description="Include the detailed component report.")


# --------- Synastry ---------
class SynastryAspectOut(BaseModel):
    planet1: str
    planet2: str
    aspect: str
    orb: float = Field(..., description="Deviation from the exact aspect angle in degrees.")
    strength: float
    interpretation: str = ""


class HouseOverlayOut(BaseModel):
    planet: str
    house: int
    sign: int
    interpretation: str = ""


class SynastryData(BaseModel):
    aspects: List[SynastryAspectOut]
    overlays: List[HouseOverlayOut]
    summary: Dict[str, Any] = Field(default_factory=dict)


class SynastryOut(BaseModel):
    data: SynastryData


# --------- Composite ---------
class CompositePlanetOut(BaseModel):
    longitude: float
    sign: int
    degree: float
    house: int


class CompositeAscendantOut(BaseModel):
    longitude: float
    sign: int
    degree: float


class CompositeAspectOut(BaseModel):
    planets: List[str]
    aspect: str
    orb: float
    strength: float
    interpretation: str = ""


class CompositeData(BaseModel):
    planets: Dict[str, CompositePlanetOut]
    ascendant: CompositeAscendantOut
    houses: List[float]
    aspects: List[CompositeAspectOut]
    interpretation: Dict[str, Any] = Field(default_factory=dict)


class CompositeOut(BaseModel):
    data: CompositeData


# --------- Vedic Guna Milan ---------
class GunaMilanData(BaseModel):
    """Guna Milan result and its explanation string.

    'result' mirrors GunaMilanResult.to_dict() and is kept as Dict[str, Any]
    to remain forward-compatible.
    """
    result: Dict[str, Any]
    explanation: str


class GunaMilanOut(BaseModel):
    data: GunaMilanData


# --------- Fused report ---------
class CompatibilityReportData(BaseModel):
    overall: float = Field(..., description="Fused compatibility score 0..1, 2 decimals.")
    breakdown: Dict[str, float]
    interpretation: str
    strengths: List[str] = Field(default_factory=list)
    challenges: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    weights: Dict[str, float] = Field(default_factory=dict)
    exceptions: List[str] = Field(default_factory=list)
    detailed: Optional[Dict[str, Any]] = None


class CompatibilityReportOut(BaseModel):
    data: CompatibilityReportData


class RelationshipData(BaseModel):
    synastry: Optional[SynastryData] = None
    composite: Optional[CompositeData] = None
    gunaMilan: Optional[GunaMilanData] = None
    report: CompatibilityReportData
    errors: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Per-branch errors, keyed by branch.")


class RelationshipOut(BaseModel):
    data: RelationshipData
