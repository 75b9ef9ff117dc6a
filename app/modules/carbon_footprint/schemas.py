"""
Carbon Footprint DTOs
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

Measure = Union[str, float]


class CarbonFootprintRequest(BaseModel):
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    distance: float = Field(..., gt=0, description="Total distance in km")
    weight: float = Field(..., gt=0, description="Shipment weight in kg")
    routeDirections: List[Dict[str, Any]] = Field(..., min_length=1)
    draftId: Optional[str] = None


class LegEmission(BaseModel):
    leg: Measure
    origin: str
    destination: str
    mode: str
    distance: Measure
    emissions: Measure


class CarbonAnalysis(BaseModel):
    """Shape the reasoning model must return"""
    totalDistance: Measure
    totalEmissions: Measure
    routeAnalysis: List[LegEmission]
    suggestions: List[str] = Field(default_factory=list)
    earthImpact: str = ""

    class Config:
        extra = "ignore"


class CarbonFootprintResponse(CarbonAnalysis):
    draftId: str
