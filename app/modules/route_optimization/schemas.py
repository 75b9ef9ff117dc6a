"""
Route Optimization DTOs
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PackageDetails(BaseModel):
    quantity: float = Field(..., gt=0)
    weight: float = Field(..., gt=0, description="kg")
    height: float = Field(..., gt=0, description="cm")
    length: float = Field(..., gt=0, description="cm")
    width: float = Field(..., gt=0, description="cm")


class RouteOptimizationRequest(BaseModel):
    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    package: PackageDetails
    description: str = Field(..., min_length=1)

    class Config:
        populate_by_name = True


class ChooseRouteRequest(BaseModel):
    draftId: Optional[str] = None
    routeData: Dict[str, Any]
    formData: Optional[Dict[str, Any]] = None


class LocationAnalysis(BaseModel):
    input: str
    countryName: str
    countryCode: str
    confidence: float


class ChooseRouteResponse(BaseModel):
    message: str
    recordId: str
    originAnalysis: Optional[LocationAnalysis] = None
    destinationAnalysis: Optional[LocationAnalysis] = None


class RouteMapRequest(BaseModel):
    draftId: Optional[str] = None
    routes: List[Dict[str, Any]] = Field(..., min_length=1, description="Legs: {id, waypoints, mode}")


class RouteMapResponse(BaseModel):
    draftId: str
    routes: Dict[str, Any]
    originalRoute: List[Dict[str, Any]]


class SaveRouteRequest(BaseModel):
    draftId: Optional[str] = None
    formData: Dict[str, Any]
    routeData: Dict[str, Any]


class SaveRouteResponse(BaseModel):
    message: str = "Route saved successfully"
    recordId: str
