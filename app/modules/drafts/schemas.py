"""
Drafts DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Any, Dict, List
from datetime import datetime

from .models import Draft


class CreateDraftDto(BaseModel):
    """DTO for the manual "new draft" form"""
    originCountry: str = Field(..., min_length=1)
    destinationCountry: str = Field(..., min_length=1)
    hsCode: str = Field(..., min_length=1)
    productDescription: str = Field(..., min_length=1)
    perishable: Optional[Any] = None
    hazardous: Optional[Any] = None
    weight: float = Field(..., gt=0, description="Gross weight in kg")

    @field_validator("originCountry", "destinationCountry", "hsCode", "productDescription")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    def to_form_data(self) -> Dict[str, Any]:
        return {
            "ShipmentDetails": {
                "Origin Country": self.originCountry,
                "Destination Country": self.destinationCountry,
                "HS Code": self.hsCode,
                "Product Description": self.productDescription,
                "Gross Weight": self.weight,
            },
            "TradeAndRegulatoryDetails": {
                "Perishable": self.perishable,
                "Hazardous Material": self.hazardous,
            },
        }


class UpdateDraftDto(BaseModel):
    """
    DTO for the generic draft update.
    Only these fields may be patched; anything else is rejected.
    """
    formData: Optional[Dict[str, Any]] = None
    carbonAnalysisData: Optional[Dict[str, Any]] = None
    productAnalysisData: Optional[Dict[str, Any]] = None

    class Config:
        extra = "forbid"


class DraftStatuses(BaseModel):
    compliance: str
    routeOptimization: str


class DraftResponse(BaseModel):
    """Response model for draft"""
    id: str
    ownerId: str
    formData: Dict[str, Any]
    complianceData: Optional[Dict[str, Any]] = None
    routeData: Optional[Dict[str, Any]] = None
    carbonAnalysisData: Optional[Dict[str, Any]] = None
    productAnalysisData: Optional[Dict[str, Any]] = None
    mapData: Optional[Any] = None
    statuses: DraftStatuses
    timestamp: datetime
    expiresAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, draft: Draft) -> "DraftResponse":
        return cls(
            id=draft.id,
            ownerId=draft.owner_id,
            formData=draft.form_data or {},
            complianceData=draft.compliance_data,
            routeData=draft.route_data,
            carbonAnalysisData=draft.carbon_analysis_data,
            productAnalysisData=draft.product_analysis_data,
            mapData=draft.map_data,
            statuses=DraftStatuses(
                compliance=draft.compliance_status.value,
                routeOptimization=draft.route_optimization_status.value,
            ),
            timestamp=draft.timestamp,
            expiresAt=draft.expires_at,
        )


class DraftCreatedResponse(BaseModel):
    message: str = "Draft created successfully"
    recordId: str


class CsvImportResponse(BaseModel):
    message: str
    recordIds: List[str]
