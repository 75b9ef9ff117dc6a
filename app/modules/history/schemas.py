"""
History DTOs
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ComplianceRecordResponse(BaseModel):
    id: str
    draftId: Optional[str] = None
    formData: Dict[str, Any]
    complianceResponse: Dict[str, Any]
    type: str
    timestamp: datetime

    @classmethod
    def from_model(cls, record) -> "ComplianceRecordResponse":
        return cls(
            id=record.id,
            draftId=record.draft_id,
            formData=record.form_data,
            complianceResponse=record.compliance_response,
            type=record.record_type,
            timestamp=record.timestamp,
        )


class SavedRouteResponse(BaseModel):
    id: str
    draftId: Optional[str] = None
    formData: Dict[str, Any]
    routeData: Dict[str, Any]
    timestamp: datetime

    @classmethod
    def from_model(cls, record) -> "SavedRouteResponse":
        return cls(
            id=record.id,
            draftId=record.draft_id,
            formData=record.form_data,
            routeData=record.route_data,
            timestamp=record.timestamp,
        )


class ProductAnalysisResponse(BaseModel):
    id: str
    draftId: Optional[str] = None
    imageDetails: Dict[str, Any]
    visionResponse: Dict[str, Any]
    aiResponse: Dict[str, Any]
    timestamp: datetime

    @classmethod
    def from_model(cls, record) -> "ProductAnalysisResponse":
        return cls(
            id=record.id,
            draftId=record.draft_id,
            imageDetails=record.image_details,
            visionResponse=record.vision_response,
            aiResponse=record.ai_response,
            timestamp=record.timestamp,
        )
