"""
Compliance DTOs
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FieldMessage(BaseModel):
    field: str = ""
    message: str


class ComplianceNarrative(BaseModel):
    """Shape the reasoning model must return. Numbers in it are advisory only."""
    summary: str
    riskSummary: Optional[str] = None
    violations: List[FieldMessage] = Field(default_factory=list)
    recommendations: List[FieldMessage] = Field(default_factory=list)
    additionalTips: List[str] = Field(default_factory=list)
    riskScore: Optional[Any] = None

    class Config:
        extra = "ignore"


class ComplianceCheckResponse(BaseModel):
    complianceResponse: Dict[str, Any]
    recordId: str
