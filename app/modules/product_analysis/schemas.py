"""
Product Analysis DTOs
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ProductRecommendations(BaseModel):
    message: str
    additionalTip: str = ""


class ProductClassification(BaseModel):
    """Shape the reasoning model must return; serialised with its display keys."""
    hs_code: str = Field(..., alias="HS Code")
    product_description: str = Field(..., alias="Product Description")
    perishable: bool = Field(..., alias="Perishable")
    hazardous: bool = Field(..., alias="Hazardous")
    required_documents: List[str] = Field(
        default_factory=list, alias="Required Export Document List"
    )
    recommendations: ProductRecommendations = Field(..., alias="Recommendations")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("hs_code", mode="before")
    @classmethod
    def hs_code_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ProductAnalysisResult(BaseModel):
    data: Dict[str, Any]
    imageUrl: Optional[str] = None
    recordId: str
    draftId: str
