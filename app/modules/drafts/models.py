"""
Draft Models - shipment records that accumulate analysis results
"""

from datetime import datetime
from typing import Any, Optional
import enum

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import Base, generate_id
from app.core.utils import utcnow


class ComplianceStatus(str, enum.Enum):
    NOT_DONE = "notDone"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "nonCompliant"


class RouteOptimizationStatus(str, enum.Enum):
    NOT_DONE = "notDone"
    DONE = "done"


class DraftTab(str, enum.Enum):
    """Listing tabs; each maps to a predicate over the two status axes."""
    YET_TO_BE_CHECKED = "yet-to-be-checked"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    READY_FOR_SHIPMENT = "ready-for-shipment"


# tab -> (compliance status, allowed route statuses)
TAB_FILTERS = {
    DraftTab.YET_TO_BE_CHECKED: (
        ComplianceStatus.NOT_DONE,
        (RouteOptimizationStatus.NOT_DONE, RouteOptimizationStatus.DONE),
    ),
    DraftTab.COMPLIANT: (ComplianceStatus.COMPLIANT, (RouteOptimizationStatus.NOT_DONE,)),
    DraftTab.NON_COMPLIANT: (
        ComplianceStatus.NON_COMPLIANT,
        (RouteOptimizationStatus.NOT_DONE,),
    ),
    DraftTab.READY_FOR_SHIPMENT: (ComplianceStatus.COMPLIANT, (RouteOptimizationStatus.DONE,)),
}


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Draft(Base):
    """
    Draft shipment record.
    form_data is stored as loose JSON; the stage results sit in their own columns.
    """
    __tablename__ = "drafts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    form_data: Mapped[Any] = mapped_column(JSON, nullable=False, default=dict)
    compliance_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    route_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    carbon_analysis_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    product_analysis_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    map_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    compliance_status: Mapped[ComplianceStatus] = mapped_column(
        SQLEnum(ComplianceStatus, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False,
        default=ComplianceStatus.NOT_DONE,
        index=True,
    )
    route_optimization_status: Mapped[RouteOptimizationStatus] = mapped_column(
        SQLEnum(RouteOptimizationStatus, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False,
        default=RouteOptimizationStatus.NOT_DONE,
        index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=utcnow, index=True
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True, index=True
    )
