"""
History Models - append-only records of completed analyses
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import Base, generate_id
from app.core.utils import utcnow


class _HistoryRecord(Base):
    """Columns shared by every history table. draft_id is a loose link, not a foreign key."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    draft_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=utcnow, index=True
    )


class ComplianceRecord(_HistoryRecord):
    __tablename__ = "compliance_records"

    form_data: Mapped[Any] = mapped_column(JSON, nullable=False)
    compliance_response: Mapped[Any] = mapped_column(JSON, nullable=False)
    record_type: Mapped[str] = mapped_column(String(50), nullable=False, default="complianceCheck")


class SavedRoute(_HistoryRecord):
    __tablename__ = "saved_routes"

    form_data: Mapped[Any] = mapped_column(JSON, nullable=False)  # {from, to, weight}
    route_data: Mapped[Any] = mapped_column(JSON, nullable=False)


class ProductAnalysis(_HistoryRecord):
    __tablename__ = "product_analyses"

    image_details: Mapped[Any] = mapped_column(JSON, nullable=False)
    vision_response: Mapped[Any] = mapped_column(JSON, nullable=False)
    ai_response: Mapped[Any] = mapped_column(JSON, nullable=False)
