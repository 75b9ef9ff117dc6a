# Import all models here to ensure they're loaded together
# This prevents circular import issues with relationships

from app.core.db.base import Base, BaseModel
from app.modules.users.models import User
from app.modules.drafts.models import Draft
from app.modules.history.models import ComplianceRecord, SavedRoute, ProductAnalysis

# Export for easy importing
__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Draft",
    "ComplianceRecord",
    "SavedRoute",
    "ProductAnalysis",
]
