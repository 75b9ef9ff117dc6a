"""Users module"""

from .models import User

__all__ = ["User"]
