"""
Application layer: the refresh use case.
"""

from .cleanup import CleanupStack
from .refresh_service import RefreshService

__all__ = ["CleanupStack", "RefreshService"]
