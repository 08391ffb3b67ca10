"""
Configuration domain models.
"""

from .db_config import DbConfig
from .refresh_config import RefreshConfig

__all__ = [
    "DbConfig",
    "RefreshConfig",
]
