"""
Configuration domain package.

This package contains the domain layer for configuration management.
"""

from .models import DbConfig, RefreshConfig

__all__ = [
    "DbConfig",
    "RefreshConfig",
]
