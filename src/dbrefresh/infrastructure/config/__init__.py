"""
Configuration infrastructure package.
"""

from .repository import ConfigRepository, expand_env, expand_env_values

__all__ = ["ConfigRepository", "expand_env", "expand_env_values"]
