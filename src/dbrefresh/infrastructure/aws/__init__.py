"""
AWS session credential handling.
"""

from .credentials import CredentialError, CredentialProvider, parse_session_credentials

__all__ = ["CredentialError", "CredentialProvider", "parse_session_credentials"]
