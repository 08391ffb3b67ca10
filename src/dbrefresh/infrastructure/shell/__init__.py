"""
Local shell execution.
"""

from .runner import CommandError, ShellRunner

__all__ = ["CommandError", "ShellRunner"]
