"""
Kubernetes access through kubectl.
"""

from .client import KubectlClient, PodNotFoundError

__all__ = ["KubectlClient", "PodNotFoundError"]
