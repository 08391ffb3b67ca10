"""
Infrastructure layer: shell, cluster, credential and configuration access.
"""
