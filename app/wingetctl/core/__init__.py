"""Core services for wingetctl.

Status resolution, the operation queue, catalog storage and settings.
"""
