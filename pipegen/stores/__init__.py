"""Persistence helpers."""

from .artifact_store import ArtifactStore

__all__ = ["ArtifactStore"]
