"""Dependency sourcing classification."""

from __future__ import annotations

from typing import Optional

from .models import DependencyReference, DependencySource, DetailedDependency, SourceKind


def classify(dependency: DependencyReference) -> DependencySource:
    """Return where ``dependency`` is sourced from.

    A non-empty ``path`` wins over ``git`` when both are set; anything
    without either, including every bare version string, is a registry crate.
    """
    if isinstance(dependency, DetailedDependency):
        if dependency.path:
            return DependencySource(SourceKind.LOCAL_PATH, dependency.path)
        if dependency.git:
            return DependencySource(SourceKind.VERSION_CONTROL, dependency.git)
    return DependencySource(SourceKind.REGISTRY)


def declared_version(dependency: DependencyReference) -> Optional[str]:
    """Return the version requirement exactly as written in the manifest, if any."""
    return dependency.version


__all__ = ["classify", "declared_version"]
