"""Core data models shared across cargo-cite components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class PackageMetadata:
    """The ``[package]`` table of a Cargo manifest."""

    name: str
    version: str
    authors: Tuple[str, ...] = ()
    description: Optional[str] = None
    repository: Optional[str] = None
    keywords: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class SimpleDependency:
    """A dependency declared as a bare version requirement (``serde = "1.0"``)."""

    version: str


@dataclass(frozen=True)
class DetailedDependency:
    """A dependency declared as a table with optional version, path and git keys."""

    version: Optional[str] = None
    path: Optional[str] = None
    git: Optional[str] = None


DependencyReference = Union[SimpleDependency, DetailedDependency]


@dataclass(frozen=True)
class Manifest:
    """One parsed ``Cargo.toml``: package metadata plus dependencies ordered by name."""

    package: PackageMetadata
    dependencies: Dict[str, DependencyReference] = field(default_factory=dict)


class SourceKind(str, Enum):
    """Where a dependency is sourced from."""

    REGISTRY = "registry"
    LOCAL_PATH = "path"
    VERSION_CONTROL = "git"


@dataclass(frozen=True)
class DependencySource:
    """Classification result; ``location`` holds the path or git locator when relevant."""

    kind: SourceKind
    location: Optional[str] = None


@dataclass(frozen=True)
class RegistryMetadata:
    """Descriptive fields returned by a crates.io lookup."""

    description: Optional[str] = None
    repository: Optional[str] = None
    homepage: Optional[str] = None
    authors: Optional[Tuple[str, ...]] = None
