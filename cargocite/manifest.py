"""Parsing of ``Cargo.toml`` manifests into :mod:`cargocite.models` objects."""

from __future__ import annotations

import tomllib
from typing import Any, Dict, Optional, Tuple

from .models import DependencyReference, DetailedDependency, Manifest, PackageMetadata, SimpleDependency

MANIFEST_FILENAME = "Cargo.toml"


class ManifestParseError(ValueError):
    """Raised when manifest text is not valid TOML or does not match the expected schema."""


def parse_manifest(text: str) -> Manifest:
    """Parse raw TOML text into a :class:`Manifest`.

    Unknown keys are ignored. ``authors`` defaults to an empty list and a
    missing ``[dependencies]`` table yields an empty mapping.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestParseError(f"TOML parse error: {exc}") from exc

    package_data = data.get("package")
    if package_data is None:
        raise ManifestParseError("missing field `package`")
    if not isinstance(package_data, dict):
        raise ManifestParseError("`package` must be a table")

    package = _parse_package(package_data)
    dependencies = _parse_dependencies(data.get("dependencies"))
    return Manifest(package=package, dependencies=dependencies)


def _parse_package(data: Dict[str, Any]) -> PackageMetadata:
    name =_required_str(data, "name", "package")
    if not name.strip():
        raise ManifestParseError("`package.name` must not be empty")
    version = _required_str(data, "version", "package")

    authors = _optional_str_list(data, "authors", "package")
    keywords = _optional_str_list(data, "keywords", "package")

    return PackageMetadata(
        name=name,
        version=version,
        authors=authors or (),
        description=_optional_str(data, "description", "package"),
        repository=_optional_str(data, "repository", "package"),
        keywords=keywords,
    )


def _parse_dependencies(value: Any) -> Dict[str, DependencyReference]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestParseError("`dependencies` must be a table")

    dependencies: Dict[str, DependencyReference] = {}
    for name in sorted(value):
        dependencies[name] = _parse_dependency(name, value[name])
    return dependencies


def _parse_dependency(name: str, value: Any) -> DependencyReference:
    # A bare string is a version requirement; a table carries sourcing details.
    if isinstance(value, str):
        return SimpleDependency(version=value)
    if isinstance(value, dict):
        table = f"dependencies.{name}"
        return DetailedDependency(
            version=_optional_str(value, "version", table),
            path=_optional_str(value, "path", table),
            git=_optional_str(value, "git", table),
        )
    raise ManifestParseError(
        f"`dependencies.{name}` must be a version string or a table, "
        f"found {_describe(value)}"
    )


def _required_str(data: Dict[str, Any], key: str, table: str) -> str:
    if key not in data:
        raise ManifestParseError(f"missing field `{table}.{key}`")
    return _expect_str(data[key], f"{table}.{key}")


def _optional_str(data: Dict[str, Any], key: str, table: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    return _expect_str(value, f"{table}.{key}")


def _optional_str_list(data: Dict[str, Any], key: str, table: str) -> Optional[Tuple[str, ...]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ManifestParseError(f"`{table}.{key}` must be an array of strings, found {_describe(value)}")
    return tuple(_expect_str(item, f"{table}.{key}") for item in value)


def _expect_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ManifestParseError(f"`{field_name}` must be a string, found {_describe(value)}")
    return value


def _describe(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "table"
    return type(value).__name__


__all__ = ["MANIFEST_FILENAME", "ManifestParseError", "parse_manifest"]
