"""Run options and the optional ``.cargo-cite.yml`` project configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .bibtex import CITATION_FILENAME, DEPENDENCIES_FILENAME
from .registry import DEFAULT_API_URL, DEFAULT_CRATE_URL, DEFAULT_USER_AGENT

CONFIG_FILENAME = ".cargo-cite.yml"
STDOUT_SENTINEL = "STDOUT"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class RegistryConfig:
    """Registry endpoint settings."""

    api_url: str = DEFAULT_API_URL
    crate_url: str = DEFAULT_CRATE_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: Optional[float] = None


@dataclass
class CiteConfig:
    """Project-level defaults read from ``.cargo-cite.yml``."""

    filename: Optional[str] = None
    dependencies_filename: str = DEPENDENCIES_FILENAME
    overwrite: bool = False
    max_depth: Optional[int] = None
    registry: RegistryConfig = field(default_factory=RegistryConfig)


@dataclass(frozen=True)
class RunOptions:
    """Immutable snapshot of everything one run needs to know.

    ``filename`` holds only an explicit ``--filename`` and overrides both
    defaults; ``None`` means "use the default for the current mode". The
    literal ``STDOUT`` sends output to the console.
    """

    path: Optional[Path] = None
    filename: Optional[str] = None
    overwrite: bool = False
    readme_append: bool = False
    dependencies: bool = False
    max_depth: Optional[int] = None
    generate: bool = False
    default_citation_filename: str = CITATION_FILENAME
    dependencies_filename: str = DEPENDENCIES_FILENAME
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @property
    def citation_filename(self) -> str:
        return self.filename or self.default_citation_filename

    @property
    def aggregate_filename(self) -> str:
        return self.filename or self.dependencies_filename

    @property
    def writes_to_stdout(self) -> bool:
        return self.filename == STDOUT_SENTINEL

    @classmethod
    def from_sources(cls, args: argparse.Namespace, config: CiteConfig | None = None) -> "RunOptions":
        """Merge parsed CLI arguments over file configuration."""
        config = config or CiteConfig()
        path = getattr(args, "path", None)
        filename = getattr(args, "filename", None)
        max_depth = getattr(args, "max_depth", None)
        return cls(
            path=Path(path).expanduser() if path else None,
            filename=filename,
            overwrite=bool(getattr(args, "overwrite", False)) or config.overwrite,
            readme_append=bool(getattr(args, "readme_append", False)),
            dependencies=bool(getattr(args, "dependencies", False)),
            max_depth=max_depth if max_depth is not None else config.max_depth,
            generate=bool(getattr(args, "generate", False)),
            default_citation_filename=config.filename or CITATION_FILENAME,
            dependencies_filename=config.dependencies_filename,
            registry=config.registry,
        )


def load_config(config_path: Path) -> CiteConfig:
    """Load configuration from ``config_path`` (a directory or the file itself)."""
    config_file = _resolve_config_path(config_path)

    if not config_file.is_file():
        return CiteConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    citation = _as_dict(data.get("citation"))
    search = _as_dict(data.get("search"))
    registry_data = _as_dict(data.get("registry"))

    registry = RegistryConfig()
    if registry_data:
        registry = RegistryConfig(
            api_url=_as_str(registry_data.get("api_url")) or DEFAULT_API_URL,
            crate_url=_as_str(registry_data.get("crate_url")) or DEFAULT_CRATE_URL,
            user_agent=_as_str(registry_data.get("user_agent")) or DEFAULT_USER_AGENT,
            request_timeout=_as_float(registry_data.get("request_timeout")),
        )

    return CiteConfig(
        filename=_as_str(citation.get("filename")),
        dependencies_filename=_as_str(citation.get("dependencies_filename")) or DEPENDENCIES_FILENAME,
        overwrite=bool(_as_bool(citation.get("overwrite"))),
        max_depth=_as_int(search.get("max_depth")),
        registry=registry,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).absolute()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).absolute()
    return config_path.absolute()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "STDOUT_SENTINEL",
    "CiteConfig",
    "ConfigError",
    "RegistryConfig",
    "RunOptions",
    "load_config",
]
