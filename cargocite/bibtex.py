"""BibTeX rendering for packages and their dependencies."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Protocol

from .dependencies import classify, declared_version
from .models import DependencyReference, Manifest, PackageMetadata, RegistryMetadata, SourceKind

CITATION_FILENAME = "CITATION.bib"
DEPENDENCIES_FILENAME = "DEPENDENCIES.bib"
DEPENDENCY_KEY_PREFIX = "rust-"

README_SECTION = (
    "\n"
    "## Citing\n"
    "\n"
    f"If you found this software useful consider citing it. See {CITATION_FILENAME} "
    "for the recommended BibTeX entry.\n"
)

Clock = Callable[[], datetime]


class MetadataSource(Protocol):
    """Anything that can enrich a registry dependency (usually a RegistryClient)."""

    def fetch(self, name: str) -> Optional[RegistryMetadata]:
        ...

    def page_url(self, name: str) -> str:
        ...


def build_bibtex(package: PackageMetadata, *, now: Clock = datetime.now) -> str:
    """Render the ``@misc`` entry citing ``package`` itself.

    ``month`` and ``year`` are taken from the clock at render time, not
    from the manifest. An empty author list yields ``author={}``.
    """
    stamp = now()
    title = package.name
    if package.description is not None:
        title = f"{title}: {package.description}"

    lines = [
        f"@misc{{{package.name},",
        f"\ttitle={{{title}}},",
        f"\tauthor={{{' and '.join(package.authors)}}},",
        f"\tversion = {{{package.version}}},",
        f"\tmonth = {stamp.month},",
        f"\tyear = {stamp.year},",
    ]
    if package.repository is not None:
        lines.append(f"\turl = {{{package.repository}}},")
    if package.keywords is not None:
        lines.append(f"\tkeywords = {{{', '.join(package.keywords)}}}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def readme_section() -> str:
    """Return the fixed "Citing" section appended to README files."""
    return README_SECTION


class DependencyBibliography:
    """Builds one ``@misc`` entry per declared dependency of a manifest."""

    def __init__(self, registry: MetadataSource, *, now: Clock = datetime.now) -> None:
        self.registry = registry
        self._now = now

    def render(self, manifest: Manifest) -> str:
        """Return every dependency record of ``manifest``, in dependency-table order."""
        return "".join(
            self.render_dependency(name, dependency)
            for name, dependency in manifest.dependencies.items()
        )

    def render_dependency(self, name: str, dependency: DependencyReference) -> str:
        source = classify(dependency)
        lines = [
            f"@misc{{{DEPENDENCY_KEY_PREFIX}{name},",
            f"\ttitle={{{name}}},",
        ]

        if source.kind is SourceKind.LOCAL_PATH:
            lines.append(f"\tnote = {{Local dependency from path: {source.location}}},")
        elif source.kind is SourceKind.VERSION_CONTROL:
            lines.append(f"\turl = {{{source.location}}},")
            lines.append("\tnote = {Git dependency},")
        else:
            metadata = self.registry.fetch(name)
            if metadata is not None:
                lines.extend(_registry_lines(metadata))

        version = declared_version(dependency)
        if version is not None:
            lines.append(f"\tversion = {{{version}}},")

        stamp = self._now()
        lines.append(f"\tyear = {stamp.year},")
        lines.append(f"\tmonth = {stamp.month},")

        if source.kind is SourceKind.REGISTRY:
            lines.append(f"\thowpublished = {{{self.registry.page_url(name)}}},")

        lines.append("}")
        return "\n".join(lines) + "\n\n"


def _registry_lines(metadata: RegistryMetadata) -> List[str]:
    lines: List[str] = []
    if metadata.description is not None:
        lines.append(f"\tnote = {{{metadata.description}}},")
    if metadata.authors:
        lines.append(f"\tauthor = {{{' and '.join(metadata.authors)}}},")
    url = metadata.repository if metadata.repository is not None else metadata.homepage
    if url is not None:
        lines.append(f"\turl = {{{url}}},")
    return lines


__all__ = [
    "CITATION_FILENAME",
    "DEPENDENCIES_FILENAME",
    "DependencyBibliography",
    "README_SECTION",
    "build_bibtex",
    "readme_section",
]
