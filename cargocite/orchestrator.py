"""Top-level control flow for a cargo-cite run."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from .bibtex import Clock, DependencyBibliography, MetadataSource, build_bibtex, readme_section
from .config import RunOptions
from .locator import describe_scope, find_manifests
from .logging import get_logger
from .manifest import MANIFEST_FILENAME, ManifestParseError, parse_manifest
from .models import Manifest
from .registry import RegistryClient


class DirectoryNotFoundError(FileNotFoundError):
    """Raised when the run's root directory cannot be resolved."""


class DestinationExistsError(FileExistsError):
    """Raised when an output file exists and overwriting was not requested."""


@dataclass
class RunSummary:
    """Outcome of :meth:`Orchestrator.run`."""

    root: Path
    manifests: List[Path] = field(default_factory=list)
    processed: int = 0
    skipped: int = 0
    written: List[Path] = field(default_factory=list)
    aggregate_path: Optional[Path] = None
    dependencies_text: str = ""

    def lines(self) -> List[str]:
        """Return the end-of-run report; empty when nothing was attempted."""
        if not self.processed and not self.skipped:
            return []
        lines = ["", "Summary:"]
        if self.processed:
            lines.append(f"- Successfully processed: {_plural(self.processed, 'file')}")
        if self.skipped:
            lines.append(f"- Skipped due to errors: {_plural(self.skipped, 'file')}")
        return lines


class Orchestrator:
    """Resolves the root, discovers manifests, renders citations and writes them out."""

    def __init__(
        self,
        registry: MetadataSource | None = None,
        *,
        now: Clock = datetime.now,
        stdout: TextIO | None = None,
        cwd: Callable[[], Path] = Path.cwd,
    ) -> None:
        self.registry = registry
        self._now = now
        self._stdout = stdout
        self._cwd = cwd
        self.logger = get_logger("orchestrator")

    def run(self, options: RunOptions) -> RunSummary:
        """Execute one run; only a missing root directory raises."""
        root = self._resolve_root(options)
        summary = RunSummary(root=root)

        summary.manifests = self._discover(root, options)
        if not summary.manifests:
            return summary

        count = len(summary.manifests)
        self.logger.info("Found %s", _plural(count, f"{MANIFEST_FILENAME} file"))

        bibliography = None
        if options.dependencies:
            bibliography = DependencyBibliography(self._resolve_registry(options), now=self._now)

        chunks: List[str] = []
        for manifest_path in summary.manifests:
            self.logger.info("Processing %s", manifest_path)
            manifest = self._load(manifest_path)
            if manifest is None:
                summary.skipped += 1
                continue

            if bibliography is not None:
                chunks.append(bibliography.render(manifest))
                summary.processed += 1
                continue

            if self._cite_package(manifest_path, manifest, options, summary):
                summary.processed += 1
            else:
                summary.skipped += 1

        summary.dependencies_text = "".join(chunks)
        if options.dependencies and summary.dependencies_text:
            self._write_aggregate(root, summary, options)
        return summary

    def _resolve_root(self, options: RunOptions) -> Path:
        if options.path is not None:
            root = Path(options.path).expanduser()
        else:
            try:
                root = self._cwd()
            except OSError as exc:
                raise DirectoryNotFoundError(f"Could not access current directory: {exc}") from exc

        if not root.exists():
            raise DirectoryNotFoundError(f"Directory {root} does not exist.")
        if not root.is_dir():
            raise DirectoryNotFoundError(f"{root} is not a directory.")
        return root.resolve()

    def _discover(self, root: Path, options: RunOptions) -> List[Path]:
        if not options.dependencies:
            candidate = root / MANIFEST_FILENAME
            if candidate.exists():
                return [candidate]
            self.logger.error("No %s found in %s.", MANIFEST_FILENAME, root)
            return []

        self.logger.info(
            "Searching for %s files in %s%s",
            MANIFEST_FILENAME,
            root,
            describe_scope(options.max_depth),
        )
        manifests = find_manifests(root, options.max_depth)
        if not manifests:
            self._report_empty_search(root, options.max_depth)
        return manifests

    def _report_empty_search(self, root: Path, max_depth: Optional[int]) -> None:
        if max_depth == 0:
            self.logger.info("No %s found in %s.", MANIFEST_FILENAME, root)
            self.logger.info(
                "Use --max-depth N to search N levels of subdirectories, "
                "or --max-depth -1 to search all of them."
            )
            return
        depth_note = ""
        if max_depth is not None and max_depth > 0:
            depth_note = f" (searched {_plural(max_depth, 'level')} deep)"
        self.logger.info(
            "No %s files found in %s or its subdirectories%s",
            MANIFEST_FILENAME,
            root,
            depth_note,
        )

    def _resolve_registry(self, options: RunOptions) -> MetadataSource:
        if self.registry is not None:
            return self.registry
        settings = options.registry
        return RegistryClient(
            api_url=settings.api_url,
            crate_url=settings.crate_url,
            user_agent=settings.user_agent,
            request_timeout=settings.request_timeout,
        )

    def _load(self, path: Path) -> Optional[Manifest]:
        try:
            handle = path.open("r", encoding="utf-8")
        except OSError as exc:
            self.logger.warning("Could not open %s: %s. Skipping this file.", path, exc)
            return None

        with handle:
            try:
                text = handle.read()
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Could not read %s: %s. Skipping this file.", path, exc)
                return None

        try:
            return parse_manifest(text)
        except ManifestParseError as exc:
            self.logger.warning("Invalid %s at %s: %s. Skipping this file.", MANIFEST_FILENAME, path, exc)
            return None

    def _cite_package(
        self,
        manifest_path: Path,
        manifest: Manifest,
        options: RunOptions,
        summary: RunSummary,
    ) -> bool:
        directory = manifest_path.parent

        if options.readme_append and not self._append_readmes(directory):
            return False

        citation = build_bibtex(manifest.package, now=self._now)
        if options.writes_to_stdout:
            self._emit(citation)
            return True

        destination = directory / options.citation_filename
        try:
            _write_text(destination, citation, overwrite=options.overwrite)
        except DestinationExistsError:
            self.logger.warning(
                "Citation file already exists at %s. Use --overwrite to replace it.", destination
            )
            return False
        except OSError as exc:
            self.logger.warning("Could not write %s: %s. Skipping this file.", destination, exc)
            return False

        self.logger.info("Created citation file at %s", destination)
        summary.written.append(destination)
        return True

    def _append_readmes(self, directory: Path) -> bool:
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            self.logger.warning("Could not list %s: %s. Skipping this file.", directory, exc)
            return False

        section = readme_section()
        for entry in entries:
            if "README" not in entry.name or not entry.is_file():
                continue
            self.logger.info("Appending to readme file: %s", entry)
            try:
                with entry.open("a", encoding="utf-8") as handle:
                    handle.write(section)
            except OSError as exc:
                self.logger.warning("Could not update %s: %s. Skipping this file.", entry, exc)
                return False
        return True

    def _write_aggregate(self, root: Path, summary: RunSummary, options: RunOptions) -> None:
        if options.writes_to_stdout:
            self._emit(summary.dependencies_text)
            return

        destination = root / options.aggregate_filename
        try:
            _write_text(destination, summary.dependencies_text, overwrite=options.overwrite)
        except DestinationExistsError:
            self.logger.warning(
                "Dependencies citation file already exists at %s. Use --overwrite to replace it.",
                destination,
            )
            return
        except OSError as exc:
            self.logger.warning("Could not write %s: %s", destination, exc)
            return

        self.logger.info("Created combined dependencies citation file at %s", destination)
        summary.aggregate_path = destination
        summary.written.append(destination)

    def _emit(self, text: str) -> None:
        stream = self._stdout or sys.stdout
        stream.write(text)
        stream.flush()


def _write_text(path: Path, text: str, *, overwrite: bool) -> None:
    """Write ``text`` to ``path``; exclusive creation unless ``overwrite`` is set."""
    mode = "w" if overwrite else "x"
    try:
        with path.open(mode, encoding="utf-8") as handle:
            handle.write(text)
    except FileExistsError as exc:
        raise DestinationExistsError(str(path)) from exc


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


__all__ = ["DestinationExistsError", "DirectoryNotFoundError", "Orchestrator", "RunSummary"]
