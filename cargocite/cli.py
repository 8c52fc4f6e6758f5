"""CLI entrypoint for cargo-cite."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, RunOptions, load_config
from .logging import configure_logging
from .orchestrator import DirectoryNotFoundError, Orchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo-cite",
        description="Generate BibTeX citations for Rust crates and their dependencies.",
    )
    parser.add_argument(
        "-g",
        "--generate",
        action="store_true",
        help="Generate CITATION.bib file (the default action).",
    )
    parser.add_argument(
        "-o",
        "--overwrite",
        action="store_true",
        help="Over-write existing citation files.",
    )
    parser.add_argument(
        "-r",
        "--readme-append",
        action="store_true",
        help='Append a "Citing" section to every README next to the manifest.',
    )
    parser.add_argument(
        "-p",
        "--path",
        default=None,
        help=(
            "Path to the crate (defaults to the current directory). With --dependencies "
            "this is also the root of the recursive Cargo.toml search."
        ),
    )
    parser.add_argument(
        "-f",
        "--filename",
        default=None,
        help=(
            "Citation file to write, default CITATION.bib (DEPENDENCIES.bib with "
            '--dependencies). "STDOUT" prints to standard output instead.'
        ),
    )
    parser.add_argument(
        "-d",
        "--dependencies",
        action="store_true",
        help="Generate BibTeX entries for all explicit dependencies.",
    )
    parser.add_argument(
        "-m",
        "--max-depth",
        type=int,
        default=None,
        help=(
            "Maximum depth for the recursive search (default: unlimited). "
            "0 means only the given directory, -1 means unlimited depth."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cargo-cite."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config_dir = Path(args.path).expanduser() if args.path else Path.cwd()
        config = load_config(config_dir)
    except OSError as exc:
        parser.exit(1, f"Error: Could not access current directory: {exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    options = RunOptions.from_sources(args, config)

    try:
        summary = Orchestrator().run(options)
    except DirectoryNotFoundError as exc:
        parser.exit(1, f"Error: {exc}\n")

    for line in summary.lines():
        print(line)


if __name__ == "__main__":
    main(sys.argv[1:])
