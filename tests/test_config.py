"""Tests for cargocite.config."""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path

import pytest

from cargocite.config import CiteConfig, ConfigError, RegistryConfig, RunOptions, load_config


def _args(**overrides) -> argparse.Namespace:
    values = {
        "path": None,
        "filename": None,
        "overwrite": False,
        "readme_append": False,
        "dependencies": False,
        "max_depth": None,
        "generate": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CiteConfig)
    assert config.filename is None
    assert config.dependencies_filename == "DEPENDENCIES.bib"
    assert config.overwrite is False
    assert config.max_depth is None
    assert config.registry == RegistryConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".cargo-cite.yml").write_text(
        """
citation:
  filename: "REFERENCES.bib"
  dependencies_filename: "THIRD_PARTY.bib"
  overwrite: true
search:
  max_depth: 2
registry:
  api_url: "https://mirror.example/api/v1/crates"
  crate_url: "https://mirror.example/crates"
  user_agent: "cargo-cite (ci)"
  request_timeout: 12
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.filename == "REFERENCES.bib"
    assert config.dependencies_filename == "THIRD_PARTY.bib"
    assert config.overwrite is True
    assert config.max_depth == 2
    assert config.registry == RegistryConfig(
        api_url="https://mirror.example/api/v1/crates",
        crate_url="https://mirror.example/crates",
        user_agent="cargo-cite (ci)",
        request_timeout=12.0,
    )


def test_load_config_accepts_file_path_and_empty_file(tmp_path: Path) -> None:
    config_file = tmp_path / ".cargo-cite.yml"
    config_file.write_text("\n", encoding="utf-8")

    assert load_config(config_file).filename is None


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".cargo-cite.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".cargo-cite.yml").write_text("citation: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert ".cargo-cite.yml" in str(excinfo.value)


def test_run_options_cli_overrides_config(tmp_path: Path) -> None:
    config = CiteConfig(filename="FROM_CONFIG.bib", max_depth=4)

    options = RunOptions.from_sources(
        _args(path=str(tmp_path), filename="FROM_CLI.bib", max_depth=0, dependencies=True), config
    )

    assert options.path == tmp_path
    assert options.filename == "FROM_CLI.bib"
    assert options.max_depth == 0
    assert options.dependencies is True


def test_run_options_fall_back_to_config() -> None:
    config = CiteConfig(filename="FROM_CONFIG.bib", overwrite=True, max_depth=4)

    options = RunOptions.from_sources(_args(), config)

    assert options.path is None
    assert options.filename is None
    assert options.citation_filename == "FROM_CONFIG.bib"
    assert options.overwrite is True
    assert options.max_depth == 4


def test_run_options_default_filenames() -> None:
    options = RunOptions()

    assert options.citation_filename == "CITATION.bib"
    assert options.aggregate_filename == "DEPENDENCIES.bib"
    assert options.writes_to_stdout is False
    assert RunOptions(filename="STDOUT").writes_to_stdout is True


def test_run_options_are_immutable() -> None:
    options = RunOptions()

    with pytest.raises(dataclasses.FrozenInstanceError):
        options.overwrite = True  # type: ignore[misc]


def test_config_citation_filename_does_not_rename_aggregate(tmp_path: Path) -> None:
    (tmp_path / ".cargo-cite.yml").write_text(
        "citation:\n  filename: CITATION.bib\n  dependencies_filename: DEPS.bib\n",
        encoding="utf-8",
    )

    options = RunOptions.from_sources(_args(dependencies=True), load_config(tmp_path))

    assert options.citation_filename == "CITATION.bib"
    assert options.aggregate_filename == "DEPS.bib"


def test_cli_filename_overrides_both_defaults() -> None:
    config = CiteConfig(filename="REFS.bib", dependencies_filename="DEPS.bib")

    options = RunOptions.from_sources(_args(filename="OUT.bib"), config)

    assert options.citation_filename == "OUT.bib"
    assert options.aggregate_filename == "OUT.bib"
