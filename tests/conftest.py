"""Shared fixtures for generator tests.

Specs are written into pytest's tmp_path so every test gets its own
input and output directories.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from dtogen.config import SPEC_PATH, GenerationOptions, GeneratorConfig
from dtogen.translator import PydanticTranslator


# ---------------------------------------------------------------------------
# Spec documents
# ---------------------------------------------------------------------------

@pytest.fixture
def notes_spec_path(tmp_path) -> Path:
    """A private copy of the bundled Notes API spec."""
    path = tmp_path / "spec" / "notes-api.yaml"
    path.parent.mkdir()
    shutil.copy(SPEC_PATH, path)
    return path


@pytest.fixture
def write_spec(tmp_path) -> Callable[..., Path]:
    """Return a callable that writes a spec (dict or raw text) to disk.

    Usage in tests::

        path = write_spec({"components": {"schemas": {...}}})
    """
    def _write(spec: dict[str, Any] | str, name: str = "openapi.yaml") -> Path:
        path = tmp_path / name
        text = spec if isinstance(spec, str) else yaml.safe_dump(spec, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def spec_with() -> Callable[..., dict[str, Any]]:
    """Build a minimal OpenAPI document around a components.schemas mapping."""
    def _spec(schemas: dict[str, Any]) -> dict[str, Any]:
        return {
            "openapi": "3.0.3",
            "info": {"title": "Notes", "version": "1"},
            "paths": {},
            "components": {"schemas": schemas},
        }
    return _spec


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------

@pytest.fixture
def translate(spec_with) -> Callable[..., str]:
    """Translate a schemas mapping with the bundled translator."""
    translator = PydanticTranslator()

    def _translate(schemas: dict[str, Any], options: GenerationOptions | None = None) -> str:
        text = yaml.safe_dump(spec_with(schemas), sort_keys=False)
        return translator.translate(text, options or GenerationOptions())
    return _translate


# ---------------------------------------------------------------------------
# Pipeline configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path, notes_spec_path) -> GeneratorConfig:
    """Config pointing at the Notes spec copy and a fresh output directory."""
    return GeneratorConfig(spec_path=notes_spec_path, output_dir=tmp_path / "out" / "dtos")
