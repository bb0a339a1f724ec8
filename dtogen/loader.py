"""Load and parse the OpenAPI spec.

Reads the spec document from disk and extracts component schemas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import GenerationError, SpecNotFoundError, SpecReadError, TranslationError

logger = logging.getLogger(__name__)

_SCHEMA_REF_PREFIX = "#/components/schemas/"


@dataclass(frozen=True)
class SpecDocument:
    path: Path
    text: str


def load_spec(path: Path | str) -> SpecDocument:
    """Read the OpenAPI document at *path* without interpreting it."""
    if not str(path):
        raise GenerationError("OpenAPI spec path must not be empty")
    spec_file = Path(path).resolve()
    if not spec_file.is_file():
        raise SpecNotFoundError(spec_file)
    try:
        text = spec_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecReadError(spec_file, exc) from exc
    logger.debug("Loaded %s (%d bytes)", spec_file, len(text))
    return SpecDocument(path=spec_file, text=text)


def parse_spec(text: str) -> dict[str, Any]:
    """Parse spec text as YAML (which also accepts JSON)."""
    try:
        spec = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise TranslationError(f"Malformed OpenAPI document: {exc}") from exc
    if not isinstance(spec, dict):
        raise TranslationError("OpenAPI document must be a mapping at the top level")
    return spec


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def ref_name(ref: str) -> str | None:
    """Return the component name a schema $ref points at, if local."""
    if ref.startswith(_SCHEMA_REF_PREFIX):
        return ref[len(_SCHEMA_REF_PREFIX):]
    return None


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    if not ref.startswith("#/"):
        raise TranslationError(f"Unsupported $ref {ref!r}: only local references are resolved")
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise TranslationError(f"Unresolvable $ref {ref!r}")
        node = node[part]
    if not isinstance(node, dict):
        raise TranslationError(f"$ref {ref!r} does not point at a schema object")
    return node
