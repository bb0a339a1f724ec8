"""Generator configuration.

Module constants hold the defaults; :class:`GeneratorConfig` carries them
into the pipeline so tests and other tools can point it elsewhere.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).parent.parent
SPEC_PATH = ROOT_DIR / "spec" / "notes-api.yaml"
OUTPUT_DIR = ROOT_DIR / "generated"
MODELS_FILENAME = "models.py"
INDEX_FILENAME = "__init__.py"

# Named types the index artifact re-exports, in order
REEXPORT_MANIFEST: tuple[str, ...] = (
    "Note",
    "CreateNoteRequest",
    "UpdateNoteRequest",
    "ErrorResponse",
    "SuccessDeleteResponse",
)


class ArrayRepresentation(enum.Enum):
    MUTABLE = "mutable"
    READONLY = "readonly"


class DateHandling(enum.Enum):
    STRING_TYPE = "string"
    DATE_TYPE = "date"


@dataclass(frozen=True)
class GenerationOptions:
    """Options controlling how schemas are lowered to Python types.

    additional_properties: open every object model to unknown keys unless
        its schema sets ``additionalProperties: false``.
    array_representation: ``list[T]`` (mutable) or ``tuple[T, ...]`` (readonly).
    default_additional_properties_policy: type for object schemas with neither
        ``properties`` nor ``additionalProperties``; ``dict[str, Any]`` when
        true, the empty mapping ``dict[str, Never]`` when false.
    union_support: render ``oneOf``/``anyOf`` as unions instead of picking
        the first usable member.
    date_handling: lower ``date-time``/``date`` formats to ``datetime``/``date``.
    """

    additional_properties: bool = False
    array_representation: ArrayRepresentation = ArrayRepresentation.READONLY
    default_additional_properties_policy: bool = False
    union_support: bool = True
    date_handling: DateHandling = DateHandling.DATE_TYPE


@dataclass(frozen=True)
class TargetPaths:
    models: Path
    index: Path


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything one generation run needs."""

    spec_path: Path = SPEC_PATH
    output_dir: Path = OUTPUT_DIR
    models_filename: str = MODELS_FILENAME
    index_filename: str = INDEX_FILENAME
    options: GenerationOptions = field(default_factory=GenerationOptions)
    manifest: tuple[str, ...] = REEXPORT_MANIFEST
    translate_timeout: float | None = None
    atomic_writes: bool = True
    index_embeds_models: bool = True
    verify_manifest: bool = True

    @property
    def target_paths(self) -> TargetPaths:
        return TargetPaths(
            models=self.output_dir / self.models_filename,
            index=self.output_dir / self.index_filename,
        )

    def with_overrides(self, **overrides: Any) -> GeneratorConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
