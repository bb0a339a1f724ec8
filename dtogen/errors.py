"""Error taxonomy for the generation pipeline.

Every failure surfaces as a :class:`GenerationError` subclass. The entry
point catches the base class, prints the message to stderr and exits with
the class-level ``exit_code``.
"""

from __future__ import annotations

from pathlib import Path

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class GenerationError(Exception):
    """Base exception for all generator failures."""

    exit_code: int = EXIT_FAILURE


class SpecNotFoundError(GenerationError):
    """Raised when the OpenAPI document does not exist at the configured path."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"OpenAPI spec not found at {path}")


class SpecReadError(GenerationError):
    """Raised when the OpenAPI document exists but cannot be read as UTF-8 text."""

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        super().__init__(f"Cannot read {path}: {cause}")


class TranslationError(GenerationError):
    """Raised when the spec cannot be lowered into type declarations."""


class ManifestError(GenerationError):
    """Raised when re-exported names are missing from the generated declarations."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Re-export manifest names not found in generated declarations: "
            + ", ".join(missing)
        )


class WriteError(GenerationError):
    """Raised when an output artifact cannot be written."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        super().__init__(f"Failed to write {path}: {cause}")
