"""Translate OpenAPI spec text into Python type declarations.

:class:`SchemaTranslator` is the boundary the pipeline depends on;
:class:`PydanticTranslator` is the bundled implementation, rendering
pydantic v2 models through a Jinja2 template.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import jinja2

from . import __version__
from .config import GenerationOptions
from .context_builder import build_context
from .errors import TranslationError
from .loader import parse_spec

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class SchemaTranslator(Protocol):
    """Converts spec text into declaration text. Stateless per call."""

    version: str

    def translate(self, spec_text: str, options: GenerationOptions) -> str: ...


def template_environment() -> jinja2.Environment:
    """Jinja2 environment shared by the models and index templates."""
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


class PydanticTranslator:
    """Lower components.schemas to pydantic models and type aliases."""

    template_name = "models.py.j2"

    def __init__(self, env: jinja2.Environment | None = None):
        self.version = __version__
        self._env = env or template_environment()

    def translate(self, spec_text: str, options: GenerationOptions) -> str:
        spec = parse_spec(spec_text)
        try:
            context = build_context(spec, options)
            output = self._env.get_template(self.template_name).render(**context)
        except TranslationError:
            raise
        except jinja2.TemplateError as exc:
            raise TranslationError(f"Failed to render {self.template_name}: {exc}") from exc
        except (AttributeError, KeyError, TypeError, ValueError, RecursionError) as exc:
            raise TranslationError(
                f"Failed to translate OpenAPI spec: {type(exc).__name__}: {exc}"
            ) from exc

        if not output.strip():
            raise TranslationError("Translation produced no declarations")
        logger.debug("Translated %d declarations", context["type_count"])
        return output
