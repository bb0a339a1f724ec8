"""Run one generation: load, translate, compose, materialize."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .codegen import exported_names, materialize, verify_manifest
from .composer import compose
from .config import GeneratorConfig
from .errors import GenerationError, TranslationError
from .loader import SpecDocument, load_spec
from .translator import PydanticTranslator, SchemaTranslator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    models_path: Path
    index_path: Path
    type_count: int
    generated_at: datetime


def _settle(future: asyncio.Future, result: object, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


def _in_daemon_thread(func, *args) -> asyncio.Future:
    """Run *func* on a daemon thread and deliver its outcome to a future.

    A timed-out call is left running in the background; neither the event
    loop nor interpreter exit waits for it.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def worker():
        try:
            outcome = (func(*args), None)
        except Exception as exc:
            outcome = (None, exc)
        try:
            loop.call_soon_threadsafe(_settle, future, *outcome)
        except RuntimeError:
            logger.debug("Translation finished after its event loop closed")

    threading.Thread(target=worker, name="dtogen-translate", daemon=True).start()
    return future


async def _translate(
    translator: SchemaTranslator,
    document: SpecDocument,
    config: GeneratorConfig,
) -> str:
    """Run the translator off the event loop, bounded by the configured timeout."""
    call = _in_daemon_thread(translator.translate, document.text, config.options)
    try:
        if config.translate_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=config.translate_timeout)
    except GenerationError:
        raise
    except asyncio.TimeoutError as exc:
        raise TranslationError(
            f"Translating {document.path} timed out after {config.translate_timeout}s"
        ) from exc
    except Exception as exc:
        raise TranslationError(
            f"Failed to translate {document.path}: {type(exc).__name__}: {exc}"
        ) from exc


async def generate(
    config: GeneratorConfig | None = None,
    translator: SchemaTranslator | None = None,
) -> GenerationResult:
    """Generate both artifacts. Raises GenerationError on any failure."""
    config = config or GeneratorConfig()
    translator = translator or PydanticTranslator()

    document = load_spec(config.spec_path)
    logger.debug("Translating %s with %s", document.path, config.options)
    declarations = await _translate(translator, document, config)
    if not declarations.strip():
        raise TranslationError(f"Translating {document.path} produced no declarations")

    if config.verify_manifest:
        verify_manifest(declarations, config.manifest)

    generated_at = datetime.now(timezone.utc)
    output = compose(declarations, translator.version, generated_at)

    targets = config.target_paths
    materialize(
        output,
        config.manifest,
        targets,
        atomic=config.atomic_writes,
        embed_models=config.index_embeds_models,
    )
    return GenerationResult(
        models_path=targets.models,
        index_path=targets.index,
        type_count=len(exported_names(declarations)),
        generated_at=generated_at,
    )


def run(
    config: GeneratorConfig | None = None,
    translator: SchemaTranslator | None = None,
) -> GenerationResult:
    """Synchronous wrapper around :func:`generate`."""
    return asyncio.run(generate(config, translator))
