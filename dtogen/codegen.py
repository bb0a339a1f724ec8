"""Write the generated artifacts.

Takes the composed output and produces the models file plus an index
file re-exporting the manifest types.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

import jinja2

from .config import TargetPaths
from .errors import ManifestError, WriteError
from .translator import template_environment

logger = logging.getLogger(__name__)

_CLASS_RE = re.compile(r"^class\s+([A-Za-z_]\w*)\b", re.MULTILINE)
_ALIAS_RE = re.compile(r"^([A-Za-z_]\w*)\s*(?::[^=\n]*)?=", re.MULTILINE)


def exported_names(decl_text: str) -> set[str]:
    """Names declared at module level in generated declaration text."""
    return set(_CLASS_RE.findall(decl_text)) | set(_ALIAS_RE.findall(decl_text))


def verify_manifest(decl_text: str, manifest: tuple[str, ...]) -> None:
    """Raise ManifestError unless every manifest name is declared."""
    names = exported_names(decl_text)
    missing = [name for name in manifest if name not in names]
    if missing:
        raise ManifestError(missing)


def render_index(
    manifest: tuple[str, ...],
    output: str,
    models_module: str = "models",
    embed_models: bool = True,
    env: jinja2.Environment | None = None,
) -> str:
    """Render the index file: re-export header, then the full output.

    The embedded output redefines every manifest class, so a closing import
    binds the exported names back to the models module's classes.
    """
    env = env or template_environment()
    context = {"manifest": manifest, "models_module": models_module}
    header = env.get_template("index.py.j2").render(**context)
    if not embed_models:
        return header
    if not output.endswith("\n"):
        output += "\n"
    return header + output + "\n\n" + env.get_template("index_rebind.py.j2").render(**context)


def _ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(directory, exc) from exc


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise WriteError(path, exc) from exc


def _stage(path: Path, text: str) -> str:
    """Write *text* to a temp file beside *path* and return its name."""
    fd = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        fd.write(text)
        fd.flush()
        os.fsync(fd.fileno())
    except BaseException:
        fd.close()
        os.unlink(fd.name)
        raise
    fd.close()
    return fd.name


def _write_all_atomic(files: dict[Path, str]) -> None:
    """Stage every file, then rename them all into place.

    Nothing is replaced unless every file was staged successfully.
    """
    staged: dict[Path, str] = {}
    try:
        for path, text in files.items():
            try:
                staged[path] = _stage(path, text)
            except OSError as exc:
                raise WriteError(path, exc) from exc
        for path, tmp_path in list(staged.items()):
            try:
                os.replace(tmp_path, path)
            except OSError as exc:
                raise WriteError(path, exc) from exc
            del staged[path]
    finally:
        for tmp_path in staged.values():
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass


def materialize(
    output: str,
    manifest: tuple[str, ...],
    target_paths: TargetPaths,
    *,
    atomic: bool = True,
    embed_models: bool = True,
) -> None:
    """Write the models file and the index file."""
    index_text = render_index(
        manifest,
        output,
        models_module=target_paths.models.stem,
        embed_models=embed_models,
    )
    files = {target_paths.models: output, target_paths.index: index_text}

    for directory in {path.parent for path in files}:
        _ensure_dir(directory)

    if atomic:
        _write_all_atomic(files)
    else:
        for path, text in files.items():
            _write(path, text)
    logger.debug("Wrote %s", ", ".join(str(p) for p in files))
