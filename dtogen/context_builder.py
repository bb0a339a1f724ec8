"""Build Jinja2 template context from a parsed OpenAPI spec.

Lowers every component schema, orders the resulting declarations so that
dependencies come first, and assembles the context dict for models.py.j2.
"""

from __future__ import annotations

from typing import Any

from .config import GenerationOptions
from .errors import TranslationError
from .loader import get_schemas
from .naming import class_name
from .schema_parser import LoweringContext, parse_component


def _assign_names(schemas: dict[str, Any]) -> dict[str, str]:
    """Map component schema names to unique Python names."""
    names: dict[str, str] = {}
    seen: dict[str, int] = {}
    for schema_name in schemas:
        name = class_name(str(schema_name))
        if name in seen:
            seen[name] += 1
            name = f"{name}{seen[name]}"
        else:
            seen[name] = 1
        names[schema_name] = name
    return names


def order_declarations(declarations: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Topologically sort declarations based on their dependencies.

    Cycles are broken by declaration order; the caller quotes the
    resulting forward references.
    """
    by_name = {d["name"]: d for d in declarations}
    ordered: list[dict[str, Any]] = []
    temporary: set[str] = set()
    permanent: set[str] = set()

    def visit(name: str) -> None:
        if name in permanent or name in temporary:
            return
        temporary.add(name)
        for dep in sorted(by_name[name]["deps"]):
            if dep in by_name:
                visit(dep)
        permanent.add(name)
        ordered.append(by_name[name])

    for decl in declarations:
        visit(decl["name"])
    return ordered


def _field_line(f: dict[str, Any]) -> str:
    """Render one model field as a class-body line."""
    args: list[str] = []
    if not f["required"]:
        args.append(f["default"])
    if f["alias"]:
        args.append(f"alias={f['alias']!r}")
    if f["description"]:
        args.append(f"description={f['description']!r}")

    line = f"{f['name']}: {f['annotation']}"
    if f["alias"] or f["description"]:
        return f"{line} = Field({', '.join(args)})"
    if not f["required"]:
        return f"{line} = {f['default']}"
    return line


def _docstring(text: str) -> str:
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return f'"""{text}"""'


def _mark_forward_refs(ordered: list[dict[str, Any]]) -> list[str]:
    """Quote annotations that reference names defined later.

    Returns the models that need ``model_rebuild()`` once everything is
    defined.
    """
    defined: set[str] = set()
    rebuild: list[str] = []
    for decl in ordered:
        if decl["kind"] == "model":
            forward = False
            for f in decl["fields"]:
                if any(ref not in defined for ref in f["refs"]):
                    f["annotation"] = repr(f["annotation"])
                    forward = True
            if forward:
                rebuild.append(decl["name"])
        else:
            pending = sorted(ref for ref in decl["deps"] if ref not in defined)
            if pending:
                raise TranslationError(
                    f"Recursive type alias {decl['name']} (via {', '.join(pending)})"
                    " is not supported"
                )
        defined.add(decl["name"])
    return rebuild


def _import_lines(ctx: LoweringContext, uses_models: bool, uses_field: bool) -> list[str]:
    stdlib: list[str] = []
    if ctx.datetime_imports:
        stdlib.append(f"from datetime import {', '.join(sorted(ctx.datetime_imports))}")
    if ctx.typing_imports:
        stdlib.append(f"from typing import {', '.join(sorted(ctx.typing_imports))}")

    third_party: list[str] = []
    if uses_models:
        names = ["BaseModel", "ConfigDict"] + (["Field"] if uses_field else [])
        third_party.append(f"from pydantic import {', '.join(names)}")

    if stdlib and third_party:
        return stdlib + [""] + third_party
    return stdlib + third_party


def build_context(spec: dict[str, Any], options: GenerationOptions) -> dict[str, Any]:
    """Build the full template context from the OpenAPI spec."""
    schemas = get_schemas(spec)
    if not isinstance(schemas, dict) or not schemas:
        raise TranslationError("OpenAPI document defines no components.schemas")

    names = _assign_names(schemas)
    ctx = LoweringContext(
        spec=spec,
        options=options,
        names=names,
        taken=set(names.values()),
    )
    for schema_name, schema in schemas.items():
        # Hoisted models are appended while the component is parsed
        ctx.declarations.append(parse_component(ctx, schema_name, schema))

    ordered = order_declarations(ctx.declarations)
    rebuild = _mark_forward_refs(ordered)

    uses_field = False
    for decl in ordered:
        if decl["kind"] == "model":
            config = f'extra="{decl["extra"]}"'
            if decl["populate_by_name"]:
                config += ", populate_by_name=True"
            decl["config"] = f"ConfigDict({config})"
            decl["docstring"] = _docstring(decl["description"]) if decl["description"] else ""
            for f in decl["fields"]:
                f["line"] = _field_line(f)
                uses_field = uses_field or bool(f["alias"] or f["description"])
        else:
            decl["comment_lines"] = [decl["description"]] if decl["description"] else []

    uses_models = any(d["kind"] == "model" for d in ordered)
    info = spec.get("info") or {}

    return {
        "declarations": ordered,
        "import_lines": _import_lines(ctx, uses_models, uses_field),
        "rebuild": rebuild,
        "type_count": len(ordered),
        "module_docstring": _docstring(
            f"Data transfer objects for {info.get('title', 'API')}"
            f" {info.get('version', 'unknown')}."
        ),
        "api_version": info.get("version", "unknown"),
    }
