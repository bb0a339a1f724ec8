"""Lower OpenAPI schemas to Python type annotations and model definitions.

Handles:
- $ref resolution to component class names
- allOf merging (later parts win, required lists unioned)
- oneOf/anyOf unions
- enum/const as Literal
- nullable (3.0) and type lists containing "null" (3.1)
- date/date-time formats as date/datetime
- readonly arrays as tuple[T, ...]
- free-form objects as dict[str, T]
- inline objects hoisted into nested models
- property names that need a Field alias
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Any

from .config import ArrayRepresentation, DateHandling, GenerationOptions
from .errors import TranslationError
from .loader import ref_name, resolve_ref
from .naming import field_name, nested_class_name


@dataclass
class LoweringContext:
    """Mutable state shared while lowering one spec."""

    spec: dict[str, Any]
    options: GenerationOptions
    names: dict[str, str]
    declarations: list[dict[str, Any]] = field(default_factory=list)
    typing_imports: set[str] = field(default_factory=set)
    datetime_imports: set[str] = field(default_factory=set)
    refs: set[str] = field(default_factory=set)
    taken: set[str] = field(default_factory=set)

    def unique_name(self, name: str) -> str:
        """Reserve *name*, appending a counter if it is already in use."""
        candidate = name
        counter = 2
        while candidate in self.taken:
            candidate = f"{name}{counter}"
            counter += 1
        self.taken.add(candidate)
        return candidate


def _clean_description(text: Any) -> str:
    """Collapse whitespace in a schema description."""
    if not isinstance(text, str):
        return ""
    return re.sub(r"\s+", " ", text).strip()


def split_union(annotation: str) -> list[str]:
    """Split an annotation on top-level ``|`` separators."""
    members: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(annotation):
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch == "|" and depth == 0:
            members.append(annotation[start:i].strip())
            start = i + 1
    members.append(annotation[start:].strip())
    return members


def allows_none(annotation: str) -> bool:
    """Check whether an annotation already admits None."""
    return annotation == "Any" or "None" in split_union(annotation)


def join_union(ctx: LoweringContext, members: list[str]) -> str:
    """Join member annotations into a flat, duplicate-free union."""
    flat: list[str] = []
    for member in members:
        for part in split_union(member):
            if part == "Any":
                ctx.typing_imports.add("Any")
                return "Any"
            if part not in flat:
                flat.append(part)
    # None goes last so optional unions read naturally
    if "None" in flat:
        flat.remove("None")
        flat.append("None")
    return " | ".join(flat)


def _is_nullable(schema: dict[str, Any]) -> bool:
    schema_type = schema.get("type")
    return schema.get("nullable") is True or (
        isinstance(schema_type, list) and "null" in schema_type
    )


def _literal(ctx: LoweringContext, values: list[Any]) -> str:
    ctx.typing_imports.add("Literal")
    return "Literal[" + ", ".join(repr(v) for v in values) + "]"


def is_object_schema(spec: dict[str, Any], schema: dict[str, Any]) -> bool:
    """Check if a schema (after $ref/allOf resolution) describes an object."""
    if "$ref" in schema:
        return is_object_schema(spec, resolve_ref(spec, schema["$ref"]))
    if "allOf" in schema:
        return all(
            isinstance(sub, dict) and is_object_schema(spec, sub)
            for sub in schema["allOf"]
        )
    return schema.get("type") == "object" or "properties" in schema


def is_model_schema(spec: dict[str, Any], schema: dict[str, Any]) -> bool:
    """Check if a schema should become a model class rather than an alias."""
    if "allOf" in schema:
        return is_object_schema(spec, schema)
    return bool(schema.get("properties"))


def merge_all_of(spec: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
    """Merge an allOf composition into a single object schema."""
    merged_props: dict[str, Any] = {}
    merged_required: list[str] = []
    parts = list(schema.get("allOf", []))
    # Sibling properties on the composing schema apply last
    parts.append({
        "properties": schema.get("properties") or {},
        "required": schema.get("required") or [],
    })
    for sub in parts:
        if "$ref" in sub:
            sub = resolve_ref(spec, sub["$ref"])
        if "allOf" in sub:
            sub = merge_all_of(spec, sub)
        merged_props.update(sub.get("properties") or {})
        for name in sub.get("required") or []:
            if name not in merged_required:
                merged_required.append(name)

    merged: dict[str, Any] = {
        "type": "object",
        "properties": merged_props,
        "required": merged_required,
    }
    for key in ("description", "additionalProperties"):
        if key in schema:
            merged[key] = schema[key]
    return merged


def _mapping_type(
    ctx: LoweringContext, schema: dict[str, Any], owner: str | None, prop: str,
) -> str:
    """Type for an object schema without declared properties."""
    extra = schema.get("additionalProperties")
    if isinstance(extra, dict) and extra:
        value_type = resolve_schema_type(ctx, extra, owner, f"{prop} value")
        return f"dict[str, {value_type}]"
    if extra is True or extra == {}:
        open_shape = True
    elif extra is False:
        open_shape = False
    else:
        open_shape = (
            ctx.options.additional_properties
            or ctx.options.default_additional_properties_policy
        )
    if open_shape:
        ctx.typing_imports.add("Any")
        return "dict[str, Any]"
    ctx.typing_imports.add("Never")
    return "dict[str, Never]"


def _hoist(
    ctx: LoweringContext,
    schema: dict[str, Any],
    owner: str | None,
    prop: str,
    item: bool,
) -> str:
    """Emit an inline object schema as its own model and return its name."""
    if owner is None:
        ctx.typing_imports.add("Any")
        return "dict[str, Any]"
    name = ctx.unique_name(nested_class_name(owner, prop, item=item))
    ctx.declarations.append(parse_model(ctx, name, schema))
    ctx.refs.add(name)
    return name


def _resolve_base_type(
    ctx: LoweringContext,
    schema: dict[str, Any],
    owner: str | None,
    prop: str,
    item: bool,
) -> str:
    if "$ref" in schema:
        target = ref_name(schema["$ref"])
        if target is not None and target in ctx.names:
            name = ctx.names[target]
            ctx.refs.add(name)
            return name
        resolved = resolve_ref(ctx.spec, schema["$ref"])
        return resolve_schema_type(ctx, resolved, owner, prop, item)

    if "allOf" in schema:
        if is_object_schema(ctx.spec, schema):
            return _hoist(ctx, merge_all_of(ctx.spec, schema), owner, prop, item)
        for sub in schema["allOf"]:
            t = resolve_schema_type(ctx, sub, owner, prop, item)
            if t != "Any":
                return t
        ctx.typing_imports.add("Any")
        return "Any"

    for key in ("oneOf", "anyOf"):
        if key in schema:
            members = []
            for index, sub in enumerate(schema[key], start=1):
                t = resolve_schema_type(ctx, sub, owner, f"{prop} option {index}")
                if not ctx.options.union_support and t != "Any":
                    return t
                members.append(t)
            if not members or not ctx.options.union_support:
                ctx.typing_imports.add("Any")
                return "Any"
            return join_union(ctx, members)

    if "const" in schema:
        return _literal(ctx, [schema["const"]])
    if "enum" in schema:
        values = schema["enum"]
        if not values:
            raise TranslationError(f"Empty enum in {owner or 'schema'}.{prop}")
        return _literal(ctx, values)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        if not non_null:
            return "None"
        members = [
            _resolve_base_type(ctx, {**schema, "type": t}, owner, prop, item)
            for t in non_null
        ]
        return join_union(ctx, members)

    if schema_type == "string":
        if ctx.options.date_handling is DateHandling.DATE_TYPE:
            fmt = schema.get("format")
            if fmt == "date-time":
                ctx.datetime_imports.add("datetime")
                return "datetime"
            if fmt == "date":
                ctx.datetime_imports.add("date")
                return "date"
        return "str"
    if schema_type == "integer":
        return "int"
    if schema_type == "number":
        return "float"
    if schema_type == "boolean":
        return "bool"
    if schema_type == "null":
        return "None"
    if schema_type == "array":
        item_type = resolve_schema_type(ctx, schema.get("items") or {}, owner, prop, item=True)
        if ctx.options.array_representation is ArrayRepresentation.READONLY:
            return f"tuple[{item_type}, ...]"
        return f"list[{item_type}]"
    if schema_type == "object" or "properties" in schema or "additionalProperties" in schema:
        if schema.get("properties"):
            return _hoist(ctx, schema, owner, prop, item)
        return _mapping_type(ctx, schema, owner, prop)

    ctx.typing_imports.add("Any")
    return "Any"


def resolve_schema_type(
    ctx: LoweringContext,
    schema: Any,
    owner: str | None = None,
    prop: str = "",
    item: bool = False,
) -> str:
    """Resolve an OpenAPI schema to a Python annotation string.

    *owner* and *prop* name the enclosing model and property; inline object
    schemas are hoisted into models named after them. Without an owner they
    degrade to ``dict[str, Any]``.
    """
    if not isinstance(schema, dict) or not schema:
        ctx.typing_imports.add("Any")
        return "Any"

    annotation = _resolve_base_type(ctx, schema, owner, prop, item)
    if _is_nullable(schema) and not allows_none(annotation):
        annotation = f"{annotation} | None"
    return annotation


def _default_repr(value: Any, annotation: str) -> str:
    """Render a schema default as a Python literal."""
    if isinstance(value, (dt.date, dt.datetime)):
        value = value.isoformat()
    if isinstance(value, list) and annotation.startswith("tuple["):
        value = tuple(value)
    return repr(value)


def parse_model(ctx: LoweringContext, name: str, schema: dict[str, Any]) -> dict[str, Any]:
    """Build a model declaration from an object schema."""
    if "allOf" in schema:
        schema = merge_all_of(ctx.spec, schema)

    properties = schema.get("properties") or {}
    if not isinstance(properties, dict):
        raise TranslationError(f"properties of {name} must be a mapping")
    required_fields = set(schema.get("required") or [])

    outer_refs = ctx.refs
    fields: list[dict[str, Any]] = []
    used: set[str] = set()
    try:
        for prop_name, prop_schema in properties.items():
            prop_name = str(prop_name)
            attr = field_name(prop_name)
            if attr in used:
                counter = 2
                while f"{attr}_{counter}" in used:
                    counter += 1
                attr = f"{attr}_{counter}"
            used.add(attr)

            ctx.refs = set()
            annotation = resolve_schema_type(ctx, prop_schema, owner=name, prop=prop_name)
            is_required = prop_name in required_fields
            if not is_required and not allows_none(annotation):
                annotation = f"{annotation} | None"

            default = None
            if isinstance(prop_schema, dict):
                default = prop_schema.get("default")
                description = _clean_description(prop_schema.get("description"))
            else:
                description = ""

            fields.append({
                "name": attr,
                "alias": prop_name if attr != prop_name else None,
                "annotation": annotation,
                "required": is_required,
                "default": None if is_required else _default_repr(default, annotation),
                "description": description,
                "refs": ctx.refs,
            })
    finally:
        ctx.refs = outer_refs

    extra = schema.get("additionalProperties")
    if extra is False:
        closed = True
    elif extra is True or isinstance(extra, dict):
        closed = False
    else:
        closed = not ctx.options.additional_properties

    deps: set[str] = set()
    for f in fields:
        deps |= f["refs"]

    return {
        "kind": "model",
        "name": name,
        "description": _clean_description(schema.get("description")),
        "fields": fields,
        "extra": "forbid" if closed else "allow",
        "populate_by_name": any(f["alias"] for f in fields),
        "deps": deps,
    }


def parse_component(ctx: LoweringContext, schema_name: str, schema: Any) -> dict[str, Any]:
    """Lower one entry of components.schemas into a declaration."""
    name = ctx.names[schema_name]
    if not isinstance(schema, dict):
        raise TranslationError(f"Schema {schema_name!r} must be a mapping")

    if is_model_schema(ctx.spec, schema):
        return parse_model(ctx, name, schema)

    outer_refs = ctx.refs
    ctx.refs = set()
    try:
        annotation = resolve_schema_type(ctx, schema, owner=name)
        deps = ctx.refs
    finally:
        ctx.refs = outer_refs
    return {
        "kind": "alias",
        "name": name,
        "description": _clean_description(schema.get("description")),
        "annotation": annotation,
        "deps": deps,
    }
