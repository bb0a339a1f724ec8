"""Convert OpenAPI schema and property names to Python identifiers.

Pattern:
  - component schema names  -> PascalCase class names
  - property names          -> kept verbatim when already a usable identifier,
                               otherwise snake_case with a Field alias
  - hoisted inline objects  -> {Parent}{PascalCaseProperty}[Item]

Examples:
  Note                   -> Note
  create-note-request    -> CreateNoteRequest
  note.v2                -> NoteV2
  createdAt              -> createdAt
  created-at             -> created_at   (alias "created-at")
  class                  -> class_       (alias "class")
  2fa                    -> field_2fa    (alias "2fa")
"""

from __future__ import annotations

import keyword
import re

# BaseModel attributes a field may not shadow, besides the "model_" prefix
_RESERVED_FIELD_NAMES = {
    "schema",
    "json",
    "dict",
    "copy",
    "construct",
    "validate",
}


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _sanitize_segment(segment: str) -> str:
    """Sanitize a name for use in a Python identifier."""
    name = _camel_to_snake(segment)
    name = re.sub(r"[.\-\s/]", "_", name)
    name = re.sub(r"[^a-z0-9_]", "", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def to_pascal_case(name: str) -> str:
    """Convert an arbitrary schema name to PascalCase."""
    words = re.split(r"[^A-Za-z0-9]+", name)
    result = "".join(w[:1].upper() + w[1:] for w in words if w)
    if not result:
        return "Model"
    if result[0].isdigit():
        result = "Model" + result
    return result


def class_name(schema_name: str) -> str:
    """Return the class or alias name for a component schema."""
    if schema_name.isidentifier() and not keyword.iskeyword(schema_name):
        return schema_name
    return to_pascal_case(schema_name)


def nested_class_name(parent: str, prop_name: str, item: bool = False) -> str:
    """Name the model hoisted from an inline object property."""
    name = parent + to_pascal_case(prop_name)
    return name + "Item" if item else name


def field_name(prop_name: str) -> str:
    """Return a Python attribute name for an OpenAPI property.

    The result differs from *prop_name* only when the property cannot be used
    as a model attribute directly; callers alias it in that case.
    """
    if (
        prop_name.isidentifier()
        and not keyword.iskeyword(prop_name)
        and not prop_name.startswith("_")
        and prop_name not in _RESERVED_FIELD_NAMES
        and not prop_name.startswith("model_")
    ):
        return prop_name

    name = _sanitize_segment(prop_name)
    if not name:
        return "field"
    if name[0].isdigit():
        name = f"field_{name}"
    if keyword.iskeyword(name) or name in _RESERVED_FIELD_NAMES or name.startswith("model_"):
        name += "_"
    return name
