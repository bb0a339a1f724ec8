"""Tests for the bundled PydanticTranslator."""

import pytest

from dtogen import __version__
from dtogen.config import SPEC_PATH, ArrayRepresentation, GenerationOptions
from dtogen.errors import TranslationError
from dtogen.translator import PydanticTranslator

_NOTE = {
    "Note": {
        "type": "object",
        "required": ["id", "title"],
        "properties": {
            "id": {"type": "string"},
            "title": {"type": "string"},
        },
    },
}


class TestTranslate:
    """Test spec text → declaration text."""

    def test_minimal_note(self, translate):
        assert translate(_NOTE) == (
            '"""Data transfer objects for Notes 1."""\n'
            "\n"
            "from pydantic import BaseModel, ConfigDict\n"
            "\n"
            "\n"
            "class Note(BaseModel):\n"
            '    model_config = ConfigDict(extra="forbid")\n'
            "    id: str\n"
            "    title: str\n"
        )

    def test_bundled_spec(self):
        text = PydanticTranslator().translate(
            SPEC_PATH.read_text(encoding="utf-8"), GenerationOptions(),
        )
        assert "class Note(BaseModel):" in text
        assert '    """A stored note."""' in text
        assert "    createdAt: datetime\n" in text
        assert "    details: tuple[ErrorResponseDetailsItem, ...] | None = None\n" in text
        assert "    success: Literal[True]\n" in text
        assert "NoteList = tuple[Note, ...]\n" in text

    def test_mutable_arrays(self, translate):
        schemas = {"Tags": {"type": "array", "items": {"type": "string"}}}
        options = GenerationOptions(array_representation=ArrayRepresentation.MUTABLE)
        assert "Tags = list[str]\n" in translate(schemas, options)

    def test_alias_only_spec_skips_pydantic(self, translate):
        text = translate({"Visibility": {"type": "string", "enum": ["private", "public"]}})
        assert "pydantic" not in text
        assert "from typing import Literal\n" in text
        assert "Visibility = Literal['private', 'public']\n" in text

    def test_alias_description_as_comment(self, translate):
        text = translate({"Tag": {"type": "string", "description": "A short label."}})
        assert "# A short label.\nTag = str\n" in text

    def test_forward_refs_rebuilt(self, translate):
        schemas = {
            "TreeNode": {
                "type": "object",
                "properties": {
                    "children": {"type": "array", "items": {"$ref": "#/components/schemas/TreeNode"}},
                },
            },
        }
        assert translate(schemas).endswith("\n\nTreeNode.model_rebuild()\n")

    def test_stateless(self, translate):
        """Each call is independent; the same input gives the same output."""
        assert translate(_NOTE) == translate(_NOTE)

    def test_version(self):
        assert PydanticTranslator().version == __version__


class TestTranslateErrors:
    """Failures surface as TranslationError with the cause attached."""

    def test_malformed_ref(self, translate):
        schemas = {
            "Note": {
                "type": "object",
                "properties": {"owner": {"$ref": "#/components/schemas/User"}},
            },
        }
        with pytest.raises(TranslationError, match="Unresolvable"):
            translate(schemas)

    def test_malformed_yaml(self):
        with pytest.raises(TranslationError):
            PydanticTranslator().translate("components: [\n", GenerationOptions())

    def test_no_schemas(self):
        with pytest.raises(TranslationError):
            PydanticTranslator().translate("openapi: 3.0.3\n", GenerationOptions())

    def test_structural_error_wrapped(self, translate):
        with pytest.raises(TranslationError) as exc_info:
            translate({"Note": {"type": "object", "properties": {"a": {"type": "string"}}, "required": 5}})
        assert isinstance(exc_info.value.__cause__, TypeError)