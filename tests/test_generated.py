"""Import the generated package and exercise the models with pydantic.

Generation writes into tmp_path, which is put on sys.path so the output
directory imports as a regular package.
"""

from __future__ import annotations

import importlib
import sys
from datetime import datetime

import pytest

pydantic = pytest.importorskip("pydantic")

from dtogen.config import REEXPORT_MANIFEST, GeneratorConfig  # noqa: E402
from dtogen.pipeline import run  # noqa: E402

_PACKAGE = "notes_dtos"


@pytest.fixture
def dtos(tmp_path, notes_spec_path, monkeypatch):
    """Generate the Notes DTO package and import it fresh."""
    run(GeneratorConfig(spec_path=notes_spec_path, output_dir=tmp_path / _PACKAGE))
    monkeypatch.syspath_prepend(str(tmp_path))
    for name in (_PACKAGE, f"{_PACKAGE}.models"):
        sys.modules.pop(name, None)
    yield importlib.import_module(_PACKAGE)
    for name in (_PACKAGE, f"{_PACKAGE}.models"):
        sys.modules.pop(name, None)


_NOTE = {
    "id": "0b9a4f3e-3d2c-4c55-9a2e-2d1d7c3c1f00",
    "title": "Groceries",
    "content": "Milk, eggs",
    "createdAt": "2024-05-01T12:00:00Z",
    "updatedAt": "2024-05-01T12:30:00Z",
}


class TestGeneratedPackage:
    """The index file re-exports the manifest types."""

    def test_all_matches_manifest(self, dtos):
        assert tuple(dtos.__all__) == REEXPORT_MANIFEST

    def test_manifest_types_importable(self, dtos):
        for name in REEXPORT_MANIFEST:
            assert issubclass(getattr(dtos, name), pydantic.BaseModel)

    def test_reexports_are_the_models_classes(self, dtos):
        models = importlib.import_module(f"{_PACKAGE}.models")
        for name in REEXPORT_MANIFEST:
            assert getattr(dtos, name) is getattr(models, name)
        note = models.Note(**_NOTE)
        assert isinstance(note, dtos.Note)

    def test_models_module(self, dtos):
        models = importlib.import_module(f"{_PACKAGE}.models")
        assert models.NoteList == tuple[models.Note, ...]


class TestGeneratedModels:
    """Generated models honour the generation options."""

    def test_note_fields(self, dtos):
        note = dtos.Note(**_NOTE)
        assert note.title == "Groceries"
        assert note.tags is None
        assert note.visibility == "private"

    def test_dates_parsed(self, dtos):
        note = dtos.Note(**_NOTE)
        assert isinstance(note.createdAt, datetime)

    def test_readonly_arrays(self, dtos):
        note = dtos.Note(**_NOTE, tags=["home", "food"])
        assert note.tags == ("home", "food")

    def test_closed_objects(self, dtos):
        with pytest.raises(pydantic.ValidationError):
            dtos.Note(**_NOTE, color="yellow")

    def test_required_fields(self, dtos):
        with pytest.raises(pydantic.ValidationError):
            dtos.CreateNoteRequest(content="no title")

    def test_enum_values(self, dtos):
        with pytest.raises(pydantic.ValidationError):
            dtos.CreateNoteRequest(title="t", content="c", visibility="secret")

    def test_nested_items(self, dtos):
        error = dtos.ErrorResponse(
            code="validation_failed",
            message="Invalid note",
            details=[{"field": "title", "issue": "too long"}],
        )
        assert error.details[0].field == "title"

    def test_delete_response(self, dtos):
        response = dtos.SuccessDeleteResponse(success=True, deletedId=_NOTE["id"])
        assert response.success is True
        with pytest.raises(pydantic.ValidationError):
            dtos.SuccessDeleteResponse(success=False, deletedId=_NOTE["id"])
