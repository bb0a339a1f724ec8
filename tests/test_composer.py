"""Tests for the composer module."""

from datetime import datetime, timedelta, timezone

from dtogen.composer import LINT_MARKER, SEPARATOR, compose, format_timestamp

_DECL = "class Note(BaseModel):\n    id: str\n"
_WHEN = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestCompose:
    """Test the provenance banner."""

    def test_banner_contents(self):
        output = compose(_DECL, "9.9.9", _WHEN)
        assert output.startswith(SEPARATOR + "\n")
        assert "AUTO-GENERATED" in output
        assert "DO NOT EDIT" in output
        assert "# Generated from OpenAPI spec on 2024-05-01T12:00:00.000Z\n" in output
        assert "# Using dtogen v9.9.9\n" in output

    def test_warning_line(self):
        lines = compose(_DECL, "1.0.0", _WHEN).splitlines()
        assert lines[1] == "# AUTO-GENERATED FILE – DO NOT EDIT MANUALLY"

    def test_lint_marker_precedes_declarations(self):
        output = compose(_DECL, "1.0.0", _WHEN)
        assert f"{SEPARATOR}\n\n{LINT_MARKER}\n\n{_DECL}" in output

    def test_declarations_unchanged(self):
        assert compose(_DECL, "1.0.0", _WHEN).endswith(_DECL)

    def test_deterministic_for_fixed_timestamp(self):
        assert compose(_DECL, "1.0.0", _WHEN) == compose(_DECL, "1.0.0", _WHEN)

    def test_defaults_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        line = next(
            line for line in compose(_DECL, "1.0.0").splitlines()
            if line.startswith("# Generated from OpenAPI spec on ")
        )
        stamp = line.rsplit(" ", 1)[1]
        moment = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
        assert moment >= before


class TestFormatTimestamp:
    def test_converts_to_utc(self):
        local = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(local) == "2024-05-01T12:00:00.000Z"
