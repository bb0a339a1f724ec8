"""Prefix generated declarations with a provenance banner."""

from __future__ import annotations

from datetime import datetime, timezone

SEPARATOR = "# " + "=" * 45
WARNING = "# AUTO-GENERATED FILE – DO NOT EDIT MANUALLY"
# File-level suppression honoured by flake8 and ruff
LINT_MARKER = "# flake8: noqa"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_banner(generator_version: str, generated_at: datetime) -> str:
    return "\n".join([
        SEPARATOR,
        WARNING,
        f"# Generated from OpenAPI spec on {format_timestamp(generated_at)}",
        f"# Using dtogen v{generator_version}",
        SEPARATOR,
    ])


def compose(
    decl_text: str,
    generator_version: str,
    generated_at: datetime | None = None,
) -> str:
    """Return *decl_text* prefixed by the banner and lint marker."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    banner = render_banner(generator_version, generated_at)
    return f"{banner}\n\n{LINT_MARKER}\n\n{decl_text}"
