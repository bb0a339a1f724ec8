"""Entry point: python -m dtogen

Reads spec/notes-api.yaml, generates generated/models.py and
generated/__init__.py.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import GeneratorConfig
from .errors import EXIT_SUCCESS, GenerationError
from .pipeline import run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtogen",
        description="Generate Python DTOs from an OpenAPI spec.",
    )
    parser.add_argument("--spec", type=Path, help="Path to the OpenAPI spec (YAML or JSON)")
    parser.add_argument("--output-dir", type=Path, help="Directory for models.py and __init__.py")
    parser.add_argument("--timeout", type=float, help="Seconds to allow for translation")
    parser.add_argument(
        "--no-atomic",
        action="store_true",
        help="Write files in place instead of staging them first",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each stage")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = GeneratorConfig().with_overrides(
        spec_path=args.spec,
        output_dir=args.output_dir,
        translate_timeout=args.timeout,
        atomic_writes=False if args.no_atomic else None,
    )

    print("Generating Python types from OpenAPI spec...")
    try:
        result = run(config)
    except GenerationError as exc:
        print(f"Failed to generate types: {exc}", file=sys.stderr)
        return exc.exit_code

    print(f"✓ Python DTOs generated → {result.models_path} ({result.type_count} types)")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
