"""
Command-line entry point: build a question paper PDF from a JSON payload.

Usage:
    exam-paper build paper.json
    exam-paper build paper.json -o out/paper.pdf --config layout.json --no-compact
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from exam_toolkit import __version__
from exam_toolkit.core.schemas import ValidationError
from exam_toolkit.core.utils import load_document
from exam_toolkit.paper_builder import (
    BuildError,
    LayoutConfig,
    build_question_paper,
    load_layout_config,
)
from exam_toolkit.paper_builder.images.normalizer import DEFAULT_FETCH_TIMEOUT_S
from exam_toolkit.paper_builder.text import MeasurementError

logger = logging.getLogger("exam_toolkit.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_FAILED = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-paper",
        description="Generate printable exam question papers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build a question paper PDF from a JSON payload")
    build.add_argument("input", type=Path, help="Paper payload (JSON)")
    build.add_argument(
        "-o", "--output", type=Path,
        help="Output PDF file or directory (default: <title>_question_paper.pdf)",
    )
    build.add_argument("--config", type=Path, help="JSON file of layout overrides")
    build.add_argument(
        "--no-compact", action="store_true",
        help="Use standard spacing and image sizes instead of compact mode",
    )
    build.add_argument(
        "--timeout", type=float, default=DEFAULT_FETCH_TIMEOUT_S,
        help="Timeout per remote image request in seconds",
    )
    build.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _load_config(args: argparse.Namespace) -> LayoutConfig:
    config = load_layout_config(args.config) if args.config else LayoutConfig()
    if args.no_compact:
        config = config.with_overrides(compact=False)
    return config


def _run_build(args: argparse.Namespace) -> int:
    try:
        document = load_document(args.input)
        config = _load_config(args)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return EXIT_INVALID
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON: {e}")
        return EXIT_INVALID
    except ValidationError as e:
        logger.error(f"Invalid paper: {e}")
        for error in e.errors:
            logger.error(f"  - {error}")
        return EXIT_INVALID
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid layout config: {e}")
        return EXIT_INVALID

    try:
        result = build_question_paper(document, config, fetch_timeout=args.timeout)
    except ValidationError as e:
        logger.error(f"Invalid paper: {e}")
        for error in e.errors:
            logger.error(f"  - {error}")
        return EXIT_INVALID
    except (MeasurementError, BuildError) as e:
        logger.error(f"Build failed: {e}")
        return EXIT_FAILED

    for warning in result.warnings:
        logger.warning(f"Warning: {warning}")

    output = args.output if args.output is not None else Path.cwd()
    try:
        path = result.write(output)
    except BuildError as e:
        logger.error(str(e))
        return EXIT_FAILED

    print(f"{path} ({result.page_count} pages, {result.total_marks} marks)")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if args.command == "build":
        return _run_build(args)
    return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
