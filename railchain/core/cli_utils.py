"""Common CLI utilities for diagnostic scripts."""

from __future__ import annotations

import argparse
import logging


def create_base_parser(description: str, *, prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "--data",
        default=None,
        help="Segment GeoJSON (or .geojson.zip). Defaults to data/processed/segments.geojson.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (logs go to stderr).",
    )
    return parser


def add_search_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--all-paths",
        action="store_true",
        help="Enumerate every simple path up to --max-depth instead of only the shortest.",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Depth bound for --all-paths (default 50).",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print endpoint connections of the start and end segments.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help='Print only the path as one quoted token, e.g. "1;2;4" ("" when none).',
    )


def log_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.WARNING)
