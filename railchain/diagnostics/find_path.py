"""Diagnostic path search between two segments of a GeoJSON dataset.

Builds the exact-mode adjacency graph over the whole dataset and prints either the
shortest path or every simple path up to a depth bound.

Exit codes: 0 when the search completed (path found or not), 1 when the data file is
missing or an id is unknown, 2 on malformed ids.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Sequence
from pathlib import Path

from railchain.core.cli_utils import add_search_flags, create_base_parser, log_level
from railchain.core.config import DEFAULT_MAX_DEPTH, configure_logging, get_paths
from railchain.core.errors import InvalidInput
from railchain.graph.pathfinding import all_paths, shortest_path
from railchain.graph.topology import (
    EndpointIndex,
    build_endpoint_index,
    build_exact_graph,
    segment_connections,
)
from railchain.io import read_segments_geojson, segments_from_gdf

LOGGER = logging.getLogger(__name__)

# Plain numeric ids, or split children such as "4019799-1".
_SEGMENT_ID = re.compile(r"^\d+(?:-\d+)*$")


def _format_list(path: Sequence[str] | None) -> str:
    return '"' + ";".join(path or ()) + '"'


def _print_connections(index: EndpointIndex, label: str, segment_id: str) -> None:
    print(f"{label} segment {segment_id}:")
    try:
        info = segment_connections(index, segment_id)
    except InvalidInput:
        print("  Not found!")
        return
    print(f"  Start coordinate: [{info.start[0]}, {info.start[1]}]")
    print(f"  End coordinate: [{info.end[0]}, {info.end[1]}]")
    print(f"  Connected segments: {', '.join(info.connected)}")
    print(f"  Start connections: {', '.join(info.start_connections)}")
    print(f"  End connections: {', '.join(info.end_connections)}")


def build_parser():
    parser = create_base_parser(
        "Find a path of connected segments between two segment ids.",
        prog="railchain-find-path",
    )
    parser.add_argument("start", help="Start segment id")
    parser.add_argument("end", help="End segment id")
    add_search_flags(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(log_level(args.log_level))

    for sid in (args.start, args.end):
        if not _SEGMENT_ID.match(sid):
            parser.error(f"malformed segment id {sid!r}")
    max_depth = DEFAULT_MAX_DEPTH if args.max_depth is None else args.max_depth
    if max_depth < 0:
        parser.error("--max-depth must be >= 0")

    data = Path(args.data) if args.data else get_paths().segments_geojson
    try:
        segments = segments_from_gdf(read_segments_geojson(data))
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    index = build_endpoint_index(segments)
    G = build_exact_graph(segments)
    LOGGER.info("Graph ready: %d segments, %d edges", G.number_of_nodes(), G.number_of_edges())

    if args.info:
        print("=== Connection Info ===")
        _print_connections(index, "Start", args.start)
        print()
        _print_connections(index, "End", args.end)
        print()

    missing = [sid for sid in (args.start, args.end) if sid not in G]
    if missing:
        print(f"Error: unknown segment id(s): {', '.join(missing)}", file=sys.stderr)
        return 1

    if args.all_paths:
        paths = all_paths(args.start, args.end, G, max_depth=max_depth)
        shortest = min(paths, key=len) if paths else None
        if args.list:
            print(_format_list(shortest))
        elif not paths:
            print(f"No paths found between segment {args.start} and {args.end}")
        else:
            print(f"Found {len(paths)} possible paths:")
            for i, p in enumerate(paths, start=1):
                print(f"Path {i}: {' -> '.join(p)}")
            print(f"\nShortest path ({len(shortest) - 1} hops): {' -> '.join(shortest)}")
        return 0

    path = shortest_path([args.start], [args.end], G)
    if args.list:
        print(_format_list(path))
    elif path is None:
        print(f"No path found between segment {args.start} and {args.end}")
    else:
        print(f"Path found: {' -> '.join(path)}")
        print(f"Total segments: {len(path)}")
        print(f"Hops: {len(path) - 1}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
