"""Plan a route through station/segment waypoints and write the merged geometry.

Run:
  python scripts/plan_route.py station:KGX station:EDB --out data/processed/route.json
  python scripts/plan_route.py segment:4019799 segment:4019800
  python scripts/plan_route.py point:-0.1234,51.5308 station:EDB   # trimmed at the point
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bootstrap import ensure_repo_root_on_path

ensure_repo_root_on_path(__file__)

from railchain.api import Waypoint, assemble_route, plan_path  # noqa: E402
from railchain.core.cli_utils import create_base_parser, log_level  # noqa: E402
from railchain.core.config import configure_logging, get_paths  # noqa: E402
from railchain.core.errors import RoutingError  # noqa: E402
from railchain.io import write_json  # noqa: E402
from railchain.io.store import GeoDataFrameSegmentStore  # noqa: E402
from railchain.models.routing import RoutingConfig, load_routing_config  # noqa: E402

LOGGER = logging.getLogger("plan_route")


def _waypoint(token: str) -> Waypoint:
    kind, _, ref = token.partition(":")
    if kind == "station" and ref:
        return Waypoint.station(ref)
    if kind == "segment" and ref:
        return Waypoint.segment(ref)
    if kind == "point" and ref:
        lon, lat = (float(v) for v in ref.split(","))
        return Waypoint.at(lon, lat)
    raise argparse.ArgumentTypeError(
        f"expected station:<id>, segment:<id> or point:<lon>,<lat>, got {token!r}"
    )


def _parse_args() -> argparse.Namespace:
    parser = create_base_parser("Plan a route through waypoints and merge its geometry.")
    parser.add_argument("waypoints", nargs="+", type=_waypoint, help="Two or more waypoints.")
    parser.add_argument("--stations", default=None, help="Station GeoJSON.")
    parser.add_argument("--config", default=None, help="Routing config YAML.")
    parser.add_argument("--out", default=None, help="Write the plan and geometry as JSON.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    configure_logging(log_level(args.log_level))
    paths = get_paths()

    config_path = Path(args.config) if args.config else paths.routing_config
    config = load_routing_config(config_path) if config_path.exists() else RoutingConfig()
    store = GeoDataFrameSegmentStore.from_geojson(
        Path(args.data) if args.data else paths.segments_geojson,
        Path(args.stations) if args.stations else paths.stations_geojson,
    )

    result = plan_path(args.waypoints, store, config=config)
    report = result.to_dict()
    if not result.ok:
        LOGGER.error("Planning failed: %s", result.error.message if result.error else "no path")
        print(report, file=sys.stderr)
        return 1

    try:
        merged = assemble_route(
            result.path,
            store,
            start_point=args.waypoints[0].coord,
            end_point=args.waypoints[-1].coord,
        )
    except RoutingError as exc:
        LOGGER.error("Merge failed: %s", exc.message)
        report["error"] = exc.to_dict()
        print(report, file=sys.stderr)
        return 1

    report["geometry"] = {
        "wkt": merged.to_wkt(),
        "length_m": merged.length_m,
        "segment_count": merged.segment_count,
        "notice": merged.notice.to_dict() if merged.notice else None,
    }
    if args.out:
        write_json(report, Path(args.out))
        LOGGER.info("Wrote %s", args.out)
    else:
        print(f'"{";".join(result.path)}"')
        print(f"Length: {merged.length_m / 1000:.1f} km")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
