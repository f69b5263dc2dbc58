"""Chain merge: assemble polylines of one non-branching path into a single oriented line.

Equality is exact numeric equality on the original floats; every input comes from the
same vertex source, so shared junctions are bit-identical.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from railchain.core.errors import AmbiguousStart, BrokenChain, InvalidInput
from railchain.geo.geometry import coordinates_to_wkt, polyline_length_m
from railchain.models.entities import Coordinate, Polyline, as_polyline

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedGeometry:
    coords: Polyline
    segment_count: int
    notice: AmbiguousStart | None = None

    @property
    def ambiguous_start(self) -> bool:
        return self.notice is not None

    @property
    def length_m(self) -> float:
        return polyline_length_m(self.coords)

    def to_wkt(self) -> str:
        return coordinates_to_wkt(self.coords)


def _endpoint_counts(polylines: Sequence[Polyline]) -> Counter[Coordinate]:
    counts: Counter[Coordinate] = Counter()
    for p in polylines:
        counts[p[0]] += 1
        counts[p[-1]] += 1
    return counts


def _pick_start(polylines: Sequence[Polyline], counts: Counter[Coordinate]) -> int | None:
    # A chain end that is already a first point wins, so forward-digitised chains keep
    # their direction whatever the input order.
    for i, p in enumerate(polylines):
        if counts[p[0]] == 1:
            return i
    for i, p in enumerate(polylines):
        if counts[p[-1]] == 1:
            return i
    return None


def merge_chain(polylines: Sequence[Sequence[Sequence[float]]]) -> MergedGeometry:
    """Merge an unordered list of chained polylines into one coordinate sequence.

    Raises `InvalidInput` for empty input or degenerate polylines and `BrokenChain` when
    the inputs do not form one connected chain.
    """
    if not polylines:
        raise InvalidInput("merge_chain needs at least one polyline", n_polylines=0)
    lines = [as_polyline(p) for p in polylines]
    short = [i for i, p in enumerate(lines) if len(p) < 2]
    if short:
        raise InvalidInput(
            f"polylines with fewer than 2 points at indices {short[:10]}", indices=short
        )

    if len(lines) == 1:
        return MergedGeometry(coords=lines[0], segment_count=1)

    counts = _endpoint_counts(lines)
    start = _pick_start(lines, counts)
    notice: AmbiguousStart | None = None
    if start is None:
        start = 0
        notice = AmbiguousStart(polyline_count=len(lines), start_index=start)
        LOGGER.warning(
            "No unshared chain end among %d polylines (loop or junction); starting from index 0",
            len(lines),
        )

    chain: list[Coordinate] = list(lines[start])
    if counts[chain[-1]] == 1 and counts[chain[0]] != 1:
        chain.reverse()

    remaining = [i for i in range(len(lines)) if i != start]
    merged = 1
    while remaining:
        tail = chain[-1]
        nxt = next((i for i in remaining if tail in (lines[i][0], lines[i][-1])), None)
        if nxt is None:
            raise BrokenChain(tail, merged_count=merged, remaining=tuple(remaining))

        piece = lines[nxt] if lines[nxt][0] == tail else lines[nxt][::-1]
        chain.extend(piece[1:])
        merged += 1
        remaining = [i for i in remaining if i != nxt]

    return MergedGeometry(coords=tuple(chain), segment_count=len(lines), notice=notice)
