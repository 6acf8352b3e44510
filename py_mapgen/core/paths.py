"""
Polyline extraction: coastlines, rivers and segment merging.

Points are (x, y) float tuples in cell coordinates. Dual edges between two
adjacent cells run along the half-cell boundary separating them.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .heightfield import HeightField
from .hydrology import downhill, get_flux
from .topology import Topology

logger = structlog.get_logger()

Point = Tuple[float, float]
Segment = Tuple[Point, Point]
Path = List[Point]


def _as_point(p) -> Point:
    return (float(p[0]), float(p[1]))


def merge_segments(segments: Sequence[Sequence]) -> List[Path]:
    """
    Join unordered segments into polylines.

    A path grows at an end only while that endpoint is shared by exactly two
    segments, so junctions of three or more segments end every path touching
    them. When both ends can grow, the unused segment that comes first in
    ``segments`` is taken. A segment whose endpoints coincide becomes a
    single-point path.
    """
    segs = [(_as_point(a), _as_point(b)) for a, b in segments]
    degree: Dict[Point, int] = defaultdict(int)
    touching: Dict[Point, List[int]] = defaultdict(list)
    for k, (a, b) in enumerate(segs):
        if a == b:
            continue
        degree[a] += 1
        degree[b] += 1
        touching[a].append(k)
        touching[b].append(k)

    used = [False] * len(segs)
    paths: List[Path] = []

    def next_segment(end: Point) -> Optional[int]:
        if degree[end] != 2:
            return None
        for k in touching[end]:
            if not used[k]:
                return k
        return None

    for seed in range(len(segs)):
        if used[seed]:
            continue
        used[seed] = True
        a, b = segs[seed]
        if a == b:
            paths.append([a])
            continue
        path = [a, b]
        while True:
            head = next_segment(path[0])
            tail = next_segment(path[-1])
            if head is None and tail is None:
                break
            if tail is None or (head is not None and head <= tail):
                k = head
                s0, s1 = segs[k]
                path.insert(0, s1 if s0 == path[0] else s0)
            else:
                k = tail
                s0, s1 = segs[k]
                path.append(s1 if s0 == path[-1] else s0)
            used[k] = True
        paths.append(path)

    return paths


def relax_path(path: Sequence) -> Path:
    """Smooth interior points with a 1-2-1 kernel; endpoints stay put."""
    pts = [_as_point(p) for p in path]
    if len(pts) < 3:
        return pts
    out = [pts[0]]
    for i in range(1, len(pts) - 1):
        (ax, ay), (bx, by), (cx, cy) = pts[i - 1], pts[i], pts[i + 1]
        out.append((0.25 * ax + 0.5 * bx + 0.25 * cx,
                    0.25 * ay + 0.5 * by + 0.25 * cy))
    out.append(pts[-1])
    return out


def dual_edge(topology: Topology, i: int, j: int) -> Segment:
    """The half-cell boundary segment separating adjacent cells i and j."""
    xi, yi = topology.position(i)
    xj, yj = topology.position(j)
    mx, my = (xi + xj) / 2, (yi + yj) / 2
    if yi == yj:
        return ((mx, my - 0.5), (mx, my + 0.5))
    return ((mx - 0.5, my), (mx + 0.5, my))


def contour(field: HeightField, level: float = 0) -> List[Path]:
    """Iso-line at ``level`` built from dual edges of straddling cell pairs."""
    topo = field.topology
    vals = field.values
    near = topo.near_boundary_mask()
    edges = []
    for i, j in topo.edges():
        if near[i] or near[j]:
            continue
        if (vals[i] > level) != (vals[j] > level):
            edges.append(dual_edge(topo, i, j))
    return merge_segments(edges)


def get_rivers(field: HeightField, limit: float) -> List[Path]:
    """
    River polylines along the downhill graph.

    A land cell away from the boundary carries a river when its flux exceeds
    ``limit`` scaled by the land fraction. A river entering the sea stops
    halfway to the first underwater cell.
    """
    topo = field.topology
    vals = field.values
    infos = downhill(field)
    flux = get_flux(field, infos)
    threshold = limit * field.land_count() / len(field)
    near = topo.near_boundary_mask()

    links = []
    for i, info in enumerate(infos):
        target = info.drains_to
        if near[i] or target is None:
            continue
        if flux[i] > threshold and vals[i] > 0:
            up = topo.position(i)
            down = topo.position(target)
            if vals[target] > 0:
                links.append((up, down))
            else:
                links.append((up, ((up[0] + down[0]) / 2, (up[1] + down[1]) / 2)))

    rivers = [relax_path(p) for p in merge_segments(links)]
    logger.debug("Rivers traced", segments=len(links), rivers=len(rivers),
                 threshold=threshold, max_flux=float(np.max(flux)))
    return rivers
