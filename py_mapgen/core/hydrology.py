"""
Hydrology over a height field.

This module implements:
- Downhill direction graph and sink detection
- Priority-flood depression filling
- Flux (drainage) accumulation
- Local slope estimation
"""

import heapq
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np
import structlog

from .heightfield import HeightField
from .topology import DIRECTION_ORDER

logger = structlog.get_logger()

DEFAULT_FILL_EPSILON = 1e-5


@dataclass(frozen=True)
class DownhillInfo:
    """Drainage information for one cell."""
    is_edge_cell: bool
    is_sink: bool
    downhill_index: int  # lowest strictly lower neighbor, -1 if none
    downhill_height: float

    @property
    def drains_to(self) -> Optional[int]:
        """Cell that receives this cell's water, None for sinks and edge outlets."""
        if self.is_edge_cell or self.is_sink:
            return None
        return self.downhill_index


class SinkKind(Enum):
    DRAINS_OFF_EDGE = "drains_off_edge"
    SINK = "sink"


@dataclass(frozen=True)
class SinkResult:
    """Where the downhill chain starting at a cell ends."""
    kind: SinkKind
    index: int  # the edge cell or sink cell the chain terminates at

    @property
    def drains_off_edge(self) -> bool:
        return self.kind is SinkKind.DRAINS_OFF_EDGE


def downhill(field: HeightField) -> List[DownhillInfo]:
    """
    Compute each cell's steepest-descent neighbor.

    The lowest neighbor wins when it is strictly lower than the cell; equal
    heights among neighbors resolve to the lowest neighbor index. Edge cells
    still report their lowest neighbor but are flagged as outlets.
    """
    topo = field.topology
    vals = field.values
    infos = []
    for i in range(topo.n_cells):
        best = -1
        best_height = vals[i]
        for j in topo.neighbors(i):
            if vals[j] < best_height:
                best_height = vals[j]
                best = j
        infos.append(DownhillInfo(
            is_edge_cell=topo.is_edge_cell(i),
            is_sink=best == -1,
            downhill_index=best,
            downhill_height=float(best_height),
        ))
    return infos


def find_sinks(field: HeightField, infos: Optional[List[DownhillInfo]] = None) -> List[SinkResult]:
    """
    Follow every cell's downhill chain to where it terminates.

    Chains form a forest, so results are memoized along each walk.
    """
    if infos is None:
        infos = downhill(field)
    results: List[Optional[SinkResult]] = [None] * len(infos)

    for start in range(len(infos)):
        if results[start] is not None:
            continue
        chain = []
        node = start
        while True:
            if results[node] is not None:
                terminal = results[node]
                break
            info = infos[node]
            if info.is_edge_cell:
                terminal = SinkResult(SinkKind.DRAINS_OFF_EDGE, node)
                results[node] = terminal
                break
            if info.is_sink:
                terminal = SinkResult(SinkKind.SINK, node)
                results[node] = terminal
                break
            chain.append(node)
            node = info.downhill_index
        for cell in chain:
            results[cell] = terminal

    sinks = {r.index for r in results if r.kind is SinkKind.SINK}
    logger.debug("Sinks found", sinks=len(sinks))
    return results


def fill_sinks(
    field: HeightField,
    epsilon: float = DEFAULT_FILL_EPSILON,
    margin_fraction: Optional[float] = None,
) -> HeightField:
    """
    Fill depressions so every interior cell can drain to the boundary.

    Edge and near-boundary cells keep their height. Every other cell is
    raised to the lowest height, not below its own, from which a path
    descending by at least ``epsilon`` per step reaches a boundary cell.
    Cells are settled lowest-first from a heap, which reaches the same fixed
    point as repeated relaxation sweeps in a single pass.
    """
    topo = field.topology
    original = field.values
    boundary = topo.near_boundary_mask(margin_fraction) | (topo.degrees < 4)

    filled = np.full(topo.n_cells, np.inf)
    settled = np.zeros(topo.n_cells, dtype=bool)
    heap = []
    for i in np.flatnonzero(boundary):
        filled[i] = original[i]
        heapq.heappush(heap, (filled[i], int(i)))

    while heap:
        height, cell = heapq.heappop(heap)
        if settled[cell]:
            continue
        settled[cell] = True
        for nb in topo.neighbors(cell):
            if settled[nb] or boundary[nb]:
                continue
            candidate = max(original[nb], height + epsilon)
            if candidate < filled[nb]:
                filled[nb] = candidate
                heapq.heappush(heap, (candidate, nb))

    logger.debug("Depression filling completed",
                 cells_filled=int(np.count_nonzero(filled > original)))
    return field.with_values(filled)


def get_flux(field: HeightField, infos: Optional[List[DownhillInfo]] = None) -> np.ndarray:
    """
    Accumulate drainage: each cell starts with 1/N and passes its total on.

    Cells are visited highest first so every contributor has been added
    before a cell hands its water downstream. Sinks and edge cells keep what
    they receive, so the total stays 1.
    """
    if infos is None:
        infos = downhill(field)
    n = len(field)
    flux = np.full(n, 1.0 / n)
    order = np.argsort(-field.values, kind="stable")
    for i in order:
        target = infos[i].drains_to
        if target is not None:
            flux[target] += flux[i]
    return flux


def _plane_gradient(field: HeightField, index: int):
    """Gradient of the plane through the W, N and E neighbors of a cell."""
    topo = field.topology
    adj = topo.adjacency(index)
    if len(adj) != 4:
        return 0.0, 0.0
    vals = field.values
    p0, p1, p2 = (adj[d] for d in DIRECTION_ORDER[:3])
    (x0, y0), (xa, ya), (xb, yb) = (topo.positions[p] for p in (p0, p1, p2))
    x1, y1 = xa - x0, ya - y0
    x2, y2 = xb - x0, yb - y0
    det = x1 * y2 - x2 * y1
    h1 = vals[p1] - vals[p0]
    h2 = vals[p2] - vals[p0]
    return (y2 * h1 - y1 * h2) / det, (-x2 * h1 + x1 * h2) / det


def get_slope(field: HeightField) -> np.ndarray:
    """Gradient magnitude per cell; 0 for cells with fewer than 4 neighbors."""
    slopes = np.zeros(len(field))
    for i in range(len(field)):
        gx, gy = _plane_gradient(field, i)
        slopes[i] = np.hypot(gx, gy)
    return slopes
