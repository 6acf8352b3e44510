"""
City placement and territory partitioning.

Process:
1. city_score() - rate every cell as a city site
2. place_cities() - greedy placement, rescoring after each city
3. get_territories() - grow regions from the first cities with a
   cost-weighted multi-source shortest path search
4. get_borders() - border polylines between territories on land
"""

import heapq
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .errors import NoCitiesError
from .heightfield import HeightField
from .hydrology import get_flux
from .paths import Path, dual_edge, merge_segments, relax_path

logger = structlog.get_logger()

# Cost parameters
UPHILL_DAMPING = 10.0
SLOPE_COST = 0.25
RIVER_COST = 100.0
SEA_COST = 100.0
COAST_CROSSING_COST = 1000.0


def city_score(field: HeightField, cities: Sequence[int], flux: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Suitability of each cell for a new city.

    Water-rich cells score higher, central cells get a small bonus and every
    existing city pushes the score down around it. Water, near-boundary
    and already occupied cells are excluded with -inf.
    """
    topo = field.topology
    if flux is None:
        flux = get_flux(field)
    score = np.sqrt(flux)

    cx, cy = topo.center
    pos = topo.positions
    dx = np.abs(pos[:, 0] - cx)
    dy = np.abs(pos[:, 1] - cy)
    score += 0.01 / (1e-9 + dx - topo.width / 2)
    score += 0.01 / (1e-9 + dy - topo.height / 2)

    for city in cities:
        cpos = pos[city]
        dist = np.hypot(pos[:, 0] - cpos[0], pos[:, 1] - cpos[1])
        score -= 0.02 / (dist + 1e-9)

    excluded = (field.values <= 0) | topo.near_boundary_mask()
    excluded[np.asarray(cities, dtype=np.intp)] = True
    score[excluded] = -np.inf
    return score


def place_city(field: HeightField, cities: Sequence[int], flux: Optional[np.ndarray] = None) -> List[int]:
    """Return ``cities`` with the best-scoring cell appended."""
    score = city_score(field, cities, flux)
    best = int(np.argmax(score))
    if not np.isfinite(score[best]):
        logger.warning("No viable city site left", placed=len(cities))
        return list(cities)
    return list(cities) + [best]


def place_cities(field: HeightField, n: int, cities: Optional[Sequence[int]] = None) -> List[int]:
    """Place ``n`` cities one at a time so each sees the ones before it."""
    flux = get_flux(field)
    placed = list(cities) if cities is not None else []
    for _ in range(n):
        grown = place_city(field, placed, flux)
        if len(grown) == len(placed):
            break
        placed = grown
    logger.info("Cities placed", requested=n, placed=len(placed))
    return placed


def _edge_cost(field: HeightField, flux: np.ndarray, u: int, v: int) -> float:
    """Travel cost from cell u to neighbor v."""
    vals = field.values
    horiz = field.topology.distance(u, v)
    vert = vals[v] - vals[u]
    if vert > 0:
        vert /= UPHILL_DAMPING
    diff = 1 + SLOPE_COST * (vert / horiz) ** 2
    diff += RIVER_COST * np.sqrt(flux[u])
    if vals[u] <= 0:
        diff = SEA_COST
    if (vals[u] > 0) != (vals[v] > 0):
        return COAST_CROSSING_COST
    return horiz * diff


def get_territories(field: HeightField, cities: Sequence[int], nterrs: int) -> np.ndarray:
    """
    Partition every cell among the first ``nterrs`` cities.

    Each territory grows from its city along the cheapest paths; a cell
    belongs to the first city whose frontier reaches it. ``nterrs`` is
    clamped to the number of cities available.

    Returns:
        Array holding, for every cell, the grid index of its owning city
    """
    if len(cities) == 0:
        raise NoCitiesError("Territories need at least one city")
    n = min(nterrs, len(cities))
    if n < nterrs:
        logger.debug("Clamping territory count", requested=nterrs, available=len(cities))
    if n < 1:
        raise NoCitiesError(f"Territory count must be positive, got {nterrs}")

    topo = field.topology
    flux = get_flux(field)
    owner = np.full(topo.n_cells, -1, dtype=np.int64)

    # Priority queue: (cost, sequence, city, cell)
    heap: List[Tuple[float, int, int, int]] = []
    counter = 0
    for city in cities[:n]:
        owner[city] = city
        for nb in topo.neighbors(city):
            heapq.heappush(heap, (_edge_cost(field, flux, city, nb), counter, city, nb))
            counter += 1

    while heap:
        cost, _, city, cell = heapq.heappop(heap)
        if owner[cell] != -1:
            continue
        owner[cell] = city
        for nb in topo.neighbors(cell):
            if owner[nb] != -1:
                continue
            heapq.heappush(heap, (cost + _edge_cost(field, flux, cell, nb), counter, city, nb))
            counter += 1

    logger.info("Territories assigned", territories=n,
                unassigned=int(np.count_nonzero(owner == -1)))
    return owner


def get_borders(field: HeightField, territories: Sequence[int]) -> List[Path]:
    """Border polylines between different territories, on land only."""
    topo = field.topology
    vals = field.values
    terr = np.asarray(territories)
    near = topo.near_boundary_mask()
    edges = []
    for i, j in topo.edges():
        if near[i] or near[j]:
            continue
        if vals[i] <= 0 or vals[j] <= 0:
            continue
        if terr[i] != terr[j]:
            edges.append(dual_edge(topo, i, j))
    return [relax_path(p) for p in merge_segments(edges)]


def territory_center(
    field: HeightField,
    territories: Sequence[int],
    city: int,
    land_only: bool = False,
) -> Optional[Tuple[float, float]]:
    """Centroid of the cells owned by ``city``, None if it owns none."""
    mask = np.asarray(territories) == city
    if land_only:
        mask &= field.land_mask()
    if not mask.any():
        return None
    pts = field.topology.positions[mask]
    return (float(pts[:, 0].mean()), float(pts[:, 1].mean()))
