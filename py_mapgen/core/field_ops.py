"""
Height field generators and combinators.

Generators build a new field from a topology (slope, cone, mountains);
combinators build a new field from existing ones (add, normalize, peaky,
relax). None of them modify their inputs.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .errors import TopologyMismatchError
from .heightfield import HeightField
from .topology import Topology

logger = structlog.get_logger()


def _offsets(topology: Topology) -> Tuple[np.ndarray, np.ndarray]:
    """Cell coordinates relative to the grid center."""
    cx, cy = topology.center
    pos = topology.positions
    return pos[:, 0] - cx, pos[:, 1] - cy


def zero(topology: Topology) -> HeightField:
    return HeightField(topology)


def slope(topology: Topology, direction: Tuple[float, float]) -> HeightField:
    """Planar ramp: height(p) = dot(p - center, direction)."""
    dx, dy = _offsets(topology)
    return HeightField(topology, dx * direction[0] + dy * direction[1])


def cone(topology: Topology, k: float) -> HeightField:
    """Radial ramp: height(p) = k * |p - center|."""
    dx, dy = _offsets(topology)
    return HeightField(topology, k * np.hypot(dx, dy))


def random_peaks(topology: Topology, count: int, rng: AleaPRNG) -> List[Tuple[float, float]]:
    """Uniformly distributed peak positions inside the grid."""
    return [
        (rng.uniform(0, topology.width - 1), rng.uniform(0, topology.height - 1))
        for _ in range(count)
    ]


def mountains(
    topology: Topology,
    peaks: Iterable[Sequence[float]],
    radius: Optional[float] = None,
) -> HeightField:
    """
    Sum of squared gaussian bumps, one per peak.

    Args:
        topology: Grid to generate over
        peaks: Peak positions in cell coordinates
        radius: Bump radius, defaults to 5% of the larger grid dimension

    Returns:
        New HeightField with sum(exp(-d^2 / 2r^2)^2) at every cell
    """
    if radius is None:
        radius = 0.05 * max(topology.width, topology.height)
    pos = topology.positions
    heights = np.zeros(topology.n_cells, dtype=np.float64)
    for px, py in peaks:
        d2 = (pos[:, 0] - px) ** 2 + (pos[:, 1] - py) ** 2
        heights += np.exp(-d2 / (2 * radius * radius)) ** 2
    return HeightField(topology, heights)


def add(*fields: HeightField) -> HeightField:
    """Elementwise sum of fields sharing one topology."""
    if not fields:
        raise ValueError("add() needs at least one field")
    topology = fields[0].topology
    for f in fields[1:]:
        if f.topology is not topology:
            raise TopologyMismatchError("All operands of add() must share one topology")
    total = np.zeros(topology.n_cells, dtype=np.float64)
    for f in fields:
        total += f.values
    return HeightField(topology, total)


def normalize(field: HeightField) -> HeightField:
    """Rescale linearly to [0, 1]; a constant field maps to all zeros."""
    vals = field.values
    lo = vals.min()
    hi = vals.max()
    if hi == lo:
        logger.debug("Normalizing constant field", value=float(lo))
        return HeightField(field.topology)
    return field.with_values((vals - lo) / (hi - lo))


def peaky(field: HeightField) -> HeightField:
    return field.with_values(np.sqrt(normalize(field).values))


def relax(field: HeightField, iterations: int = 1) -> HeightField:
    """
    Replace each cell by the mean of its neighbors.

    Cells with fewer than three neighbors (grid corners) become 0.
    """
    topo = field.topology
    table = topo.neighbor_table
    present = table >= 0
    degrees = topo.degrees.astype(np.float64)
    relaxed = degrees >= 3
    vals = field.values
    for _ in range(iterations):
        sums = np.where(present, vals[np.where(present, table, 0)], 0.0).sum(axis=1)
        out = np.zeros_like(vals)
        out[relaxed] = sums[relaxed] / degrees[relaxed]
        vals = out
    return field.with_values(vals)


def drop_edge(field: HeightField, power: float = 4) -> HeightField:
    """Pull the rim of the map down so the coast closes before the boundary."""
    topo = field.topology
    dx, dy = _offsets(topo)
    x = 2.4 * dx / topo.width
    y = 2.4 * dy / topo.height
    rim = np.exp(10 * ((np.abs(x) ** power + np.abs(y) ** power) ** (1 / power) - 1))
    return field.with_values(field.values - rim)
