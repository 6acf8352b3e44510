"""Regular 4-connected grid topology shared by every height field."""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np
import structlog

from .errors import InvalidExtentError

logger = structlog.get_logger()

# Cells whose offset from the grid center exceeds this fraction of the extent
# are treated as near the map boundary.
NEAR_BOUNDARY_MARGIN = 0.45


class Extent(NamedTuple):
    """Grid size in cells."""
    width: int
    height: int


class GridPoint(NamedTuple):
    """Integer grid coordinate."""
    x: int
    y: int


class Direction(Enum):
    """Compass direction to a neighboring cell."""

    N = (0, -1)
    E = (1, 0)
    S = (0, 1)
    W = (-1, 0)

    @property
    def offset(self) -> Tuple[int, int]:
        return self.value

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.N: Direction.S,
    Direction.S: Direction.N,
    Direction.E: Direction.W,
    Direction.W: Direction.E,
}

# Order used when a fixed neighbor sequence is needed (slope fitting).
DIRECTION_ORDER = (Direction.W, Direction.N, Direction.E, Direction.S)


class Topology:
    """
    Points and adjacency of a width x height grid.

    Built once and never mutated; fields hold a reference to it. The
    neighbor lists are sorted by index so that scans over them are
    deterministic.
    """

    def __init__(self, extent: Extent, margin_fraction: float = NEAR_BOUNDARY_MARGIN):
        width, height = extent
        if int(width) != width or int(height) != height or width < 1 or height < 1:
            raise InvalidExtentError(width, height)

        self.extent = Extent(int(width), int(height))
        self.width = self.extent.width
        self.height = self.extent.height
        self.n_cells = self.width * self.height
        self.margin_fraction = margin_fraction

        xs, ys = np.meshgrid(np.arange(self.width), np.arange(self.height))
        positions = np.column_stack([xs.ravel(), ys.ravel()]).astype(np.float64)
        positions.flags.writeable = False
        self._positions = positions

        self._adjacency: List[Dict[Direction, int]] = []
        self._neighbors: List[Tuple[int, ...]] = []
        for i in range(self.n_cells):
            x, y = i % self.width, i // self.width
            adj = {}
            for direction in DIRECTION_ORDER:
                dx, dy = direction.offset
                px, py = x + dx, y + dy
                if 0 <= px < self.width and 0 <= py < self.height:
                    adj[direction] = py * self.width + px
            self._adjacency.append(adj)
            self._neighbors.append(tuple(sorted(adj.values())))

        degrees = np.array([len(n) for n in self._neighbors], dtype=np.int8)
        degrees.flags.writeable = False
        self._degrees = degrees

        table = np.full((self.n_cells, 4), -1, dtype=np.int64)
        for i, nbs in enumerate(self._neighbors):
            table[i, :len(nbs)] = nbs
        table.flags.writeable = False
        self._neighbor_table = table

        logger.debug("Topology built", width=self.width, height=self.height,
                     cells=self.n_cells)

    def __len__(self) -> int:
        return self.n_cells

    def __repr__(self) -> str:
        return f"Topology(width={self.width}, height={self.height})"

    @property
    def center(self) -> Tuple[float, float]:
        """Geometric center of the grid in cell coordinates."""
        return ((self.width - 1) / 2, (self.height - 1) / 2)

    @property
    def positions(self) -> np.ndarray:
        """Read-only (n_cells, 2) array of cell coordinates."""
        return self._positions

    @property
    def neighbor_table(self) -> np.ndarray:
        """(n_cells, 4) neighbor indices padded with -1."""
        return self._neighbor_table

    @property
    def degrees(self) -> np.ndarray:
        """Read-only array with the neighbor count of every cell."""
        return self._degrees

    def index_of(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Coordinate ({x}, {y}) outside {self.extent}")
        return y * self.width + x

    def point(self, index: int) -> GridPoint:
        self._check_index(index)
        return GridPoint(index % self.width, index // self.width)

    def points(self):
        """Iterate every grid point in index order."""
        for i in range(self.n_cells):
            yield GridPoint(i % self.width, i // self.width)

    def position(self, index: int) -> Tuple[float, float]:
        """Cell coordinate as a float pair, the unit used by paths."""
        x, y = self.point(index)
        return (float(x), float(y))

    def neighbors(self, index: int) -> Tuple[int, ...]:
        return self._neighbors[index]

    def adjacency(self, index: int) -> Dict[Direction, int]:
        return dict(self._adjacency[index])

    def neighbor(self, index: int, direction: Direction):
        """Neighbor index in ``direction`` or None at the boundary."""
        return self._adjacency[index].get(direction)

    def is_edge_cell(self, index: int) -> bool:
        return self._degrees[index] < 4

    def is_near_boundary(self, index: int, margin_fraction: Optional[float] = None) -> bool:
        if margin_fraction is None:
            margin_fraction = self.margin_fraction
        cx, cy = self.center
        x, y = self.point(index)
        return (abs(x - cx) > margin_fraction * self.width
                or abs(y - cy) > margin_fraction * self.height)

    def near_boundary_mask(self, margin_fraction: Optional[float] = None) -> np.ndarray:
        """Vectorized ``is_near_boundary`` over all cells."""
        if margin_fraction is None:
            margin_fraction = self.margin_fraction
        cx, cy = self.center
        dx = np.abs(self._positions[:, 0] - cx)
        dy = np.abs(self._positions[:, 1] - cy)
        return (dx > margin_fraction * self.width) | (dy > margin_fraction * self.height)

    def edges(self):
        """Yield each undirected adjacent pair (i, j) once, with i < j."""
        for i in range(self.n_cells):
            for direction in (Direction.E, Direction.S):
                j = self._adjacency[i].get(direction)
                if j is not None:
                    yield i, j

    def distance(self, a: int, b: int) -> float:
        pa = self._positions[a]
        pb = self._positions[b]
        return float(np.hypot(pa[0] - pb[0], pa[1] - pb[1]))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.n_cells:
            raise IndexError(f"Cell index {index} outside [0, {self.n_cells})")
