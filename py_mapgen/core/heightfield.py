"""Height values over a shared grid topology."""

from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .errors import FieldShapeError
from .topology import Extent, Topology

TransformFn = Callable[[float, Tuple[float, float], Tuple[float, ...]], float]


class HeightField:
    """
    Immutable array of heights, one per grid cell.

    The field only references its Topology. Every operation that changes
    heights returns a new HeightField over the same topology.
    """

    __slots__ = ("topology", "_values")

    def __init__(self, topology: Topology, values=None):
        self.topology = topology
        if values is None:
            arr = np.zeros(topology.n_cells, dtype=np.float64)
        else:
            arr = np.array(values, dtype=np.float64).ravel()
            if arr.shape[0] != topology.n_cells:
                raise FieldShapeError(
                    f"Expected {topology.n_cells} values for {topology!r}, got {arr.shape[0]}"
                )
        arr.flags.writeable = False
        self._values = arr

    @classmethod
    def build(cls, extent: Extent) -> "HeightField":
        """All-zero field over a fresh topology."""
        return cls(Topology(extent))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "HeightField":
        """Build a field from row-major nested sequences (rows[y][x])."""
        arr = np.asarray(rows, dtype=np.float64)
        if arr.ndim != 2:
            raise FieldShapeError("Rows must form a 2D array")
        height, width = arr.shape
        return cls(Topology(Extent(width, height)), arr.ravel())

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def extent(self) -> Extent:
        return self.topology.extent

    def __len__(self) -> int:
        return self._values.shape[0]

    def __iter__(self):
        return iter(self._values.tolist())

    def __repr__(self) -> str:
        return (f"HeightField({self.topology.width}x{self.topology.height}, "
                f"min={self._values.min():.4g}, max={self._values.max():.4g})")

    def height_at(self, index: int) -> float:
        if not 0 <= index < len(self):
            raise IndexError(f"Cell index {index} outside [0, {len(self)})")
        return float(self._values[index])

    def height_at_coord(self, x: int, y: int) -> float:
        return float(self._values[self.topology.index_of(x, y)])

    def to_rows(self):
        """Heights as nested lists, rows[y][x]."""
        return self._values.reshape(self.topology.height, self.topology.width).tolist()

    def with_values(self, values) -> "HeightField":
        """New field over the same topology."""
        return HeightField(self.topology, values)

    def transform(self, fn: TransformFn) -> "HeightField":
        """
        Apply ``fn(height, position, neighbor_heights)`` to every cell.

        ``position`` is the cell's (x, y) coordinate and ``neighbor_heights``
        holds the heights of its neighbors in ascending index order.
        """
        topo = self.topology
        vals = self._values
        out = np.empty_like(vals)
        for i in range(len(vals)):
            nbs = tuple(float(vals[j]) for j in topo.neighbors(i))
            out[i] = fn(float(vals[i]), topo.position(i), nbs)
        return HeightField(topo, out)

    def neighbors(self, index: int):
        return self.topology.neighbors(index)

    def is_edge_cell(self, index: int) -> bool:
        return self.topology.is_edge_cell(index)

    def is_near_boundary(self, index: int, margin_fraction: Optional[float] = None) -> bool:
        return self.topology.is_near_boundary(index, margin_fraction)

    def is_land(self, index: int) -> bool:
        """Land means strictly above sea level (height > 0)."""
        return self._values[index] > 0

    def land_mask(self) -> np.ndarray:
        return self._values > 0

    def land_count(self) -> int:
        return int(np.count_nonzero(self._values > 0))


def build(extent: Extent) -> HeightField:
    """All-zero field over a new topology of the given extent."""
    return HeightField.build(extent)
