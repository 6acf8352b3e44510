"""Tests for grid topology and height fields."""

import pytest
import numpy as np
from py_mapgen.core.errors import FieldShapeError, InvalidExtentError
from py_mapgen.core.heightfield import HeightField, build
from py_mapgen.core.topology import Direction, Extent, GridPoint, Topology


class TestTopology:
    """Test point enumeration and adjacency."""

    @pytest.mark.parametrize("width,height", [(1, 1), (3, 2), (5, 7), (10, 10)])
    def test_point_enumeration(self, width, height):
        """Every grid point appears once with a unique index in range."""
        topo = Topology(Extent(width, height))
        points = list(topo.points())

        assert len(points) == width * height
        assert len(set(points)) == width * height

        indices = [topo.index_of(p.x, p.y) for p in points]
        assert sorted(indices) == list(range(width * height))

    def test_index_layout(self):
        """Index is y * width + x."""
        topo = Topology(Extent(4, 3))
        assert topo.index_of(3, 2) == 11
        assert topo.point(6) == GridPoint(2, 1)
        assert topo.position(6) == (2.0, 1.0)

    @pytest.mark.parametrize("width,height", [(1, 1), (2, 5), (6, 4)])
    def test_adjacency_symmetry(self, width, height):
        """If i lists j in direction D, j lists i in the opposite direction."""
        topo = Topology(Extent(width, height))
        for i in range(topo.n_cells):
            for direction, j in topo.adjacency(i).items():
                assert topo.adjacency(j)[direction.opposite] == i

    def test_adjacency_directions(self):
        """Compass directions point at the expected cells."""
        topo = Topology(Extent(3, 3))
        adj = topo.adjacency(4)
        assert adj == {Direction.N: 1, Direction.S: 7, Direction.W: 3, Direction.E: 5}
        assert Direction.N not in topo.adjacency(0)
        assert topo.neighbor(0, Direction.W) is None

    def test_neighbor_counts(self):
        """Corners have 2 neighbors, sides 3 and interior cells 4."""
        topo = Topology(Extent(4, 4))
        assert len(topo.neighbors(0)) == 2
        assert len(topo.neighbors(1)) == 3
        assert len(topo.neighbors(5)) == 4
        assert list(topo.neighbors(5)) == sorted(topo.neighbors(5))

    def test_edge_cells(self):
        """Only the center of a 3x3 grid is not an edge cell."""
        topo = Topology(Extent(3, 3))
        edge = [topo.is_edge_cell(i) for i in range(9)]
        assert edge == [True, True, True, True, False, True, True, True, True]

    def test_near_boundary(self):
        """Cells more than 45% of the extent from the center are near the boundary."""
        topo = Topology(Extent(100, 100))
        assert topo.is_near_boundary(topo.index_of(0, 50))
        assert topo.is_near_boundary(topo.index_of(4, 50))
        assert not topo.is_near_boundary(topo.index_of(5, 50))
        assert not topo.is_near_boundary(topo.index_of(50, 50))
        assert topo.is_near_boundary(topo.index_of(50, 99))

        mask = topo.near_boundary_mask()
        assert mask[topo.index_of(0, 0)]
        assert not mask[topo.index_of(50, 50)]

    def test_custom_margin(self):
        """A narrower margin marks more cells."""
        topo = Topology(Extent(20, 20), margin_fraction=0.25)
        assert topo.is_near_boundary(topo.index_of(3, 10))
        assert not Topology(Extent(20, 20)).is_near_boundary(topo.index_of(3, 10))

    def test_edges_listed_once(self):
        """Each adjacent pair is yielded exactly once."""
        topo = Topology(Extent(4, 3))
        edges = list(topo.edges())
        # 3 horizontal pairs per row * 3 rows + 4 vertical pairs per column gap * 2
        assert len(edges) == 3 * 3 + 4 * 2
        assert len(set(edges)) == len(edges)
        assert all(i < j for i, j in edges)

    @pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 4)])
    def test_invalid_extent(self, width, height):
        """Non-positive extents are rejected at construction."""
        with pytest.raises(InvalidExtentError):
            Topology(Extent(width, height))

    def test_invalid_extent_is_value_error(self):
        with pytest.raises(ValueError):
            build(Extent(0, 0))


class TestHeightField:
    """Test height field access and transforms."""

    def test_build_is_zero(self):
        field = build(Extent(4, 4))
        assert len(field) == 16
        assert np.all(field.values == 0)

    def test_index_and_coordinate_access(self):
        """heightAt and heightAtCoord address the same storage."""
        field = HeightField.from_rows([[1, 2, 3], [4, 5, 6]])
        assert field.topology.width == 3
        assert field.topology.height == 2
        assert field.height_at(5) == 6
        assert field.height_at_coord(2, 1) == 6
        assert field.height_at_coord(0, 1) == 4

        with pytest.raises(IndexError):
            field.height_at(6)
        with pytest.raises(IndexError):
            field.height_at_coord(3, 0)

    def test_values_are_read_only(self):
        field = build(Extent(2, 2))
        with pytest.raises(ValueError):
            field.values[0] = 1.0

    def test_wrong_length(self):
        topo = Topology(Extent(3, 3))
        with pytest.raises(FieldShapeError):
            HeightField(topo, [1.0, 2.0])

    def test_transform_is_pure(self):
        """transform returns a new field and shares the topology."""
        field = build(Extent(3, 3))
        result = field.transform(lambda h, pos, nbs: h + len(nbs))

        assert result is not field
        assert result.topology is field.topology
        assert np.all(field.values == 0)
        assert result.height_at(4) == 4
        assert result.height_at(0) == 2
        assert result.height_at(1) == 3

    def test_transform_sees_position_and_neighbors(self):
        field = HeightField.from_rows([[0, 1], [2, 3]])
        result = field.transform(lambda h, pos, nbs: pos[0] * 10 + pos[1] + sum(nbs))
        # cell (1, 0) has neighbors 0 and 3
        assert result.height_at_coord(1, 0) == 10 + 0 + 3

    def test_land(self):
        field = HeightField.from_rows([[-1, 0, 2]])
        assert not field.is_land(0)
        assert not field.is_land(1)
        assert field.is_land(2)
        assert field.land_count() == 1

    def test_to_rows(self):
        rows = [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]
        assert HeightField.from_rows(rows).to_rows() == rows
