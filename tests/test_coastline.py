"""Tests for sea level and coastline clean-up."""

import pytest
import numpy as np
from py_mapgen.core.coastline import clean_coast, quantile, set_sea_level
from py_mapgen.core.heightfield import HeightField, build
from py_mapgen.core.topology import Extent


class TestSeaLevel:
    """Test quantile thresholding."""

    def test_zero_field(self):
        """Sea level on an all-zero field keeps every height at 0."""
        field = build(Extent(4, 4))
        result = set_sea_level(field, 0.5)
        assert np.all(result.values == 0)

    def test_quantile_interpolates(self):
        field = HeightField.from_rows([[0, 1, 2, 3], [4, 5, 6, 7]])
        assert quantile(field, 0.5) == pytest.approx(3.5)
        assert quantile(field, 0.0) == 0.0
        assert quantile(field, 1.0) == 7.0

    def test_fraction_below_sea(self):
        field = HeightField.from_rows(np.arange(16, dtype=float).reshape(4, 4))
        result = set_sea_level(field, 0.5)
        assert np.count_nonzero(result.values < 0) == 8
        assert np.count_nonzero(result.values > 0) == 8

    def test_quantile_range(self):
        field = build(Extent(2, 2))
        with pytest.raises(ValueError):
            quantile(field, 1.5)


class TestCleanCoast:
    """Test coastal smoothing passes."""

    @pytest.mark.parametrize("spur", [4.0, 0.1])
    def test_lowers_spur(self, spur):
        """A degree-3 land cell with a single land neighbor sinks below sea level."""
        rows = np.full((5, 5), -1.0)
        rows[0, 2] = spur
        rows[1, 2] = 2.0
        field = HeightField.from_rows(rows)

        result = clean_coast(field, 1)
        assert result.height_at_coord(2, 0) == pytest.approx(-0.5)
        assert not result.is_land(2)
        assert result.height_at_coord(2, 1) == 2.0
        changed = np.flatnonzero(result.values != field.values)
        assert list(changed) == [2]

    def test_sinks_lone_edge_cell(self):
        """Land with no land neighbor takes half its highest sea neighbor."""
        rows = np.full((5, 5), -4.0)
        rows[0, 1] = -2.0
        rows[0, 2] = 3.0
        field = HeightField.from_rows(rows)

        result = clean_coast(field, 1)
        assert result.height_at_coord(2, 0) == pytest.approx(-1.0)

    def test_raises_inlet(self):
        """A degree-3 sea cell with a single sea neighbor becomes land."""
        rows = np.full((5, 5), 3.0)
        rows[2, 0] = -2.0
        rows[2, 1] = -6.0
        field = HeightField.from_rows(rows)

        result = clean_coast(field, 1)
        assert result.height_at_coord(0, 2) == pytest.approx(1.5)
        assert result.is_land(10)
        assert result.height_at_coord(1, 2) == -6.0

    def test_inlet_takes_lowest_land(self):
        rows = np.full((5, 5), 3.0)
        rows[1, 0] = 1.0
        rows[2, 0] = -2.0
        rows[2, 1] = -6.0
        field = HeightField.from_rows(rows)

        result = clean_coast(field, 1)
        assert result.height_at_coord(0, 2) == pytest.approx(0.5)

    def test_no_change_without_candidates(self):
        field = HeightField.from_rows(np.full((4, 4), 2.0))
        np.testing.assert_array_equal(clean_coast(field, 3).values, field.values)

    def test_input_untouched(self):
        rows = np.full((5, 5), -1.0)
        rows[0, 2] = 4.0
        rows[1, 2] = 2.0
        field = HeightField.from_rows(rows)
        clean_coast(field, 2)
        assert field.height_at_coord(2, 0) == 4.0
