"""
Tests for core/layout.py - Grid layout solver.
"""

import pytest

from core.layout import Constraint, GridShape, candidate_grids, grid_positions, solve_grid


def _scale(container_w, container_h, cols, rows, aspect_w, aspect_h):
    return min((container_w / cols) / aspect_w, (container_h / rows) / aspect_h)


class TestSolveGridScenarios:
    """Hand-computed layouts."""

    def test_four_tiles_in_700x500(self):
        """Test 4 tiles of 4:3 in 700x500 produce a height-bound 2x2 grid."""
        shape = solve_grid(700, 500, 4, 4, 3)
        assert (shape.columns, shape.rows) == (2, 2)
        assert shape.constraint is Constraint.HEIGHT
        assert shape.container_constraint is Constraint.HEIGHT
        # height scale = (500 / 2) / 3 = 83.33, width scale = (700 / 2) / 4 = 87.5
        assert shape.cell_width_px == pytest.approx(1000 / 3)
        assert shape.cell_height_px == pytest.approx(250.0)

    def test_single_tile_fills_container(self):
        """Test one tile in a same-aspect container fills it."""
        shape = solve_grid(640, 480, 1, 4, 3)
        assert shape.dimensions == (1, 1)
        assert shape.cell_width_px == pytest.approx(640)
        assert shape.cell_height_px == pytest.approx(480)

    def test_wide_container_uses_single_row(self):
        """Test a very wide container lays tiles out in one row."""
        shape = solve_grid(1600, 300, 4, 4, 3)
        assert shape.dimensions == (4, 1)
        assert shape.cell_width_px == pytest.approx(400)
        assert shape.cell_height_px == pytest.approx(300)

    def test_tall_container_is_width_bound(self):
        """Test a tall container reports a width container constraint."""
        shape = solve_grid(300, 1600, 4, 4, 3)
        # Five rows: (1, 5) and (1, 6) tie on scale, fewer cells wins.
        assert shape.dimensions == (1, 5)
        assert shape.constraint is Constraint.WIDTH
        assert shape.container_constraint is Constraint.WIDTH

    def test_scale_tie_prefers_fewer_cells_then_first_option(self):
        """Test equal scales pick the fewest cells, then generation order."""
        # All three options give scale 50: (2,1), (1,2) and (2,2).
        shape = solve_grid(400, 300, 2, 4, 3)
        assert shape.dimensions == (2, 1)
        assert shape.constraint is Constraint.WIDTH
        assert shape.cell_width_px == pytest.approx(200)
        assert shape.cell_height_px == pytest.approx(150)


class TestSolveGridProperties:
    """Feasibility and optimality over many inputs."""

    CONTAINERS = [(700, 500), (1920, 1080), (1080, 1920), (320, 240), (1, 1), (5000, 37), (37, 5000)]
    ASPECTS = [(4, 3), (16, 9), (1, 1)]

    @pytest.mark.parametrize("container_w,container_h", CONTAINERS)
    @pytest.mark.parametrize("aspect_w,aspect_h", ASPECTS)
    def test_always_seats_all_tiles(self, container_w, container_h, aspect_w, aspect_h):
        """Test every solved grid has room for every tile."""
        for num_tiles in range(1, 65):
            shape = solve_grid(container_w, container_h, num_tiles, aspect_w, aspect_h)
            assert shape.columns >= 1
            assert shape.rows >= 1
            assert shape.num_cells >= num_tiles

    @pytest.mark.parametrize("container_w,container_h", CONTAINERS)
    def test_never_picks_smaller_scale_than_a_feasible_option(self, container_w, container_h):
        """Test the chosen option has the maximum scale, fewest cells on ties."""
        for num_tiles in range(1, 40):
            shape = solve_grid(container_w, container_h, num_tiles, 4, 3)
            chosen = _scale(container_w, container_h, shape.columns, shape.rows, 4, 3)
            assert shape.cell_width_px == pytest.approx(4 * chosen)

            scale_factor = (container_h / 3) / (container_w / 4)
            ideal_rows = (scale_factor * num_tiles) ** 0.5
            ideal_cols = (num_tiles / scale_factor) ** 0.5
            for cols, rows in candidate_grids(ideal_cols, ideal_rows):
                if cols < 1 or rows < 1 or cols * rows < num_tiles:
                    continue
                scale = _scale(container_w, container_h, cols, rows, 4, 3)
                assert chosen >= scale
                if scale == chosen:
                    assert shape.num_cells <= cols * rows

    def test_is_pure(self):
        """Test repeated calls return equal shapes."""
        assert solve_grid(1024, 768, 7, 4, 3) == solve_grid(1024, 768, 7, 4, 3)


class TestSolveGridValidation:
    """Invalid inputs are programming errors."""

    @pytest.mark.parametrize(
        "args",
        [(0, 500, 4, 4, 3), (700, 0, 4, 4, 3), (700, 500, 0, 4, 3), (700, 500, 4, 0, 3)],
    )
    def test_rejects_non_positive_inputs(self, args):
        """Test zero sizes, tile counts or aspects raise ValueError."""
        with pytest.raises(ValueError):
            solve_grid(*args)


class TestGridHelpers:
    """Tests for candidate and position helpers."""

    def test_candidate_order(self):
        """Test candidates are (ceil,floor), (floor,ceil), (ceil,ceil)."""
        assert candidate_grids(2.05, 1.95) == [(3, 1), (2, 2), (3, 2)]

    def test_grid_positions_row_major(self):
        """Test tiles fill rows left to right."""
        assert grid_positions(5, 2) == [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]

    def test_grid_shape_num_cells(self):
        """Test num_cells is columns * rows."""
        shape = GridShape(3, 2, Constraint.WIDTH, Constraint.HEIGHT, 10.0, 7.5)
        assert shape.num_cells == 6
