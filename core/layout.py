"""
Grid layout solver for Camera Grid.

Calculates the grid shape that maximizes the size of every feed while
preserving its aspect ratio.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class Constraint(str, Enum):
    """Which dimension limits the scale when fitting a box into another."""

    WIDTH = "width"
    HEIGHT = "height"


@dataclass(frozen=True)
class GridShape:
    columns: int
    rows: int
    constraint: Constraint
    container_constraint: Constraint
    cell_width_px: float
    cell_height_px: float

    @property
    def num_cells(self) -> int:
        return self.columns * self.rows

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.columns, self.rows


def candidate_grids(ideal_cols: float, ideal_rows: float) -> list[tuple[int, int]]:
    """Integer (columns, rows) options around the continuous ideal."""
    return [
        (math.ceil(ideal_cols), math.floor(ideal_rows)),
        (math.floor(ideal_cols), math.ceil(ideal_rows)),
        (math.ceil(ideal_cols), math.ceil(ideal_rows)),
    ]


def solve_grid(
    container_width: float,
    container_height: float,
    num_tiles: int,
    tile_aspect_w: float,
    tile_aspect_h: float,
) -> GridShape:
    """
    Return the optimal grid for num_tiles feeds in the container.

    Options are ranked by (decreasing priority):
    1) Fit all the tiles.
    2) Maximum scale for the image in each cell.
    3) Fewest cells.
    The first generated option wins a full tie.
    """
    if container_width <= 0 or container_height <= 0:
        raise ValueError(
            f"Container must be positive, got {container_width}x{container_height}"
        )
    if num_tiles < 1:
        raise ValueError(f"Need at least one tile, got {num_tiles}")
    if tile_aspect_w <= 0 or tile_aspect_h <= 0:
        raise ValueError(f"Tile aspect must be positive, got {tile_aspect_w}:{tile_aspect_h}")

    # How many unit tiles fit vertically relative to horizontally.
    scale_factor = (container_height / tile_aspect_h) / (container_width / tile_aspect_w)

    ideal_rows = math.sqrt(scale_factor * num_tiles)
    ideal_cols = math.sqrt(num_tiles / scale_factor)

    chosen = None
    max_scale = 0.0
    min_cells = None
    for cols, rows in candidate_grids(ideal_cols, ideal_rows):
        if cols < 1 or rows < 1:
            continue
        num_cells = cols * rows
        if num_cells < num_tiles:
            # Rounded down too far.
            continue

        width_scale = (container_width / cols) / tile_aspect_w
        height_scale = (container_height / rows) / tile_aspect_h
        if width_scale < height_scale:
            scale, constraint = width_scale, Constraint.WIDTH
        else:
            scale, constraint = height_scale, Constraint.HEIGHT

        if scale < max_scale:
            continue
        if scale == max_scale and min_cells is not None and num_cells >= min_cells:
            continue

        chosen = (cols, rows, constraint)
        max_scale = scale
        min_cells = num_cells

    if chosen is None:
        raise RuntimeError(
            f"No grid option seats {num_tiles} tiles in "
            f"{container_width}x{container_height}"
        )

    cols, rows, constraint = chosen
    return GridShape(
        columns=cols,
        rows=rows,
        constraint=constraint,
        container_constraint=Constraint.WIDTH if scale_factor > 1 else Constraint.HEIGHT,
        cell_width_px=tile_aspect_w * max_scale,
        cell_height_px=tile_aspect_h * max_scale,
    )


def grid_positions(num_tiles: int, columns: int) -> list[tuple[int, int]]:
    """Row-major (column, row) position for each tile index."""
    return [(i % columns, i // columns) for i in range(num_tiles)]
