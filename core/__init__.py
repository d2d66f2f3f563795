"""Core modules: resolution catalog, grid solver, controller and configuration."""

__all__ = [
    # resolutions module exports
    "ConfigurationError",
    "DEFAULT_RESOLUTIONS",
    "Resolution",
    "ResolutionCatalog",
    "parse_resolutions",
    # layout module exports
    "Constraint",
    "GridShape",
    "grid_positions",
    "solve_grid",
    # controller module exports
    "GridController",
    "ViewMode",
]

from .resolutions import (
    ConfigurationError,
    DEFAULT_RESOLUTIONS,
    Resolution,
    ResolutionCatalog,
    parse_resolutions,
)
from .layout import Constraint, GridShape, grid_positions, solve_grid
from .controller import GridController, ViewMode
