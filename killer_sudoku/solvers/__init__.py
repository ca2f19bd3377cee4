"""Solvers module for Sudoku grids."""

from .base_solver import BaseSolver, SolverStats
from .backtracking import BacktrackingSolver, generate_complete_grid

__all__ = [
    "BaseSolver",
    "SolverStats",
    "BacktrackingSolver",
    "generate_complete_grid",
]
