"""Image rendering for Killer Sudoku boards."""

from .visualizer import PuzzleRenderer

__all__ = ["PuzzleRenderer"]
