"""Killer Sudoku puzzle engine: generation, cages and game sessions."""

__version__ = "1.0.0"
