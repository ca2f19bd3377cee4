"""Core module for Sudoku board representation and validation."""

from .board import SudokuBoard, GRID_SIZE, BOX_SIZE, CELL_COUNT, cell_index, cell_position, box_index
from .validator import is_valid_placement, is_valid_board, validate_solution, count_solutions

__all__ = [
    "SudokuBoard",
    "GRID_SIZE",
    "BOX_SIZE",
    "CELL_COUNT",
    "cell_index",
    "cell_position",
    "box_index",
    "is_valid_placement",
    "is_valid_board",
    "validate_solution",
    "count_solutions",
]
