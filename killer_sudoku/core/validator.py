"""Validation utilities for Sudoku puzzles."""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .board import SudokuBoard


def is_valid_placement(board: SudokuBoard, row: int, col: int, value: int) -> bool:
    """
    Check if placing a value at (row, col) is valid.

    The cell itself is not excluded: callers ask this about cells they are
    about to fill, which are empty.

    Args:
        board: The Sudoku board.
        row: Row index.
        col: Column index.
        value: Value to check (1 to 9).

    Returns:
        True if the value does not already appear in the row, column or box.
    """
    if value < 1 or value > board.size:
        return False

    if value in board.get_row(row):
        return False

    if value in board.get_col(col):
        return False

    if value in board.get_box(row, col):
        return False

    return True


def is_valid_board(board: SudokuBoard) -> bool:
    """
    Check if the entire board state is valid (no conflicts).

    Args:
        board: The Sudoku board to validate.

    Returns:
        True if no constraints are violated.
    """
    return board.is_valid()


def count_solutions(board: SudokuBoard, limit: int = 2) -> int:
    """
    Count the number of solutions for a puzzle (up to limit).

    Diagnostic only: puzzle generation checks solvability, not uniqueness.
    Stops early once limit is reached.

    Args:
        board: The puzzle board.
        limit: Maximum solutions to count before stopping.

    Returns:
        Number of solutions found (up to limit).
    """
    work_board = board.copy()
    count = [0]

    def backtrack() -> bool:
        """Returns True if limit reached."""
        empty_cells = work_board.get_empty_cells()
        if not empty_cells:
            count[0] += 1
            return count[0] >= limit

        # MRV: pick the cell with fewest candidates
        min_candidates = board.size + 1
        best_cell = empty_cells[0]
        for cell in empty_cells:
            candidates = work_board.get_candidates(cell[0], cell[1])
            if len(candidates) < min_candidates:
                min_candidates = len(candidates)
                best_cell = cell
                if min_candidates == 0:
                    return False

        row, col = best_cell
        for val in sorted(work_board.get_candidates(row, col)):
            work_board.set(row, col, val)
            if backtrack():
                return True
            work_board.clear(row, col)

        return False

    if not work_board.is_valid():
        return 0

    backtrack()
    return count[0]


def validate_solution(puzzle: SudokuBoard, solution: SudokuBoard) -> bool:
    """
    Validate that a solution correctly solves the puzzle.

    Args:
        puzzle: The original puzzle.
        solution: The proposed solution.

    Returns:
        True if solution is valid and matches puzzle clues.
    """
    clues = puzzle.grid != 0
    if (puzzle.grid[clues] != solution.grid[clues]).any():
        return False

    return solution.is_solved()
