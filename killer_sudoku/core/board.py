"""Sudoku board representation backed by a 9x9 numpy grid."""

from __future__ import annotations
import numpy as np
from typing import List, Tuple, Optional, Set, Sequence


GRID_SIZE = 9
BOX_SIZE = 3
CELL_COUNT = GRID_SIZE * GRID_SIZE


def cell_index(row: int, col: int) -> int:
    """Flat index (0-80) of the cell at (row, col)."""
    return row * GRID_SIZE + col


def cell_position(index: int) -> Tuple[int, int]:
    """(row, col) of a flat cell index."""
    return index // GRID_SIZE, index % GRID_SIZE


def box_index(row: int, col: int) -> int:
    """Box number (0-8) of the cell at (row, col), counted row-major."""
    return (row // BOX_SIZE) * BOX_SIZE + (col // BOX_SIZE)


class SudokuBoard:
    """
    Represents a standard 9x9 Sudoku board.

    Cells hold 0 for empty or a digit 1-9. Cells can be addressed either by
    (row, col) or by the flat index ``row * 9 + col`` used for grids,
    cages and persisted snapshots.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Initialize a Sudoku board.

        Args:
            grid: Optional initial 9x9 grid. If None, creates empty board.
        """
        self.size = GRID_SIZE
        self.box_size = BOX_SIZE

        if grid is not None:
            grid = np.asarray(grid)
            if grid.shape != (GRID_SIZE, GRID_SIZE):
                raise ValueError(f"Grid shape must be ({GRID_SIZE}, {GRID_SIZE}), got {grid.shape}")
            if grid.min() < 0 or grid.max() > GRID_SIZE:
                raise ValueError(f"Grid values must be 0-{GRID_SIZE}")
            self.grid = grid.copy().astype(np.int32)
        else:
            self.grid = np.zeros((GRID_SIZE, GRID_SIZE), dtype=np.int32)

    def copy(self) -> SudokuBoard:
        """Create a deep copy of the board."""
        new_board = SudokuBoard()
        new_board.grid = self.grid.copy()
        return new_board

    def get(self, row: int, col: int) -> int:
        """Get value at position (row, col). 0 means empty."""
        return int(self.grid[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        """Set value at position (row, col). Use 0 to clear."""
        if value < 0 or value > self.size:
            raise ValueError(f"Value must be 0-{self.size}, got {value}")
        self.grid[row, col] = value

    def clear(self, row: int, col: int) -> None:
        """Clear the cell at position (row, col)."""
        self.grid[row, col] = 0

    def get_index(self, index: int) -> int:
        """Get value at a flat cell index."""
        row, col = cell_position(index)
        return int(self.grid[row, col])

    def set_index(self, index: int, value: int) -> None:
        """Set value at a flat cell index. Use 0 to clear."""
        row, col = cell_position(index)
        self.set(row, col, value)

    def is_empty(self, row: int, col: int) -> bool:
        """Check if cell is empty (value is 0)."""
        return self.grid[row, col] == 0

    def get_row(self, row: int) -> np.ndarray:
        """Get all values in a row."""
        return self.grid[row, :]

    def get_col(self, col: int) -> np.ndarray:
        """Get all values in a column."""
        return self.grid[:, col]

    def get_box(self, row: int, col: int) -> np.ndarray:
        """Get all values in the box containing (row, col)."""
        box_row = (row // self.box_size) * self.box_size
        box_col = (col // self.box_size) * self.box_size
        return self.grid[box_row:box_row + self.box_size,
                        box_col:box_col + self.box_size].flatten()

    def get_candidates(self, row: int, col: int) -> Set[int]:
        """
        Get all valid candidate values for an empty cell.

        Returns:
            Set of digits 1-9 that can be placed at (row, col) without a
            row, column or box conflict. Empty set if the cell is filled.
        """
        if not self.is_empty(row, col):
            return set()

        used = set(int(v) for v in self.get_row(row))
        used |= set(int(v) for v in self.get_col(col))
        used |= set(int(v) for v in self.get_box(row, col))

        return set(range(1, self.size + 1)) - used

    def get_empty_cells(self) -> List[Tuple[int, int]]:
        """Get list of all empty cell positions."""
        rows, cols = np.nonzero(self.grid == 0)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def get_empty_indices(self) -> List[int]:
        """Get flat indices of all empty cells, in ascending order."""
        return [int(i) for i in np.flatnonzero(self.grid == 0)]

    def count_empty(self) -> int:
        """Count the number of empty cells."""
        return int(np.sum(self.grid == 0))

    def count_filled(self) -> int:
        """Count the number of filled cells."""
        return int(np.sum(self.grid != 0))

    def is_complete(self) -> bool:
        """Check if all cells are filled."""
        return self.count_empty() == 0

    def is_valid(self) -> bool:
        """
        Check if the current board state is valid.
        Does not check if solution is complete, only if no conflicts exist.
        """
        for i in range(self.size):
            row = self.get_row(i)
            non_zero = row[row != 0]
            if len(non_zero) != len(set(non_zero)):
                return False

        for j in range(self.size):
            col = self.get_col(j)
            non_zero = col[col != 0]
            if len(non_zero) != len(set(non_zero)):
                return False

        for box_row in range(0, self.size, self.box_size):
            for box_col in range(0, self.size, self.box_size):
                box = self.get_box(box_row, box_col)
                non_zero = box[box != 0]
                if len(non_zero) != len(set(non_zero)):
                    return False

        return True

    def is_solved(self) -> bool:
        """Check if the puzzle is completely and correctly solved."""
        return self.is_complete() and self.is_valid()

    def to_list(self) -> List[int]:
        """Flatten the board into 81 ints in row-major order."""
        return [int(v) for v in self.grid.flatten()]

    @classmethod
    def from_list(cls, values: Sequence[int]) -> SudokuBoard:
        """Create a board from a flat sequence of 81 ints."""
        if len(values) != CELL_COUNT:
            raise ValueError(f"Grid must have {CELL_COUNT} values, got {len(values)}")
        arr = np.array(values, dtype=np.int32).reshape(GRID_SIZE, GRID_SIZE)
        return cls(arr)

    def to_string(self) -> str:
        """Convert board to an 81-char string, 0 for empty cells."""
        return ''.join(str(v) for v in self.to_list())

    @classmethod
    def from_string(cls, s: str) -> SudokuBoard:
        """
        Create a board from a string representation.

        Args:
            s: String of length 81. 0 or . for empty, 1-9 for values.
        """
        if len(s) != CELL_COUNT:
            raise ValueError(f"String length must be {CELL_COUNT}, got {len(s)}")

        values = []
        for c in s:
            if c in '0.':
                values.append(0)
            elif c.isdigit():
                values.append(int(c))
            else:
                raise ValueError(f"Invalid character in puzzle string: {c!r}")

        return cls.from_list(values)

    def __str__(self) -> str:
        """Pretty-print the board."""
        lines = []
        horizontal_sep = '+' + (('-' * (self.box_size * 2 + 1)) + '+') * self.box_size

        for i in range(self.size):
            if i % self.box_size == 0:
                lines.append(horizontal_sep)

            row_str = '|'
            for j in range(self.size):
                val = self.grid[i, j]
                row_str += ' .' if val == 0 else f' {val}'

                if (j + 1) % self.box_size == 0:
                    row_str += ' |'

            lines.append(row_str)

        lines.append(horizontal_sep)
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f"SudokuBoard(filled={self.count_filled()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SudokuBoard):
            return False
        return np.array_equal(self.grid, other.grid)

    def __hash__(self) -> int:
        return hash(self.to_string())
