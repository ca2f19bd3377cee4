"""Index-order backtracking used both to fill grids and to check solvability."""

from __future__ import annotations
import logging
import random
import time
from typing import Optional, List

from .base_solver import BaseSolver
from ..core.board import SudokuBoard, GRID_SIZE, CELL_COUNT, cell_position, box_index

logger = logging.getLogger(__name__)

DIGITS = tuple(range(1, GRID_SIZE + 1))


class BacktrackingSolver(BaseSolver):
    """
    Plain depth-first backtracking over cells 0..80 in index order.

    The same search serves two purposes:

    - ``fill_grid`` tries digits in random order and is used to manufacture
      fresh complete grids.
    - ``solve_puzzle`` tries digits in ascending order and is used as a
      solvability oracle. It says whether *a* completion exists, not
      whether it is unique.

    Placements are checked against row/column/box occupancy kept as bit
    masks, which is the same test as ``is_valid_placement`` without
    rescanning the grid on every try. Clues that already clash make the
    search fail at once.

    There is no timeout. ``max_iterations`` can bound the number of search
    nodes; when it is hit the search unwinds, the board is left as it was
    and the call returns False with ``stats.limit_reached`` set.
    """

    name = "Backtracking"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        max_iterations: Optional[int] = None
    ):
        """
        Initialize the solver.

        Args:
            rng: Random source used to shuffle digits in ``fill_grid``.
            seed: Seed for a private random source when ``rng`` is None.
            max_iterations: Optional bound on visited search nodes.
        """
        super().__init__()
        self.rng = rng if rng is not None else random.Random(seed)
        self.max_iterations = max_iterations

        self._rows: List[int] = []
        self._cols: List[int] = []
        self._boxes: List[int] = []

    def fill_grid(self, board: SudokuBoard) -> bool:
        """
        Complete the board in place, trying digits in random order.

        Returns:
            True if the board was filled. On False the board is unchanged.
        """
        return self._run(board, randomize=True)

    def solve_puzzle(self, board: SudokuBoard) -> bool:
        """
        Complete the board in place, trying digits in ascending order.

        Pre-filled cells are kept and skipped.

        Returns:
            True if at least one completion exists. On False the board is
            unchanged.
        """
        return self._run(board, randomize=False)

    def is_solvable(self, board: SudokuBoard) -> bool:
        """Check solvability on a copy, leaving ``board`` untouched."""
        return self.solve_puzzle(board.copy())

    def _solve(self, board: SudokuBoard) -> Optional[SudokuBoard]:
        if self.solve_puzzle(board):
            return board
        return None

    def _run(self, board: SudokuBoard, randomize: bool) -> bool:
        self.stats.iterations = 0
        self.stats.backtracks = 0
        self.stats.limit_reached = False
        start_time = time.perf_counter()

        cells = board.to_list()
        found = self._load(cells) and self._search(cells, 0, randomize)
        if found:
            for index, value in enumerate(cells):
                board.set_index(index, value)

        self.stats.time_seconds = time.perf_counter() - start_time
        if self.stats.limit_reached:
            logger.debug(
                "Search stopped after %d iterations (limit %s)",
                self.stats.iterations, self.max_iterations
            )
        return found

    def _search(self, cells: List[int], index: int, randomize: bool) -> bool:
        """
        Recursive backtracking from ``index`` onward.

        Returns True if solution found, False otherwise.
        """
        while index < CELL_COUNT and cells[index] != 0:
            index += 1
        if index == CELL_COUNT:
            return True

        self.stats.iterations += 1
        if self.max_iterations is not None and self.stats.iterations > self.max_iterations:
            self.stats.limit_reached = True
            return False

        used = self._used_digits(index)

        digits = list(DIGITS)
        if randomize:
            self.rng.shuffle(digits)

        for value in digits:
            if used & (1 << value):
                continue

            cells[index] = value
            self._mark(index, value)

            if self._search(cells, index + 1, randomize):
                return True

            cells[index] = 0
            self._unmark(index, value)
            self.stats.backtracks += 1

            if self.stats.limit_reached:
                return False

        return False

    def _load(self, cells: List[int]) -> bool:
        """
        Rebuild the occupancy masks from the given cells.

        Returns False if two clues already clash.
        """
        self._rows = [0] * GRID_SIZE
        self._cols = [0] * GRID_SIZE
        self._boxes = [0] * GRID_SIZE
        for index, value in enumerate(cells):
            if not value:
                continue
            if self._used_digits(index) & (1 << value):
                logger.debug("Clue %d at cell %d conflicts with another clue", value, index)
                return False
            self._mark(index, value)
        return True

    def _used_digits(self, index: int) -> int:
        row, col = cell_position(index)
        return self._rows[row] | self._cols[col] | self._boxes[box_index(row, col)]

    def _mark(self, index: int, value: int) -> None:
        row, col = cell_position(index)
        bit = 1 << value
        self._rows[row] |= bit
        self._cols[col] |= bit
        self._boxes[box_index(row, col)] |= bit

    def _unmark(self, index: int, value: int) -> None:
        row, col = cell_position(index)
        bit = ~(1 << value)
        self._rows[row] &= bit
        self._cols[col] &= bit
        self._boxes[box_index(row, col)] &= bit


def generate_complete_grid(rng: Optional[random.Random] = None) -> SudokuBoard:
    """Generate a complete valid Sudoku grid from an empty board."""
    board = SudokuBoard()
    BacktrackingSolver(rng=rng).fill_grid(board)
    return board
