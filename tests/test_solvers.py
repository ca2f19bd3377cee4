"""Unit tests for the backtracking filler and solver."""

import random

import pytest
from killer_sudoku.core.board import SudokuBoard
from killer_sudoku.core.validator import is_valid_placement
from killer_sudoku.solvers import BacktrackingSolver, generate_complete_grid

from conftest import TEST_PUZZLE, TEST_SOLUTION


def units(board):
    """Every row, column and box as a list of values."""
    grid = board.grid
    rows = [list(grid[r, :]) for r in range(9)]
    cols = [list(grid[:, c]) for c in range(9)]
    boxes = [list(grid[r:r + 3, c:c + 3].flatten()) for r in range(0, 9, 3) for c in range(0, 9, 3)]
    return rows + cols + boxes


class TestFillGrid:
    """Tests for randomized grid filling."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_fills_valid_complete_grid(self, seed):
        board = SudokuBoard()
        assert BacktrackingSolver(seed=seed).fill_grid(board)

        assert board.is_complete()
        for unit in units(board):
            assert sorted(unit) == list(range(1, 10))

    def test_same_seed_same_grid(self):
        assert generate_complete_grid(random.Random(11)) == generate_complete_grid(random.Random(11))

    def test_different_seeds_vary(self):
        grids = {generate_complete_grid(random.Random(seed)).to_string() for seed in range(5)}
        assert len(grids) > 1

    def test_keeps_prefilled_cells(self, puzzle_board):
        board = puzzle_board.copy()
        assert BacktrackingSolver(seed=5).fill_grid(board)
        assert board.to_string() == TEST_SOLUTION


class TestSolvePuzzle:
    """Tests for the solvability oracle."""

    def test_solve_puzzle(self):
        """Test solving a known puzzle."""
        board = SudokuBoard.from_string(TEST_PUZZLE)
        assert BacktrackingSolver().solve_puzzle(board)
        assert board.to_string() == TEST_SOLUTION

    def test_one_missing_cell_is_solvable(self):
        board = generate_complete_grid(random.Random(8))
        expected = board.get_index(0)
        board.set_index(0, 0)

        assert BacktrackingSolver().solve_puzzle(board)
        assert board.get_index(0) == expected

    def test_unsolvable_leaves_board_unchanged(self):
        board = SudokuBoard.from_string("123456780" + "000000009" + "0" * 63)
        before = board.copy()

        solver = BacktrackingSolver()
        assert not solver.solve_puzzle(board)
        assert board == before
        assert not solver.stats.limit_reached

    def test_conflicting_clues_fail_without_search(self):
        board = SudokuBoard.from_string("0" * 72 + "550000000")
        before = board.copy()

        solver = BacktrackingSolver(max_iterations=1000)
        assert not solver.solve_puzzle(board)
        assert solver.stats.iterations == 0
        assert not solver.stats.limit_reached
        assert board == before

    def test_is_solvable_does_not_modify(self, puzzle_board):
        before = puzzle_board.copy()
        assert BacktrackingSolver().is_solvable(puzzle_board)
        assert puzzle_board == before

    def test_iteration_limit(self, puzzle_board):
        board = puzzle_board.copy()
        solver = BacktrackingSolver(max_iterations=5)

        assert not solver.solve_puzzle(board)
        assert solver.stats.limit_reached
        assert board == puzzle_board

    def test_stats_collected(self, puzzle_board):
        """Test that stats are collected."""
        solution, stats = BacktrackingSolver().solve(puzzle_board)

        assert stats.solved
        assert solution.to_string() == TEST_SOLUTION
        assert stats.iterations >= puzzle_board.count_empty()
        assert stats.time_seconds > 0
        assert stats.to_dict()["algorithm"] == "Backtracking"

    def test_solve_reports_failure(self):
        board = SudokuBoard.from_string("123456780" + "000000009" + "0" * 63)
        solution, stats = BacktrackingSolver().solve(board)
        assert solution is None
        assert not stats.solved



class TestOccupancyMasks:
    """Bit mask bookkeeping agrees with the validator."""

    @pytest.mark.parametrize("seed", range(5))
    def test_masks_match_is_valid_placement(self, seed):
        rng = random.Random(seed)
        board = generate_complete_grid(rng)
        for index in rng.sample(range(81), rng.randint(20, 70)):
            board.set_index(index, 0)

        solver = BacktrackingSolver()
        assert solver._load(board.to_list())

        for index in board.get_empty_indices():
            row, col = divmod(index, 9)
            used = solver._used_digits(index)
            for value in range(1, 10):
                assert (not used & (1 << value)) == is_valid_placement(board, row, col, value)

    def test_mark_and_unmark(self, puzzle_board):
        solver = BacktrackingSolver()
        solver._load(puzzle_board.to_list())
        before = solver._used_digits(2)

        solver._mark(3, 4)
        assert solver._used_digits(2) & (1 << 4)
        solver._unmark(3, 4)
        assert solver._used_digits(2) == before


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
