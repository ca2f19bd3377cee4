"""Shared fixtures for the test suite."""

import random

import matplotlib
import pytest

matplotlib.use("Agg")

from killer_sudoku.core.board import SudokuBoard
from killer_sudoku.generator import CageGenerator, KillerPuzzle, determine_cage_borders
from killer_sudoku.game import GameSession


# A known solvable puzzle with a unique solution
TEST_PUZZLE = (
    "530070000"
    "600195000"
    "098000060"
    "800060003"
    "400803001"
    "700020006"
    "060000280"
    "000419005"
    "000080079"
)

TEST_SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


@pytest.fixture
def puzzle_board():
    return SudokuBoard.from_string(TEST_PUZZLE)


@pytest.fixture
def solution_board():
    return SudokuBoard.from_string(TEST_SOLUTION)


@pytest.fixture
def killer_puzzle(puzzle_board, solution_board):
    cages = CageGenerator(seed=7).generate_cages(solution_board, "medium")
    return KillerPuzzle(
        puzzle=puzzle_board,
        solution=solution_board,
        cages=cages,
        cage_borders=determine_cage_borders(cages),
        difficulty="medium",
        cells_removed=puzzle_board.count_empty()
    )


@pytest.fixture
def session(killer_puzzle):
    return GameSession.from_puzzle(killer_puzzle, rng=random.Random(3))
