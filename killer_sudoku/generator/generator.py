"""Sudoku puzzle generator with configurable difficulty levels."""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Optional, Union

from tqdm import tqdm

from ..core.board import SudokuBoard, CELL_COUNT
from ..solvers.backtracking import BacktrackingSolver

logger = logging.getLogger(__name__)

# Cells to blank when the difficulty name is not recognized
DEFAULT_CELLS_TO_REMOVE = 45


class Difficulty(Enum):
    """Difficulty levels for Killer Sudoku puzzles."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def cells_to_remove(self) -> int:
        """Number of clues to blank out of the 81 cells."""
        counts = {
            Difficulty.EASY: 40,    # 41 clues
            Difficulty.MEDIUM: 50,  # 31 clues
            Difficulty.HARD: 60,    # 21 clues
        }
        return counts[self]

    @property
    def cage_parameters(self) -> Tuple[int, int, int]:
        """Cage shape for this difficulty as (min size, max size, target count)."""
        params = {
            Difficulty.EASY: (2, 4, 25),
            Difficulty.MEDIUM: (2, 5, 22),
            Difficulty.HARD: (2, 6, 20),
        }
        return params[self]

    @classmethod
    def parse(cls, name: Union[str, Difficulty, None]) -> Optional[Difficulty]:
        """Look up a difficulty by name; None if it is not one of ours."""
        if isinstance(name, Difficulty):
            return name
        if name is None:
            return None
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            return None


DifficultyLike = Union[Difficulty, str]


def difficulty_name(difficulty: DifficultyLike) -> str:
    """Name stored on sessions; unknown names are kept as given."""
    if isinstance(difficulty, Difficulty):
        return difficulty.value
    return str(difficulty)


def cells_to_remove_for(difficulty: DifficultyLike) -> int:
    """Clue removal target, falling back to 45 for unknown difficulties."""
    parsed = Difficulty.parse(difficulty)
    if parsed is None:
        return DEFAULT_CELLS_TO_REMOVE
    return parsed.cells_to_remove


@dataclass
class GeneratedPuzzle:
    """A puzzle together with the complete grid it was carved from."""
    puzzle: SudokuBoard
    solution: SudokuBoard
    difficulty: str
    cells_removed: int

    @property
    def clue_count(self) -> int:
        return self.puzzle.count_filled()


class PuzzleGenerator:
    """
    Generator for Sudoku puzzles with various difficulty levels.

    Algorithm:
    1. Fill an empty grid by randomized backtracking.
    2. Visit all 81 cells in random order, blanking each one as long as
       the remaining puzzle is still solvable, until the difficulty's
       removal target is reached.

    Only solvability is checked after each removal, so a puzzle may admit
    more than one completion.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        max_iterations: Optional[int] = None
    ):
        """
        Initialize the generator.

        Args:
            seed: Random seed for reproducibility.
            rng: Explicit random source; takes precedence over ``seed``.
            max_iterations: Optional search bound for each solvability check.
        """
        self.rng = rng if rng is not None else random.Random(seed)
        self.filler = BacktrackingSolver(rng=self.rng)
        self.checker = BacktrackingSolver(rng=self.rng, max_iterations=max_iterations)

    def generate(self, difficulty: DifficultyLike = Difficulty.MEDIUM) -> GeneratedPuzzle:
        """
        Generate a puzzle with the specified difficulty.

        Args:
            difficulty: Difficulty level or name. Unknown names remove 45 cells.

        Returns:
            GeneratedPuzzle with the clue grid and its solution.
        """
        solution = self.generate_complete_grid()
        puzzle, removed = self.remove_cells(solution, cells_to_remove_for(difficulty))
        return GeneratedPuzzle(
            puzzle=puzzle,
            solution=solution,
            difficulty=difficulty_name(difficulty),
            cells_removed=removed
        )

    def generate_batch(
        self,
        count: int,
        difficulty: DifficultyLike = Difficulty.MEDIUM,
        show_progress: bool = False
    ) -> List[GeneratedPuzzle]:
        """
        Generate multiple puzzles of the same difficulty.

        Args:
            count: Number of puzzles to generate.
            difficulty: Desired difficulty level.
            show_progress: Show a progress bar while generating.

        Returns:
            List of generated puzzles.
        """
        return [
            self.generate(difficulty)
            for _ in tqdm(range(count), desc=f"Generating {difficulty_name(difficulty)}",
                          disable=not show_progress)
        ]

    def generate_complete_grid(self) -> SudokuBoard:
        """Generate a complete valid Sudoku board using backtracking."""
        board = SudokuBoard()
        self.filler.fill_grid(board)
        return board

    def remove_cells(self, solution: SudokuBoard, cells_to_remove: int) -> Tuple[SudokuBoard, int]:
        """
        Blank cells of a complete grid while the puzzle stays solvable.

        Returns:
            Tuple of (puzzle, number of cells actually removed). Fewer than
            ``cells_to_remove`` may be removed if solvability checks fail.
        """
        puzzle = solution.copy()
        indices = list(range(CELL_COUNT))
        self.rng.shuffle(indices)

        removed = 0
        for index in indices:
            if removed >= cells_to_remove:
                break

            backup = puzzle.get_index(index)
            puzzle.set_index(index, 0)

            if self.checker.is_solvable(puzzle):
                removed += 1
            else:
                puzzle.set_index(index, backup)

        if removed < cells_to_remove:
            logger.warning(
                "Only removed %d of %d requested cells", removed, cells_to_remove
            )
        else:
            logger.debug("Removed %d cells, %d clues remain", removed, puzzle.count_filled())

        return puzzle, removed
