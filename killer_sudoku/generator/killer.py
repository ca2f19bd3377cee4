"""Full Killer Sudoku puzzle: clues, solution, cages and cage borders."""

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import List, Optional

from ..core.board import SudokuBoard
from .generator import PuzzleGenerator, DifficultyLike, Difficulty
from .cages import Cage, CageBorderMap, generate_cages_with_retry, determine_cage_borders


@dataclass
class KillerPuzzle:
    """Everything a new game needs."""
    puzzle: SudokuBoard
    solution: SudokuBoard
    cages: List[Cage]
    cage_borders: CageBorderMap
    difficulty: str
    cells_removed: int
    cage_attempts: int = 1


def generate_killer_puzzle(
    difficulty: DifficultyLike = Difficulty.MEDIUM,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> KillerPuzzle:
    """
    Generate clues and cages for one Killer Sudoku.

    Args:
        difficulty: Difficulty level or name.
        rng: Random source shared by grid filling, clue removal and caging.
        seed: Seed for a private random source when ``rng`` is None.
    """
    rng = rng if rng is not None else random.Random(seed)
    generated = PuzzleGenerator(rng=rng).generate(difficulty)
    cages, attempts = generate_cages_with_retry(generated.solution, difficulty, rng=rng)

    return KillerPuzzle(
        puzzle=generated.puzzle,
        solution=generated.solution,
        cages=cages,
        cage_borders=determine_cage_borders(cages),
        difficulty=generated.difficulty,
        cells_removed=generated.cells_removed,
        cage_attempts=attempts
    )
