"""Generator module for creating Killer Sudoku puzzles."""

from .generator import (
    PuzzleGenerator,
    GeneratedPuzzle,
    Difficulty,
    DEFAULT_CELLS_TO_REMOVE,
    cells_to_remove_for,
)
from .cages import (
    Cage,
    CellBorders,
    CageGenerator,
    determine_cage_borders,
    generate_cages_with_retry,
    cage_for_cell,
    validate_cages,
    cage_adjacency,
    assign_cage_colors,
)
from .killer import KillerPuzzle, generate_killer_puzzle

__all__ = [
    "PuzzleGenerator",
    "GeneratedPuzzle",
    "Difficulty",
    "DEFAULT_CELLS_TO_REMOVE",
    "cells_to_remove_for",
    "Cage",
    "CellBorders",
    "CageGenerator",
    "determine_cage_borders",
    "generate_cages_with_retry",
    "cage_for_cell",
    "validate_cages",
    "cage_adjacency",
    "assign_cage_colors",
    "KillerPuzzle",
    "generate_killer_puzzle",
]
