"""Cage partitioning for Killer Sudoku."""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import List, Dict, Set, Optional, Any, Iterable, Tuple

from ..core.board import SudokuBoard, GRID_SIZE, CELL_COUNT, cell_index, cell_position
from .generator import Difficulty, DifficultyLike

logger = logging.getLogger(__name__)

# Neighbour search order: up, right, down, left
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))

MIN_CAGE_SIZE = 2
MAX_CAGE_SIZE = 9
MAX_GENERATION_ATTEMPTS = 10


@dataclass
class Cage:
    """A group of cells whose solution values add up to ``sum``."""
    cells: List[int]
    sum: int

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, index: object) -> bool:
        return index in self.cells

    def to_dict(self) -> Dict[str, Any]:
        return {"cells": list(self.cells), "sum": self.sum}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Cage:
        return cls(cells=[int(c) for c in data["cells"]], sum=int(data["sum"]))


@dataclass(frozen=True)
class CellBorders:
    """Which edges of a cell are drawn as cage boundaries."""
    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CellBorders:
        return cls(
            top=bool(data.get("top", False)),
            right=bool(data.get("right", False)),
            bottom=bool(data.get("bottom", False)),
            left=bool(data.get("left", False))
        )


CageBorderMap = Dict[int, CellBorders]


def neighbours(index: int) -> List[int]:
    """In-grid 4-directional neighbours of a cell, in up/right/down/left order."""
    row, col = cell_position(index)
    result = []
    for dr, dc in DIRECTIONS:
        new_row, new_col = row + dr, col + dc
        if 0 <= new_row < GRID_SIZE and 0 <= new_col < GRID_SIZE:
            result.append(cell_index(new_row, new_col))
    return result


def cage_parameters_for(difficulty: DifficultyLike) -> Tuple[int, int, int]:
    """(min size, max size, target count); unknown difficulties use easy's."""
    parsed = Difficulty.parse(difficulty)
    if parsed is None:
        parsed = Difficulty.EASY
    return parsed.cage_parameters


class CageGenerator:
    """
    Partitions a solved grid into cages by randomized region growing.

    Each cage starts from a random uncaged seed cell and grows by picking
    random cells from its frontier of uncaged neighbours. Once the
    difficulty's target cage count is reached, the size cap is lifted to 9
    so leftover pockets get absorbed. Any 1-cell cages that survive are
    merged into a neighbouring cage afterwards.
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def generate_cages(self, solution: SudokuBoard, difficulty: DifficultyLike) -> List[Cage]:
        """
        Generate cages covering all 81 cells.

        Args:
            solution: Complete solution grid; cage sums are taken from it.
            difficulty: Difficulty level or name.

        Returns:
            List of cages. Each has at least 2 cells unless adjacency left
            no partner at all for a stray cell.
        """
        min_size, max_size, target_count = cage_parameters_for(difficulty)
        min_size = max(min_size, MIN_CAGE_SIZE)

        caged: Set[int] = set()
        cages: List[Cage] = []

        while len(caged) < CELL_COUNT:
            if len(cages) >= target_count:
                max_size = MAX_CAGE_SIZE

            available = [i for i in range(CELL_COUNT) if i not in caged]
            start = self.rng.choice(available)
            size = min(len(available), self.rng.randint(min_size, max_size))

            cage = self.grow_cage(start, size, caged, solution)
            cages.append(cage)
            caged.update(cage.cells)

        return self._merge_single_cells(cages, solution)

    def grow_cage(
        self,
        start: int,
        target_size: int,
        caged: Set[int],
        solution: SudokuBoard
    ) -> Cage:
        """
        Grow a cage from ``start`` up to ``target_size`` cells.

        Args:
            start: Seed cell index.
            target_size: Desired number of cells (at least 2).
            caged: Cells already belonging to other cages.
            solution: Complete solution grid.
        """
        cells = [start]
        total = solution.get_index(start)
        target_size = max(target_size, MIN_CAGE_SIZE)

        frontier = self.adjacent_cells(start, caged)

        while len(cells) < target_size and frontier:
            nxt = frontier.pop(self.rng.randrange(len(frontier)))
            cells.append(nxt)
            total += solution.get_index(nxt)

            for cell in self.adjacent_cells(nxt, caged, cells):
                if cell not in frontier:
                    frontier.append(cell)

        if len(cells) == 1:
            # Stalled on the seed: take any free neighbour
            for cell in neighbours(start):
                if cell not in caged:
                    cells.append(cell)
                    total += solution.get_index(cell)
                    break
            else:
                logger.debug("Cage seeded at %d could not grow past one cell", start)

        return Cage(cells=cells, sum=total)

    @staticmethod
    def adjacent_cells(index: int, caged: Set[int], current: Iterable[int] = ()) -> List[int]:
        """Neighbours of ``index`` that are neither caged nor in ``current``."""
        current = set(current)
        return [cell for cell in neighbours(index) if cell not in caged and cell not in current]

    def _merge_single_cells(self, cages: List[Cage], solution: SudokuBoard) -> List[Cage]:
        valid = [cage for cage in cages if len(cage.cells) >= MIN_CAGE_SIZE]
        singles = [cage.cells[0] for cage in cages if len(cage.cells) == 1]
        if not singles:
            return valid

        logger.debug("Merging %d single-cell cages", len(singles))
        owner: Dict[int, Cage] = {cell: cage for cage in valid for cell in cage.cells}
        # Singles already swallowed by a fresh pair
        paired: Set[int] = set()

        for cell in singles:
            if cell in paired:
                continue

            adjacent_cage = next(
                (owner[n] for n in neighbours(cell) if n in owner), None
            )
            if adjacent_cage is not None:
                adjacent_cage.cells.append(cell)
                adjacent_cage.sum += solution.get_index(cell)
                owner[cell] = adjacent_cage
                continue

            partner = next((n for n in neighbours(cell) if n not in owner), None)
            if partner is not None:
                pair = Cage(
                    cells=[cell, partner],
                    sum=solution.get_index(cell) + solution.get_index(partner)
                )
                valid.append(pair)
                owner[cell] = pair
                owner[partner] = pair
                paired.add(partner)
                continue

            logger.warning("Cell %d has no cage to join; leaving a 1-cell cage", cell)
            stray = Cage(cells=[cell], sum=solution.get_index(cell))
            valid.append(stray)
            owner[cell] = stray

        return valid


def determine_cage_borders(cages: Iterable[Cage]) -> CageBorderMap:
    """
    Work out which cell edges are cage boundaries.

    An edge is a boundary when it is on the grid edge or the neighbour on
    that side belongs to a different cage. Cells not covered by any cage
    keep all four edges False.
    """
    borders: CageBorderMap = {i: CellBorders() for i in range(CELL_COUNT)}

    for cage in cages:
        members = set(cage.cells)
        for index in cage.cells:
            row, col = cell_position(index)
            borders[index] = CellBorders(
                top=row == 0 or cell_index(row - 1, col) not in members,
                right=col == GRID_SIZE - 1 or cell_index(row, col + 1) not in members,
                bottom=row == GRID_SIZE - 1 or cell_index(row + 1, col) not in members,
                left=col == 0 or cell_index(row, col - 1) not in members
            )

    return borders


def generate_cages_with_retry(
    solution: SudokuBoard,
    difficulty: DifficultyLike,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_GENERATION_ATTEMPTS
) -> Tuple[List[Cage], int]:
    """
    Generate cages, retrying while any cage has fewer than 2 cells.

    The last attempt is accepted whatever it produced.

    Returns:
        Tuple of (cages, attempts used).
    """
    generator = CageGenerator(rng=rng)
    attempts = 0
    while True:
        attempts += 1
        cages = generator.generate_cages(solution, difficulty)
        if all(len(cage.cells) >= MIN_CAGE_SIZE for cage in cages):
            break
        if attempts >= max_attempts:
            logger.warning("Accepting cages with an undersized cage after %d attempts", attempts)
            break
        logger.debug("Undersized cage on attempt %d, regenerating", attempts)

    return cages, attempts


def cage_for_cell(cages: Iterable[Cage], index: int) -> Optional[Cage]:
    """The cage containing ``index``, or None."""
    return next((cage for cage in cages if index in cage.cells), None)


def is_connected(cells: Iterable[int]) -> bool:
    """Check that cells form one 4-directionally connected region."""
    members = set(cells)
    if not members:
        return False

    start = next(iter(members))
    seen = {start}
    stack = [start]
    while stack:
        for n in neighbours(stack.pop()):
            if n in members and n not in seen:
                seen.add(n)
                stack.append(n)

    return seen == members


def validate_cages(cages: List[Cage], solution: SudokuBoard) -> List[str]:
    """
    Check a cage set against the partition, size, shape and sum rules.

    Returns:
        Human-readable problems; empty when the cage set is sound.
    """
    problems = []
    seen: Dict[int, int] = {}

    for number, cage in enumerate(cages):
        if len(cage.cells) < MIN_CAGE_SIZE:
            problems.append(f"cage {number} has {len(cage.cells)} cell(s)")
        if not is_connected(cage.cells):
            problems.append(f"cage {number} is not contiguous")
        expected = sum(solution.get_index(i) for i in cage.cells)
        if cage.sum != expected:
            problems.append(f"cage {number} sum is {cage.sum}, expected {expected}")
        for index in cage.cells:
            if index in seen:
                problems.append(f"cell {index} is in cages {seen[index]} and {number}")
            seen[index] = number

    missing = sorted(set(range(CELL_COUNT)) - set(seen))
    if missing:
        problems.append(f"cells not in any cage: {missing}")

    return problems


def cage_adjacency(cages: List[Cage]) -> Dict[int, Set[int]]:
    """Map each cage position to the positions of cages touching it."""
    owner = {cell: number for number, cage in enumerate(cages) for cell in cage.cells}
    adjacency: Dict[int, Set[int]] = {number: set() for number in range(len(cages))}

    for number, cage in enumerate(cages):
        for cell in cage.cells:
            for n in neighbours(cell):
                other = owner.get(n)
                if other is not None and other != number:
                    adjacency[number].add(other)

    return adjacency


def assign_cage_colors(cages: List[Cage], palette_size: int = 6) -> List[int]:
    """
    Greedy colouring so touching cages get different palette slots.

    Cages are coloured in list order, each taking the first slot not used
    by an already coloured neighbour. If every slot is taken the cage falls
    back to ``position % palette_size``.

    Returns:
        Palette slot for each cage, in cage order.
    """
    adjacency = cage_adjacency(cages)
    colors: List[int] = []

    for number in range(len(cages)):
        taken = {colors[other] for other in adjacency[number] if other < number}
        slot = next((c for c in range(palette_size) if c not in taken), number % palette_size)
        colors.append(slot)

    return colors
