"""Live Killer Sudoku game: player grid, notes, undo/redo history and timer."""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Optional, Dict, Any

import numpy as np

from ..core.board import SudokuBoard, GRID_SIZE, CELL_COUNT, cell_position
from ..generator.generator import Difficulty, DifficultyLike
from ..generator.cages import Cage, CageBorderMap, cage_for_cell, determine_cage_borders
from ..generator.killer import KillerPuzzle, generate_killer_puzzle

logger = logging.getLogger(__name__)

NotesGrid = Tuple[Tuple[bool, ...], ...]


def empty_notes() -> np.ndarray:
    """81 x 9 candidate flags, all cleared."""
    return np.zeros((CELL_COUNT, GRID_SIZE), dtype=bool)


def format_time(seconds: int) -> str:
    """Format elapsed seconds as MM:SS."""
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes:02d}:{remaining:02d}"


class GameState(Enum):
    """Where a session is in its lifecycle."""
    NOT_STARTED = "not-started"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETE = "complete"


@dataclass(frozen=True)
class HistorySnapshot:
    """One recorded player grid and note set, with the action that produced it."""
    user_grid: Tuple[int, ...]
    notes: NotesGrid
    action: Optional[Dict[str, Any]] = None

    @classmethod
    def capture(cls, user_grid: SudokuBoard, notes: np.ndarray,
                action: Optional[Dict[str, Any]] = None) -> HistorySnapshot:
        return cls(
            user_grid=tuple(user_grid.to_list()),
            notes=tuple(tuple(bool(flag) for flag in cell) for cell in notes),
            action=dict(action) if action is not None else None
        )

    def restore_grid(self) -> SudokuBoard:
        return SudokuBoard.from_list(self.user_grid)

    def restore_notes(self) -> np.ndarray:
        return np.array(self.notes, dtype=bool).reshape(CELL_COUNT, GRID_SIZE)


class History:
    """
    Undo/redo log of immutable snapshots with a cursor.

    Pushing while the cursor is not at the end drops the redo tail first.
    Undo and redo only move the cursor.
    """

    def __init__(self, snapshots: Optional[List[HistorySnapshot]] = None, index: Optional[int] = None):
        self.snapshots: List[HistorySnapshot] = list(snapshots or [])
        self.index = len(self.snapshots) - 1 if index is None else index
        if self.snapshots and not 0 <= self.index < len(self.snapshots):
            raise ValueError(f"History index {self.index} out of range for {len(self.snapshots)} entries")

    def __len__(self) -> int:
        return len(self.snapshots)

    @property
    def current(self) -> Optional[HistorySnapshot]:
        if not self.snapshots:
            return None
        return self.snapshots[self.index]

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    def push(self, snapshot: HistorySnapshot) -> None:
        del self.snapshots[self.index + 1:]
        self.snapshots.append(snapshot)
        self.index = len(self.snapshots) - 1

    def undo(self) -> Optional[HistorySnapshot]:
        if not self.can_undo():
            return None
        self.index -= 1
        return self.snapshots[self.index]

    def redo(self) -> Optional[HistorySnapshot]:
        if not self.can_redo():
            return None
        self.index += 1
        return self.snapshots[self.index]


class GameSession:
    """
    One Killer Sudoku game as seen by a front end.

    Rendering code reads ``puzzle``, ``user_grid``, ``notes``, ``cages``,
    ``cage_borders``, ``timer``, ``is_paused``, ``is_complete``,
    ``selected_cell`` and ``difficulty``, and changes them only through
    the operations below. Operations that find nothing to do return False
    (or None for ``get_hint``) instead of raising.

    A session is never partially reset: starting a new game builds a new
    session object.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

        self.puzzle = SudokuBoard()
        self.solution = SudokuBoard()
        self.user_grid = SudokuBoard()
        self.notes = empty_notes()
        self.cages: List[Cage] = []
        self.cage_borders: CageBorderMap = {}
        self.difficulty = Difficulty.MEDIUM.value
        self.timer = 0
        self.is_paused = False
        self.is_complete = False
        self.selected_cell: Optional[int] = None
        self.notes_mode = False
        self.history = History()

    @classmethod
    def new_game(
        cls,
        difficulty: DifficultyLike = Difficulty.MEDIUM,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None
    ) -> GameSession:
        """Generate a fresh puzzle and start a session on it."""
        rng = rng if rng is not None else random.Random(seed)
        killer = generate_killer_puzzle(difficulty, rng=rng)
        logger.debug(
            "New %s game: %d clues, %d cages (%d cage attempt(s))",
            killer.difficulty, killer.puzzle.count_filled(), len(killer.cages), killer.cage_attempts
        )
        return cls.from_puzzle(killer, rng=rng)

    @classmethod
    def from_puzzle(cls, killer: KillerPuzzle, rng: Optional[random.Random] = None) -> GameSession:
        """Start a session on an already generated puzzle."""
        session = cls(rng=rng)
        session.puzzle = killer.puzzle.copy()
        session.solution = killer.solution.copy()
        session.user_grid = killer.puzzle.copy()
        session.cages = [Cage(list(c.cells), c.sum) for c in killer.cages]
        session.cage_borders = dict(killer.cage_borders) or determine_cage_borders(session.cages)
        session.difficulty = killer.difficulty
        session.save_state()
        return session

    @classmethod
    def load(cls, snapshot: Dict[str, Any], rng: Optional[random.Random] = None) -> GameSession:
        """Rebuild a session from a persisted snapshot record."""
        from .persistence import session_from_dict
        return session_from_dict(snapshot, rng=rng)

    @property
    def state(self) -> GameState:
        if not self.history:
            return GameState.NOT_STARTED
        if self.is_complete:
            return GameState.COMPLETE
        if self.is_paused:
            return GameState.PAUSED
        return GameState.ACTIVE

    def _can_play(self) -> bool:
        return self.state is GameState.ACTIVE

    def _is_given(self, index: int) -> bool:
        return self.puzzle.get_index(index) != 0

    # -- selection and modes -------------------------------------------------

    def select_cell(self, index: Optional[int]) -> None:
        """Select a cell by flat index, or clear the selection with None."""
        if index is not None and not 0 <= index < CELL_COUNT:
            raise ValueError(f"Cell index must be 0-{CELL_COUNT - 1}, got {index}")
        self.selected_cell = index

    def toggle_notes_mode(self) -> bool:
        self.notes_mode = not self.notes_mode
        return self.notes_mode

    def toggle_pause(self) -> bool:
        """Flip between active and paused. Returns the new paused flag."""
        if self.state in (GameState.ACTIVE, GameState.PAUSED):
            self.is_paused = not self.is_paused
        return self.is_paused

    def increment_timer(self) -> None:
        """Advance the clock by one second while the game is running."""
        if self._can_play():
            self.timer += 1

    # -- moves ---------------------------------------------------------------

    def place_number(self, digit: int) -> bool:
        """
        Put ``digit`` in the selected cell, or toggle it as a note in notes mode.

        Returns:
            True if the grid or notes changed.
        """
        if not 1 <= digit <= GRID_SIZE:
            raise ValueError(f"Digit must be 1-{GRID_SIZE}, got {digit}")
        index = self.selected_cell
        if index is None or not self._can_play() or self._is_given(index):
            return False

        old_value = self.user_grid.get_index(index)
        old_notes = self._note_digits(index)

        if self.notes_mode:
            self.notes[index, digit - 1] = not self.notes[index, digit - 1]
        else:
            self.user_grid.set_index(index, digit)
            self.notes[index, :] = False

        self.save_state({
            "type": "placeNumber",
            "cell": index,
            "old_value": old_value,
            "new_value": self.user_grid.get_index(index),
            "old_notes": old_notes,
            "new_notes": self._note_digits(index),
        })
        self.check_completion()
        return True

    def erase_cell(self) -> bool:
        """Clear the selected cell's value. Notes are left alone."""
        index = self.selected_cell
        if index is None or not self._can_play() or self._is_given(index):
            return False

        old_value = self.user_grid.get_index(index)
        self.user_grid.set_index(index, 0)

        self.save_state({
            "type": "eraseCell",
            "cell": index,
            "old_value": old_value,
            "new_value": 0,
            "old_notes": self._note_digits(index),
            "new_notes": self._note_digits(index),
        })
        return True

    def get_hint(self) -> Optional[int]:
        """
        Fill a random empty cell with its solution value.

        Returns:
            The filled cell index, or None if there was nothing to do.
        """
        if not self._can_play():
            return None

        empty = self.user_grid.get_empty_indices()
        if not empty:
            return None

        index = self.rng.choice(empty)
        old_notes = self._note_digits(index)
        self.user_grid.set_index(index, self.solution.get_index(index))
        self.notes[index, :] = False

        self.save_state({
            "type": "hint",
            "cell": index,
            "old_value": 0,
            "new_value": self.user_grid.get_index(index),
            "old_notes": old_notes,
            "new_notes": [],
        })
        self.check_completion()
        return index

    def auto_set_notes(self) -> bool:
        """
        Pencil in candidates for every empty cell.

        A candidate must be free in the cell's row, column and box and must
        not exceed what is left of its cage sum. When a cell is the last
        empty one in its cage and the remainder is a digit, the cell is
        filled instead. Cells are processed in index order against the live
        grid, so earlier fills constrain later cells. The whole pass is one
        history entry.
        """
        if not self._can_play():
            return False

        owner = {cell: cage for cage in self.cages for cell in cage.cells}

        for index in range(CELL_COUNT):
            if self.user_grid.get_index(index) != 0:
                continue

            row, col = cell_position(index)
            candidates = np.ones(GRID_SIZE, dtype=bool)
            for units in (self.user_grid.get_row(row), self.user_grid.get_col(col),
                          self.user_grid.get_box(row, col)):
                for value in units:
                    if value:
                        candidates[value - 1] = False

            cage = owner.get(index)
            if cage is not None:
                remaining = cage.sum
                other_empty = 0
                for cell in cage.cells:
                    value = self.user_grid.get_index(cell)
                    if value:
                        remaining -= value
                    elif cell != index:
                        other_empty += 1

                if other_empty == 0 and 1 <= remaining <= GRID_SIZE:
                    self.user_grid.set_index(index, remaining)
                    self.notes[index, :] = False
                    continue

                candidates[max(remaining, 0):] = False

            self.notes[index] = candidates

        self.save_state({"type": "autoSetNotes"})
        self.check_completion()
        return True

    def clear_all_notes(self) -> bool:
        """Remove every note on the board as a single history entry."""
        if not self._can_play():
            return False
        self.notes = empty_notes()
        self.save_state({"type": "clearAllNotes"})
        return True

    # -- history -------------------------------------------------------------

    def save_state(self, action: Optional[Dict[str, Any]] = None) -> None:
        """Record the current grid and notes as a new history entry."""
        self.history.push(HistorySnapshot.capture(self.user_grid, self.notes, action))

    def undo(self) -> bool:
        """Step back one history entry. Allowed after completion, not while paused."""
        if self.is_paused:
            return False
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        if self.is_paused:
            return False
        return self._restore(self.history.redo())

    def _restore(self, snapshot: Optional[HistorySnapshot]) -> bool:
        if snapshot is None:
            return False
        self.user_grid = snapshot.restore_grid()
        self.notes = snapshot.restore_notes()
        return True

    # -- queries -------------------------------------------------------------

    def check_completion(self) -> bool:
        """Mark the game complete if the player grid equals the solution."""
        if not self.user_grid.is_complete():
            return False
        if self.user_grid != self.solution:
            return False

        if not self.is_complete:
            logger.debug("Puzzle completed in %s", format_time(self.timer))
        self.is_complete = True
        return True

    def check_errors(self) -> List[int]:
        """Indices of filled cells whose value disagrees with the solution."""
        wrong = (self.user_grid.grid != 0) & (self.user_grid.grid != self.solution.grid)
        return [int(i) for i in np.flatnonzero(wrong)]

    def cage_for_cell(self, index: int) -> Optional[Cage]:
        return cage_for_cell(self.cages, index)

    def note_digits(self, index: int) -> List[int]:
        """Digits currently noted in a cell."""
        return self._note_digits(index)

    def _note_digits(self, index: int) -> List[int]:
        return [int(d) + 1 for d in np.flatnonzero(self.notes[index])]

    def __repr__(self) -> str:
        return (
            f"GameSession(difficulty={self.difficulty!r}, state={self.state.value}, "
            f"filled={self.user_grid.count_filled()}, timer={format_time(self.timer)})"
        )
