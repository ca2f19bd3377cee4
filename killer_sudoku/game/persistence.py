"""Versioned snapshot format for saving and resuming game sessions."""

from __future__ import annotations
import json
import logging
import random
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.board import SudokuBoard, GRID_SIZE, CELL_COUNT
from ..generator.cages import Cage, CellBorders, CageBorderMap, determine_cage_borders
from .session import GameSession, History, HistorySnapshot, empty_notes

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Field names written by the browser version of the game
LEGACY_KEYS = {
    "userGrid": "user_grid",
    "cageBorders": "cage_borders",
    "isPaused": "is_paused",
    "isComplete": "is_complete",
    "selectedCell": "selected_cell",
    "notesMode": "notes_mode",
    "historyIndex": "history_index",
}

REQUIRED_FIELDS = ("puzzle", "solution", "user_grid", "cages")


class SnapshotError(ValueError):
    """A persisted session record cannot be loaded."""


def session_to_dict(session: GameSession) -> Dict[str, Any]:
    """Serialize every persisted field of a session to plain JSON types."""
    return {
        "version": SCHEMA_VERSION,
        "difficulty": session.difficulty,
        "puzzle": session.puzzle.to_list(),
        "solution": session.solution.to_list(),
        "user_grid": session.user_grid.to_list(),
        "notes": session.notes.tolist(),
        "cages": [cage.to_dict() for cage in session.cages],
        "cage_borders": {str(i): b.to_dict() for i, b in session.cage_borders.items()},
        "timer": session.timer,
        "is_paused": session.is_paused,
        "is_complete": session.is_complete,
        "selected_cell": session.selected_cell,
        "notes_mode": session.notes_mode,
        "history": [
            {
                "user_grid": list(snapshot.user_grid),
                "notes": [list(cell) for cell in snapshot.notes],
                "action": snapshot.action,
            }
            for snapshot in session.history.snapshots
        ],
        "history_index": session.history.index,
    }


def session_from_dict(data: Dict[str, Any], rng: Optional[random.Random] = None) -> GameSession:
    """
    Rebuild a session from a snapshot record.

    Optional fields get defaults; cage borders are recomputed when absent
    or empty, and a missing history is seeded with the current grid.

    Raises:
        SnapshotError: Unknown version, missing required fields,
            malformed grids, notes, cages or history, or a solution or
            player grid that changes a puzzle clue.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot must be a mapping, got {type(data).__name__}")

    data = {LEGACY_KEYS.get(key, key): value for key, value in data.items()}

    version = data.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise SnapshotError(f"Unsupported snapshot version {version!r}")

    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        raise SnapshotError(f"Snapshot is missing fields: {', '.join(missing)}")

    session = GameSession(rng=rng)
    session.puzzle = _parse_grid(data["puzzle"], "puzzle")
    session.solution = _parse_grid(data["solution"], "solution")
    session.user_grid = _parse_grid(data["user_grid"], "user_grid")
    _check_clues(session.puzzle, session.solution, session.user_grid)
    session.notes = _parse_notes(data.get("notes"), "notes")
    session.cages = _parse_cages(data["cages"])

    borders = data.get("cage_borders")
    if borders:
        session.cage_borders = _parse_borders(borders)
    else:
        logger.debug("Snapshot has no cage borders, recomputing from cages")
        session.cage_borders = determine_cage_borders(session.cages)

    session.difficulty = str(data.get("difficulty", session.difficulty))
    session.timer = int(data.get("timer", 0))
    session.is_paused = bool(data.get("is_paused", False))
    session.is_complete = bool(data.get("is_complete", False))
    session.notes_mode = bool(data.get("notes_mode", False))

    selected = data.get("selected_cell")
    if selected is None or selected == -1:
        session.selected_cell = None
    else:
        try:
            session.select_cell(int(selected))
        except ValueError as e:
            raise SnapshotError(str(e)) from e

    session.history = _parse_history(data.get("history"), data.get("history_index"))
    if not session.history:
        session.save_state()

    return session


def save_session(session: GameSession, path: str) -> None:
    """Write a session snapshot as JSON."""
    with open(path, "w") as f:
        json.dump(session_to_dict(session), f, indent=2)


def load_session(path: str, rng: Optional[random.Random] = None) -> GameSession:
    """Read a session snapshot written by ``save_session``."""
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"{path} is not valid JSON: {e}") from e
    return session_from_dict(data, rng=rng)


def _parse_grid(values: Any, name: str) -> SudokuBoard:
    try:
        return SudokuBoard.from_list([int(v) for v in values])
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid {name}: {e}") from e


def _check_clues(puzzle: SudokuBoard, solution: SudokuBoard, user_grid: SudokuBoard) -> None:
    givens = puzzle.grid != 0
    for name, grid in (("solution", solution), ("user_grid", user_grid)):
        mismatched = np.flatnonzero(givens & (grid.grid != puzzle.grid))
        if mismatched.size:
            raise SnapshotError(
                f"{name} disagrees with puzzle clues at cells {[int(i) for i in mismatched]}"
            )


def _parse_notes(values: Any, name: str) -> np.ndarray:
    if values is None:
        return empty_notes()
    try:
        notes = np.array(values, dtype=bool)
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid {name}: {e}") from e
    if notes.shape != (CELL_COUNT, GRID_SIZE):
        raise SnapshotError(f"Invalid {name}: expected {CELL_COUNT}x{GRID_SIZE} flags, got shape {notes.shape}")
    return notes


def _parse_cages(values: Any) -> List[Cage]:
    try:
        cages = [Cage.from_dict(item) for item in values]
    except (TypeError, KeyError, ValueError) as e:
        raise SnapshotError(f"Invalid cages: {e}") from e

    for cage in cages:
        if any(not 0 <= cell < CELL_COUNT for cell in cage.cells):
            raise SnapshotError(f"Cage {cage.cells} has a cell outside the grid")
    return cages


def _parse_borders(values: Any) -> CageBorderMap:
    try:
        borders = {int(key): CellBorders.from_dict(item) for key, item in values.items()}
    except (AttributeError, TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid cage_borders: {e}") from e

    if set(borders) != set(range(CELL_COUNT)):
        raise SnapshotError("cage_borders must cover cells 0-80")
    return borders


def _parse_history(entries: Any, index: Any) -> History:
    if not entries:
        return History()

    snapshots = []
    for number, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise SnapshotError(f"Invalid history[{number}]: expected a mapping")
        grid = _parse_grid(entry.get("user_grid", entry.get("userGrid")), f"history[{number}].user_grid")
        notes = _parse_notes(entry.get("notes"), f"history[{number}].notes")
        snapshots.append(HistorySnapshot.capture(grid, notes, entry.get("action")))

    try:
        return History(snapshots, None if index is None else int(index))
    except ValueError as e:
        raise SnapshotError(str(e)) from e
