"""Unit tests for saving and loading sessions."""

import json
import random

import pytest
from killer_sudoku.generator import determine_cage_borders
from killer_sudoku.game import (
    GameSession, GameState, SCHEMA_VERSION, SnapshotError,
    session_to_dict, session_from_dict, save_session, load_session,
)


@pytest.fixture
def played(session):
    session.select_cell(2)
    session.place_number(4)
    session.toggle_notes_mode()
    session.select_cell(3)
    session.place_number(6)
    session.place_number(1)
    session.undo()
    for _ in range(42):
        session.increment_timer()
    return session


def assert_same_session(a, b):
    assert a.puzzle == b.puzzle
    assert a.solution == b.solution
    assert a.user_grid == b.user_grid
    assert (a.notes == b.notes).all()
    assert [c.to_dict() for c in a.cages] == [c.to_dict() for c in b.cages]
    assert a.cage_borders == b.cage_borders
    assert a.difficulty == b.difficulty
    assert a.timer == b.timer
    assert a.is_paused == b.is_paused
    assert a.is_complete == b.is_complete
    assert a.selected_cell == b.selected_cell
    assert a.notes_mode == b.notes_mode
    assert a.history.index == b.history.index
    assert len(a.history) == len(b.history)


class TestSnapshotRecord:
    """Conversion to and from plain records."""

    def test_round_trip(self, played):
        data = session_to_dict(played)
        restored = session_from_dict(data)

        assert data["version"] == SCHEMA_VERSION
        assert_same_session(played, restored)

    def test_record_is_json_serializable(self, played):
        data = json.loads(json.dumps(session_to_dict(played)))
        assert_same_session(played, session_from_dict(data))

    def test_restored_history_can_redo(self, played):
        restored = session_from_dict(session_to_dict(played))

        assert restored.history.can_redo()
        assert restored.redo()
        assert restored.note_digits(3) == [1, 6]

    def test_load_classmethod(self, played):
        restored = GameSession.load(session_to_dict(played), rng=random.Random(1))
        assert restored.state is GameState.ACTIVE
        assert restored.timer == 42

    def test_missing_optional_fields(self, session):
        data = session_to_dict(session)
        for key in ("notes", "cage_borders", "timer", "history", "history_index",
                    "selected_cell", "notes_mode", "is_paused", "is_complete", "version"):
            del data[key]

        restored = session_from_dict(data)

        assert restored.cage_borders == determine_cage_borders(session.cages)
        assert not restored.notes.any()
        assert restored.timer == 0
        assert restored.selected_cell is None
        assert len(restored.history) == 1
        assert restored.state is GameState.ACTIVE

    def test_empty_borders_recomputed(self, session):
        data = session_to_dict(session)
        data["cage_borders"] = {}
        restored = session_from_dict(data)
        assert len(restored.cage_borders) == 81

    def test_legacy_keys(self, session):
        data = session_to_dict(session)
        data["userGrid"] = data.pop("user_grid")
        data["selectedCell"] = -1
        data["isPaused"] = True
        del data["selected_cell"]
        del data["is_paused"]

        restored = session_from_dict(data)

        assert restored.user_grid == session.user_grid
        assert restored.selected_cell is None
        assert restored.state is GameState.PAUSED


class TestSnapshotErrors:
    """Records that cannot be loaded."""

    def test_wrong_version(self, session):
        data = session_to_dict(session)
        data["version"] = SCHEMA_VERSION + 1
        with pytest.raises(SnapshotError, match="version"):
            session_from_dict(data)

    def test_missing_required_field(self, session):
        data = session_to_dict(session)
        del data["solution"]
        with pytest.raises(SnapshotError, match="solution"):
            session_from_dict(data)

    def test_short_grid(self, session):
        data = session_to_dict(session)
        data["puzzle"] = data["puzzle"][:80]
        with pytest.raises(SnapshotError, match="puzzle"):
            session_from_dict(data)

    def test_solution_contradicts_clue(self, session):
        data = session_to_dict(session)
        data["solution"][0] = 9
        with pytest.raises(SnapshotError, match="solution disagrees"):
            session_from_dict(data)

    def test_user_grid_overwrites_clue(self, session):
        data = session_to_dict(session)
        data["user_grid"][1] = 4
        with pytest.raises(SnapshotError, match=r"user_grid disagrees .* \[1\]"):
            session_from_dict(data)

    def test_bad_notes_shape(self, session):
        data = session_to_dict(session)
        data["notes"] = [[False] * 9] * 80
        with pytest.raises(SnapshotError, match="notes"):
            session_from_dict(data)

    def test_cage_outside_grid(self, session):
        data = session_to_dict(session)
        data["cages"].append({"cells": [81, 82], "sum": 3})
        with pytest.raises(SnapshotError, match="outside"):
            session_from_dict(data)

    def test_incomplete_borders(self, session):
        data = session_to_dict(session)
        del data["cage_borders"]["80"]
        with pytest.raises(SnapshotError, match="cage_borders"):
            session_from_dict(data)

    def test_bad_history_index(self, played):
        data = session_to_dict(played)
        data["history_index"] = len(data["history"])
        with pytest.raises(SnapshotError):
            session_from_dict(data)

    def test_history_entry_not_mapping(self, played):
        data = session_to_dict(played)
        data["history"][0] = "oops"
        with pytest.raises(SnapshotError, match="history"):
            session_from_dict(data)

    def test_not_a_mapping(self):
        with pytest.raises(SnapshotError):
            session_from_dict([1, 2, 3])

    def test_snapshot_error_is_value_error(self):
        assert issubclass(SnapshotError, ValueError)


class TestFiles:
    """JSON files on disk."""

    def test_save_and_load(self, played, tmp_path):
        path = tmp_path / "game.json"
        save_session(played, str(path))
        restored = load_session(str(path))

        assert_same_session(played, restored)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError, match="not valid JSON"):
            load_session(str(path))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
