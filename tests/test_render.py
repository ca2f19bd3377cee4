"""Unit tests for puzzle rendering."""

import os

import pytest
from killer_sudoku.render import PuzzleRenderer


class TestPuzzleRenderer:
    """Image output for boards and sessions."""

    def test_render_puzzle(self, killer_puzzle, tmp_path):
        path = str(tmp_path / "puzzle.png")
        result = PuzzleRenderer().render(killer_puzzle.puzzle, killer_puzzle.cages, path)

        assert result == path
        assert os.path.getsize(path) > 0

    def test_creates_missing_directory(self, killer_puzzle, tmp_path):
        path = str(tmp_path / "nested" / "dir" / "puzzle.png")
        PuzzleRenderer(cage_coloring=False, dotted_lines=False).render(
            killer_puzzle.puzzle, killer_puzzle.cages, path
        )
        assert os.path.exists(path)

    def test_render_session_with_notes(self, session, tmp_path):
        session.select_cell(2)
        session.place_number(4)
        session.auto_set_notes()

        path = str(tmp_path / "session.png")
        PuzzleRenderer(dark_mode=True).render_session(session, path)

        assert os.path.exists(path)

    def test_theme_selection(self):
        assert PuzzleRenderer().theme == PuzzleRenderer.THEMES["light"]
        assert PuzzleRenderer(dark_mode=True).theme == PuzzleRenderer.THEMES["dark"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
