"""Tests for the command-line interface."""

import os

import pytest
from killer_sudoku.cli import main, handle_command, play_loop, format_cage
from killer_sudoku.generator import Cage
from killer_sudoku.game import load_session, GameState

from conftest import TEST_PUZZLE


def scripted(lines):
    """Stand-in for input() that replays ``lines`` and then hits end of input."""
    remaining = iter(lines)

    def read(prompt=""):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError
    return read


class TestCheckCommand:

    def test_unique_puzzle(self, capsys):
        main(["check", "--puzzle", TEST_PUZZLE])
        out = capsys.readouterr().out

        assert "Solvable" in out
        assert "Unique solution" in out

    def test_unsolvable_puzzle(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["check", "--puzzle", "123456780" + "000000009" + "0" * 63])

        assert exc.value.code == 1
        assert "Not solvable" in capsys.readouterr().out

    def test_conflicting_clues(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["check", "--puzzle", "0" * 72 + "550000000"])

        assert exc.value.code == 1
        assert "conflicting clues" in capsys.readouterr().out

    def test_bad_characters(self, capsys):
        with pytest.raises(SystemExit):
            main(["check", "--puzzle", "x" * 81])
        assert "Error parsing puzzle" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestGenerateAndRender:

    def test_generate_saves_games(self, tmp_path, capsys):
        out_dir = tmp_path / "games"
        main(["generate", "-n", "2", "-d", "easy", "-s", "1", "-o", str(out_dir)])

        assert sorted(os.listdir(out_dir)) == ["killer_easy_1.json", "killer_easy_2.json"]
        session = load_session(str(out_dir / "killer_easy_1.json"))
        assert session.puzzle.count_filled() == 41
        assert "Total puzzles generated: 2" in capsys.readouterr().out

    def test_render_saved_game(self, tmp_path, capsys):
        main(["generate", "-d", "hard", "-s", "2", "-o", str(tmp_path)])
        image = tmp_path / "board.png"
        main(["render", "-g", str(tmp_path / "killer_hard_1.json"), "-o", str(image), "--dark", "--solid"])

        assert image.exists()
        assert "Image saved to" in capsys.readouterr().out

    def test_render_missing_game(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["render", "-g", str(tmp_path / "missing.json")])


class TestBenchmarkCommand:

    def test_benchmark_without_charts(self, tmp_path):
        main(["benchmark", "-n", "1", "-d", "easy", "-o", str(tmp_path), "--no-charts"])

        assert (tmp_path / "generation_results.json").exists()
        assert (tmp_path / "generation_summary.json").exists()
        assert not (tmp_path / "generation_time.png").exists()


class TestPlayCommands:
    """Single play commands against a session."""

    def test_select_and_place(self, session, capsys):
        assert handle_command(session, "select 1 3")
        assert session.selected_cell == 2

        handle_command(session, "4")
        assert session.user_grid.get_index(2) == 4

        handle_command(session, "check")
        assert "No errors found" in capsys.readouterr().out

    def test_wrong_digit_reported(self, session, capsys):
        handle_command(session, "select 1 3")
        handle_command(session, "9")
        handle_command(session, "check")
        assert "Wrong cells: r1c3" in capsys.readouterr().out

    def test_given_cell_reports_no_change(self, session, capsys):
        handle_command(session, "select 1 1")
        handle_command(session, "9")
        assert "Nothing changed" in capsys.readouterr().out

    def test_undo_and_redo(self, session, capsys):
        handle_command(session, "undo")
        assert "Nothing to undo" in capsys.readouterr().out

        handle_command(session, "select 1 3")
        handle_command(session, "4")
        handle_command(session, "undo")
        assert session.user_grid.get_index(2) == 0
        handle_command(session, "redo")
        assert session.user_grid.get_index(2) == 4

    def test_notes_and_pause(self, session, capsys):
        handle_command(session, "notes")
        handle_command(session, "pause")
        out = capsys.readouterr().out

        assert "Notes mode on" in out
        assert "Paused" in out
        assert session.state is GameState.PAUSED

    def test_bad_input(self, session):
        with pytest.raises(ValueError):
            handle_command(session, "select 10 1")
        with pytest.raises(ValueError):
            handle_command(session, "select 1")
        with pytest.raises(ValueError):
            handle_command(session, "dance")
        with pytest.raises(ValueError):
            handle_command(session, "save")

    def test_save(self, session, tmp_path):
        path = tmp_path / "game.json"
        handle_command(session, f"save {path}")
        assert load_session(str(path)).user_grid == session.user_grid

    def test_quit(self, session):
        assert not handle_command(session, "quit")


class TestPlayLoop:

    def test_scripted_game(self, session, tmp_path, capsys):
        save_path = str(tmp_path / "auto.json")
        play_loop(session, default_save=save_path,
                  read=scripted(["select 1 3", "", "4", "oops", "save", "quit", "hint"]))
        out = capsys.readouterr().out

        assert session.user_grid.get_index(2) == 4
        assert "Error: unknown command" in out
        assert os.path.exists(save_path)
        # Commands after quit are not read
        assert len(session.history) == 2

    def test_end_of_input(self, session):
        play_loop(session, read=scripted(["select 1 3"]))
        assert session.selected_cell == 2


def test_format_cage():
    assert format_cage(Cage([10, 1], 12)) == "12 = r1c2 r2c2"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
