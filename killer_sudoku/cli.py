"""Command-line interface for the Killer Sudoku engine."""

import argparse
import logging
import os
import random
import sys
import time
from typing import List, Optional

from .core.board import SudokuBoard, cell_index, cell_position
from .core.validator import count_solutions
from .generator import Difficulty, Cage
from .game import GameSession, GameState, SnapshotError, format_time, save_session, load_session
from .solvers import BacktrackingSolver
from .render import PuzzleRenderer
from .benchmark import GenerationBenchmark, BenchmarkVisualizer

DIFFICULTY_CHOICES = ["easy", "medium", "hard", "all"]

PLAY_HELP = """Commands:
  select R C   select the cell at row R, column C (1-9)
  D            place digit D (1-9) in the selected cell (a note in notes mode)
  erase        clear the selected cell
  notes        toggle notes mode
  hint         fill a random empty cell
  undo / redo  step through history
  check        list cells that disagree with the solution
  auto         fill in candidate notes
  clear        remove all notes
  pause        pause or resume
  show         print the board
  save [PATH]  save the game as JSON
  quit         leave the game"""


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Killer Sudoku Puzzle Generator & Player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate 3 hard puzzles and draw them
  killer-sudoku generate --count 3 --difficulty hard --render-dir images/

  # Play a medium game in the terminal
  killer-sudoku play --difficulty medium --save game.json

  # Check whether a plain Sudoku string is solvable and unique
  killer-sudoku check --puzzle "530070000600195000..."
        """
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate Killer Sudoku puzzles")
    gen_parser.add_argument(
        "--count", "-n", type=int, default=1,
        help="Number of puzzles to generate (default: 1)"
    )
    gen_parser.add_argument(
        "--difficulty", "-d", choices=DIFFICULTY_CHOICES, default="medium",
        help="Difficulty level (default: medium)"
    )
    gen_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducibility"
    )
    gen_parser.add_argument(
        "--output", "-o", type=str, default=None,
        help="Directory to save each puzzle as a JSON game"
    )
    gen_parser.add_argument(
        "--render-dir", type=str, default=None,
        help="Directory to save each puzzle as a PNG"
    )

    # Check command
    check_parser = subparsers.add_parser("check", help="Check a Sudoku clue string")
    check_parser.add_argument(
        "--puzzle", "-p", type=str, required=True,
        help="Puzzle string (81 chars, 0 or . for empty cells)"
    )

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument(
        "--difficulty", "-d", choices=["easy", "medium", "hard"], default="medium",
        help="Difficulty level (default: medium)"
    )
    play_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducibility"
    )
    play_parser.add_argument(
        "--load", type=str, default=None,
        help="Resume a saved JSON game instead of starting a new one"
    )
    play_parser.add_argument(
        "--save", type=str, default=None,
        help="Default path for the save command"
    )

    # Render command
    render_parser = subparsers.add_parser("render", help="Draw a saved game")
    render_parser.add_argument(
        "--game", "-g", type=str, required=True,
        help="Saved JSON game"
    )
    render_parser.add_argument(
        "--output", "-o", type=str, default="killer_sudoku.png",
        help="Output image (default: killer_sudoku.png)"
    )
    render_parser.add_argument(
        "--no-coloring", action="store_true",
        help="Do not tint cages"
    )
    render_parser.add_argument(
        "--solid", action="store_true",
        help="Draw solid cage outlines instead of dashed"
    )
    render_parser.add_argument(
        "--dark", action="store_true",
        help="Use the dark theme"
    )

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Benchmark puzzle generation")
    bench_parser.add_argument(
        "--puzzles", "-n", type=int, default=10,
        help="Puzzles per difficulty (default: 10)"
    )
    bench_parser.add_argument(
        "--difficulty", "-d", choices=DIFFICULTY_CHOICES, default="all",
        help="Difficulty to benchmark (default: all)"
    )
    bench_parser.add_argument(
        "--output", "-o", type=str, default="results",
        help="Output directory for results (default: results)"
    )
    bench_parser.add_argument(
        "--seed", "-s", type=int, default=42,
        help="Random seed for reproducibility (default: 42)"
    )
    bench_parser.add_argument(
        "--no-charts", action="store_true",
        help="Skip chart generation"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "generate":
        cmd_generate(args)
    elif args.command == "check":
        cmd_check(args)
    elif args.command == "play":
        cmd_play(args)
    elif args.command == "render":
        cmd_render(args)
    elif args.command == "benchmark":
        cmd_benchmark(args)


def _difficulties(name: str) -> List[Difficulty]:
    if name == "all":
        return list(Difficulty)
    return [Difficulty(name)]


def format_cage(cage: Cage) -> str:
    """One-line cage description with 1-based cell coordinates."""
    cells = " ".join(
        f"r{row + 1}c{col + 1}" for row, col in (cell_position(i) for i in sorted(cage.cells))
    )
    return f"{cage.sum:>2} = {cells}"


def print_session(session: GameSession) -> None:
    """Print the player grid, cages and status line."""
    print(session.user_grid)
    print(f"Cages ({len(session.cages)}):")
    for cage in sorted(session.cages, key=lambda c: min(c.cells)):
        print(f"  {format_cage(cage)}")
    selected = "none"
    if session.selected_cell is not None:
        row, col = cell_position(session.selected_cell)
        selected = f"r{row + 1}c{col + 1}"
    print(
        f"[{session.difficulty}] {session.state.value}  time {format_time(session.timer)}"
        f"  selected {selected}  notes {'on' if session.notes_mode else 'off'}"
    )


def cmd_generate(args):
    """Handle the generate command."""
    rng = random.Random(args.seed)
    renderer = PuzzleRenderer() if args.render_dir else None

    total = 0
    for difficulty in _difficulties(args.difficulty):
        print(f"\nGenerating {args.count} {difficulty.value} puzzles...")
        for i in range(1, args.count + 1):
            session = GameSession.new_game(difficulty, rng=rng)
            total += 1

            print(f"\n--- {difficulty.value.capitalize()} Puzzle {i} "
                  f"({session.puzzle.count_filled()} clues, {len(session.cages)} cages) ---")
            print_session(session)

            name = f"killer_{difficulty.value}_{i}"
            if args.output:
                os.makedirs(args.output, exist_ok=True)
                save_session(session, os.path.join(args.output, f"{name}.json"))
            if renderer is not None:
                path = renderer.render_session(session, os.path.join(args.render_dir, f"{name}.png"))
                print(f"Image saved to {path}")

    if args.output:
        print(f"\nGames saved to {args.output}/")
    print(f"\nTotal puzzles generated: {total}")


def cmd_check(args):
    """Handle the check command."""
    try:
        board = SudokuBoard.from_string(args.puzzle)
    except ValueError as e:
        print(f"Error parsing puzzle: {e}")
        sys.exit(1)

    print("Input puzzle:")
    print(board)
    print()

    if not board.is_valid():
        print("✗ Not solvable (conflicting clues)")
        sys.exit(1)

    solver = BacktrackingSolver()
    solution, stats = solver.solve(board)
    if not stats.solved:
        print(f"✗ Not solvable ({stats.iterations:,} iterations)")
        sys.exit(1)

    print(f"✓ Solvable in {stats.time_seconds:.4f}s ({stats.iterations:,} iterations)")
    print(solution)

    unique = count_solutions(board, limit=2) == 1
    print("Unique solution" if unique else "More than one solution")


def cmd_play(args):
    """Handle the play command."""
    if args.load:
        try:
            session = load_session(args.load)
        except (OSError, SnapshotError) as e:
            print(f"Error loading game: {e}")
            sys.exit(1)
    else:
        print(f"Generating a {args.difficulty} puzzle...")
        session = GameSession.new_game(args.difficulty, rng=random.Random(args.seed))

    print(PLAY_HELP)
    print()
    print_session(session)
    play_loop(session, default_save=args.save)


def play_loop(session: GameSession, default_save: Optional[str] = None, read=input) -> GameSession:
    """Read commands until quit or end of input, applying them to ``session``."""
    last_tick = time.monotonic()

    while True:
        try:
            line = read("> ").strip()
        except EOFError:
            break

        now = time.monotonic()
        for _ in range(int(now - last_tick)):
            session.increment_timer()
        last_tick = now

        if not line:
            continue
        try:
            if not handle_command(session, line, default_save):
                break
        except ValueError as e:
            print(f"Error: {e}")

        if session.state is GameState.COMPLETE:
            print(f"Solved in {format_time(session.timer)}!")

    return session


def handle_command(session: GameSession, line: str, default_save: Optional[str] = None) -> bool:
    """Apply one play command. Returns False when the player quits."""
    parts = line.split()
    command, rest = parts[0].lower(), parts[1:]

    if command in ("quit", "exit", "q"):
        return False
    if command == "help":
        print(PLAY_HELP)
    elif command == "select":
        if len(rest) != 2:
            raise ValueError("usage: select ROW COL")
        row, col = int(rest[0]) - 1, int(rest[1]) - 1
        if not (0 <= row < 9 and 0 <= col < 9):
            raise ValueError("row and column must be 1-9")
        session.select_cell(cell_index(row, col))
    elif command.isdigit():
        if not session.place_number(int(command)):
            print("Nothing changed")
    elif command == "erase":
        if not session.erase_cell():
            print("Nothing changed")
    elif command == "notes":
        print(f"Notes mode {'on' if session.toggle_notes_mode() else 'off'}")
    elif command == "hint":
        index = session.get_hint()
        if index is None:
            print("No hint available")
        else:
            row, col = cell_position(index)
            print(f"Filled r{row + 1}c{col + 1}")
    elif command == "undo":
        if not session.undo():
            print("Nothing to undo")
    elif command == "redo":
        if not session.redo():
            print("Nothing to redo")
    elif command == "check":
        errors = session.check_errors()
        if errors:
            print("Wrong cells: " + ", ".join(
                f"r{r + 1}c{c + 1}" for r, c in (cell_position(i) for i in errors)
            ))
        else:
            print("No errors found")
    elif command == "auto":
        session.auto_set_notes()
    elif command == "clear":
        session.clear_all_notes()
    elif command == "pause":
        print("Paused" if session.toggle_pause() else "Resumed")
    elif command == "show":
        print_session(session)
        if session.selected_cell is not None:
            notes = session.note_digits(session.selected_cell)
            if notes:
                print(f"Notes: {' '.join(str(d) for d in notes)}")
    elif command == "save":
        path = rest[0] if rest else default_save
        if not path:
            raise ValueError("usage: save PATH")
        save_session(session, path)
        print(f"Game saved to {path}")
    else:
        raise ValueError(f"unknown command {command!r} (try help)")

    return True


def cmd_render(args):
    """Handle the render command."""
    try:
        session = load_session(args.game)
    except (OSError, SnapshotError) as e:
        print(f"Error loading game: {e}")
        sys.exit(1)

    renderer = PuzzleRenderer(
        cage_coloring=not args.no_coloring,
        dotted_lines=not args.solid,
        dark_mode=args.dark
    )
    path = renderer.render_session(session, args.output)
    print(f"Image saved to {path}")


def cmd_benchmark(args):
    """Handle the benchmark command."""
    difficulties = _difficulties(args.difficulty)

    print("=" * 60)
    print("KILLER SUDOKU GENERATION BENCHMARK")
    print("=" * 60)
    print(f"Puzzles per difficulty: {args.puzzles}")
    print(f"Difficulties: {[d.value for d in difficulties]}")
    print(f"Output directory: {args.output}")
    print("=" * 60)

    benchmark = GenerationBenchmark(
        puzzles_per_difficulty=args.puzzles,
        difficulties=difficulties,
        seed=args.seed
    )
    results = benchmark.run()
    summary = benchmark.get_summary()

    print("\n" + "=" * 60)
    print("RESULTS SUMMARY")
    print("=" * 60)
    for difficulty, stats in summary["results_by_difficulty"].items():
        print(f"\n{difficulty}:")
        print(f"  Avg Time: {stats['avg_time_seconds']:.4f}s")
        print(f"  Avg Clues: {stats['avg_clues']:.1f}")
        print(f"  Avg Cages: {stats['avg_cage_count']:.1f} (mean size {stats['avg_cage_size']:.2f})")
        print(f"  Cage retries: {stats['retries']}  Invalid: {stats['invalid']}")

    benchmark.save_results(args.output)
    print(f"\nResults saved to {args.output}/")

    if not args.no_charts:
        print("\nGenerating charts...")
        charts = BenchmarkVisualizer(results, args.output).generate_all()
        for chart in charts:
            print(f"  - {os.path.basename(chart)}")

    print("\n" + "=" * 60)
    print("Benchmark complete!")


if __name__ == "__main__":
    main()
