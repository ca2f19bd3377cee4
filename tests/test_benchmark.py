"""Tests for the generation benchmark and its charts."""

import json
import os

import pytest
from killer_sudoku.benchmark import GenerationBenchmark, BenchmarkVisualizer
from killer_sudoku.generator import Difficulty


@pytest.fixture(scope="module")
def benchmark():
    bench = GenerationBenchmark(
        puzzles_per_difficulty=2,
        difficulties=[Difficulty.EASY, Difficulty.HARD],
        seed=5
    )
    bench.run(show_progress=False)
    return bench


class TestGenerationBenchmark:
    """Benchmark runs and summaries."""

    def test_result_count(self, benchmark):
        assert len(benchmark.results) == 4
        assert [r.difficulty for r in benchmark.results] == ["easy", "easy", "hard", "hard"]

    def test_results_are_valid(self, benchmark):
        for result in benchmark.results:
            assert result.valid
            assert sum(result.cage_sizes) == 81
            assert result.cage_count == len(result.cage_sizes)
            assert result.total_seconds >= result.puzzle_seconds

    def test_clue_counts(self, benchmark):
        clues = {r.difficulty: r.clues for r in benchmark.results}
        assert clues == {"easy": 41, "hard": 21}

    def test_summary(self, benchmark):
        summary = benchmark.get_summary()

        assert summary["total_puzzles"] == 4
        assert summary["difficulties"] == ["easy", "hard"]
        easy = summary["results_by_difficulty"]["easy"]
        assert easy["tested"] == 2
        assert easy["avg_clues"] == 41.0
        assert easy["invalid"] == 0
        assert "medium" not in summary["results_by_difficulty"]

    def test_save_results(self, benchmark, tmp_path):
        benchmark.save_results(str(tmp_path))

        with open(tmp_path / "generation_results.json") as f:
            rows = json.load(f)
        with open(tmp_path / "generation_summary.json") as f:
            summary = json.load(f)

        assert len(rows) == 4
        assert rows[0]["max_cage_size"] >= rows[0]["min_cage_size"] >= 2
        assert summary["total_puzzles"] == 4

    def test_same_seed_same_clues(self, benchmark):
        again = GenerationBenchmark(2, [Difficulty.EASY, Difficulty.HARD], seed=5)
        again.run(show_progress=False)

        assert [r.cage_sizes for r in again.results] == [r.cage_sizes for r in benchmark.results]


class TestBenchmarkVisualizer:

    def test_generate_all(self, benchmark, tmp_path):
        paths = BenchmarkVisualizer(benchmark.results, str(tmp_path / "charts")).generate_all()

        assert [os.path.basename(p) for p in paths] == ["generation_time.png", "cage_sizes.png"]
        for path in paths:
            assert os.path.getsize(path) > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
