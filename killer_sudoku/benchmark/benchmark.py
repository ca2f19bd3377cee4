"""Benchmark for puzzle and cage generation across difficulties."""

from __future__ import annotations
import json
import logging
import os
import random
import time
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

import numpy as np
from tqdm import tqdm

from ..generator import Difficulty, PuzzleGenerator, generate_cages_with_retry, validate_cages

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Measurements from generating one puzzle and its cages."""
    puzzle_id: int
    difficulty: str
    puzzle_seconds: float
    cage_seconds: float
    clues: int
    cells_removed: int
    cage_count: int
    cage_sizes: List[int] = field(default_factory=list)
    cage_attempts: int = 1
    valid: bool = True

    @property
    def total_seconds(self) -> float:
        return self.puzzle_seconds + self.cage_seconds

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "puzzle_id": self.puzzle_id,
            "difficulty": self.difficulty,
            "puzzle_seconds": self.puzzle_seconds,
            "cage_seconds": self.cage_seconds,
            "total_seconds": self.total_seconds,
            "clues": self.clues,
            "cells_removed": self.cells_removed,
            "cage_count": self.cage_count,
            "min_cage_size": min(self.cage_sizes) if self.cage_sizes else 0,
            "max_cage_size": max(self.cage_sizes) if self.cage_sizes else 0,
            "mean_cage_size": float(np.mean(self.cage_sizes)) if self.cage_sizes else 0.0,
            "cage_sizes": list(self.cage_sizes),
            "cage_attempts": self.cage_attempts,
            "valid": self.valid,
        }


class GenerationBenchmark:
    """
    Times puzzle generation and caging for each difficulty.

    Every puzzle's cage set is also checked for partition, size,
    contiguity and sum problems so regressions show up as invalid rows.
    """

    def __init__(
        self,
        puzzles_per_difficulty: int = 10,
        difficulties: Optional[List[Difficulty]] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the benchmark.

        Args:
            puzzles_per_difficulty: Number of puzzles to generate per difficulty.
            difficulties: List of difficulties to test (default: all).
            seed: Random seed for reproducibility.
        """
        self.puzzles_per_difficulty = puzzles_per_difficulty
        self.difficulties = difficulties or list(Difficulty)
        self.seed = seed
        self.results: List[GenerationResult] = []

    def run(self, show_progress: bool = True) -> List[GenerationResult]:
        """
        Run the full benchmark suite.

        Returns:
            List of GenerationResult objects.
        """
        rng = random.Random(self.seed)
        generator = PuzzleGenerator(rng=rng)
        self.results = []

        total = len(self.difficulties) * self.puzzles_per_difficulty
        pbar = tqdm(total=total, desc="Generating", disable=not show_progress)

        for difficulty in self.difficulties:
            for puzzle_id in range(self.puzzles_per_difficulty):
                self.results.append(self._run_single(generator, rng, difficulty, puzzle_id))
                pbar.update(1)

        pbar.close()
        return self.results

    def _run_single(
        self,
        generator: PuzzleGenerator,
        rng: random.Random,
        difficulty: Difficulty,
        puzzle_id: int
    ) -> GenerationResult:
        start = time.perf_counter()
        generated = generator.generate(difficulty)
        puzzle_seconds = time.perf_counter() - start

        start = time.perf_counter()
        cages, attempts = generate_cages_with_retry(generated.solution, difficulty, rng=rng)
        cage_seconds = time.perf_counter() - start

        problems = validate_cages(cages, generated.solution)
        if problems:
            logger.warning("Puzzle %d (%s) has cage problems: %s",
                           puzzle_id, difficulty.value, "; ".join(problems))

        return GenerationResult(
            puzzle_id=puzzle_id,
            difficulty=difficulty.value,
            puzzle_seconds=puzzle_seconds,
            cage_seconds=cage_seconds,
            clues=generated.clue_count,
            cells_removed=generated.cells_removed,
            cage_count=len(cages),
            cage_sizes=[len(cage.cells) for cage in cages],
            cage_attempts=attempts,
            valid=not problems
        )

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics grouped by difficulty."""
        summary = {
            "total_puzzles": len(self.results),
            "difficulties": [d.value for d in self.difficulties],
            "results_by_difficulty": {}
        }

        for difficulty in self.difficulties:
            rows = [r for r in self.results if r.difficulty == difficulty.value]
            if not rows:
                continue

            times = [r.total_seconds for r in rows]
            sizes = [size for r in rows for size in r.cage_sizes]
            summary["results_by_difficulty"][difficulty.value] = {
                "avg_time_seconds": float(np.mean(times)),
                "max_time_seconds": float(np.max(times)),
                "avg_clues": float(np.mean([r.clues for r in rows])),
                "avg_cage_count": float(np.mean([r.cage_count for r in rows])),
                "avg_cage_size": float(np.mean(sizes)) if sizes else 0.0,
                "max_cage_size": int(np.max(sizes)) if sizes else 0,
                "retries": sum(r.cage_attempts - 1 for r in rows),
                "invalid": sum(1 for r in rows if not r.valid),
                "tested": len(rows)
            }

        return summary

    def save_results(self, output_dir: str) -> None:
        """Save raw results and the summary as JSON."""
        os.makedirs(output_dir, exist_ok=True)

        with open(os.path.join(output_dir, "generation_results.json"), "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=2)

        with open(os.path.join(output_dir, "generation_summary.json"), "w") as f:
            json.dump(self.get_summary(), f, indent=2)

        logger.info("Results saved to %s", output_dir)
