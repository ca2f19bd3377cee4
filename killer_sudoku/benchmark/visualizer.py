"""Charts for generation benchmark results."""

from __future__ import annotations
import os
from typing import List

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .benchmark import GenerationResult


class BenchmarkVisualizer:
    """Creates charts comparing generation across difficulties."""

    COLORS = {
        "easy": "#2ecc71",
        "medium": "#f39c12",
        "hard": "#e74c3c",
    }

    def __init__(self, results: List[GenerationResult], output_dir: str = "results"):
        """
        Initialize the visualizer.

        Args:
            results: List of benchmark results.
            output_dir: Directory to save generated charts.
        """
        self.results = results
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        sns.set_theme(style="whitegrid")

    def _difficulties(self) -> List[str]:
        order = list(self.COLORS)
        seen = {r.difficulty for r in self.results}
        return [d for d in order if d in seen] + sorted(seen - set(order))

    def generate_all(self) -> List[str]:
        """
        Generate all charts.

        Returns:
            List of paths to generated chart files.
        """
        return [
            self.plot_time_by_difficulty(),
            self.plot_cage_size_distribution(),
        ]

    def plot_time_by_difficulty(self) -> str:
        """Stacked bars of average puzzle and cage generation time."""
        fig, ax = plt.subplots(figsize=(8, 5))

        difficulties = self._difficulties()
        x = np.arange(len(difficulties))
        puzzle_times = [
            np.mean([r.puzzle_seconds for r in self.results if r.difficulty == d])
            for d in difficulties
        ]
        cage_times = [
            np.mean([r.cage_seconds for r in self.results if r.difficulty == d])
            for d in difficulties
        ]

        ax.bar(x, puzzle_times, 0.6, label="Grid + clue removal",
               color=[self.COLORS.get(d, "#95a5a6") for d in difficulties],
               edgecolor='black', linewidth=0.5)
        ax.bar(x, cage_times, 0.6, bottom=puzzle_times, label="Cages",
               color="#95a5a6", edgecolor='black', linewidth=0.5)

        ax.set_xticks(x)
        ax.set_xticklabels([d.capitalize() for d in difficulties])
        ax.set_xlabel('Difficulty', fontsize=12)
        ax.set_ylabel('Average Time (seconds)', fontsize=12)
        ax.set_title('Generation Time by Difficulty', fontsize=14, fontweight='bold')
        ax.legend()

        plt.tight_layout()
        path = os.path.join(self.output_dir, "generation_time.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        return path

    def plot_cage_size_distribution(self) -> str:
        """Histogram of cage sizes per difficulty."""
        fig, ax = plt.subplots(figsize=(8, 5))

        for difficulty in self._difficulties():
            sizes = [s for r in self.results if r.difficulty == difficulty for s in r.cage_sizes]
            sns.histplot(sizes, discrete=True, stat="probability", element="step",
                         fill=False, label=difficulty.capitalize(),
                         color=self.COLORS.get(difficulty, "#95a5a6"), ax=ax)

        ax.set_xlabel('Cage Size (cells)', fontsize=12)
        ax.set_ylabel('Share of Cages', fontsize=12)
        ax.set_title('Cage Size Distribution', fontsize=14, fontweight='bold')
        ax.legend(title='Difficulty')

        plt.tight_layout()
        path = os.path.join(self.output_dir, "cage_sizes.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        return path
