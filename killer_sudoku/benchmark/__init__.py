"""Benchmark module for puzzle and cage generation."""

from .benchmark import GenerationBenchmark, GenerationResult
from .visualizer import BenchmarkVisualizer

__all__ = ["GenerationBenchmark", "GenerationResult", "BenchmarkVisualizer"]
