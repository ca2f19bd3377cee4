"""Draw Killer Sudoku boards with cages to image files."""

from __future__ import annotations
import os
from typing import List, Optional

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
import seaborn as sns

from ..core.board import SudokuBoard, GRID_SIZE, BOX_SIZE, CELL_COUNT, cell_position
from ..generator.cages import Cage, CageBorderMap, determine_cage_borders, assign_cage_colors


class PuzzleRenderer:
    """
    Renders a board, its cages and the player's entries with matplotlib.

    Display options mirror the game's settings panel: cage tinting, dashed
    or solid cage outlines, and a dark theme. They are plain constructor
    arguments; the renderer does not load or store them.
    """

    # Inset of cage outlines from the cell edge, in cell units
    CAGE_INSET = 0.08
    PALETTE_SIZE = 6

    THEMES = {
        "light": {"background": "#ffffff", "grid": "#555555", "given": "#111111",
                  "entry": "#1f5fbf", "note": "#666666", "cage": "#333333"},
        "dark": {"background": "#1e1e1e", "grid": "#bbbbbb", "given": "#f0f0f0",
                 "entry": "#7fb2ff", "note": "#aaaaaa", "cage": "#dddddd"},
    }

    def __init__(
        self,
        cage_coloring: bool = True,
        dotted_lines: bool = True,
        dark_mode: bool = False,
        cell_size: float = 0.8
    ):
        """
        Initialize the renderer.

        Args:
            cage_coloring: Tint neighbouring cages in different pastel colours.
            dotted_lines: Draw cage outlines dashed instead of solid.
            dark_mode: Use the dark colour theme.
            cell_size: Figure inches per cell.
        """
        self.cage_coloring = cage_coloring
        self.dotted_lines = dotted_lines
        self.theme = self.THEMES["dark" if dark_mode else "light"]
        self.cell_size = cell_size

    def render_session(self, session, path: str) -> str:
        """Draw a GameSession's current state."""
        return self.render(
            session.puzzle,
            session.cages,
            path,
            user_grid=session.user_grid,
            notes=session.notes,
            cage_borders=session.cage_borders
        )

    def render(
        self,
        puzzle: SudokuBoard,
        cages: List[Cage],
        path: str,
        user_grid: Optional[SudokuBoard] = None,
        notes: Optional[np.ndarray] = None,
        cage_borders: Optional[CageBorderMap] = None
    ) -> str:
        """
        Draw a puzzle and save it as an image.

        Args:
            puzzle: Clue grid; its digits are drawn as givens.
            cages: Cage partition with sums.
            path: Output image path.
            user_grid: Player entries; defaults to the clues only.
            notes: Optional 81x9 candidate flags.
            cage_borders: Precomputed borders; derived from ``cages`` if None.

        Returns:
            Path to the written image.
        """
        user_grid = user_grid if user_grid is not None else puzzle
        cage_borders = cage_borders or determine_cage_borders(cages)

        size = self.cell_size * GRID_SIZE
        fig, ax = plt.subplots(figsize=(size, size))
        fig.patch.set_facecolor(self.theme["background"])
        ax.set_facecolor(self.theme["background"])
        ax.set_xlim(0, GRID_SIZE)
        ax.set_ylim(GRID_SIZE, 0)
        ax.set_aspect("equal")
        ax.axis("off")

        if self.cage_coloring and cages:
            self._draw_cage_tints(ax, cages)
        self._draw_grid_lines(ax)
        self._draw_cage_outlines(ax, cage_borders)
        self._draw_cage_sums(ax, cages)
        self._draw_values(ax, puzzle, user_grid)
        if notes is not None:
            self._draw_notes(ax, user_grid, notes)

        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        plt.savefig(path, dpi=150, bbox_inches='tight', facecolor=fig.get_facecolor())
        plt.close(fig)

        return path

    def _draw_cage_tints(self, ax, cages: List[Cage]) -> None:
        palette = sns.color_palette("pastel", self.PALETTE_SIZE)
        for cage, slot in zip(cages, assign_cage_colors(cages, self.PALETTE_SIZE)):
            for index in cage.cells:
                row, col = cell_position(index)
                ax.add_patch(mpatches.Rectangle(
                    (col, row), 1, 1, facecolor=palette[slot], edgecolor="none", alpha=0.55
                ))

    def _draw_grid_lines(self, ax) -> None:
        for i in range(GRID_SIZE + 1):
            width = 2.0 if i % BOX_SIZE == 0 else 0.5
            ax.plot([0, GRID_SIZE], [i, i], color=self.theme["grid"], linewidth=width)
            ax.plot([i, i], [0, GRID_SIZE], color=self.theme["grid"], linewidth=width)

    def _draw_cage_outlines(self, ax, cage_borders: CageBorderMap) -> None:
        style = "--" if self.dotted_lines else "-"
        inset = self.CAGE_INSET
        for index in range(CELL_COUNT):
            borders = cage_borders.get(index)
            if borders is None:
                continue
            row, col = cell_position(index)
            left, right = col + inset, col + 1 - inset
            top, bottom = row + inset, row + 1 - inset

            segments = []
            if borders.top:
                segments.append(([left, right], [top, top]))
            if borders.bottom:
                segments.append(([left, right], [bottom, bottom]))
            if borders.left:
                segments.append(([left, left], [top, bottom]))
            if borders.right:
                segments.append(([right, right], [top, bottom]))

            for xs, ys in segments:
                ax.plot(xs, ys, linestyle=style, color=self.theme["cage"], linewidth=0.9)

    def _draw_cage_sums(self, ax, cages: List[Cage]) -> None:
        # Sum goes in the cage's first cell, as in the game view
        for cage in cages:
            if not cage.cells:
                continue
            row, col = cell_position(cage.cells[0])
            ax.text(col + 0.12, row + 0.14, str(cage.sum), fontsize=6,
                    ha="left", va="top", color=self.theme["cage"])

    def _draw_values(self, ax, puzzle: SudokuBoard, user_grid: SudokuBoard) -> None:
        for index in range(CELL_COUNT):
            value = user_grid.get_index(index)
            if value == 0:
                continue
            row, col = cell_position(index)
            given = puzzle.get_index(index) != 0
            ax.text(col + 0.5, row + 0.55, str(value), fontsize=16,
                    ha="center", va="center",
                    fontweight="bold" if given else "normal",
                    color=self.theme["given"] if given else self.theme["entry"])

    def _draw_notes(self, ax, user_grid: SudokuBoard, notes: np.ndarray) -> None:
        for index in range(CELL_COUNT):
            if user_grid.get_index(index) != 0:
                continue
            row, col = cell_position(index)
            for digit in np.flatnonzero(notes[index]):
                sub_row, sub_col = divmod(int(digit), BOX_SIZE)
                ax.text(col + 0.22 + sub_col * 0.28, row + 0.3 + sub_row * 0.24,
                        str(int(digit) + 1), fontsize=5, ha="center", va="center",
                        color=self.theme["note"])
