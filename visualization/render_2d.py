"""
render_2d.py

Simple 2D visualization of the drawing surface.

Renders painted strokes, calibration targets and calibration progress in
screen pixel coordinates (origin top-left, y down). Performs no tracking or
calibration.

All rendering is deterministic given the same inputs.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from contracts.events import CalibrationProgress
from contracts.points import ScreenPoint
from visualization.canvas import StrokeCanvas


def draw_targets(
    ax: Axes,
    targets: Sequence[ScreenPoint],
    current_index: Optional[int] = None,
    color: str = "tab:blue",
    highlight_color: str = "tab:orange",
    radius: float = 12.0,
) -> None:
    """
    Draw calibration targets as numbered circles.

    Parameters
    ----------
    ax : Axes
        Target axes.
    targets : Sequence[ScreenPoint]
        Calibration targets in capture order.
    current_index : Optional[int], optional
        Index of the target being collected; drawn highlighted.
    color : str, optional
        Color of inactive targets.
    highlight_color : str, optional
        Color of the current target.
    radius : float, optional
        Circle radius in pixels.
    """
    for i, target in enumerate(targets):
        is_current = current_index is not None and i == current_index
        circle = plt.Circle(
            (target.x, target.y),
            radius,
            fill=is_current,
            color=highlight_color if is_current else color,
            alpha=0.8,
        )
        ax.add_patch(circle)
        ax.annotate(
            str(i + 1),
            (target.x, target.y),
            xytext=(radius, -radius),
            textcoords="offset points",
            fontsize=9,
            color=color,
        )


def draw_strokes(ax: Axes, canvas: StrokeCanvas, linewidth: float = 2.5) -> int:
    """
    Draw every stroke of the canvas.

    Single-point strokes are drawn as dots.

    Returns
    -------
    int
        Number of strokes drawn.
    """
    drawn = 0
    for stroke in canvas.all_strokes():
        if not stroke.points:
            continue
        pts = np.asarray(stroke.points, dtype=np.float64)
        if len(pts) == 1:
            ax.plot(pts[:, 0], pts[:, 1], "o", color=stroke.color, markersize=linewidth * 1.5)
        else:
            ax.plot(pts[:, 0], pts[:, 1], "-", color=stroke.color, linewidth=linewidth)
        drawn += 1
    return drawn


def render_strokes(
    canvas: StrokeCanvas,
    targets: Optional[Sequence[ScreenPoint]] = None,
    progress: Optional[CalibrationProgress] = None,
    screen_size: Tuple[int, int] = (800, 450),
    title: str = "Drawing Surface",
    figsize: Tuple[float, float] = (8, 4.5),
    show: bool = False,
) -> Figure:
    """
    Render the drawing surface.

    Parameters
    ----------
    canvas : StrokeCanvas
        Stroke storage to draw.
    targets : Optional[Sequence[ScreenPoint]], optional
        Calibration targets to overlay.
    progress : Optional[CalibrationProgress], optional
        Progress to display; defaults to the canvas's latest progress.
    screen_size : Tuple[int, int], optional
        Surface (width, height) in pixels. Defaults to (800, 450).
    title : str, optional
        Plot title.
    figsize : Tuple[float, float], optional
        Figure size in inches.
    show : bool, optional
        If True, call plt.show(). Defaults to False.

    Returns
    -------
    Figure
        Matplotlib figure object.

    Raises
    ------
    ValueError
        If screen_size is not positive.
    """
    width, height = screen_size
    if width <= 0 or height <= 0:
        raise ValueError(f"screen_size must be positive. Got {screen_size}.")

    if progress is None:
        progress = canvas.progress

    fig, ax = plt.subplots(figsize=figsize)

    ax.set_xlim(0, width)
    # Screen coordinates grow downward
    ax.set_ylim(height, 0)
    ax.set_aspect("equal")
    ax.set_xlabel("X (pixels)")
    ax.set_ylabel("Y (pixels)")

    if targets:
        current = None
        if progress is not None and not progress.complete:
            current = progress.target_index
        draw_targets(ax, targets, current_index=current)

    draw_strokes(ax, canvas)

    if progress is not None:
        ax.set_title(f"{title}\n{progress.message}")
    else:
        ax.set_title(title)

    fig.tight_layout()

    if show:
        plt.show()

    return fig
