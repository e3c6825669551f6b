"""
visualization package

Reference rendering sink and matplotlib rendering of the drawing surface.
"""

from visualization.canvas import Stroke, StrokeCanvas
from visualization.render_2d import draw_strokes, draw_targets, render_strokes

__all__ = ["Stroke", "StrokeCanvas", "draw_strokes", "draw_targets", "render_strokes"]
