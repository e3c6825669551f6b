"""
scenarios.py

Ready-made scripted sessions for demos and integration tests.

The default floor rectangle spans x in [-1, 1] m and depth z in [1.5, 3.0] m
in front of the sensor; far corners map to the top of the screen.
"""

from typing import List, Sequence, Tuple

import numpy as np

from world.subjects import ScriptedSubject, Segment
from world.world import World

# Sensor-space corners matching the default calibration targets
# (top-left, top-right, bottom-right, bottom-left).
DEFAULT_FLOOR_CORNERS: Tuple[Tuple[float, float, float], ...] = (
    (-1.0, 0.0, 3.0),
    (1.0, 0.0, 3.0),
    (1.0, 0.0, 1.5),
    (-1.0, 0.0, 1.5),
)


def calibration_segments(
    corners: Sequence[Tuple[float, float, float]] = DEFAULT_FLOOR_CORNERS,
    settle_seconds: float = 5.0,
    frame_interval: float = 1.0 / 30.0,
) -> List[Segment]:
    """
    Stand at each corner long enough for one capture.

    Captures happen roughly every ``settle_seconds``, and at least one frame
    apart; each hold is centered on its expected capture time so frame
    quantization cannot shift a capture to the wrong corner.
    """
    hold = max(settle_seconds, frame_interval)
    segments = [Segment(position=corners[0], duration=1.5 * hold)]
    for corner in corners[1:]:
        segments.append(Segment(position=corner, duration=hold))
    return segments


def paint_sweep(
    position: Tuple[float, float, float],
    dx_range: Tuple[float, float] = (-0.4, 0.4),
    steps: int = 10,
    step_duration: float = 0.2,
) -> List[Segment]:
    """Hold the paint pose while sweeping the dominant hand sideways."""
    return [
        Segment(position=position, duration=step_duration, pose="paint", hand_offset=(dx, 0.0))
        for dx in np.linspace(dx_range[0], dx_range[1], steps)
    ]


def two_subject_session(
    settle_seconds: float = 5.0,
    frame_interval: float = 1.0 / 30.0,
) -> Tuple[World, float]:
    """
    Build a world where subject 1 calibrates, then both subjects draw.

    Subject 1 calibrates, paints a sweep and rests. Subject 2 enters after
    calibration, paints its own sweep, erases it and leaves.

    Returns
    -------
    Tuple[World, float]
        The world and the scripted session length in seconds.
    """
    calib = calibration_segments(settle_seconds=settle_seconds, frame_interval=frame_interval)
    calib_time = sum(s.duration for s in calib)

    first = ScriptedSubject(
        tracking_id=1,
        segments=calib
        + [Segment(position=(0.0, 0.0, 2.25), duration=0.5)]
        + paint_sweep((0.0, 0.0, 2.25))
        + [Segment(position=(0.0, 0.0, 2.25), duration=5.0)],
    )
    second = ScriptedSubject(
        tracking_id=2,
        segments=[Segment(position=(0.5, 0.0, 2.0), duration=calib_time + 1.0, pose="absent")]
        + paint_sweep((0.5, 0.0, 2.0), dx_range=(-0.2, 0.2), steps=5)
        + [
            Segment(position=(0.5, 0.0, 2.0), duration=0.3),
            Segment(position=(0.5, 0.0, 2.0), duration=0.2, pose="erase"),
            Segment(position=(0.5, 0.0, 2.0), duration=5.0, pose="absent"),
        ],
    )

    world = World()
    world.add_subject(first)
    world.add_subject(second)
    return world, calib_time + 5.0
