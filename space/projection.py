"""
projection.py

Projection Function: sensor-space positions to screen pixels.

A pure function of an immutable transform and the input point. Only the
(x, z) components of a sensor point are used; height is ignored. Safe to
call from several frames or subjects at once because the transform never
changes after calibration.

Rounding policy for downstream consumers: nearest integer pixel, ties half
away from zero (2.5 -> 3, -2.5 -> -3). Python's built-in round() rounds
half to even and is not used.
"""

from typing import Iterable, Protocol, Tuple, runtime_checkable

import numpy as np

from calibration.errors import ProjectionError
from contracts.compat import sensor_points_to_xz
from contracts.points import ScreenPoint, SensorPoint, round_half_away_from_zero


@runtime_checkable
class TransformProtocol(Protocol):
    """
    Protocol for a solved sensor-plane to screen transform.

    Must map an (N, 2) array of sensor (x, z) to an (N, 2) array of
    screen (x, y), raising ProjectionError for points at infinity.
    """

    def map_xz(self, xz: np.ndarray) -> np.ndarray:
        ...


def project(transform: TransformProtocol, point: SensorPoint) -> ScreenPoint:
    """
    Project a sensor point to the screen.

    Parameters
    ----------
    transform : TransformProtocol
        Solved calibration transform.
    point : SensorPoint
        Live sensor-space position.

    Returns
    -------
    ScreenPoint
        Unrounded screen position.

    Raises
    ------
    ProjectionError
        If the point lies on the transform's vanishing line.
    """
    u, v = transform.map_xz(np.array(point.floor_xz, dtype=np.float64))
    return ScreenPoint(float(u), float(v))


def project_pixel(transform: TransformProtocol, point: SensorPoint) -> Tuple[int, int]:
    """Project and round to the nearest integer pixel, ties away from zero."""
    return project(transform, point).pixel


def round_pixels(points: np.ndarray) -> np.ndarray:
    """Vectorized half-away-from-zero rounding of screen coordinates."""
    points = np.asarray(points, dtype=np.float64)
    magnitude = np.abs(points)
    whole = np.floor(magnitude)
    whole += (magnitude - whole) >= 0.5
    return (np.sign(points) * whole).astype(np.int64)


class Projector:
    """
    Per-frame projection bound to one calibration transform.

    Parameters
    ----------
    transform : TransformProtocol
        Solved transform, typically a calibration.Homography.
    """

    def __init__(self, transform: TransformProtocol) -> None:
        if not isinstance(transform, TransformProtocol):
            raise TypeError(
                f"transform must provide map_xz(), got {type(transform).__name__}"
            )
        self._transform = transform

    @property
    def transform(self) -> TransformProtocol:
        return self._transform

    def project(self, point: SensorPoint) -> ScreenPoint:
        """Unrounded screen position of a sensor point."""
        return project(self._transform, point)

    def project_pixel(self, point: SensorPoint) -> Tuple[int, int]:
        """Integer pixel of a sensor point."""
        return project_pixel(self._transform, point)

    def project_rounded(self, point: SensorPoint) -> ScreenPoint:
        """Screen point snapped to the integer pixel grid."""
        return self.project(point).rounded()

    def project_many(self, points: Iterable[SensorPoint]) -> np.ndarray:
        """
        Project several sensor points at once.

        Returns
        -------
        np.ndarray
            Shape (N, 2) unrounded screen coordinates.
        """
        xz = sensor_points_to_xz(list(points))
        if len(xz) == 0:
            return np.zeros((0, 2), dtype=np.float64)
        return np.atleast_2d(self._transform.map_xz(xz))


__all__ = [
    "ProjectionError",
    "TransformProtocol",
    "Projector",
    "project",
    "project_pixel",
    "round_pixels",
    "round_half_away_from_zero",
]
