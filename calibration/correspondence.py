"""
calibration/correspondence.py

Point Correspondence Store.

Holds the ordered sensor-space and screen-space sequences captured during a
calibration session. The two sequences advance in lock-step: each capture
cycle appends one sensor point and then the screen target it was captured
for. The store is write-once; a new calibration needs a new store.
"""

import logging
from typing import List, Optional, Tuple

from calibration.errors import CalibrationSequenceError, IncompleteCalibrationError
from calibration.solver import MIN_CORRESPONDENCES, CalibrationSolver, Homography
from contracts.events import CalibrationState
from contracts.points import Correspondence, ScreenPoint, SensorPoint

logger = logging.getLogger(__name__)


class CorrespondenceStore:
    """
    Ordered, lock-step store of calibration correspondences.

    Parameters
    ----------
    required_count : int
        Number of correspondences needed before calibration. Must be >= 3.
    solver : CalibrationSolver, optional
        Solver used by calibrate(). Defaults to a CalibrationSolver with
        default tolerances.

    Attributes
    ----------
    state : CalibrationState
        COLLECTING until calibrate() succeeds, then COMPLETE.
    transform : Homography or None
        The solved transform once COMPLETE.

    Examples
    --------
    >>> store = CorrespondenceStore(required_count=4)
    >>> store.add_sensor_point(SensorPoint(0.0, 0.0, 2.0))
    >>> store.add_screen_point(ScreenPoint(200, 25))
    >>> len(store), store.is_complete()
    (1, False)
    """

    def __init__(
        self,
        required_count: int = 4,
        solver: Optional[CalibrationSolver] = None,
    ) -> None:
        if isinstance(required_count, bool) or not isinstance(required_count, int):
            raise TypeError(f"required_count must be int, got {type(required_count).__name__}")
        if required_count < MIN_CORRESPONDENCES:
            raise ValueError(
                f"required_count must be >= {MIN_CORRESPONDENCES}, got {required_count}"
            )

        self._required_count = required_count
        self._solver = solver if solver is not None else CalibrationSolver()
        self._sensor_points: List[SensorPoint] = []
        self._screen_points: List[ScreenPoint] = []
        self._state = CalibrationState.COLLECTING
        self._transform: Optional[Homography] = None

    @property
    def required_count(self) -> int:
        """Correspondences needed before calibration."""
        return self._required_count

    @property
    def state(self) -> CalibrationState:
        return self._state

    @property
    def transform(self) -> Optional[Homography]:
        return self._transform

    @property
    def sensor_points(self) -> Tuple[SensorPoint, ...]:
        return tuple(self._sensor_points)

    @property
    def screen_points(self) -> Tuple[ScreenPoint, ...]:
        return tuple(self._screen_points)

    def __len__(self) -> int:
        """Number of complete (sensor, screen) pairs."""
        return len(self._screen_points)

    def add_sensor_point(self, point: SensorPoint) -> None:
        """
        Append the sensor point of a new capture cycle.

        Raises
        ------
        CalibrationSequenceError
            If the previous cycle has no screen point yet, or the store is full.
        """
        if not isinstance(point, SensorPoint):
            raise TypeError(f"point must be SensorPoint, got {type(point).__name__}")
        if len(self._sensor_points) != len(self._screen_points):
            raise CalibrationSequenceError(
                "sensor point added twice without a matching screen point"
            )
        if len(self._sensor_points) >= self._required_count:
            raise CalibrationSequenceError(
                f"store already holds {self._required_count} correspondences"
            )
        self._sensor_points.append(point)

    def add_screen_point(self, point: ScreenPoint) -> None:
        """
        Append the screen target of the current capture cycle.

        Raises
        ------
        CalibrationSequenceError
            If no sensor point is waiting for its screen point.
        """
        if not isinstance(point, ScreenPoint):
            raise TypeError(f"point must be ScreenPoint, got {type(point).__name__}")
        if len(self._sensor_points) != len(self._screen_points) + 1:
            raise CalibrationSequenceError(
                "screen point added without a preceding sensor point"
            )
        self._screen_points.append(point)
        logger.debug(
            "Correspondence %d/%d: %r -> %r",
            len(self._screen_points),
            self._required_count,
            self._sensor_points[-1],
            point,
        )

    def add(self, correspondence: Correspondence) -> None:
        """Append a full capture cycle."""
        self.add_sensor_point(correspondence.sensor)
        self.add_screen_point(correspondence.screen)

    def is_complete(self) -> bool:
        """True exactly when both sequences hold required_count points."""
        return (
            len(self._sensor_points) == self._required_count
            and len(self._screen_points) == self._required_count
        )

    def correspondences(self) -> Tuple[Correspondence, ...]:
        """Complete pairs in capture order."""
        return tuple(
            Correspondence(sensor=s, screen=p)
            for s, p in zip(self._sensor_points, self._screen_points)
        )

    def calibrate(self) -> Homography:
        """
        Solve the transform from the complete correspondence set.

        On success the state becomes COMPLETE. Repeating the call recomputes
        the same transform.

        Raises
        ------
        IncompleteCalibrationError
            If the store is not complete.
        DegenerateCalibrationError
            If the geometry is degenerate; the state stays COLLECTING.
        """
        if not self.is_complete():
            raise IncompleteCalibrationError(
                f"calibrate() needs {self._required_count} correspondences, "
                f"have {len(self)}"
            )

        transform = self._solver.solve(self.correspondences())
        self._transform = transform
        self._state = CalibrationState.COMPLETE
        return transform
