"""
calibration/config.py

Calibration session configuration.

The calibration target list and settle duration are configuration, not
inline constants. The defaults reproduce the reference setup: the four
corners of a 400x400 rectangle visited clockwise from top-left, with a
5 second settle before each capture.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from calibration.errors import DegenerateCalibrationError
from calibration.solver import MIN_CORRESPONDENCES, check_geometry
from contracts.compat import screen_points_to_array
from contracts.points import ScreenPoint
from contracts.validation import (
    ValidationError,
    validate_finite_scalar,
    validate_positive,
)

DEFAULT_TARGETS: Tuple[ScreenPoint, ...] = (
    ScreenPoint(200, 25),  # top-left
    ScreenPoint(600, 25),  # top-right
    ScreenPoint(600, 425),  # bottom-right
    ScreenPoint(200, 425),  # bottom-left
)


@dataclass(frozen=True)
class CalibrationConfig:
    """
    Calibration session parameters.

    Parameters
    ----------
    targets : Tuple[ScreenPoint, ...]
        Ordered calibration targets; one correspondence is captured per
        target. At least three are required, with no two coincident and
        (for up to four targets) no three collinear.
    settle_seconds : float
        Time a subject must hold position before a capture.
    stall_warning_seconds : float
        Time in READY_TO_CAPTURE without a tracked subject before a warning
        is logged. The session keeps waiting regardless.
    collinearity_tolerance : float
        Relative tolerance for degenerate geometry detection.
    refine_iterations : int
        Gauss-Newton iterations when more than four targets are used.
    """

    targets: Tuple[ScreenPoint, ...] = DEFAULT_TARGETS
    settle_seconds: float = 5.0
    stall_warning_seconds: float = 30.0
    collinearity_tolerance: float = 1e-6
    refine_iterations: int = 20

    def __post_init__(self) -> None:
        """Validate and normalize targets."""
        targets = tuple(
            t if isinstance(t, ScreenPoint) else ScreenPoint.from_sequence(t)
            for t in self.targets
        )
        if len(targets) < MIN_CORRESPONDENCES:
            raise ValidationError(
                f"at least {MIN_CORRESPONDENCES} calibration targets required, "
                f"got {len(targets)}"
            )
        object.__setattr__(self, "targets", targets)

        validate_finite_scalar(self.settle_seconds, "settle_seconds")
        validate_positive(self.settle_seconds, "settle_seconds", allow_zero=True)
        validate_finite_scalar(self.stall_warning_seconds, "stall_warning_seconds")
        validate_positive(self.stall_warning_seconds, "stall_warning_seconds")
        validate_positive(self.collinearity_tolerance, "collinearity_tolerance")

        try:
            check_geometry(screen_points_to_array(targets), "target", self.collinearity_tolerance)
        except DegenerateCalibrationError as e:
            raise ValidationError(f"calibration targets are degenerate: {e}") from e

        if not isinstance(self.refine_iterations, int) or self.refine_iterations < 0:
            raise ValidationError(
                f"refine_iterations must be non-negative int, got {self.refine_iterations}"
            )

    @property
    def required_count(self) -> int:
        """One correspondence per target."""
        return len(self.targets)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalibrationConfig":
        kwargs = dict(data)
        if "targets" in kwargs:
            kwargs["targets"] = tuple(ScreenPoint.from_sequence(t) for t in kwargs["targets"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targets": [[t.x, t.y] for t in self.targets],
            "settle_seconds": self.settle_seconds,
            "stall_warning_seconds": self.stall_warning_seconds,
            "collinearity_tolerance": self.collinearity_tolerance,
            "refine_iterations": self.refine_iterations,
        }
