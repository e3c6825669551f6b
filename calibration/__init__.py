"""
calibration package

Point correspondence collection and sensor-to-screen transform estimation.

Includes the correspondence store, the homography/affine solver, the
settle timer and the interactive session controller.
"""

from calibration.errors import (
    CalibrationError,
    CalibrationSequenceError,
    IncompleteCalibrationError,
    DegenerateCalibrationError,
    ProjectionError,
)
from calibration.solver import (
    Homography,
    CalibrationReport,
    CalibrationSolver,
    MIN_CORRESPONDENCES,
    check_geometry,
    evaluate,
    solve_transform,
)
from calibration.correspondence import CorrespondenceStore
from calibration.config import CalibrationConfig, DEFAULT_TARGETS
from calibration.timer import SettleTimer
from calibration.session import CalibrationSession

__all__ = [
    "CalibrationError",
    "CalibrationSequenceError",
    "IncompleteCalibrationError",
    "DegenerateCalibrationError",
    "ProjectionError",
    "Homography",
    "CalibrationReport",
    "CalibrationSolver",
    "MIN_CORRESPONDENCES",
    "check_geometry",
    "evaluate",
    "solve_transform",
    "CorrespondenceStore",
    "CalibrationConfig",
    "DEFAULT_TARGETS",
    "SettleTimer",
    "CalibrationSession",
]
