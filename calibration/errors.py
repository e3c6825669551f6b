"""
calibration/errors.py

Error taxonomy of the calibration and projection engine.

CalibrationError
    CalibrationSequenceError      lock-step / ordering violations
        IncompleteCalibrationError  solve requested before the set is complete
    DegenerateCalibrationError    collinear / coincident geometry, singular system
ProjectionError                   input lies on the transform's vanishing line
"""


class CalibrationError(RuntimeError):
    """Base class for calibration failures."""

    pass


class CalibrationSequenceError(CalibrationError):
    """
    Correspondences were added or consumed out of order.

    This is a programming error: the session controller's gating makes it
    unreachable in normal operation.
    """

    pass


class IncompleteCalibrationError(CalibrationSequenceError):
    """calibrate() invoked before the correspondence set is complete."""

    pass


class DegenerateCalibrationError(CalibrationError):
    """
    Correspondence geometry admits no unique transform.

    Raised for collinear or coincident points and for singular systems.
    The only recovery is a fresh correspondence set.
    """

    pass


class ProjectionError(ValueError):
    """Sensor point maps to infinity under the transform."""

    pass
