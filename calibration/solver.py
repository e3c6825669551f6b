"""
calibration/solver.py

Sensor-to-screen transform estimation.

Subjects move in a roughly planar region in front of the sensor, so the
mapping is a plane-to-plane transform from the sensor (x, z) plane (lateral
position, depth) to screen (x, y). Sensor height (y) is not used.

Policy by correspondence count N:
- N == 3: exact affine transform (6 DOF)
- N == 4: exact homography (8 DOF), unique for non-degenerate input
- N > 4: least-squares homography (normalized DLT, refined with Gauss-Newton
  on the total squared reprojection error)

The solver is deterministic: identical input yields an identical matrix.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Any, Optional, Sequence, Tuple

import numpy as np

from calibration.errors import (
    DegenerateCalibrationError,
    IncompleteCalibrationError,
    ProjectionError,
)
from contracts.compat import screen_points_to_array, sensor_points_to_xz
from contracts.points import Correspondence, ScreenPoint, SensorPoint
from contracts.validation import ValidationError, validate_points_array, validate_positive

logger = logging.getLogger(__name__)

MIN_CORRESPONDENCES = 3

# Homogeneous scale below which a point is treated as mapped to infinity.
_W_EPS = 1e-12

# Relative singular-value floor for the normalized DLT system.
_RANK_EPS = 1e-10


def _immutable_matrix(matrix: np.ndarray) -> np.ndarray:
    copy = np.array(matrix, dtype=np.float64, copy=True)
    copy.flags.writeable = False
    return copy


@dataclass(frozen=True, eq=False)
class Homography:
    """
    Immutable plane-to-plane transform from sensor (x, z) to screen (x, y).

    Parameters
    ----------
    matrix : np.ndarray
        3x3 projective matrix acting on homogeneous (x, z, 1).
    method : str
        How the matrix was estimated: "affine", "exact" or "least_squares".
    n_points : int
        Number of correspondences it was estimated from.

    Examples
    --------
    >>> h = Homography(np.eye(3))
    >>> h.apply(SensorPoint(1.0, 0.5, 2.0))
    ScreenPoint(x=1.00, y=2.00)
    """

    matrix: np.ndarray
    method: str = "exact"
    n_points: int = 4

    def __post_init__(self) -> None:
        """Validate and freeze the matrix."""
        if not isinstance(self.matrix, np.ndarray):
            raise TypeError(f"matrix must be ndarray, got {type(self.matrix).__name__}")
        if self.matrix.shape != (3, 3):
            raise ValidationError(f"matrix must be 3x3, got shape {self.matrix.shape}")
        if not np.all(np.isfinite(self.matrix)):
            raise ValidationError("matrix contains non-finite values")
        object.__setattr__(self, "matrix", _immutable_matrix(self.matrix))

    def map_xz(self, xz: np.ndarray) -> np.ndarray:
        """
        Map calibration-plane coordinates to screen coordinates.

        Parameters
        ----------
        xz : np.ndarray
            Shape (2,) or (N, 2): sensor (x, z) pairs.

        Returns
        -------
        np.ndarray
            Screen (x, y), same leading shape as the input.

        Raises
        ------
        ProjectionError
            If any point lies on the transform's vanishing line.
        """
        pts = np.asarray(xz, dtype=np.float64)
        single = pts.ndim == 1
        pts = np.atleast_2d(pts)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValidationError(f"xz must have shape (2,) or (N, 2), got {pts.shape}")

        homog = np.column_stack([pts, np.ones(len(pts))]) @ self.matrix.T
        w = homog[:, 2]
        if np.any(np.abs(w) < _W_EPS):
            bad = int(np.argmax(np.abs(w) < _W_EPS))
            raise ProjectionError(
                f"point {tuple(pts[bad])} lies on the vanishing line of the transform"
            )

        out = homog[:, :2] / w[:, None]
        return out[0] if single else out

    def apply(self, point: SensorPoint) -> ScreenPoint:
        """Project one sensor point (height ignored)."""
        u, v = self.map_xz(np.array(point.floor_xz, dtype=np.float64))
        return ScreenPoint(u, v)

    @property
    def is_affine(self) -> bool:
        """True when the projective row is (0, 0, 1)."""
        return bool(np.allclose(self.matrix[2, :2], 0.0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matrix": self.matrix.tolist(),
            "method": self.method,
            "n_points": self.n_points,
        }

    def __repr__(self) -> str:
        return f"Homography(method={self.method!r}, n_points={self.n_points})"


@dataclass(frozen=True)
class CalibrationReport:
    """
    Reprojection accuracy of a transform over its correspondences.

    Parameters
    ----------
    errors : Tuple[float, ...]
        Per-correspondence distance in pixels between the projected sensor
        point and its screen target, in capture order.
    """

    errors: Tuple[float, ...]

    @property
    def rms(self) -> float:
        """Root-mean-square reprojection error in pixels."""
        if not self.errors:
            return 0.0
        return float(np.sqrt(np.mean(np.square(self.errors))))

    @property
    def max_error(self) -> float:
        """Worst reprojection error in pixels."""
        return float(max(self.errors)) if self.errors else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": list(self.errors), "rms": self.rms, "max_error": self.max_error}


def evaluate(transform: Homography, correspondences: Sequence[Correspondence]) -> CalibrationReport:
    """Measure reprojection error of a transform on correspondences."""
    src = sensor_points_to_xz([c.sensor for c in correspondences])
    dst = screen_points_to_array([c.screen for c in correspondences])
    if len(src) == 0:
        return CalibrationReport(errors=())
    projected = transform.map_xz(src)
    errors = np.linalg.norm(projected - dst, axis=1)
    return CalibrationReport(errors=tuple(float(e) for e in errors))


def check_geometry(points: np.ndarray, name: str, tolerance: float) -> None:
    """
    Reject point sets that cannot define a unique transform.

    For up to four points, any coincident pair or collinear triple is
    degenerate. For more points, only a fully collinear set is rejected.
    Distances and areas are compared relative to the set's extent.

    Raises
    ------
    DegenerateCalibrationError
        If the configuration is degenerate.
    """
    n = len(points)
    scale = float(np.max(np.ptp(points, axis=0)))
    if scale <= 0.0:
        raise DegenerateCalibrationError(f"all {name} points coincide")

    if n <= 4:
        for i, j in combinations(range(n), 2):
            if np.linalg.norm(points[i] - points[j]) <= tolerance * scale:
                raise DegenerateCalibrationError(f"{name} points {i} and {j} coincide")

        for i, j, k in combinations(range(n), 3):
            a, b, c = points[i], points[j], points[k]
            cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
            if abs(cross) <= tolerance * scale * scale:
                raise DegenerateCalibrationError(
                    f"{name} points {i}, {j} and {k} are collinear"
                )
    else:
        centered = points - points.mean(axis=0)
        s = np.linalg.svd(centered, compute_uv=False)
        if s[1] <= tolerance * s[0]:
            raise DegenerateCalibrationError(f"all {name} points are collinear")


def _normalization_matrix(points: np.ndarray) -> np.ndarray:
    """Similarity moving the centroid to the origin with mean distance sqrt(2)."""
    centroid = points.mean(axis=0)
    mean_dist = float(np.mean(np.linalg.norm(points - centroid, axis=1)))
    if mean_dist <= 0.0:
        raise DegenerateCalibrationError("all points coincide")
    s = np.sqrt(2.0) / mean_dist
    return np.array(
        [
            [s, 0.0, -s * centroid[0]],
            [0.0, s, -s * centroid[1]],
            [0.0, 0.0, 1.0],
        ]
    )


def _transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    homog = np.column_stack([points, np.ones(len(points))]) @ matrix.T
    return homog[:, :2] / homog[:, 2:3]


def _dlt(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Direct linear transform: null vector of the 2N x 9 system."""
    n = len(src)
    a = np.zeros((2 * n, 9))
    for i, ((x, z), (u, v)) in enumerate(zip(src, dst)):
        a[2 * i] = [x, z, 1.0, 0.0, 0.0, 0.0, -u * x, -u * z, -u]
        a[2 * i + 1] = [0.0, 0.0, 0.0, x, z, 1.0, -v * x, -v * z, -v]

    _, s, vt = np.linalg.svd(a)
    # Rank 8 is required for a unique (up to scale) solution.
    if s[7] <= _RANK_EPS * s[0]:
        raise DegenerateCalibrationError("calibration system is singular")
    return vt[-1].reshape(3, 3)


def _residuals(
    h8: np.ndarray, src: np.ndarray, dst: np.ndarray
) -> Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]]:
    """Reprojection residuals for h33 = 1, or None if a point hits infinity."""
    h = np.append(h8, 1.0).reshape(3, 3)
    homog = np.column_stack([src, np.ones(len(src))]) @ h.T
    w = homog[:, 2]
    if np.any(np.abs(w) < _W_EPS):
        return None
    proj = homog[:, :2] / w[:, None]
    return (proj - dst).ravel(), proj, w


def _refine(
    h_norm: np.ndarray,
    src: np.ndarray,
    dst: np.ndarray,
    iterations: int,
) -> np.ndarray:
    """Gauss-Newton refinement of total squared reprojection error."""
    if abs(h_norm[2, 2]) < 1e-8:
        return h_norm

    h = (h_norm / h_norm[2, 2]).ravel()[:8]
    current = _residuals(h, src, dst)
    if current is None:
        return h_norm
    r, proj, w = current
    cost = float(r @ r)

    x, z = src[:, 0], src[:, 1]
    for _ in range(iterations):
        jac = np.zeros((2 * len(src), 8))
        jac[0::2, 0] = x / w
        jac[0::2, 1] = z / w
        jac[0::2, 2] = 1.0 / w
        jac[1::2, 3] = x / w
        jac[1::2, 4] = z / w
        jac[1::2, 5] = 1.0 / w
        jac[0::2, 6] = -proj[:, 0] * x / w
        jac[0::2, 7] = -proj[:, 0] * z / w
        jac[1::2, 6] = -proj[:, 1] * x / w
        jac[1::2, 7] = -proj[:, 1] * z / w

        step = np.linalg.lstsq(jac, -r, rcond=None)[0]

        accepted = None
        t = 1.0
        for _ in range(8):
            candidate = h + t * step
            trial = _residuals(candidate, src, dst)
            if trial is not None and float(trial[0] @ trial[0]) < cost:
                accepted = candidate, trial
                break
            t *= 0.5

        if accepted is None:
            break

        h, (r, proj, w) = accepted
        new_cost = float(r @ r)
        converged = cost - new_cost <= 1e-15 * (1.0 + cost)
        cost = new_cost
        if converged:
            break

    return np.append(h, 1.0).reshape(3, 3)


def _solve_affine(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    m = np.column_stack([src, np.ones(len(src))])
    try:
        coeffs = np.linalg.solve(m, dst)
    except np.linalg.LinAlgError as e:
        raise DegenerateCalibrationError("calibration system is singular") from e
    return np.vstack([coeffs.T, [0.0, 0.0, 1.0]])


def _canonical_scale(h: np.ndarray) -> np.ndarray:
    """Fix the projective scale: h33 = 1 where possible, else unit norm."""
    if abs(h[2, 2]) > 1e-12:
        return h / h[2, 2]
    h = h / np.linalg.norm(h)
    flat = h.ravel()
    return h if flat[np.argmax(np.abs(flat))] > 0 else -h


def solve_transform(
    sensor_xz: np.ndarray,
    screen_xy: np.ndarray,
    collinearity_tolerance: float = 1e-6,
    refine_iterations: int = 20,
) -> Tuple[np.ndarray, str]:
    """
    Estimate the sensor-plane to screen matrix from point arrays.

    Parameters
    ----------
    sensor_xz : np.ndarray
        Shape (N, 2), sensor (x, z) per correspondence.
    screen_xy : np.ndarray
        Shape (N, 2), screen (x, y) per correspondence.
    collinearity_tolerance : float
        Relative tolerance for coincident / collinear detection.
    refine_iterations : int
        Gauss-Newton iterations for N > 4 (0 disables refinement).

    Returns
    -------
    Tuple[np.ndarray, str]
        3x3 matrix and the method used.

    Raises
    ------
    ValidationError
        If either array is not a finite (N, 2) array, or their shapes differ.
    IncompleteCalibrationError
        If fewer than three correspondences are given.
    DegenerateCalibrationError
        If the geometry admits no unique transform.
    """
    validate_points_array(sensor_xz, 2, "sensor_xz")
    validate_points_array(screen_xy, 2, "screen_xy")
    if sensor_xz.shape != screen_xy.shape:
        raise ValidationError(
            f"sensor shape {sensor_xz.shape} does not match screen shape {screen_xy.shape}"
        )
    n = len(sensor_xz)
    if n < MIN_CORRESPONDENCES:
        raise IncompleteCalibrationError(
            f"at least {MIN_CORRESPONDENCES} correspondences required, got {n}"
        )

    check_geometry(sensor_xz, "sensor", collinearity_tolerance)
    check_geometry(screen_xy, "screen", collinearity_tolerance)

    if n == 3:
        return _solve_affine(sensor_xz, screen_xy), "affine"

    t_src = _normalization_matrix(sensor_xz)
    t_dst = _normalization_matrix(screen_xy)
    src_n = _transform_points(t_src, sensor_xz)
    dst_n = _transform_points(t_dst, screen_xy)

    h_norm = _dlt(src_n, dst_n)
    method = "exact"
    if n > 4:
        method = "least_squares"
        if refine_iterations > 0:
            h_norm = _refine(h_norm, src_n, dst_n, refine_iterations)

    h = np.linalg.inv(t_dst) @ h_norm @ t_src
    h = _canonical_scale(h)
    if abs(np.linalg.det(h / np.linalg.norm(h))) < 1e-12:
        raise DegenerateCalibrationError("estimated transform is singular")
    return h, method


class CalibrationSolver:
    """
    Derives the sensor-to-screen transform from an ordered correspondence set.

    Parameters
    ----------
    collinearity_tolerance : float
        Relative tolerance for coincident / collinear detection.
    refine_iterations : int
        Gauss-Newton iterations used when more than four correspondences
        are given.
    """

    def __init__(
        self,
        collinearity_tolerance: float = 1e-6,
        refine_iterations: int = 20,
    ) -> None:
        validate_positive(collinearity_tolerance, "collinearity_tolerance")
        if refine_iterations < 0:
            raise ValidationError(
                f"refine_iterations must be non-negative, got {refine_iterations}"
            )
        self._tolerance = collinearity_tolerance
        self._refine_iterations = refine_iterations
        self._last_report: Optional[CalibrationReport] = None

    @property
    def last_report(self) -> Optional[CalibrationReport]:
        """Accuracy report of the most recent successful solve."""
        return self._last_report

    def solve(self, correspondences: Sequence[Correspondence]) -> Homography:
        """
        Compute the transform for the given correspondences.

        Raises
        ------
        IncompleteCalibrationError
            If fewer than three correspondences are given.
        DegenerateCalibrationError
            If the geometry admits no unique transform.
        """
        sensor_xz = sensor_points_to_xz([c.sensor for c in correspondences])
        screen_xy = screen_points_to_array([c.screen for c in correspondences])

        matrix, method = solve_transform(
            sensor_xz,
            screen_xy,
            collinearity_tolerance=self._tolerance,
            refine_iterations=self._refine_iterations,
        )
        transform = Homography(matrix=matrix, method=method, n_points=len(correspondences))

        report = evaluate(transform, correspondences)
        self._last_report = report
        logger.info(
            "Solved %s transform from %d correspondences (rms %.4f px, max %.4f px)",
            method,
            len(correspondences),
            report.rms,
            report.max_error,
        )
        return transform
