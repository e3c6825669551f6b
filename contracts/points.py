"""
contracts/points.py

Point data contracts shared by calibration and projection.

Defines:
- SensorPoint: 3D joint position in sensor space (meters)
- ScreenPoint: 2D position on the display surface (pixels)
- Correspondence: ordered (SensorPoint, ScreenPoint) pair captured during calibration

Invariants
----------
- All coordinates must be finite
- Points are immutable once constructed
- Pixel rounding is half away from zero (never Python's half-to-even round)
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, Tuple

import numpy as np

from contracts.validation import validate_finite_scalar, validate_coordinates


def round_half_away_from_zero(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    >>> round_half_away_from_zero(2.5), round_half_away_from_zero(-2.5)
    (3, -3)
    """
    validate_finite_scalar(value, "value")
    magnitude = abs(float(value))
    whole = math.floor(magnitude)
    # Compare the exact fractional part; magnitude + 0.5 can round up
    if magnitude - whole >= 0.5:
        whole += 1
    return int(math.copysign(whole, value))


@dataclass(frozen=True)
class SensorPoint:
    """
    Joint position in sensor space.

    Depth sensors report lateral position in x, height in y and
    distance from the sensor in z.

    Parameters
    ----------
    x : float
        Lateral position in meters.
    y : float
        Height in meters.
    z : float
        Depth (distance from sensor) in meters.

    Examples
    --------
    >>> p = SensorPoint(0.1, 0.4, 2.2)
    >>> p.floor_xz
    (0.1, 2.2)
    """

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        """Validate and normalize to float."""
        for name in ("x", "y", "z"):
            value = getattr(self, name)
            validate_finite_scalar(value, name)
            object.__setattr__(self, name, float(value))

    @classmethod
    def from_sequence(cls, values) -> "SensorPoint":
        """Build from any (x, y, z) sequence or array."""
        x, y, z = validate_coordinates(values, 3, "sensor point")
        return cls(x, y, z)

    @property
    def floor_xz(self) -> Tuple[float, float]:
        """Lateral/depth pair used as calibration plane coordinates."""
        return (self.x, self.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def __repr__(self) -> str:
        return f"SensorPoint(x={self.x:.3f}, y={self.y:.3f}, z={self.z:.3f})"


@dataclass(frozen=True)
class ScreenPoint:
    """
    Position on the display/projection surface in pixels.

    Parameters
    ----------
    x : float
        Horizontal pixel coordinate.
    y : float
        Vertical pixel coordinate (grows downward).
    """

    x: float
    y: float

    def __post_init__(self) -> None:
        """Validate and normalize to float."""
        for name in ("x", "y"):
            value = getattr(self, name)
            validate_finite_scalar(value, name)
            object.__setattr__(self, name, float(value))

    @classmethod
    def from_sequence(cls, values) -> "ScreenPoint":
        """Build from any (x, y) sequence or array."""
        x, y = validate_coordinates(values, 2, "screen point")
        return cls(x, y)

    def rounded(self) -> "ScreenPoint":
        """Nearest integer pixel, ties rounded half away from zero."""
        return ScreenPoint(
            round_half_away_from_zero(self.x),
            round_half_away_from_zero(self.y),
        )

    @property
    def pixel(self) -> Tuple[int, int]:
        """Rounded (x, y) as ints."""
        return (round_half_away_from_zero(self.x), round_half_away_from_zero(self.y))

    def distance_to(self, other: "ScreenPoint") -> float:
        """Euclidean distance to another screen point, in pixels."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}

    def __repr__(self) -> str:
        return f"ScreenPoint(x={self.x:.2f}, y={self.y:.2f})"


@dataclass(frozen=True)
class Correspondence:
    """
    A sensor-space point paired with the screen target it was captured for.

    Parameters
    ----------
    sensor : SensorPoint
        Subject reference position at capture time.
    screen : ScreenPoint
        Calibration target shown on screen at capture time.
    """

    sensor: SensorPoint
    screen: ScreenPoint

    def __post_init__(self) -> None:
        if not isinstance(self.sensor, SensorPoint):
            raise TypeError(f"sensor must be SensorPoint, got {type(self.sensor).__name__}")
        if not isinstance(self.screen, ScreenPoint):
            raise TypeError(f"screen must be ScreenPoint, got {type(self.screen).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        return {"sensor": self.sensor.to_dict(), "screen": self.screen.to_dict()}
