"""
contracts/validation.py

Lightweight validation utilities for contract enforcement.

Provides scalar, coordinate and array checks used by the point, skeleton
and configuration contracts. All validators raise ValidationError on failure.

Usage
-----
>>> from contracts.validation import validate_finite_scalar, validate_positive
>>> validate_finite_scalar(1.5, "x")
>>> validate_positive(5.0, "settle_seconds")
"""

import math
from typing import Tuple, Sequence, Any

import numpy as np


class ValidationError(ValueError):
    """
    Raised when a contract validation fails.

    Subclass of ValueError for compatibility with existing error handling.
    """

    pass


def validate_finite_scalar(
    value: float,
    name: str = "value",
) -> None:
    """
    Validate that a scalar value is finite.

    Parameters
    ----------
    value : float
        Value to validate.
    name : str
        Name for error messages.

    Raises
    ------
    ValidationError
        If value is inf or nan.
    TypeError
        If value is not numeric.
    """
    if isinstance(value, bool):
        raise TypeError(f"{name} must be numeric, got bool")

    try:
        float_val = float(value)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{name} must be numeric, got {type(value).__name__}") from e

    if not math.isfinite(float_val):
        raise ValidationError(f"{name} must be finite, got {value}")


def validate_coordinates(
    values: Sequence[float],
    expected_len: int,
    name: str = "coordinates",
) -> Tuple[float, ...]:
    """
    Validate a fixed-length coordinate sequence and return it as floats.

    Parameters
    ----------
    values : Sequence[float]
        Coordinate sequence, e.g. (x, y) or (x, y, z).
    expected_len : int
        Required number of components.
    name : str
        Name for error messages.

    Returns
    -------
    Tuple[float, ...]
        The coordinates converted to float.

    Raises
    ------
    ValidationError
        If the length is wrong or any component is non-finite.
    TypeError
        If values is not a sequence of numbers.
    """
    try:
        n = len(values)
    except TypeError as e:
        raise TypeError(f"{name} must be a sequence, got {type(values).__name__}") from e

    if n != expected_len:
        raise ValidationError(f"{name} must have {expected_len} elements, got {n}")

    for i, v in enumerate(values):
        validate_finite_scalar(v, f"{name}[{i}]")

    return tuple(float(v) for v in values)


def validate_positive(
    value: float,
    name: str = "value",
    allow_zero: bool = False,
) -> None:
    """
    Validate that a value is positive.

    Parameters
    ----------
    value : float
        Value to validate.
    name : str
        Name for error messages.
    allow_zero : bool
        If True, zero is acceptable.

    Raises
    ------
    ValidationError
        If value is not positive (or non-negative if allow_zero).
    """
    if allow_zero:
        if value < 0:
            raise ValidationError(f"{name} must be non-negative, got {value}")
    else:
        if value <= 0:
            raise ValidationError(f"{name} must be positive, got {value}")


def validate_non_negative_int(
    value: Any,
    name: str = "value",
) -> None:
    """
    Validate that a value is a non-negative int (bool excluded).

    Raises
    ------
    ValidationError
        If value is not a non-negative int.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be non-negative int, got {value!r}")


def validate_points_array(
    array: np.ndarray,
    n_cols: int,
    name: str = "points",
) -> None:
    """
    Validate an (N, n_cols) array of finite point coordinates.

    Parameters
    ----------
    array : np.ndarray
        Array to validate.
    n_cols : int
        Required number of columns.
    name : str
        Name for error messages.

    Raises
    ------
    ValidationError
        If shape is wrong or any element is inf or nan.
    TypeError
        If array is not a numpy array.
    """
    if not isinstance(array, np.ndarray):
        raise TypeError(f"{name} must be a numpy ndarray, got {type(array).__name__}")

    if array.ndim != 2 or array.shape[1] != n_cols:
        raise ValidationError(
            f"{name} must have shape (N, {n_cols}), got {array.shape}"
        )

    if not np.all(np.isfinite(array)):
        n_inf = int(np.sum(np.isinf(array)))
        n_nan = int(np.sum(np.isnan(array)))
        raise ValidationError(
            f"{name} contains non-finite values: {n_inf} inf, {n_nan} nan"
        )
