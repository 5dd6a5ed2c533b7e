"""
XSpline Custom Exceptions

Provides specific exception classes for the contract violations that can
occur while editing or evaluating an X-Spline, plus the validation helpers
that raise them.
"""

import math
from typing import Optional, Tuple

import numpy as np


class XSplineError(Exception):
    """Base exception class for all XSpline errors"""

    def __init__(self, message: str, error_code: str = "XS_GENERAL"):
        super().__init__(message)
        self.error_code = error_code
        self.message = message

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class OutOfRangeError(XSplineError, IndexError):
    """Raised when a control point or segment index is outside valid bounds"""

    def __init__(self, message: str, index: int = None,
                 valid_range: Tuple[int, int] = None):
        self.index = index
        self.valid_range = valid_range

        full_message = f"Index out of range: {message}"

        details = []
        if index is not None:
            details.append(f"index={index}")
        if valid_range is not None:
            details.append(f"valid=[{valid_range[0]}, {valid_range[1]}]")

        if details:
            full_message += f" ({', '.join(details)})"

        super().__init__(full_message, "XS_OUT_OF_RANGE")


class InvalidArgumentError(XSplineError, ValueError):
    """Raised when an argument value violates its contract, e.g. tension outside [-1, 1]"""

    def __init__(self, message: str, argument: str = None, value=None):
        self.argument = argument
        self.value = value

        full_message = f"Invalid argument: {message}"

        if argument:
            full_message += f" (argument: {argument}"
            if value is not None:
                full_message += f", value: {value}"
            full_message += ")"

        super().__init__(full_message, "XS_INVALID_ARGUMENT")


class InvalidStateError(XSplineError, RuntimeError):
    """Raised when an evaluation is requested on a spline that can't support it"""

    def __init__(self, message: str, num_control_points: int = None):
        self.num_control_points = num_control_points

        full_message = f"Invalid spline state: {message}"

        if num_control_points is not None:
            full_message += f" (control_points={num_control_points})"

        super().__init__(full_message, "XS_INVALID_STATE")


class VisualizationError(XSplineError):
    """Raised when visualization operations fail"""

    def __init__(self, message: str, plot_type: str = None):
        self.plot_type = plot_type

        if plot_type:
            full_message = f"Visualization failed ({plot_type}): {message}"
        else:
            full_message = f"Visualization failed: {message}"

        super().__init__(full_message, "XS_VISUALIZATION")


# Validation helpers

def validate_tension(tension) -> float:
    """Validate a tension value and return it as a float"""
    try:
        value = float(tension)
    except (TypeError, ValueError):
        raise InvalidArgumentError(
            f"Tension must be a number, got {type(tension).__name__}",
            argument="tension"
        )

    # NaN fails both comparisons, so it's rejected too.
    if not -1.0 <= value <= 1.0:
        raise InvalidArgumentError(
            "Tension must lie in [-1, 1]",
            argument="tension",
            value=value
        )

    return value


def validate_index(idx, size: int, allow_end: bool = False) -> int:
    """Validate a control point index against a sequence of the given size

    Args:
        idx: Index to check
        size: Current number of control points
        allow_end: Whether idx == size is acceptable (insert position)

    Returns:
        The index as an int
    """
    if isinstance(idx, bool) or not isinstance(idx, (int, np.integer)):
        raise OutOfRangeError(
            f"Index must be an integer, got {type(idx).__name__}"
        )

    upper = size if allow_end else size - 1
    if idx < 0 or idx > upper:
        raise OutOfRangeError(
            "Control point index outside the spline",
            index=int(idx),
            valid_range=(0, upper)
        )

    return int(idx)


def validate_position(pos) -> np.ndarray:
    """Validate a 2D position and return it as a float64 array"""
    try:
        arr = np.array(pos, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError):
        raise InvalidArgumentError(
            "Position must be a pair of numbers",
            argument="pos",
            value=pos
        )

    if arr.shape != (2,):
        raise InvalidArgumentError(
            f"Position must have exactly 2 coordinates, got {arr.size}",
            argument="pos"
        )

    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(
            "Position coordinates must be finite",
            argument="pos",
            value=tuple(arr.tolist())
        )

    return arr


def validate_parameter(t, name: str = "t") -> float:
    """Validate a global curve parameter in [0, 1]"""
    try:
        value = float(t)
    except (TypeError, ValueError):
        raise InvalidArgumentError(
            f"Parameter must be a number, got {type(t).__name__}",
            argument=name
        )

    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise InvalidArgumentError(
            "Curve parameter must lie in [0, 1]",
            argument=name,
            value=value
        )

    return value


def validate_evaluable(num_control_points: int, operation: Optional[str] = None):
    """Raise InvalidStateError unless the spline has at least 2 control points"""
    if num_control_points < 2:
        what = operation or "evaluation"
        raise InvalidStateError(
            f"{what} requires at least 2 control points",
            num_control_points=num_control_points
        )


# Export commonly used exceptions for easy import
__all__ = [
    'XSplineError',
    'OutOfRangeError',
    'InvalidArgumentError',
    'InvalidStateError',
    'VisualizationError',
    'validate_tension',
    'validate_index',
    'validate_position',
    'validate_parameter',
    'validate_evaluable',
]
