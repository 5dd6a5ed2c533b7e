"""
XSpline Blend Functions

Per-segment blending functions of the general X-Spline model:

    Blanc, C., Schlick, C.: X-splines: a spline model designed for the end-user.

A segment is shaped by four control points placed at knots -1, 0, 1, 2; the
segment itself spans the local parameter range [0, 1]. The tensions of the
two segment endpoints decide which blend is active for every weight:

    g(u) = q*u + 2q*u^2 + (10 - 12q - p)*u^3 + (2p + 14q - 15)*u^4 + (6 - 5q - p)*u^5
    h(u) = q*u + 2q*u^2 - 2q*u^4 - q*u^5

Positive tension moves the approximation knots outwards (p grows), negative
tension feeds q and makes the curve pass through the control point.
Everything here is a pure function of (tension1, tension2, u).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

# Knots of the four control points influencing a segment.
KNOTS = (-1.0, 0.0, 1.0, 2.0)


class BlendKind(Enum):
    """Behaviour of the curve near a control point, derived from its tension"""
    INTERPOLATING = "interpolating"    # tension < 0
    CORNER = "corner"                  # tension == 0
    APPROXIMATING = "approximating"    # tension > 0

    @classmethod
    def from_tension(cls, tension: float) -> "BlendKind":
        if tension < 0:
            return cls.INTERPOLATING
        if tension > 0:
            return cls.APPROXIMATING
        return cls.CORNER


class BlendShape(Enum):
    """The two closed-form blending polynomials"""
    G = "g"
    H = "h"


@dataclass(frozen=True)
class TensionDerivedParams:
    """Knot shifts and blend coefficients for one segment

    Attributes:
        T: Shifted knots (T0+, T1+, T2-, T3-) for the four weights
        q: Interpolation strength for the four weights
        p: Approximation strength for the four weights
    """
    T: Tuple[float, float, float, float]
    q: Tuple[float, float, float, float]
    p: Tuple[float, float, float, float]
    kinds: Tuple[BlendKind, BlendKind]

    @classmethod
    def from_tensions(cls, tension1: float, tension2: float) -> "TensionDerivedParams":
        # Tk+ = t(k+1) + s(k+1), Tk- = t(k-1) - s(k-1)
        s1 = max(tension1, 0.0)
        s2 = max(tension2, 0.0)
        T = (KNOTS[1] + s1, KNOTS[2] + s2, KNOTS[1] - s1, KNOTS[2] - s2)

        q1 = -0.5 * min(tension1, 0.0)
        q2 = -0.5 * min(tension2, 0.0)
        q = (q1, q2, q1, q2)

        p = tuple(2.0 * (knot - Tk) * (knot - Tk) for knot, Tk in zip(KNOTS, T))

        kinds = (BlendKind.from_tension(tension1), BlendKind.from_tension(tension2))
        return cls(T=T, q=q, p=p, kinds=kinds)

    def shape(self, k: int, u: float) -> BlendShape:
        """Which blend weight k uses at local parameter u"""
        if k == 0:
            return BlendShape.G if u <= self.T[0] else BlendShape.H
        if k == 3:
            return BlendShape.G if u >= self.T[3] else BlendShape.H
        return BlendShape.G


def _g(q: float, p: float, u: float) -> Tuple[float, float, float]:
    c3 = 10.0 - 12.0 * q - p
    c4 = 2.0 * p + 14.0 * q - 15.0
    c5 = 6.0 - 5.0 * q - p
    u2 = u * u
    u3 = u2 * u
    value = q * u + 2.0 * q * u2 + c3 * u3 + c4 * u2 * u2 + c5 * u3 * u2
    d1 = q + 4.0 * q * u + 3.0 * c3 * u2 + 4.0 * c4 * u3 + 5.0 * c5 * u2 * u2
    d2 = 4.0 * q + 6.0 * c3 * u + 12.0 * c4 * u2 + 20.0 * c5 * u3
    return value, d1, d2


def _h(q: float, u: float) -> Tuple[float, float, float]:
    u2 = u * u
    u3 = u2 * u
    value = q * u + 2.0 * q * u2 - 2.0 * q * u2 * u2 - q * u3 * u2
    d1 = q + 4.0 * q * u - 8.0 * q * u3 - 5.0 * q * u2 * u2
    d2 = 4.0 * q - 24.0 * q * u2 - 20.0 * q * u3
    return value, d1, d2


def blend_function(shape: BlendShape, q: float, p: float, u: float) -> Tuple[float, float, float]:
    """Evaluate a blending polynomial and its first two derivatives at u"""
    if shape is BlendShape.G:
        return _g(q, p, u)
    return _h(q, u)


def blend_weights_and_derivatives(params: TensionDerivedParams,
                                  u: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Raw (unnormalised) blend weights of a segment at local parameter u

    Args:
        params: Tension derived parameters of the segment
        u: Local parameter in [0, 1]

    Returns:
        (A, dA, ddA): the four weights and their first and second
        derivatives with respect to u
    """
    A = np.empty(4)
    dA = np.empty(4)
    ddA = np.empty(4)

    for k in range(4):
        Tk = params.T[k]
        # Argument of the blend: (u - Tk) / (knot - Tk), linear in u.
        ta = 1.0 / (KNOTS[k] - Tk)
        arg = (u - Tk) * ta
        value, d1, d2 = blend_function(params.shape(k, u), params.q[k], params.p[k], arg)
        A[k] = value
        dA[k] = d1 * ta
        ddA[k] = d2 * ta * ta

    return A, dA, ddA


def blend_weights(tension1: float, tension2: float, u: float) -> np.ndarray:
    """Normalised blend weights of a segment with the given endpoint tensions"""
    A, _, _ = blend_weights_and_derivatives(
        TensionDerivedParams.from_tensions(tension1, tension2), u
    )
    return A / A.sum()
