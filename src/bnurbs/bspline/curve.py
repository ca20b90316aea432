"""
B-spline and NURBS curves.
Evaluation of points and derivatives, the rational derivatives are obtained
from the derivatives in the homogeneous space (The NURBS Book, A4.2).
"""
import numpy as np
from scipy.special import comb

from bnurbs.exceptions import MalformedCurveError, DegenerateWeightError
from bnurbs.core.report import report
from . import bspline as bs
from .homogeneous import homogenize, dehomogenize


def rational_derivatives(a_ders, w_ders):
    """
    Derivatives of the rational curve C = A / w from the derivatives of the homogeneous curve.

    C^(k) = (A^(k) - sum_{i=1..k} binom(k, i) w^(i) C^(k-i)) / w^(0)

    :param a_ders: (order + 1) x D array, derivatives of the weighted position A.
    :param w_ders: (order + 1) array, derivatives of the weight.
    :return: (order + 1) x D array of cartesian derivatives.
    """
    a_ders = np.array(a_ders, dtype=float)
    w_ders = np.array(w_ders, dtype=float)
    if w_ders[0] == 0.0:
        raise DegenerateWeightError("Zero weight of the curve point.")
    c_ders = np.zeros_like(a_ders)
    for k in range(len(a_ders)):
        v = a_ders[k].copy()
        for i in range(1, k + 1):
            v -= comb(k, i, exact=True) * w_ders[i] * c_ders[k - i]
        c_ders[k] = v / w_ders[0]
    return c_ders


class Curve:
    """
    Defines a 2D or 3D (in general dim-D) curve as B-spline, optionally rational (NURBS).
    The curve is immutable, evaluation never changes it.
    """

    @classmethod
    def make_raw(cls, poles, knots, weights=None, degree=2):
        """
        Construct a B-spline curve.
        :param poles: List of poles (control points) ( X, Y ) or ( X, Y, Z ).
        :param knots: Either the full knot vector or list of tuples (knot, multiplicity), where knot is float,
                   t-parameter on the curve of the knot and multiplicity is positive int. Total number of knots,
                   i.e. sum of their multiplicities, must be degree + N + 1, where N is number of poles.
        :param weights: Positive weight for every pole, None for non-rational B-spline.
        :param degree: Positive int
        """
        if len(knots) > 0 and np.ndim(knots[0]) > 0:
            basis = bs.SplineBasis.make_from_packed_knots(degree, knots)
        else:
            basis = bs.SplineBasis(degree, knots)
        return cls(basis, poles, weights)

    def __init__(self, basis, poles, weights=None):
        """
        :param basis: SplineBasis
        :param poles: N x D poles, N == basis.size
        :param weights: N positive weights or None.
        """
        self.basis = basis
        if basis.degree < 1:
            raise MalformedCurveError("Curve degree must be at least 1, got {}.".format(basis.degree))
        if len(poles) != basis.size:
            raise MalformedCurveError("Knot vector of length {} with degree {} needs {} poles, got {}."
                                      .format(len(basis.knots), basis.degree, basis.size, len(poles)))
        self.dim = bs.check_matrix(poles, [basis.size, None], bs.scalar_types)[1]

        self.poles = np.array(poles, dtype=float)  # N x D
        self.poles.setflags(write=False)

        self.weights = None
        if weights is not None:
            weights = np.array(weights, dtype=float)
            if weights.shape != (basis.size,):
                raise MalformedCurveError("Wrong number of weights {}, expected {}."
                                          .format(len(weights), basis.size))
            if not np.all((weights > 0.0) & np.isfinite(weights)):
                raise MalformedCurveError("Weights must be positive and finite: {}".format(weights))
            weights.setflags(write=False)
            self.weights = weights

        # N x (D+1), unit weights for the non-rational curve
        self._poles_h = homogenize(self.poles, self.weights)
        self._poles_h.setflags(write=False)

    @property
    def degree(self):
        return self.basis.degree

    @property
    def knots(self):
        return self.basis.knots

    @property
    def domain(self):
        return self.basis.domain

    @property
    def is_rational(self):
        return self.weights is not None

    def _control_points(self, span):
        # Poles affecting the knot span; homogeneous for the rational curve.
        poles = self._poles_h if self.is_rational else self.poles
        return poles[span - self.degree: span + 1, :]

    def eval(self, t):
        """
        Point of the curve for the parameter 't'.
        :return: np.array of D coordinates.
        """
        span = self.basis.find_span(t)
        t_base_vec = bs.basis_functions(span, t, self.degree, self.knots)
        value = t_base_vec @ self._control_points(span)
        if self.is_rational:
            return dehomogenize(value)
        return value

    @report
    def eval_array(self, t_points):
        """
        Evaluate curve in array of parameters.
        :param t_points: array of N parameters
        :return: N x D array of points
        """
        return np.array([self.eval(t) for t in t_points]).reshape(-1, self.dim)

    def derivatives(self, t, order):
        """
        Derivatives of the curve up to 'order' in the space of the control points.
        For the rational curve these are the derivatives of the homogeneous curve (A, w),
        the weight derivatives are in the last column.
        :return: (order + 1) x D array, (order + 1) x (D + 1) for the rational curve.
        """
        span = self.basis.find_span(t)
        ders = bs.derivative_basis_functions(span, t, self.degree, order, self.knots)
        return ders @ self._control_points(span)

    def rational_derivatives(self, t, order):
        """
        Cartesian derivatives of the curve up to 'order'.
        :return: (order + 1) x D array
        """
        span = self.basis.find_span(t)
        ders = bs.derivative_basis_functions(span, t, self.degree, order, self.knots)
        ders_h = ders @ self._poles_h[span - self.degree: span + 1, :]
        return rational_derivatives(ders_h[:, :-1], ders_h[:, -1])

    def tangent(self, t):
        """
        Not normalized tangent vector (first derivative) in 't'.
        """
        return self.rational_derivatives(t, 1)[1]

    def aabb(self):
        """
        Axis aligned bounding box of the poles, contains the whole curve.
        :return: [min_corner, max_corner]
        """
        return np.array([np.min(self.poles, axis=0), np.max(self.poles, axis=0)])

    def __repr__(self):
        return "Curve(degree={}, n_poles={}, dim={}, rational={})".format(
            self.degree, self.basis.size, self.dim, self.is_rational)


def curve_point(curve, t):
    return curve.eval(t)


def curve_derivatives(curve, t, order):
    return curve.derivatives(t, order)


def rational_curve_derivatives(curve, t, order):
    return curve.rational_derivatives(t, order)


def rational_curve_tangent(curve, t):
    return curve.tangent(t)
