"""
B-spline basis of a single knot vector.

Provides:
- knot span lookup
- nonzero basis functions in a span (Cox - de Boor triangle)
- derivatives of the nonzero basis functions up to given order

Algorithms follow The NURBS Book (2nd Ed.), A2.1 - A2.3.
All functions allocate their own working arrays, nothing is shared between calls.
"""

import numpy as np
from scipy.special import perm

from bnurbs.exceptions import ParamError, MalformedCurveError, ParameterOutOfDomainError


# Tolerance for the parameter comparison with the domain ends.
EPSILON = 1e-10

scalar_types = (int, float, np.integer, np.floating)


def check_matrix(mat, shape, values, idx=()):
    '''
    Check shape and type of scalar, vector or matrix.
    :param mat: Scalar, vector, or vector of vectors (i.e. matrix). Vector may be list or other iterable.
    :param shape: List of dimensions: [] for scalar, [ n ] for vector, [n_rows, n_cols] for matrix.
    If a value in this list is None, the dimension can be arbitrary. The shape list is set to actual dimensions
    of the matrix.
    :param values: Type or tuple of allowed types of elements of the matrix. E.g. ( int, float )
    :param idx: Internal. Used to pass actual index in the matrix for possible error messages.
    :return: The shape list with resolved dimensions.
    '''
    try:
        if len(shape) == 0:
            if not isinstance(mat, values):
                raise ParamError("Element at index {} of type {}, expected instance of {}.".format(idx, type(mat), values))
        else:
            if shape[0] is None:
                shape[0] = len(mat)
            l = None
            if not hasattr(mat, '__len__'):
                l = 0
            elif len(mat) != shape[0]:
                l = len(mat)
            if l is not None:
                raise ParamError("Wrong len {} of element {}, should be {}.".format(l, idx, shape[0]))
            for i, item in enumerate(mat):
                sub_shape = shape[1:]
                check_matrix(item, sub_shape, values, idx=(*idx, i))
                shape[1:] = sub_shape
        return shape
    except ParamError:
        raise
    except Exception as e:
        raise ParamError(e)


def find_span(n, degree, u, knots):
    """
    Find the knot span index 'i' such that knots[i] <= u < knots[i+1].
    Parameters within EPSILON of the domain ends are snapped to the first or the last
    nonempty span.

    :param n: Index of the last basis function (number of poles - 1).
    :param degree: Degree of the basis.
    :param u: Parameter, must be in [knots[degree], knots[n+1]].
    :param knots: Full knot vector.
    :return: span index, degree <= i <= n
    """
    t_min, t_max = knots[degree], knots[n + 1]
    if not (t_min - EPSILON <= u <= t_max + EPSILON):
        raise ParameterOutOfDomainError(
            "Parameter {} out of the domain [{}, {}].".format(u, t_min, t_max))
    if u > t_max - EPSILON:
        return n
    if u < t_min + EPSILON:
        return degree

    low, high = degree, n + 1
    mid = low + (high - low) // 2
    while u < knots[mid] or u >= knots[mid + 1]:
        if u < knots[mid]:
            high = mid
        else:
            low = mid
        mid = low + (high - low) // 2
    return mid


def basis_functions(span, u, degree, knots):
    """
    Values of the basis functions N_{span-degree+j}(u), j = 0..degree,
    the only ones nonzero in the knot span.
    :return: np.array of degree + 1 values.
    """
    basis = np.zeros(degree + 1)
    left = np.zeros(degree + 1)
    right = np.zeros(degree + 1)
    basis[0] = 1.0
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            temp = basis[r] / (right[r + 1] + left[j - r])
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved
    return basis


def basis_functions_at(u, degree, knots):
    """
    Same as basis_functions, the span is located for the parameter 'u'.
    """
    n = len(knots) - degree - 2
    span = find_span(n, degree, u, knots)
    return basis_functions(span, u, degree, knots)


def derivative_basis_functions(span, u, degree, order, knots):
    """
    Nonzero basis functions and their derivatives.

    ders[k, j] is the k-th derivative of N_{span-degree+j}(u).
    Derivatives of order higher then the degree are zero.

    :param span: Knot span of 'u', see find_span.
    :param order: Highest derivative order, order >= 0.
    :return: np.array of shape (order + 1, degree + 1)
    """
    if order < 0:
        raise ParamError("Negative derivative order: {}".format(order))

    ders = np.zeros((order + 1, degree + 1))
    # Upper triangle: basis functions of degree 0..degree, lower triangle: knot differences.
    ndu = np.zeros((degree + 1, degree + 1))
    left = np.zeros(degree + 1)
    right = np.zeros(degree + 1)

    ndu[0, 0] = 1.0
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = ndu[r, j - 1] / ndu[j, r]
            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        ndu[j, j] = saved
    ders[0, :] = ndu[:, degree]

    n_ders = min(order, degree)
    a = np.zeros((2, degree + 1))
    for r in range(degree + 1):
        s1, s2 = 0, 1
        a[0, 0] = 1.0
        for k in range(1, n_ders + 1):
            d = 0.0
            rk, pk = r - k, degree - k
            if r >= k:
                a[s2, 0] = a[s1, 0] / ndu[pk + 1, rk]
                d = a[s2, 0] * ndu[rk, pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else degree - r
            for j in range(j1, j2 + 1):
                a[s2, j] = (a[s1, j] - a[s1, j - 1]) / ndu[pk + 1, rk + j]
                d += a[s2, j] * ndu[rk + j, pk]
            if r <= pk:
                a[s2, k] = -a[s1, k - 1] / ndu[pk + 1, r]
                d += a[s2, k] * ndu[r, pk]
            ders[k, r] = d
            s1, s2 = s2, s1

    for k in range(1, n_ders + 1):
        # degree! / (degree - k)!
        ders[k, :] *= perm(degree, k, exact=True)
    return ders


class SplineBasis:
    """
    Represents a spline basis for a given knot vector and degree.
    Provides canonical evaluation for the bases functions and their derivatives, knot vector lookup etc.
    """

    @classmethod
    def make_equidistant(cls, degree, n_intervals, knot_range=(0.0, 1.0)):
        """
        Returns clamped spline basis for an equidistant knot vector
        having 'n_intervals' subintervals.
        :param degree: degree of the spline basis
        :param n_intervals: number of nonempty knot intervals
        :param knot_range: support of the spline, min and max valid 't'
        :return: SplineBasis
        """
        n = n_intervals + 2 * degree + 1
        knots = np.full(n, float(knot_range[0]))
        diff = (knot_range[1] - knot_range[0]) / n_intervals
        for i in range(degree + 1, n - degree):
            knots[i] = (i - degree) * diff + knot_range[0]
        knots[-degree - 1:] = knot_range[1]
        return cls(degree, knots)

    @classmethod
    def make_from_packed_knots(cls, degree, knots):
        """
        :param knots: List of pairs (knot, multiplicity).
        """
        full_knots = [q for q, mult in knots for i in range(mult)]
        return cls(degree, full_knots)

    def __init__(self, degree, knots):
        """
        Constructor of the basis.
        :param degree: Degree of the basis polynomials >= 0.
        :param knots: Knot vector including multiplicities, non-decreasing.
        """
        if degree < 0:
            raise MalformedCurveError("Negative degree: {}".format(degree))
        self.degree = degree

        knots = np.array(knots, dtype=float)
        if knots.ndim != 1:
            raise MalformedCurveError("Knot vector must be flat, shape: {}".format(knots.shape))
        if not np.all(np.isfinite(knots)) or np.any(np.diff(knots) < 0):
            raise MalformedCurveError("Decreasing or non-finite knot vector: {}".format(knots))
        knots.setflags(write=False)
        self.knots = knots

        # Number of basis functions.
        self.size = len(self.knots) - self.degree - 1
        if self.size < self.degree + 1:
            raise MalformedCurveError(
                "Too few knots ({}) for degree {}.".format(len(self.knots), self.degree))
        self.knots_idx_range = [self.degree, self.size]
        self.domain = self.knots[self.knots_idx_range]
        self.domain_size = self.domain[1] - self.domain[0]
        if self.domain_size <= 0:
            raise MalformedCurveError("Empty parameter domain: {}".format(self.domain))

    def pack_knots(self):
        last, mult = self.knots[0], 0
        packed_knots = []
        for q in self.knots:
            if q == last:
                mult += 1
            else:
                packed_knots.append((last, mult))
                last, mult = q, 1
        packed_knots.append((last, mult))
        return packed_knots

    def find_span(self, t):
        """
        Knot span index 'i' with knots[i] <= t < knots[i+1], see 'find_span'.
        """
        return find_span(self.size - 1, self.degree, t, self.knots)

    def find_knot_interval(self, t):
        """
        Find the first non-empty knot interval containing the value 't'.
        Returns I = i - degree, which is the index of the first basis function
        nonzero in 't'.

        :param t: float, must be within the domain.
        :return: I
        """
        return self.find_span(t) - self.degree

    def fn_supp(self, i_base):
        """
        Support of the base function 'i_base'.
        :param i_base:
        :return: (t_min, t_max)
        """
        return (self.knots[i_base], self.knots[i_base + self.degree + 1])

    def eval(self, i_base, t):
        """
        :param i_base: Index of base function to evaluate.
        :param t: point in which evaluate
        :return: b_i(t)
        """
        assert 0 <= i_base < self.size
        it = self.find_knot_interval(t)
        j = i_base - it
        if 0 <= j <= self.degree:
            return self.eval_vector(it, t)[j]
        return 0.0

    def eval_diff(self, i_base, t):
        """
        First derivative of the base function 'i_base' in 't'.
        """
        assert 0 <= i_base < self.size
        it = self.find_knot_interval(t)
        j = i_base - it
        if 0 <= j <= self.degree:
            return self.eval_diff_vector(it, t)[j]
        return 0.0

    def eval_vector(self, i_base, t):
        """
        Values of the basis functions i_base, ..., i_base + degree in 't'.
        :param i_base: Index of the first basis function, see 'find_knot_interval'.
        """
        return basis_functions(i_base + self.degree, t, self.degree, self.knots)

    def eval_diff_vector(self, i_base, t):
        """
        Derivatives of the basis functions i_base, ..., i_base + degree in 't'.
        """
        return self.eval_diff_table(i_base, t, 1)[1]

    def eval_diff_table(self, i_base, t, order):
        """
        Derivatives up to 'order' of the basis functions i_base, ..., i_base + degree in 't'.
        :return: np.array (order + 1, degree + 1)
        """
        return derivative_basis_functions(i_base + self.degree, t, self.degree, order, self.knots)

    def make_linear_poles(self):
        """
        Return poles of basis functions to get a f(x) = x.
        :return:
        """
        poles = [self.knots[self.degree]]
        for i in range(self.size - 1):
            pp = poles[-1] + (self.knots[i + self.degree + 1] - self.knots[i + 1]) / float(self.degree)
            poles.append(pp)
        return poles
