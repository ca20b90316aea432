import logging
from bnurbs.bspline import bspline as bs, curve as bc
from bnurbs.exceptions import ParamError, MalformedCurveError, ParameterOutOfDomainError, DegenerateWeightError
import numpy as np
import pytest


def make_arc():
    # Quadratic rational Bezier circular arc, The NURBS Book, p.126.
    return bc.Curve.make_raw([[1, 0], [1, 1], [0, 1]], [0, 0, 0, 1, 1, 1], weights=[1, 1, 2], degree=2)


def make_cubic():
    knots = [0.0, 0.0, 0.0, 0.0, 0.33, 0.66, 1.0, 1.0, 1.0, 1.0]
    poles = [[5, 5, 0], [10, 10, 0], [20, 15, 0], [35, 15, 0], [45, 10, 0], [50, 5, 0]]
    return bc.Curve.make_raw(poles, knots, degree=3)


def make_rational_3d():
    knots = [(0.0, 4), (0.3, 1), (0.7, 1), (1.0, 4)]
    poles = [[0, 0, 0], [1, 2, -1], [2, 3, 0.5], [4, 1, 2], [5, -1, 1], [6, 0, 0]]
    return bc.Curve.make_raw(poles, knots, weights=[1, 2, 0.5, 1.5, 1, 3], degree=3)


class TestCurveConstruction:

    def test_make_raw(self):
        curve = make_rational_3d()
        assert curve.degree == 3
        assert curve.dim == 3
        assert curve.is_rational
        assert len(curve.knots) == 10
        assert np.allclose(curve.domain, [0.0, 1.0])
        assert not make_cubic().is_rational

    def test_knot_count(self):
        with pytest.raises(MalformedCurveError):
            bc.Curve.make_raw([[0, 0], [1, 1], [2, 0]], [0, 0, 0, 1, 1], degree=2)
        with pytest.raises(MalformedCurveError):
            bc.Curve.make_raw([[0, 0], [1, 1], [2, 0]], [0, 0, 0, 0.5, 1, 1, 1], degree=2)

    @pytest.mark.parametrize("weights", [[1, 0, 1], [1, -2, 1], [1, 1], [1, 1, 1, 1],
                                         [1, float('nan'), 2], [1, float('inf'), 1]])
    def test_weights(self, weights):
        with pytest.raises(MalformedCurveError):
            bc.Curve.make_raw([[0, 0], [1, 1], [2, 0]], [0, 0, 0, 1, 1, 1], weights=weights, degree=2)

    def test_degree(self):
        basis = bs.SplineBasis(0, [0, 0.5, 1])
        with pytest.raises(MalformedCurveError):
            bc.Curve(basis, [[0, 0], [1, 1]])

    def test_poles_shape(self):
        with pytest.raises(ParamError):
            bc.Curve.make_raw([[0, 0], [1]], [0, 0, 1, 1], degree=1)
        with pytest.raises(ParamError):
            bc.Curve.make_raw([[0, 0], [1, "a"]], [0, 0, 1, 1], degree=1)

    def test_immutable(self):
        curve = make_arc()
        with pytest.raises(ValueError):
            curve.poles[0, 0] = 2.0
        with pytest.raises(ValueError):
            curve.weights[0] = 2.0
        with pytest.raises(ValueError):
            curve.knots[0] = -1.0

    def test_aabb(self):
        poles = [[0., 0.], [1.0, 0.5], [2., -2.], [3., 1.]]
        basis = bs.SplineBasis.make_equidistant(2, 2)
        curve = bc.Curve(basis, poles)
        box = curve.aabb()
        assert np.allclose(box, np.array([[0, -2], [3, 1]]))
        for pt in curve.eval_array(np.linspace(0, 1, 20)):
            assert np.all(box[0] <= pt) and np.all(pt <= box[1])


class TestCurveEval:

    @pytest.mark.parametrize("t, expected", [
        (0.0, [5.0, 5.0]),
        (0.3, [18.617, 13.377]),
        (0.5, [27.645, 14.691]),
        (0.6, [32.143, 14.328]),
        (1.0, [50.0, 5.0]),
    ])
    def test_point(self, t, expected):
        pt = make_cubic().eval(t)
        assert pt.shape == (3,)
        assert np.allclose(pt[:2], expected, atol=1e-3)
        assert pt[2] == 0.0

    def test_end_points(self):
        for curve in [make_arc(), make_cubic(), make_rational_3d()]:
            assert np.allclose(curve.eval(curve.domain[0]), curve.poles[0])
            assert np.allclose(curve.eval(curve.domain[1]), curve.poles[-1])

    def test_circle(self):
        curve = make_arc()
        for t in np.linspace(0, 1, 11):
            assert np.isclose(np.linalg.norm(curve.eval(t)), 1.0)
        assert np.allclose(curve.eval(0.5), [0.6, 0.8])

    def test_linear_reproduction(self):
        basis = bs.SplineBasis.make_equidistant(3, 5)
        curve = bc.Curve(basis, np.array([basis.make_linear_poles()]).T)
        for t in np.linspace(0, 1, 13):
            assert np.allclose(curve.eval(t), [t])

    def test_out_of_domain(self):
        curve = make_cubic()
        with pytest.raises(ParameterOutOfDomainError):
            curve.eval(1.01)
        with pytest.raises(ParameterOutOfDomainError):
            curve.rational_derivatives(-0.5, 1)
        with pytest.raises(ParameterOutOfDomainError):
            curve.eval(float('nan'))
        with pytest.raises(ParameterOutOfDomainError):
            make_arc().rational_derivatives(float('nan'), 1)

    def test_eval_array(self, caplog):
        caplog.set_level(logging.INFO)
        curve = make_rational_3d()
        t_points = np.linspace(0, 1, 7)
        points = curve.eval_array(t_points)
        assert points.shape == (7, 3)
        for t, pt in zip(t_points, points):
            assert np.allclose(pt, curve.eval(t))
        assert "eval_array" in caplog.text
        assert np.allclose(bc.curve_point(curve, 0.25), curve.eval(0.25))


class TestCurveDerivatives:

    def test_cubic_bezier(self):
        poles = [[10, 0], [20, 10], [30, 20], [50, 50]]
        curve = bc.Curve.make_raw(poles, [0, 0, 0, 0, 1, 1, 1, 1], degree=3)
        ders = bc.curve_derivatives(curve, 0, 2)
        assert ders.shape == (3, 2)
        assert np.allclose(ders[0], [10, 0])
        assert np.allclose(ders[1], [30, 30])
        assert ders[1][0] / ders[1][1] == 1.0
        assert np.allclose(ders[2], [0, 0])

    def test_homogeneous_shape(self):
        curve = make_arc()
        ders = curve.derivatives(0.0, 2)
        assert ders.shape == (3, 3)
        assert np.allclose(ders[:, 2], [1, 0, 2])

    def test_order_above_degree(self):
        curve = make_cubic()
        ders = curve.derivatives(0.4, 6)
        assert ders.shape == (7, 3)
        assert np.allclose(ders[4:], 0.0)

    def test_rational_arc(self):
        curve = make_arc()
        ders = bc.rational_curve_derivatives(curve, 0, 2)
        assert np.allclose(ders, [[1, 0], [0, 2], [-4, 0]])

        ders = curve.rational_derivatives(1, 2)
        assert np.allclose(ders, [[0, 1], [-1, 0], [1, -1]])

        assert np.allclose(curve.rational_derivatives(0, 3)[3], [0, -12])
        assert np.allclose(curve.rational_derivatives(1, 3)[3], [0, 3])

    def test_circle_tangent(self):
        curve = make_arc()
        for t in np.linspace(0, 1, 9):
            assert np.isclose(np.dot(curve.eval(t), curve.tangent(t)), 0.0)

    def test_unit_weights(self):
        knots = [(0.0, 4), (0.3, 1), (0.7, 1), (1.0, 4)]
        poles = [[0, 0, 0], [1, 2, -1], [2, 3, 0.5], [4, 1, 2], [5, -1, 1], [6, 0, 0]]
        polynomial = bc.Curve.make_raw(poles, knots, degree=3)
        unit = bc.Curve.make_raw(poles, knots, weights=np.ones(6), degree=3)
        for t in np.linspace(0, 1, 11):
            ders = polynomial.derivatives(t, 4)
            assert np.allclose(polynomial.rational_derivatives(t, 4), ders)
            assert np.allclose(unit.rational_derivatives(t, 4), ders)
            assert np.allclose(unit.derivatives(t, 4)[:, :3], ders)
            assert np.allclose(unit.derivatives(t, 4)[1:, 3], 0.0)

    def test_finite_differences(self):
        curve = make_rational_3d()
        h = 1e-4
        for t in [0.1, 0.45, 0.8]:
            ders = curve.rational_derivatives(t, 2)
            c_m, c_0, c_p = curve.eval(t - h), curve.eval(t), curve.eval(t + h)
            assert np.allclose(ders[0], c_0)
            assert np.allclose(ders[1], (c_p - c_m) / (2 * h), rtol=1e-5, atol=1e-5)
            assert np.allclose(ders[2], (c_p - 2 * c_0 + c_m) / h ** 2, rtol=1e-4, atol=1e-3)

    def test_line_tangent(self):
        knots = [0, 0, 0, 0, 0.5, 1, 1, 1, 1]
        poles = [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0], [4, 0, 0]]
        curve = bc.Curve.make_raw(poles, knots, weights=[1, 1, 1, 1, 1], degree=3)
        assert np.allclose(bc.rational_curve_tangent(curve, 0.5), [3, 0, 0])


def test_rational_derivatives_zero_weight():
    with pytest.raises(DegenerateWeightError):
        bc.rational_derivatives([[1.0, 2.0], [0.0, 1.0]], [0.0, 1.0])
