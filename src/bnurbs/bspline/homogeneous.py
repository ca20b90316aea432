"""
Conversion of weighted poles to homogeneous coordinates and back.

Homogeneous pole: (w*x, w*y, [w*z,] w)
"""
import numpy as np

from bnurbs.exceptions import ParamError, DegenerateWeightError


def homogenize(poles, weights=None):
    """
    :param poles: N x D array of poles.
    :param weights: N weights, None for all weights equal to 1.
    :return: N x (D+1) array of homogeneous poles.
    """
    poles = np.atleast_2d(np.array(poles, dtype=float))
    if weights is None:
        weights = np.ones(len(poles))
    else:
        weights = np.array(weights, dtype=float)
        if weights.shape != (len(poles),):
            raise ParamError("Wrong weights shape {}, expected ({},).".format(weights.shape, len(poles)))
    return np.column_stack((poles * weights[:, None], weights))


def extract_weights(homogeneous_poles):
    return np.array(homogeneous_poles, dtype=float)[..., -1]


def dehomogenize(point):
    """
    Project homogeneous point(s) to cartesian coordinates, dividing by the last coordinate.
    :param point: Homogeneous point, or array of points with coordinates along the last axis.
    """
    point = np.array(point, dtype=float)
    weight = point[..., -1]
    if np.any(weight == 0.0):
        raise DegenerateWeightError("Zero weight of homogeneous point: {}".format(point))
    return point[..., :-1] / weight[..., None]
