"""
Curves defined in YAML configuration files.

curves:
  arc:
    degree: 2
    knots: [[0, 3], [1, 3]]      # packed (knot, multiplicity) pairs or the full knot vector
    poles: [[1, 0], [1, 1], [0, 1]]
    weights: [1, 1, 2]           # optional
"""
import logging
from typing import *

from bnurbs.core import load_config, report
from bnurbs.exceptions import MalformedCurveError
from .curve import Curve


def make_curve(cfg: Dict[str, Any]) -> Curve:
    """
    Construct a curve from its configuration mapping.
    """
    try:
        degree = cfg['degree']
        knots = cfg['knots']
        poles = cfg['poles']
    except KeyError as e:
        raise MalformedCurveError(f"Missing curve key: {e}")
    return Curve.make_raw(poles, knots, weights=cfg.get('weights', None), degree=int(degree))


@report
def load_curves(path) -> Dict[str, Curve]:
    """
    Load all curves from the 'curves' mapping of the configuration file.
    """
    cfg = load_config(path)
    if 'curves' not in cfg:
        raise KeyError(f"Missing 'curves' in the configuration file: {path}")
    curves = {}
    for name, curve_cfg in cfg.curves.items():
        curves[name] = make_curve(curve_cfg)
        logging.debug(f"Curve '{name}': {curves[name]}")
    logging.info(f"Loaded {len(curves)} curves from {path}")
    return curves
